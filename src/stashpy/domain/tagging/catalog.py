"""Topic definitions the scoring engine matches content against."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


@dataclass(slots=True, frozen=True, kw_only=True)
class TagDefinition:
    name: str
    slug: str
    keywords: tuple[str, ...]
    description: str | None = None
    color: str | None = None

    def __post_init__(self) -> None:
        if not self.keywords:
            raise ValueError(f"Tag definition {self.slug!r} needs at least one keyword")


@dataclass(slots=True, frozen=True)
class TagCatalog:
    """Immutable, ordered collection of tag definitions.

    Order matters: it is the tie-break order for equally scored matches.
    """

    definitions: tuple[TagDefinition, ...]
    _by_slug: dict[str, TagDefinition] = field(init=False, repr=False, compare=False)
    _by_name: dict[str, TagDefinition] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_slug: dict[str, TagDefinition] = {}
        by_name: dict[str, TagDefinition] = {}
        for definition in self.definitions:
            if definition.slug in by_slug:
                raise ValueError(f"Duplicate tag slug in catalog: {definition.slug}")
            by_slug[definition.slug] = definition
            by_name.setdefault(definition.name, definition)
        object.__setattr__(self, "_by_slug", by_slug)
        object.__setattr__(self, "_by_name", by_name)

    @classmethod
    def of(cls, definitions: Iterable[TagDefinition]) -> TagCatalog:
        return cls(tuple(definitions))

    def __iter__(self) -> Iterator[TagDefinition]:
        return iter(self.definitions)

    def __len__(self) -> int:
        return len(self.definitions)

    def __contains__(self, slug: object) -> bool:
        return slug in self._by_slug

    def by_slug(self, slug: str) -> TagDefinition | None:
        return self._by_slug.get(slug)

    def by_name(self, name: str) -> TagDefinition | None:
        return self._by_name.get(name)

    @property
    def slugs(self) -> tuple[str, ...]:
        return tuple(definition.slug for definition in self.definitions)


DEFAULT_TAG_DEFINITIONS: tuple[TagDefinition, ...] = (
    TagDefinition(
        name="health",
        slug="health",
        description="Health and wellness topics",
        color="#EF4444",
        keywords=(
            "health", "wellness", "wellbeing", "medical", "medicine", "disease", "illness",
            "treatment", "cure", "symptom", "diagnosis", "doctor", "physician", "hospital",
            "clinic", "patient", "healthcare", "therapy", "therapeutic", "healing", "heal",
        ),
    ),
    TagDefinition(
        name="fitness",
        slug="fitness",
        description="Exercise and physical fitness",
        color="#10B981",
        keywords=(
            "fitness", "exercise", "workout", "gym", "training", "cardio", "cardiorespiratory",
            "strength", "weight", "lifting", "muscle", "muscular", "endurance", "stamina",
            "yoga", "pilates", "running", "jogging", "cycling", "swimming", "sport", "athletic",
            "athlete", "physical", "bodybuilding", "crossfit", "calisthenics",
        ),
    ),
    TagDefinition(
        name="nutrition",
        slug="nutrition",
        description="Food, diet, and nutrition",
        color="#F59E0B",
        keywords=(
            "nutrition", "food", "diet", "dietary", "meal", "meals", "eating", "recipe", "recipes",
            "cooking", "cuisine", "ingredient", "ingredients", "calorie", "calories", "protein",
            "carbohydrate", "carb", "fat", "fiber", "vitamin", "mineral", "supplement",
            "healthy eating", "meal plan", "nutritional", "nutrient", "macros", "keto",
            "paleo", "vegan", "vegetarian", "organic",
        ),
    ),
    TagDefinition(
        name="coding",
        slug="coding",
        description="General programming and coding",
        color="#3B82F6",
        keywords=(
            "code", "coding", "programming", "program", "developer", "development", "software",
            "software engineering", "function", "variable", "syntax", "compiler", "interpreter",
            "debug", "debugging", "bug", "bugfix", "codebase", "repository", "repo", "git",
            "version control", "commit", "branch", "merge", "pull request", "pr",
        ),
    ),
    TagDefinition(
        name="programming",
        slug="programming",
        description="Programming languages and frameworks",
        color="#6366F1",
        keywords=(
            "python", "javascript", "typescript", "java", "c++", "cpp", "c#", "csharp",
            "react", "vue", "angular", "node", "nodejs", "express", "django", "flask",
            "algorithm", "data structure", "api", "rest", "graphql", "sql", "database",
            "frontend", "backend", "fullstack", "full stack", "web development", "mobile",
            "ios", "android", "swift", "kotlin", "rust", "go", "golang", "php", "ruby",
            "rails", "laravel", "spring", "framework", "library", "package", "npm", "yarn",
        ),
    ),
    TagDefinition(
        name="ai/ml",
        slug="ai-ml",
        description="Artificial Intelligence and Machine Learning",
        color="#8B5CF6",
        keywords=(
            "ai", "artificial intelligence", "machine learning", "ml", "deep learning",
            "neural network", "neural", "llm", "large language model", "chatgpt", "gpt",
            "openai", "anthropic", "claude", "transformer", "nlp", "natural language",
            "computer vision", "reinforcement learning", "supervised", "unsupervised",
            "tensorflow", "pytorch", "keras", "model", "training", "inference", "prediction",
            "algorithm", "data science", "datascience", "automation", "robotic", "robot",
        ),
    ),
    TagDefinition(
        name="business",
        slug="business",
        description="Business and entrepreneurship",
        color="#EC4899",
        keywords=(
            "business", "startup", "start-up", "entrepreneur", "entrepreneurship", "revenue",
            "profit", "market", "marketing", "sales", "strategy", "business model", "customer",
            "client", "product", "service", "company", "corporation", "corp", "inc", "llc",
            "venture capital", "vc", "investment", "investor", "funding", "fundraise",
            "brand", "branding", "growth", "scale", "scaling", "team", "leadership", "management",
        ),
    ),
    TagDefinition(
        name="design",
        slug="design",
        description="Design and user experience",
        color="#F97316",
        keywords=(
            "design", "designer", "ui", "user interface", "ux", "user experience",
            "interface", "visual", "aesthetic", "aesthetics", "layout", "typography",
            "graphic design", "web design", "mobile design", "responsive", "wireframe",
            "prototype", "prototyping", "figma", "sketch", "adobe", "photoshop", "illustrator",
            "color", "palette", "icon", "iconography", "illustration", "illustrator",
            "usability", "accessibility", "a11y", "interaction", "interactive",
        ),
    ),
    TagDefinition(
        name="productivity",
        slug="productivity",
        description="Productivity and efficiency tools",
        color="#06B6D4",
        keywords=(
            "productivity", "efficient", "efficiency", "optimize", "optimization", "workflow",
            "tool", "tools", "automation", "automate", "task", "tasks", "project management",
            "pomodoro", "time management", "organize", "organization", "system", "process",
            "methodology", "framework", "hack", "tip", "tips", "technique", "best practice",
            "gtd", "getting things done", "kanban", "agile", "scrum", "sprint",
        ),
    ),
    TagDefinition(
        name="science",
        slug="science",
        description="Scientific research and studies",
        color="#14B8A6",
        keywords=(
            "science", "scientific", "research", "study", "studies", "experiment", "experimental",
            "hypothesis", "thesis", "theory", "data", "dataset", "analysis", "analytical",
            "peer review", "published", "publication", "journal", "paper", "academic",
            "university", "professor", "researcher", "scientist", "laboratory", "lab",
            "evidence", "evidence-based", "statistics", "statistical", "methodology",
        ),
    ),
    TagDefinition(
        name="tech",
        slug="tech",
        description="Technology and innovation",
        color="#6366F1",
        keywords=(
            "technology", "tech", "innovation", "innovative", "device", "devices", "gadget",
            "hardware", "software", "application", "app", "platform", "system", "service",
            "digital", "electronic", "electronics", "computer", "laptop", "smartphone",
            "mobile", "tablet", "internet", "web", "cloud", "server", "infrastructure",
            "security", "cybersecurity", "privacy", "data", "information",
        ),
    ),
    TagDefinition(
        name="finance",
        slug="finance",
        description="Finance and investing",
        color="#22C55E",
        keywords=(
            "finance", "financial", "money", "monetary", "investment", "investing", "invest",
            "investor", "stock", "stocks", "equity", "equities", "trading", "trade", "trader",
            "market", "stock market", "crypto", "cryptocurrency", "bitcoin", "ethereum",
            "budget", "budgeting", "saving", "savings", "retirement", "retire", "portfolio",
            "asset", "assets", "liability", "liabilities", "wealth", "income", "expense",
            "tax", "taxation", "accounting", "accountant", "bank", "banking", "loan", "credit",
        ),
    ),
)


def default_tag_catalog() -> TagCatalog:
    return TagCatalog(DEFAULT_TAG_DEFINITIONS)
