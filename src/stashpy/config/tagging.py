"""Tag scoring configuration.

The default catalog ships with the package. ``STASHPY_TAG_CATALOG`` may point
to a JSON file that replaces it, shaped as a list of definitions::

    [{"name": "ai/ml", "slug": "ai-ml", "color": "#8B5CF6",
      "keywords": ["machine learning", "neural network"]}]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from stashpy.domain.tagging import (
    MIN_CONFIDENCE_THRESHOLD,
    TagCatalog,
    TagDefinition,
    default_tag_catalog,
)

from .env import optional_env_var
from .errors import ConfigurationError


class TagDefinitionModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(min_length=1, max_length=100)
    slug: str = Field(min_length=1, max_length=100, pattern=r"^[a-z0-9-]+$")
    description: str | None = Field(default=None, max_length=500)
    color: str | None = Field(default=None, pattern=r"^#[0-9a-fA-F]{3}([0-9a-fA-F]{3})?$")
    keywords: list[str] = Field(min_length=1)

    def to_domain(self) -> TagDefinition:
        return TagDefinition(
            name=self.name,
            slug=self.slug,
            description=self.description,
            color=self.color,
            keywords=tuple(self.keywords),
        )


_CATALOG_ADAPTER = TypeAdapter(list[TagDefinitionModel])


@dataclass(frozen=True, slots=True)
class TaggingConfig:
    catalog: TagCatalog = field(default_factory=default_tag_catalog)
    min_confidence: float = MIN_CONFIDENCE_THRESHOLD


def load_tag_catalog(path: Path) -> TagCatalog:
    """Read and validate a JSON tag catalog file."""

    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read tag catalog {path}: {exc}") from exc
    try:
        models = _CATALOG_ADAPTER.validate_json(raw)
    except PydanticValidationError as exc:
        raise ConfigurationError(f"Invalid tag catalog {path}: {exc}") from exc
    try:
        return TagCatalog.of(model.to_domain() for model in models)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid tag catalog {path}: {exc}") from exc


def get_tagging_config() -> TaggingConfig:
    catalog_path = optional_env_var("STASHPY_TAG_CATALOG")
    if catalog_path is None:
        return TaggingConfig()
    return TaggingConfig(catalog=load_tag_catalog(Path(catalog_path).expanduser()))
