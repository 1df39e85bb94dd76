"""Schema migrations bundled with the SQLAlchemy adapter.

The revision scripts live next to this module, so upgrades behave the same
from a source checkout and from an installed wheel. The ``alembic`` command
line finds them through ``[tool.alembic]`` in pyproject.toml.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from stashpy.config import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

SCRIPTS_DIR: Final[Path] = Path(__file__).resolve().parent

log = logging.getLogger(__name__)


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Upgrade the schema to the latest revision.

    With ``engine`` the upgrade runs on one of its connections inside a single
    transaction. Otherwise alembic connects to ``database_uri``, falling back
    to the configured database.
    """

    config = Config()
    config.set_main_option("script_location", str(SCRIPTS_DIR))
    if engine is None:
        uri = database_uri or get_database_config().uri
        # Config values go through configparser interpolation.
        config.set_main_option("sqlalchemy.url", uri.replace("%", "%%"))
        log.info("Upgrading bookmark schema")
        command.upgrade(config, "head")
        return

    log.info("Upgrading bookmark schema on %s", engine.url.render_as_string(hide_password=True))
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, "head")
