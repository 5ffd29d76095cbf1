import logging
import pathlib
import sys

from alembic import command
from alembic.config import Config

from tasktracker.errors import MigrationError
from tasktracker.logging_setup import setup_logging
from tasktracker.settings import get_settings

log = logging.getLogger(__name__)

MIGRATIONS_DIR = pathlib.Path(__file__).parent / "migrations"


def build_config(url: str) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    # ConfigParser interpolation treats "%" as special
    cfg.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
    cfg.attributes["configure_logger"] = False
    return cfg


def run_migrations(url: str) -> None:
    """Bring the schema up to date. Safe to call on every start."""
    log.info("[Migrations] Applying migrations")
    try:
        command.upgrade(build_config(url), "head")
    except Exception as e:
        raise MigrationError("Failed to apply migrations", cause=e) from e
    log.info("[Migrations] Migrations completed successfully")


def main() -> None:
    settings = get_settings()
    setup_logging(level=settings.LOG_LEVEL)
    try:
        run_migrations(settings.DATABASE_SYNC_URL)
    except MigrationError as e:
        log.critical("[Migrations] %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
