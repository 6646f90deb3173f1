"""
Alembic environment configuration
"""
import sys
from logging.config import fileConfig
from pathlib import Path
from urllib.parse import urlparse, urlunparse

BASE_DIR = Path(__file__).resolve().parent.parent
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from alembic import context
from sqlalchemy import engine_from_config, pool

from contact_manager.core.config import get_settings
from contact_manager.core.database import Base
import contact_manager.models  # noqa: F401 - register models for autogenerate

# this is the Alembic Config object
config = context.config


def _mask_database_url(url: str) -> str:
    """Mask password in a database URL for safe logging."""
    p = urlparse(url)
    if not p.password:
        return url
    netloc = f"{p.username}:***@{p.hostname or ''}"
    if p.port:
        netloc = f"{netloc}:{p.port}"
    return urlunparse((p.scheme, netloc, p.path or "", p.params or "", p.query or "", p.fragment or ""))


# The CLI and tests pass the URL in; otherwise resolve it from the environment
if not config.get_main_option("sqlalchemy.url"):
    try:
        config.set_main_option("sqlalchemy.url", get_settings().sqlalchemy_url)
    except Exception as exc:  # pragma: no cover - helpful runtime error path
        sys.stderr.write(
            "Failed to resolve the database URL for Alembic.\n"
            "Set DATABASE_URL or APP_ENV=development|test (see contact_manager/core/config.py).\n\n"
            f"Original error: {exc}\n"
        )
        raise

# Interpret the config file for Python logging unless the caller already did.
if config.config_file_name is not None and not config.attributes.get("logging_configured"):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

sys.stderr.write(f"Alembic will use database URL: {_mask_database_url(config.get_main_option('sqlalchemy.url'))}\n")

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection, target_metadata=target_metadata
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
