"""Migration environment for the ELibrary schema (users, admin bootstrap claim, books).

The database URL comes from application settings; pass ``-x url=...`` to
migrate a different database without touching the environment.
"""

import logging
from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

load_dotenv()

from app.core.config import get_settings  # noqa: E402
from app.models import AdminBootstrap, Base, Book, User  # noqa: E402,F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")
target_metadata = Base.metadata


def database_url() -> str:
    override = context.get_x_argument(as_dictionary=True).get("url")
    return override or get_settings().DATABASE_URL


def _configure(**kwargs) -> None:
    context.configure(target_metadata=target_metadata, compare_type=True, **kwargs)


def run_offline(url: str) -> None:
    """Emit SQL to stdout instead of executing it."""
    _configure(url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_online(url: str) -> None:
    engine = create_engine(url, poolclass=NullPool)
    try:
        with engine.connect() as connection:
            dialect = connection.dialect.name
            logger.info("Running migrations", extra={"dialect": dialect})
            # SQLite cannot ALTER constraints in place; batch mode rebuilds tables.
            _configure(connection=connection, render_as_batch=dialect == "sqlite")
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_offline(database_url())
else:
    run_online(database_url())
