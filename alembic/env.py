"""Migration environment for the medadmin schema.

The database URL comes from medadmin settings (DATABASE_URL), never from
alembic.ini, so migrations always target the same database as the API.
"""

import logging
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

from medadmin.core.config import get_settings
from medadmin.models import Base

config = context.config
if config.config_file_name is not None and config.file_config.has_section("formatters"):
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

settings = get_settings()
target_metadata = Base.metadata

# sqlite cannot ALTER most constraints in place; batch mode rebuilds the table.
migration_options = {
    "target_metadata": target_metadata,
    "compare_type": True,
    "render_as_batch": settings.is_sqlite,
}


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting."""
    context.configure(
        url=settings.DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **migration_options,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(settings.DATABASE_URL, poolclass=NullPool)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, **migration_options)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()
    logger.info("Migrations applied to %s", engine.url.render_as_string(hide_password=True))


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
