"""Alembic environment for the publication job schema.

The database URL always comes from runtime settings (`DATABASE_URL`), so
migrations target the same database as the service.
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from publication_export.config import config_load_database_url

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)


def _migration_database_url() -> str:
    """Resolve the migration target and mirror it into the Alembic config."""

    database_url = config_load_database_url()
    config.set_main_option("sqlalchemy.url", database_url)
    return database_url


def run_migrations_offline() -> None:
    """Emit migration SQL without connecting."""

    context.configure(
        url=_migration_database_url(),
        target_metadata=None,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a dedicated connection."""

    connectable = create_engine(_migration_database_url(), poolclass=pool.NullPool)
    try:
        with connectable.connect() as connection:
            # sqlite cannot ALTER constraints in place
            context.configure(
                connection=connection,
                target_metadata=None,
                render_as_batch=connection.dialect.name == "sqlite",
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
