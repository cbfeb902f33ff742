"""Alembic environment for the helpdesk schema (URL comes from DATABASE_URL)."""

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context

from helpdesk.core.config import settings
from helpdesk.db.base import Base
import helpdesk.db.models  # noqa: F401  (registers every table on Base.metadata)

config = context.config
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# Objects created with raw SQL in migrations that autogenerate cannot see.
UNMANAGED_INDEXES = {"idx_kb_embeddings_vector"}


def include_object(obj, name, type_, reflected, compare_to):
    if type_ == "index" and name in UNMANAGED_INDEXES:
        return False
    return True


def run_migrations_offline() -> None:
    """Emit SQL to stdout without a database connection."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        include_object=include_object,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_object=include_object,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
