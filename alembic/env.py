from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

from config import settings

# Alembic Config
config = context.config

# La URL sale siempre de Settings (normaliza postgres:// -> postgresql+psycopg2://)
config.set_main_option(
    "sqlalchemy.url",
    settings.DATABASE_URL.get_secret_value().replace("%", "%%"),
)

# Logging desde alembic.ini
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

from db.database import Base  # noqa: E402
from db import models as _models  # noqa: F401,E402

target_metadata = Base.metadata

IS_SQLITE = settings.DATABASE_URL.get_secret_value().startswith("sqlite")


def include_object(object, name, type_, reflected, compare_to):
    """Excluir la tabla de control de Alembic."""
    if type_ == "table" and name == "alembic_version":
        return False
    return True


def _configure_kwargs() -> dict:
    kwargs = dict(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        include_object=include_object,
        version_table="alembic_version",
        # SQLite no soporta ALTER completos
        render_as_batch=IS_SQLITE,
    )
    if not IS_SQLITE:
        kwargs.update(include_schemas=True, version_table_schema="public")
    return kwargs


def run_migrations_offline() -> None:
    """Modo 'offline': genera SQL sin conectarse al motor."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs(),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Modo 'online': aplica migraciones contra una conexión real."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
        future=True,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_kwargs())

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
