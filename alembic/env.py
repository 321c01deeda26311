import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

from voicequiz.config import settings
from voicequiz.database import Base
from voicequiz.models import *  # noqa: F401,F403 - регистрирует questions и recordings

config = context.config

# Тот же файл SQLite, что и у приложения (DATABASE_URL из .env / окружения)
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

def _configure(**kwargs) -> None:
    # SQLite не умеет ALTER COLUMN, поэтому миграции идут через batch
    context.configure(target_metadata=target_metadata, render_as_batch=True, **kwargs)
    with context.begin_transaction():
        context.run_migrations()

def run_migrations_offline() -> None:
    """Генерирует SQL без подключения к базе (alembic upgrade --sql)."""
    _configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

def do_run_migrations(connection: Connection) -> None:
    _configure(connection=connection)

async def run_migrations_online() -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()

if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
