from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool
from voicequiz.config import settings

# Встроенная SQLite через aiosqlite.
# NullPool: каждое подключение живет ровно одну сессию и не привязано к чужому event loop.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,  # Ставь True, если хочешь видеть SQL запросы в консоли
    poolclass=NullPool,
)

# expire_on_commit=False обязателен для асинхронной работы
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# Базовый класс для всех моделей
class Base(DeclarativeBase):
    pass

# Dependency для FastAPI: async def handler(db: AsyncSession = Depends(get_db))
async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()

async def init_db():
    """Создает таблицы, если их еще нет (аналог CREATE TABLE IF NOT EXISTS)."""
    # Импорт регистрирует модели в Base.metadata
    from voicequiz import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
