"""Настройка сессии базы данных."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

from inventory_api.core.config import settings
from inventory_api.db import models  # noqa: F401

# Асинхронный "движок" SQLAlchemy, управляет подключениями к базе данных.
async_engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,  # Проверяет "живо" ли соединение перед использованием
)

AsyncSessionFactory = async_sessionmaker(
    async_engine,
    autoflush=False,
    expire_on_commit=False,
    class_=AsyncSession,
)


async def init_models(engine: AsyncEngine) -> None:
    """
    Создает недостающие таблицы каталога и журнала.

    Args:
        engine: Асинхронный движок базы данных.
    """
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Зависимость (dependency) для получения сессии базы данных.

    Yields:
        Объект асинхронной сессии SQLAlchemy.
    """
    async with AsyncSessionFactory() as session:
        yield session
