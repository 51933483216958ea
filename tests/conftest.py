"""Конфигурация и фикстуры для тестов Pytest."""

import os
from collections.abc import AsyncGenerator

# Приложение не должно обращаться к PostgreSQL во время тестов
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from inventory_api.core.config import settings  # noqa: E402
from inventory_api.db.session import get_db_session  # noqa: E402
from inventory_api.main import app  # noqa: E402

# Используем асинхронный драйвер для SQLite для тестов
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


async def create_test_engine(url: str = TEST_DATABASE_URL) -> AsyncEngine:
    """Создает движок и схему. Для :memory: все сессии делят одно соединение."""
    if url == TEST_DATABASE_URL:
        async_engine = create_async_engine(url, echo=False, poolclass=StaticPool)
    else:
        async_engine = create_async_engine(url, echo=False)
    async with async_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    return async_engine


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
        class_=AsyncSession,
    )


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Фикстура с чистой базой в памяти для каждого теста.
    """
    async_engine = await create_test_engine()

    yield async_engine

    await async_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Фикстура, создающая фабрику сессий для тестов.
    """
    return make_session_factory(engine)


@pytest.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Фикстура, предоставляющая сессию БД для теста сервисного слоя.
    """
    async with session_factory() as db_session:
        yield db_session


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP-клиент приложения, работающий с тестовой базой.
    """

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as db_session:
            yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as http_client:
        yield http_client
    app.dependency_overrides.clear()


def make_token(username: str) -> str:
    return jwt.encode(
        {"username": username}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM
    )


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token('alice')}"}
