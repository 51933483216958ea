"""Главный файл приложения. Точка входа."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from inventory_api.api import products
from inventory_api.api.errors import register_exception_handlers
from inventory_api.core.config import settings
from inventory_api.db.session import async_engine, init_models


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Контекстный менеджер для управления жизненным циклом приложения.
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.info("Starting inventory API")
    await init_models(async_engine)
    logging.info("Database schema is ready")

    yield

    await async_engine.dispose()
    logging.info("Inventory API stopped")


app = FastAPI(title="Inventory API", lifespan=lifespan)
register_exception_handlers(app)
app.include_router(products.router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


# --- Точка входа для локального запуска ---
if __name__ == "__main__":
    uvicorn.run(
        "inventory_api.main:app",
        host="0.0.0.0",  # noqa: B104
        port=8000,
        reload=True,
    )
