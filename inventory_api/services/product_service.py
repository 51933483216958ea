"""Сервисный слой каталога товаров: чтение и изменение."""

import logging
from collections.abc import Sequence

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from inventory_api.core.config import settings
from inventory_api.core.exceptions import (
    NotFound,
    StoreError,
    UniquenessConflict,
    ValidationError,
)
from inventory_api.db.models import Product
from inventory_api.schemas import SORT_FIELDS, SORT_ORDERS, ProductIn
from inventory_api.services import history_service


async def list_products(
    session: AsyncSession,
    page: int = 1,
    limit: int = settings.DEFAULT_PAGE_LIMIT,
    sort: str = "name",
    order: str = "asc",
    category: str | None = None,
) -> Sequence[Product]:
    """
    Возвращает страницу каталога с сортировкой и фильтром по категории.

    Поле и направление сортировки проверяются по белому списку, в запрос
    попадает только колонка модели, а не пользовательская строка.

    Args:
        session: Сессия базы данных.
        page: Номер страницы, начиная с 1.
        limit: Размер страницы.
        sort: Поле сортировки из SORT_FIELDS.
        order: Направление сортировки, "asc" или "desc".
        category: Точное значение категории для фильтра.

    Returns:
        Последовательность объектов Product.

    Raises:
        ValidationError: Если параметры пагинации или сортировки некорректны.
    """
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be positive integers")
    if sort not in SORT_FIELDS:
        raise ValidationError(f"Unsupported sort field: {sort!r}")
    if order not in SORT_ORDERS:
        raise ValidationError(f"Unsupported sort order: {order!r}")

    column = col(getattr(Product, sort))
    statement = select(Product)
    if category:
        statement = statement.where(Product.category == category)
    statement = (
        statement.order_by(
            column.asc() if order == "asc" else column.desc(), col(Product.id)
        )
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await session.execute(statement)
    return result.scalars().all()


async def search_products(session: AsyncSession, name: str) -> Sequence[Product]:
    """
    Ищет товары по подстроке в названии без учета регистра.

    Args:
        session: Сессия базы данных.
        name: Подстрока для поиска. Символы % и _ ищутся буквально.

    Returns:
        Найденные товары в порядке id.
    """
    statement = (
        select(Product)
        .where(col(Product.name).icontains(name, autoescape=True))
        .order_by(col(Product.id))
    )
    result = await session.execute(statement)
    return result.scalars().all()


async def get_product(session: AsyncSession, product_id: int) -> Product:
    """
    Возвращает товар по id.

    Raises:
        NotFound: Если товара нет.
    """
    db_product = await session.get(Product, product_id)
    if db_product is None:
        raise NotFound("Product", product_id)
    return db_product


async def get_product_by_name(session: AsyncSession, name: str) -> Product | None:
    """
    Находит товар по его уникальному имени.

    Args:
        session: Сессия базы данных.
        name: Название товара для поиска.

    Returns:
        Объект Product или None, если товар не найден.
    """
    statement = select(Product).where(Product.name == name)
    result = await session.execute(statement)
    return result.scalar_one_or_none()


async def create_product(session: AsyncSession, data: ProductIn) -> Product:
    """
    Создает новый товар в базе данных.

    Уникальность названия проверяет само хранилище: предварительного
    чтения нет, IntegrityError при вставке и есть сигнал конфликта.

    Args:
        session: Сессия базы данных.
        data: Проверенные данные товара.

    Returns:
        Созданный объект товара.

    Raises:
        UniquenessConflict: Если товар с таким названием уже существует.
        StoreError: При прочих сбоях хранилища.
    """
    db_product = Product.model_validate(data)
    session.add(db_product)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise UniquenessConflict(data.name) from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        raise StoreError("Failed to create product") from exc

    await session.refresh(db_product)
    logging.info("Product %s created: %r", db_product.id, db_product.name)
    return db_product


async def update_product(
    session: AsyncSession, product_id: int, data: ProductIn, actor: str
) -> Product:
    """
    Полностью заменяет поля товара, фиксируя изменение остатка в журнале.

    Чтение текущего остатка, запись в журнал и обновление товара
    выполняются в одной транзакции.

    Args:
        session: Сессия базы данных.
        product_id: ID товара для обновления.
        data: Новые значения всех полей товара.
        actor: Пользователь, выполняющий изменение.

    Returns:
        Обновленный объект Product.

    Raises:
        NotFound: Если товар не найден.
        UniquenessConflict: Если новое название занято другим товаром.
        StoreError: При прочих сбоях хранилища.
    """
    try:
        statement = (
            select(Product)
            .where(Product.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await session.execute(statement)
        db_product = result.scalar_one_or_none()
        if db_product is None:
            await session.rollback()
            raise NotFound("Product", product_id)

        old_stock = db_product.stock
        if old_stock != data.stock:
            await history_service.record_stock_change(
                session, product_id, old_stock, data.stock, actor
            )

        for field, value in data.model_dump().items():
            setattr(db_product, field, value)
        session.add(db_product)
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise UniquenessConflict(data.name) from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        raise StoreError(f"Failed to update product {product_id}") from exc

    await session.refresh(db_product)
    logging.info("Product %s updated by %s", product_id, actor)
    return db_product


async def delete_product(session: AsyncSession, product_id: int) -> bool:
    """
    Удаляет товар. Отсутствие товара ошибкой не считается.

    Журнал изменений остатка товара не удаляется.

    Returns:
        True, если строка была удалена.
    """
    try:
        result = await session.execute(delete(Product).where(col(Product.id) == product_id))
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise StoreError(f"Failed to delete product {product_id}") from exc

    deleted = bool(result.rowcount)  # type: ignore[attr-defined]
    logging.info("Product %s delete requested, removed: %s", product_id, deleted)
    return deleted
