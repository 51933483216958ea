"""Журнал изменений остатков товаров."""

import logging
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from inventory_api.db.models import InventoryHistory


async def record_stock_change(
    session: AsyncSession,
    product_id: int,
    old_quantity: int,
    new_quantity: int,
    actor: str,
) -> InventoryHistory:
    """
    Добавляет запись об изменении остатка в текущую транзакцию.

    Фиксацию транзакции выполняет вызывающий код вместе с обновлением
    товара.

    Args:
        session: Сессия базы данных.
        product_id: ID товара.
        old_quantity: Остаток до изменения.
        new_quantity: Остаток после изменения.
        actor: Пользователь, выполнивший изменение.

    Returns:
        Созданная запись журнала (с присвоенным id).

    Raises:
        ValueError: Если остаток не изменился.
    """
    if old_quantity == new_quantity:
        raise ValueError("Stock did not change, nothing to record.")

    entry = InventoryHistory(
        product_id=product_id,
        old_quantity=old_quantity,
        new_quantity=new_quantity,
        actor=actor,
    )
    session.add(entry)
    await session.flush()
    logging.info(
        "Stock of product %s changed %s -> %s by %s",
        product_id,
        old_quantity,
        new_quantity,
        actor,
    )
    return entry


async def get_history(session: AsyncSession, product_id: int) -> Sequence[InventoryHistory]:
    """
    Возвращает журнал товара, самые свежие записи первыми.

    Args:
        session: Сессия базы данных.
        product_id: ID товара, в том числе уже удаленного.

    Returns:
        Последовательность записей InventoryHistory, возможно пустая.
    """
    statement = (
        select(InventoryHistory)
        .where(InventoryHistory.product_id == product_id)
        .order_by(
            col(InventoryHistory.change_timestamp).desc(),
            col(InventoryHistory.id).desc(),
        )
    )
    result = await session.execute(statement)
    return result.scalars().all()
