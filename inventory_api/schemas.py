"""Схемы входящих и исходящих данных API."""

import datetime
from typing import Literal, get_args

from pydantic import BaseModel
from sqlmodel import Field, SQLModel

from inventory_api.db.models import ProductBase

# Поля, по которым разрешена сортировка списка товаров
SortField = Literal["id", "name", "unit", "category", "brand", "stock", "status", "image"]
SortOrder = Literal["asc", "desc"]

SORT_FIELDS: tuple[str, ...] = get_args(SortField)
SORT_ORDERS: tuple[str, ...] = get_args(SortOrder)


class ProductIn(ProductBase):
    """Тело запросов создания и полной замены товара."""

    stock: int = Field(ge=0)


class ProductRead(ProductBase):
    id: int


class HistoryEntryRead(SQLModel):
    id: int
    product_id: int
    old_quantity: int
    new_quantity: int
    change_timestamp: datetime.datetime
    actor: str


class ProductCreated(BaseModel):
    id: int


class Message(BaseModel):
    message: str


class ImportSummary(BaseModel):
    """Итог импорта: сколько строк добавлено и сколько пропущено."""

    added: int = 0
    skipped: int = 0
