"""Модели базы данных проекта."""

import datetime

from pydantic import field_validator
from sqlalchemy import CheckConstraint, DateTime
from sqlmodel import Field, SQLModel

# Порядок колонок в CSV-файлах импорта и экспорта
PRODUCT_FIELDS = ("name", "unit", "category", "brand", "stock", "status", "image")


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class ProductBase(SQLModel):
    """Общие поля товара для таблицы и входящих данных."""

    name: str = Field(min_length=1, max_length=255)
    unit: str = ""
    category: str = ""
    brand: str = ""
    stock: int = Field(default=0, ge=0)
    status: str = ""
    image: str = ""

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be blank")
        return value


class Product(ProductBase, table=True):
    """Модель товара в каталоге."""

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("length(trim(name)) > 0", name="ck_products_name_not_empty"),
    )

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True, max_length=255)


class InventoryHistory(SQLModel, table=True):
    """
    Запись журнала изменений остатка.

    product_id не является внешним ключом: журнал сохраняется после
    удаления товара.
    """

    __tablename__ = "inventory_history"

    id: int | None = Field(default=None, primary_key=True)
    product_id: int = Field(index=True)
    old_quantity: int
    new_quantity: int
    change_timestamp: datetime.datetime = Field(
        default_factory=utc_now, sa_type=DateTime(timezone=True)
    )
    actor: str = Field(max_length=255)
