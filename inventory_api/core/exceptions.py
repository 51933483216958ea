"""Исключения сервисного слоя каталога."""

from typing import Any


class InventoryError(Exception):
    """Базовое исключение приложения."""


class ValidationError(InventoryError):
    """Входные данные не прошли проверку."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or [{"msg": message}]


class UniquenessConflict(InventoryError):
    """Товар с таким названием уже существует."""

    def __init__(self, name: str):
        super().__init__(f"Product name must be unique: {name!r}")
        self.name = name


class NotFound(InventoryError):
    """Запрошенная сущность отсутствует."""

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class StoreError(InventoryError):
    """Сбой хранилища. Детали не передаются клиенту."""
