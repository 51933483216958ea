"""Массовый импорт и экспорт каталога в формате CSV."""

import csv
import io
import logging
import shutil
import tempfile
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import BinaryIO

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from inventory_api.core.exceptions import ValidationError
from inventory_api.db.models import PRODUCT_FIELDS, Product
from inventory_api.schemas import ImportSummary
from inventory_api.services import product_service

CsvRow = Mapping[str, str | None]


def read_csv_rows(path: Path) -> Iterator[CsvRow]:
    """
    Построчно читает CSV-файл с заголовком.

    Args:
        path: Путь к файлу.

    Yields:
        Словарь "колонка -> значение" для каждой строки.

    Raises:
        ValidationError: Если в заголовке нет колонки name или файл не
                         является корректным UTF-8 CSV.
    """
    try:
        with path.open("r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            if reader.fieldnames is None:
                raise ValidationError("CSV file is empty")
            reader.fieldnames = [column.strip() for column in reader.fieldnames]
            if "name" not in reader.fieldnames:
                raise ValidationError("CSV header must contain a 'name' column")
            yield from reader
    except (UnicodeDecodeError, csv.Error) as exc:
        raise ValidationError(f"Malformed CSV file: {exc}") from exc


def _row_to_product(row: CsvRow) -> Product:
    # Без проверок схемы: ограничения таблицы отсекут недопустимые строки
    stock_raw = (row.get("stock") or "").strip()
    values = {field: row.get(field) or "" for field in PRODUCT_FIELDS if field != "stock"}
    return Product(**values, stock=int(stock_raw) if stock_raw else 0)


async def _import_row(session: AsyncSession, row: CsvRow) -> bool:
    """
    Импортирует одну строку.

    Returns:
        True, если товар добавлен; False, если строка пропущена.
    """
    name = row.get("name") or ""
    try:
        if await product_service.get_product_by_name(session, name) is not None:
            return False
        session.add(_row_to_product(row))
        await session.commit()
    except (ValueError, SQLAlchemyError) as exc:
        await session.rollback()
        logging.warning("Import row %r skipped: %s", name, exc)
        return False
    return True


async def import_rows(session: AsyncSession, rows: Iterable[CsvRow]) -> ImportSummary:
    """
    Импортирует строки, пропуская товары с уже существующими названиями.

    Строки обрабатываются независимо: каждая добавленная фиксируется
    отдельно, ошибка в одной строке не прерывает импорт и учитывается
    как пропуск.

    Args:
        session: Сессия базы данных.
        rows: Строки с полями товара.

    Returns:
        Количество добавленных и пропущенных строк.
    """
    outcomes = [await _import_row(session, row) for row in rows]
    added = sum(outcomes)
    summary = ImportSummary(added=added, skipped=len(outcomes) - added)
    logging.info("Import finished: %d added, %d skipped", summary.added, summary.skipped)
    return summary


def spool_to_tempfile(source: BinaryIO, directory: str | None = None) -> Path:
    """Копирует загруженный поток во временный файл и возвращает путь к нему."""
    with tempfile.NamedTemporaryFile(
        "wb", suffix=".csv", dir=directory, delete=False
    ) as tmp:
        shutil.copyfileobj(source, tmp)
    return Path(tmp.name)


def count_csv_rows(path: Path) -> int:
    """
    Читает файл целиком и возвращает число строк данных.

    Raises:
        ValidationError: Если файл не является корректным UTF-8 CSV с колонкой name.
    """
    return sum(1 for _ in read_csv_rows(path))


async def import_csv_upload(
    session: AsyncSession, source: BinaryIO, upload_dir: str | None = None
) -> ImportSummary:
    """
    Импортирует загруженный CSV-файл.

    Файл полностью проверяется до первой записи в базу: ошибка кодировки
    или разметки в середине файла отклоняет весь импорт. Временный файл
    удаляется после обработки, в том числе при ошибке.

    Args:
        session: Сессия базы данных.
        source: Бинарный поток с содержимым файла.
        upload_dir: Каталог для временного файла.

    Returns:
        Итог импорта.

    Raises:
        ValidationError: Если файл не прошел проверку.
    """
    path = await run_in_threadpool(spool_to_tempfile, source, upload_dir)
    try:
        total = await run_in_threadpool(count_csv_rows, path)
        logging.info("Importing %d CSV rows from upload", total)
        return await import_rows(session, read_csv_rows(path))
    finally:
        path.unlink(missing_ok=True)


async def export_csv(session: AsyncSession) -> str:
    """
    Выгружает весь каталог в CSV.

    Заголовок: name,unit,category,brand,stock,status,image. Все значения
    строк данных берутся в кавычки, поэтому разделители, кавычки и любые
    переводы строк (включая одиночный \\r) переживают повторный импорт.

    Args:
        session: Сессия базы данных.

    Returns:
        Текст CSV, строки разделены "\\n".
    """
    result = await session.execute(select(Product).order_by(col(Product.id)))
    buffer = io.StringIO()
    buffer.write(",".join(PRODUCT_FIELDS) + "\n")
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_ALL)
    for product in result.scalars():
        writer.writerow([getattr(product, field) for field in PRODUCT_FIELDS])
    return buffer.getvalue()
