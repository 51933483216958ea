"""Тесты массового импорта и экспорта каталога."""

import csv
import io
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.core.exceptions import ValidationError
from inventory_api.db.models import PRODUCT_FIELDS
from inventory_api.schemas import ProductIn
from inventory_api.services import product_service, transfer_service
from tests.conftest import create_test_engine, make_session_factory

HEADER = "name,unit,category,brand,stock,status,image"


def _rows(*names: str) -> list[dict[str, str]]:
    return [
        {
            "name": name,
            "unit": "pcs",
            "category": "tools",
            "brand": "Acme",
            "stock": "4",
            "status": "active",
            "image": "",
        }
        for name in names
    ]


async def test_import_same_batch_twice(session: AsyncSession) -> None:
    batch = _rows("Drill", "Hammer", "Saw")

    first = await transfer_service.import_rows(session, batch)
    second = await transfer_service.import_rows(session, batch)

    assert (first.added, first.skipped) == (3, 0)
    assert (second.added, second.skipped) == (0, 3)


async def test_import_skips_existing_and_keeps_it_unchanged(session: AsyncSession) -> None:
    await product_service.create_product(session, ProductIn(name="Drill", brand="Bosch", stock=9))

    summary = await transfer_service.import_rows(session, _rows("Drill", "Saw"))

    assert (summary.added, summary.skipped) == (1, 1)
    [drill] = await product_service.search_products(session, "Drill")
    assert drill.brand == "Bosch"
    assert drill.stock == 9


async def test_import_duplicate_within_batch_is_skipped(session: AsyncSession) -> None:
    summary = await transfer_service.import_rows(session, _rows("Drill", "Drill"))

    assert (summary.added, summary.skipped) == (1, 1)


async def test_import_bad_rows_do_not_abort_batch(session: AsyncSession) -> None:
    rows = [
        {"name": "Drill", "stock": "abc"},
        {"name": "Hammer", "stock": "-3"},
        {"name": "", "stock": "1"},
        {"name": "Saw", "stock": "2"},
        {"name": "Level"},
    ]

    summary = await transfer_service.import_rows(session, rows)

    assert (summary.added, summary.skipped) == (2, 3)
    names = [p.name for p in await product_service.list_products(session)]
    assert names == ["Level", "Saw"]
    [level] = await product_service.search_products(session, "Level")
    assert level.stock == 0


async def test_export_has_fixed_header_and_quotes_values(session: AsyncSession) -> None:
    await product_service.create_product(
        session, ProductIn(name="Bolt, M8", unit="box", category="parts", stock=100)
    )
    await product_service.create_product(session, ProductIn(name='Nut "hex"', stock=0))

    content = await transfer_service.export_csv(session)

    assert content.splitlines()[0] == HEADER
    assert content.split("\n")[1] == '"Bolt, M8","box","parts","","100","",""'
    rows = list(csv.DictReader(io.StringIO(content)))
    assert [r["name"] for r in rows] == ["Bolt, M8", 'Nut "hex"']
    assert rows[0]["stock"] == "100"
    assert rows[0]["unit"] == "box"


async def test_export_of_empty_catalog_is_header_only(session: AsyncSession) -> None:
    assert await transfer_service.export_csv(session) == HEADER + "\n"


async def test_export_import_round_trip(session: AsyncSession, tmp_path: Path) -> None:
    originals = [
        ProductIn(
            name="Bolt, M8",
            unit="box",
            category="parts",
            brand="Acme",
            stock=100,
            status="active",
            image="bolt.png",
        ),
        ProductIn(name="Paint\nwhite", unit="l", category="paint", stock=3),
        ProductIn(name="A\rB", brand="x\ry", stock=1),
        ProductIn(name="Tape\r\nroll", status="on\rhold", stock=2),
        ProductIn(name="Глина", unit="кг", category="materials", brand="Урал", stock=0),
    ]
    for item in originals:
        await product_service.create_product(session, item)
    exported = await transfer_service.export_csv(session)

    engine = await create_test_engine()
    try:
        async with make_session_factory(engine)() as empty_session:
            summary = await transfer_service.import_csv_upload(
                empty_session, io.BytesIO(exported.encode("utf-8")), str(tmp_path)
            )
            assert (summary.added, summary.skipped) == (5, 0)
            imported = await product_service.list_products(empty_session, sort="id")
    finally:
        await engine.dispose()

    def fields(p: object) -> tuple[object, ...]:
        return tuple(getattr(p, field) for field in PRODUCT_FIELDS)

    assert [fields(p) for p in imported] == [fields(p) for p in originals]


async def test_import_upload_removes_temp_file(session: AsyncSession, tmp_path: Path) -> None:
    data = f"{HEADER}\nDrill,pcs,tools,Acme,4,active,\n".encode()

    summary = await transfer_service.import_csv_upload(session, io.BytesIO(data), str(tmp_path))

    assert summary.added == 1
    assert list(tmp_path.iterdir()) == []


async def test_import_upload_without_name_column_is_rejected(
    session: AsyncSession, tmp_path: Path
) -> None:
    data = b"title,stock\nDrill,4\n"

    with pytest.raises(ValidationError):
        await transfer_service.import_csv_upload(session, io.BytesIO(data), str(tmp_path))

    assert list(tmp_path.iterdir()) == []
    assert await product_service.list_products(session) == []


async def test_import_upload_accepts_bom(session: AsyncSession, tmp_path: Path) -> None:
    data = ("\ufeff" + f"{HEADER}\nDrill,pcs,tools,Acme,4,active,\n").encode()

    summary = await transfer_service.import_csv_upload(session, io.BytesIO(data), str(tmp_path))

    assert summary.added == 1


async def test_import_upload_with_bad_bytes_late_in_file_writes_nothing(
    session: AsyncSession, tmp_path: Path
) -> None:
    good = "".join(f"Item {i},pcs,tools,,1,,\n" for i in range(2000))
    data = f"{HEADER}\n{good}".encode() + b"Bad\xff,pcs,tools,,1,,\n"

    with pytest.raises(ValidationError):
        await transfer_service.import_csv_upload(session, io.BytesIO(data), str(tmp_path))

    assert list(tmp_path.iterdir()) == []
    assert await transfer_service.export_csv(session) == HEADER + "\n"
