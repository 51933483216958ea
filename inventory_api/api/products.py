"""HTTP-маршруты каталога товаров."""

from collections.abc import Sequence

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.api.deps import get_current_actor
from inventory_api.core.config import settings
from inventory_api.core.exceptions import StoreError
from inventory_api.db.models import InventoryHistory, Product
from inventory_api.db.session import get_db_session
from inventory_api.schemas import (
    HistoryEntryRead,
    ImportSummary,
    Message,
    ProductCreated,
    ProductIn,
    ProductRead,
    SortField,
    SortOrder,
)
from inventory_api.services import history_service, product_service, transfer_service

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=list[ProductRead])
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    sort: SortField = "name",
    order: SortOrder = "asc",
    category: str | None = None,
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[Product]:
    """Страница каталога с сортировкой и фильтром по категории."""
    return await product_service.list_products(
        session, page=page, limit=limit, sort=sort, order=order, category=category
    )


@router.get("/search", response_model=list[ProductRead])
async def search_products(
    name: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_db_session),
) -> Sequence[Product]:
    return await product_service.search_products(session, name)


@router.get("/export")
async def export_products(session: AsyncSession = Depends(get_db_session)) -> Response:
    """Выгрузка всего каталога в CSV-файл."""
    content = await transfer_service.export_csv(session)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="products.csv"'},
    )


@router.post(
    "/import", response_model=ImportSummary, dependencies=[Depends(get_current_actor)]
)
async def import_products(
    csv_file: UploadFile = File(..., alias="csvFile"),
    session: AsyncSession = Depends(get_db_session),
) -> ImportSummary:
    """Импорт товаров из CSV; товары с существующими названиями пропускаются."""
    try:
        return await transfer_service.import_csv_upload(
            session, csv_file.file, settings.UPLOAD_DIR
        )
    finally:
        await csv_file.close()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ProductCreated,
    dependencies=[Depends(get_current_actor)],
)
async def create_product(
    product: ProductIn, session: AsyncSession = Depends(get_db_session)
) -> ProductCreated:
    db_product = await product_service.create_product(session, product)
    if db_product.id is None:
        raise StoreError("Created product has no id")
    return ProductCreated(id=db_product.id)


@router.get("/{product_id}", response_model=ProductRead)
async def get_product(
    product_id: int, session: AsyncSession = Depends(get_db_session)
) -> Product:
    return await product_service.get_product(session, product_id)


@router.put("/{product_id}", response_model=Message)
async def update_product(
    product_id: int,
    product: ProductIn,
    session: AsyncSession = Depends(get_db_session),
    actor: str = Depends(get_current_actor),
) -> Message:
    """Полная замена полей товара; изменение остатка попадает в журнал."""
    await product_service.update_product(session, product_id, product, actor)
    return Message(message="Product updated")


@router.delete(
    "/{product_id}", response_model=Message, dependencies=[Depends(get_current_actor)]
)
async def delete_product(
    product_id: int, session: AsyncSession = Depends(get_db_session)
) -> Message:
    await product_service.delete_product(session, product_id)
    return Message(message="Product deleted")


@router.get("/{product_id}/history", response_model=list[HistoryEntryRead])
async def get_product_history(
    product_id: int, session: AsyncSession = Depends(get_db_session)
) -> Sequence[InventoryHistory]:
    """Журнал изменений остатка, самые свежие записи первыми."""
    return await history_service.get_history(session, product_id)
