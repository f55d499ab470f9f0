from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

import config
from enums.capability import Capability
from models.product import ProductInputDTO
from models.user import UserDTO
from services.catalog_import import CatalogImportService
from services.product import ProductService
from utils.pagination import build_pagination
from web.dependencies import get_session, require_capability, PageParams
from web.payloads import BulkUpdatePayload, CatalogImportPayload
from web.responses import envelope


product_router = APIRouter(prefix="/api/products", tags=["products"])


@product_router.get("")
async def get_products(category: str | None = Query(default=None),
                       paging: PageParams = Depends(),
                       session: AsyncSession = Depends(get_session)):
    products, total = await ProductService.get_products(paging.page, paging.limit, session, category=category)
    return envelope(products, pagination=build_pagination(paging.page, paging.limit, total))


@product_router.get("/search")
async def search_products(q: str | None = Query(default=None),
                          paging: PageParams = Depends(),
                          session: AsyncSession = Depends(get_session)):
    products, total = await ProductService.search(q, paging.page, paging.limit, session)
    return envelope(products, pagination=build_pagination(paging.page, paging.limit, total))


@product_router.get("/categories")
async def get_categories(session: AsyncSession = Depends(get_session)):
    return envelope(await ProductService.get_categories(session))


@product_router.get("/category")
async def get_products_by_category(categories: str | None = Query(default=None),
                                   paging: PageParams = Depends(),
                                   session: AsyncSession = Depends(get_session)):
    products, total = await ProductService.get_by_categories(categories, paging.page, paging.limit, session)
    return envelope(products, pagination=build_pagination(paging.page, paging.limit, total))


@product_router.get("/stats")
async def get_product_stats(session: AsyncSession = Depends(get_session)):
    return envelope(await ProductService.get_stats(session))


@product_router.get("/{product_id}")
async def get_product(product_id: int, session: AsyncSession = Depends(get_session)):
    return envelope(await ProductService.get_product(product_id, session))


@product_router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(payload: ProductInputDTO,
                         user: UserDTO = Depends(require_capability(Capability.PRODUCT_MANAGE)),
                         session: AsyncSession = Depends(get_session)):
    product = await ProductService.create_product(payload, user.username, session)
    return envelope(product, "Product created successfully")


@product_router.put("/{product_id}")
async def update_product(product_id: int, payload: ProductInputDTO,
                         user: UserDTO = Depends(require_capability(Capability.PRODUCT_MANAGE)),
                         session: AsyncSession = Depends(get_session)):
    product = await ProductService.update_product(product_id, payload, user.username, session)
    return envelope(product, "Product updated successfully")


@product_router.delete("/{product_id}")
async def delete_product(product_id: int,
                         user: UserDTO = Depends(require_capability(Capability.PRODUCT_MANAGE)),
                         session: AsyncSession = Depends(get_session)):
    await ProductService.delete_product(product_id, user.username, session)
    return envelope(message="Product deleted successfully")


@product_router.post("/bulk-update")
async def bulk_update_products(payload: BulkUpdatePayload,
                               user: UserDTO = Depends(require_capability(Capability.PRODUCT_MANAGE)),
                               session: AsyncSession = Depends(get_session)):
    result = await ProductService.bulk_update(
        [(entry.product_id, entry.update_data) for entry in payload.updates], user.username, session
    )
    return envelope(result, f"Bulk update completed: {result['updated']} updated, {result['failed']} failed")


@product_router.post("/fetch-store")
async def fetch_and_store_products(payload: CatalogImportPayload | None = None,
                                   user: UserDTO = Depends(require_capability(Capability.CATALOG_IMPORT)),
                                   session: AsyncSession = Depends(get_session)):
    limit = payload.limit if payload and payload.limit else config.CATALOG_IMPORT_DEFAULT_LIMIT
    result = await CatalogImportService.fetch_and_store(session, limit=limit)
    return envelope(result, f"Products fetched and stored successfully: {result['stored']} new products added")


@product_router.post("/update-existing")
async def update_existing_products(payload: CatalogImportPayload | None = None,
                                   user: UserDTO = Depends(require_capability(Capability.CATALOG_IMPORT)),
                                   session: AsyncSession = Depends(get_session)):
    limit = payload.limit if payload and payload.limit else config.CATALOG_IMPORT_DEFAULT_LIMIT
    result = await CatalogImportService.update_existing(session, limit=limit)
    return envelope(result, f"Existing products updated: {result['updated']} updated")
