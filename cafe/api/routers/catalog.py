# cafe/api/routers/catalog.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from cafe.api import http_error
from cafe.api.deps import get_catalog_service, require_admin
from cafe.domain.errors import CafeError
from cafe.domain.schemas import CategoryIn, CategoryOut, ProductIn, ProductOut, ProductUpdate
from cafe.services.catalog_service import CatalogService

router = APIRouter(tags=["catalog"])
admin_router = APIRouter(prefix="/admin", tags=["admin-catalog"], dependencies=[Depends(require_admin)])


@router.get("/categories", response_model=List[CategoryOut])
def list_categories(svc: CatalogService = Depends(get_catalog_service)):
    return svc.list_categories()


@router.get("/products", response_model=List[ProductOut])
def list_products(
    category: Optional[str] = Query(None, description="slug kategorii"),
    available_only: bool = Query(True),
    svc: CatalogService = Depends(get_catalog_service),
):
    return svc.list_products(category_slug=category, available_only=available_only)


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, svc: CatalogService = Depends(get_catalog_service)):
    try:
        return svc.get_product(product_id)
    except CafeError as e:
        raise http_error(e)


@admin_router.post("/categories", response_model=CategoryOut, status_code=201)
def create_category(payload: CategoryIn, svc: CatalogService = Depends(get_catalog_service)):
    try:
        return svc.create_category(payload)
    except CafeError as e:
        raise http_error(e)


@admin_router.put("/categories/{category_id}", response_model=CategoryOut)
def update_category(category_id: int, payload: CategoryIn, svc: CatalogService = Depends(get_catalog_service)):
    try:
        return svc.update_category(category_id, payload)
    except CafeError as e:
        raise http_error(e)


@admin_router.delete("/categories/{category_id}", status_code=204)
def delete_category(category_id: int, svc: CatalogService = Depends(get_catalog_service)):
    try:
        svc.delete_category(category_id)
    except CafeError as e:
        raise http_error(e)


@admin_router.get("/products", response_model=List[ProductOut])
def list_all_products(svc: CatalogService = Depends(get_catalog_service)):
    return svc.list_products(available_only=False)


@admin_router.post("/products", response_model=ProductOut, status_code=201)
def create_product(payload: ProductIn, svc: CatalogService = Depends(get_catalog_service)):
    try:
        return svc.create_product(payload)
    except CafeError as e:
        raise http_error(e)


@admin_router.patch("/products/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductUpdate, svc: CatalogService = Depends(get_catalog_service)):
    try:
        return svc.update_product(product_id, payload)
    except CafeError as e:
        raise http_error(e)


@admin_router.delete("/products/{product_id}", status_code=204)
def delete_product(product_id: int, svc: CatalogService = Depends(get_catalog_service)):
    try:
        svc.delete_product(product_id)
    except CafeError as e:
        raise http_error(e)
