from typing import Annotated, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.errors import http_error
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.filters import ProductFilters
from storefront.domain.schemas import ProductCreate, ProductOut, CategoryCreate, CategoryOut
from storefront.services.catalog_service import CatalogService

router = APIRouter(tags=["catalog"])


def get_service(db: Session):
    return CatalogService(db)


@router.post("/categories", response_model=CategoryOut, status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.create_category(payload)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/categories/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_category(category_id)
    except StorefrontError as e:
        raise http_error(e)


@router.post("/products", response_model=ProductOut, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.create_product(payload)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/products", response_model=List[ProductOut])
def search_products(filters: Annotated[ProductFilters, Query()], db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.search_products(filters)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_product(product_id)
    except StorefrontError as e:
        raise http_error(e)


@router.delete("/products/{product_id}", status_code=204)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        svc.delete_product(product_id)
    except StorefrontError as e:
        raise http_error(e)
