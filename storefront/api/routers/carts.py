#storefront/api/routers/carts.py
from typing import Annotated, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.errors import http_error
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.filters import CartFilters
from storefront.domain.schemas import ItemIn, ItemQuantityIn, CartOut
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/carts", tags=["carts"])


def get_service(db: Session):
    return CartService(db)


@router.get("", response_model=CartOut)
def get_cart(user_id: int = Query(..., gt=0), db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_by_user_id(user_id)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/search", response_model=List[CartOut])
def search_carts(filters: Annotated[CartFilters, Query()], db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.search(filters)
    except StorefrontError as e:
        raise http_error(e)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    user_id: int = Query(..., gt=0),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.add_product(
            user_id=user_id,
            product_id=payload.product_id,
            quantity=payload.quantity,
        )
    except StorefrontError as e:
        raise http_error(e)


@router.put("/items/{item_id}", response_model=CartOut)
def update_item(item_id: int, payload: ItemQuantityIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.update_item(item_id, payload.quantity)
    except StorefrontError as e:
        raise http_error(e)


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_item(item_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.remove_item(item_id)
    except StorefrontError as e:
        raise http_error(e)


@router.delete("", response_model=CartOut)
def clear_cart(user_id: int = Query(..., gt=0), db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.clear_cart(user_id)
    except StorefrontError as e:
        raise http_error(e)
