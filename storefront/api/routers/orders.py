# storefront/api/routers/orders.py
from typing import Annotated, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.errors import http_error
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.filters import OrderFilters
from storefront.domain.schemas import OrderCreate, OrderOut, OrderStatusIn
from storefront.services.order_service import OrderService
from storefront.utils.settings import STRICT_STATUS_TRANSITIONS

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db, strict_transitions=STRICT_STATUS_TRANSITIONS)


@router.post("", response_model=OrderOut, status_code=201)
def create_order(
    payload: OrderCreate,
    user_id: int = Query(..., gt=0),
    db: Session = Depends(get_db),
):
    """
    Checks out the user's cart: stock is decremented, the cart is emptied.
    """
    svc = get_service(db)
    try:
        return svc.create_from_cart(user_id, payload.payment_method, payload.shipping_address_id)
    except StorefrontError as e:
        raise http_error(e)


@router.get("", response_model=List[OrderOut])
def get_user_orders(user_id: int = Query(..., gt=0), db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_by_user_id(user_id)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/all", response_model=List[OrderOut])
def get_all_orders(db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_all()
    except StorefrontError as e:
        raise http_error(e)


@router.get("/search", response_model=List[OrderOut])
def search_orders(filters: Annotated[OrderFilters, Query()], db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.search(filters)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_by_id(order_id)
    except StorefrontError as e:
        raise http_error(e)


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_status(order_id: int, payload: OrderStatusIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.update_status(order_id, payload.status)
    except StorefrontError as e:
        raise http_error(e)


@router.post("/{order_id}/cancel", response_model=OrderOut)
def cancel_order(order_id: int, db: Session = Depends(get_db)):
    """
    Cancels the order and restores stock, cancelling twice is a no-op.
    """
    svc = get_service(db)
    try:
        return svc.cancel_order(order_id)
    except StorefrontError as e:
        raise http_error(e)
