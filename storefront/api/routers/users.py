from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.errors import http_error
from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import UserCreate, UserRead, AddressCreate, AddressOut
from storefront.services.user_service import UserService

router = APIRouter(tags=["users"])


@router.post("/users", response_model=UserRead, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.create_user(payload)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/users/{user_id}", response_model=UserRead)
def get_user(user_id: int, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.get_user(user_id)
    except StorefrontError as e:
        raise http_error(e)


@router.post("/addresses", response_model=AddressOut, status_code=201)
def create_address(payload: AddressCreate, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.create_address(payload)
    except StorefrontError as e:
        raise http_error(e)


@router.get("/addresses/{address_id}", response_model=AddressOut)
def get_address(address_id: int, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.get_address(address_id)
    except StorefrontError as e:
        raise http_error(e)
