# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, EmailStr
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from storefront.domain.enums import OrderStatus, PaymentMethod


# ---------------------------------------------------------------- cart

class ItemIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: int = Field(..., gt=0, description="product ID (must be > 0)")
    #quantity validated by the service, so a bad value maps to 400 not 422
    quantity: int = Field(..., description="number of units")


class ItemQuantityIn(BaseModel):
    """Schema for changing an item's quantity, 0 removes the item."""

    quantity: int


class CartItemOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    id: int
    user_id: int
    items: List[CartItemOut]
    total: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------- orders

class OrderCreate(BaseModel):
    """Schema for checking out the caller's cart."""

    payment_method: PaymentMethod
    shipping_address_id: int = Field(..., gt=0, description="address ID (must be > 0)")


class OrderStatusIn(BaseModel):
    status: OrderStatus


class OrderItemOut(BaseModel):
    id: int
    product_id: int
    name: str
    unit_price: Decimal
    quantity: int
    subtotal: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    user_id: int
    status: OrderStatus
    payment_method: PaymentMethod
    shipping_address_id: int
    items: List[OrderItemOut]
    total: Decimal
    created_at: datetime
    paid_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------- catalog

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    parent_id: Optional[int] = Field(None, gt=0)


class CategoryRef(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class CategoryOut(BaseModel):
    id: int
    name: str
    parent_id: Optional[int] = None
    subcategories: List[CategoryRef] = []

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    price: Decimal = Field(..., ge=0)
    currency: str = Field("USD", min_length=1, max_length=10)
    stock: int = Field(0, ge=0)
    is_active: bool = True
    category_id: int = Field(..., gt=0)


class ProductOut(BaseModel):
    id: int
    name: str
    description: str
    price: Decimal
    currency: str
    stock: int
    is_active: bool
    category_id: int

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------- users

class AddressCreate(BaseModel):
    country: str = Field(..., min_length=1, max_length=100)
    city: str = Field(..., min_length=1, max_length=100)
    postcode: str = Field(..., min_length=1, max_length=20)
    street: str = Field(..., min_length=1, max_length=200)
    number: str = Field(..., min_length=1, max_length=50)


class AddressOut(AddressCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)


class UserCreate(BaseModel):
    """Schema for registering a user together with their address."""

    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    surname: str = Field(..., min_length=1, max_length=100)
    address: AddressCreate


class UserRead(BaseModel):
    id: int
    email: str
    name: str
    surname: str
    address: AddressOut

    model_config = ConfigDict(from_attributes=True)
