# storefront/domain/filters.py
"""
Typed search predicates.

Every field is optional; a field left as None does not constrain the query.
Routers take these as query parameters through Depends().
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from storefront.domain.enums import OrderStatus


class CartFilters(BaseModel):
    user_id: Optional[int] = Field(None, gt=0)
    total_min: Optional[Decimal] = Field(None, ge=0)
    total_max: Optional[Decimal] = Field(None, ge=0)
    created_after: Optional[datetime] = None
    created_before: Optional[datetime] = None


class OrderFilters(BaseModel):
    user_id: Optional[int] = Field(None, gt=0)
    status: Optional[OrderStatus] = None
    total_min: Optional[Decimal] = Field(None, ge=0)
    total_max: Optional[Decimal] = Field(None, ge=0)
    created_after: Optional[datetime] = None
    created_before: Optional[datetime] = None


class ProductFilters(BaseModel):
    category_id: Optional[int] = Field(None, gt=0)
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    price_min: Optional[Decimal] = Field(None, ge=0)
    price_max: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None
