#storefront/data/models/product.py
from sqlalchemy import Column, Integer, String, Text, Boolean, Numeric, ForeignKey, DateTime

from storefront.data.database import Base
from storefront.utils.clock import utcnow


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(10), nullable=False, default="USD")
    stock = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)

    # optimistic locking, bumped on every stock write
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    #soft delete, a deleted product stays referenced by cart and order rows
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
