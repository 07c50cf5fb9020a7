from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class CategoryModel(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    parent_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)

    parent = relationship("CategoryModel", remote_side=[id], back_populates="subcategories")
    subcategories = relationship(
        "CategoryModel",
        back_populates="parent",
        order_by="CategoryModel.id",
    )
