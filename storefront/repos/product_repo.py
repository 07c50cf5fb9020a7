# storefront/repos/product_repo.py
from typing import List

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel
from storefront.domain.filters import ProductFilters
from storefront.utils.clock import utcnow


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def _live(self):
        return select(ProductModel).where(ProductModel.deleted_at.is_(None))

    def find_by_id(self, product_id: int) -> ProductModel | None:
        return self.db.execute(
            self._live().where(ProductModel.id == product_id)
        ).scalar_one_or_none()

    def find_for_update(self, product_id: int) -> ProductModel | None:
        #row lock on the stock column, no-op on sqlite
        return self.db.execute(
            self._live()
            .where(ProductModel.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def search(self, filters: ProductFilters) -> List[ProductModel]:
        stmt = self._live()

        if filters.category_id is not None:
            stmt = stmt.where(ProductModel.category_id == filters.category_id)
        if filters.name is not None:
            stmt = stmt.where(func.lower(ProductModel.name).contains(filters.name.lower()))
        if filters.price_min is not None:
            stmt = stmt.where(ProductModel.price >= filters.price_min)
        if filters.price_max is not None:
            stmt = stmt.where(ProductModel.price <= filters.price_max)
        if filters.is_active is not None:
            stmt = stmt.where(ProductModel.is_active == filters.is_active)

        return list(self.db.execute(stmt.order_by(ProductModel.id)).scalars().all())

    def create(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def soft_delete(self, product: ProductModel) -> ProductModel:
        product.deleted_at = utcnow()
        self.db.flush()
        return product

    def update_stock(self, product: ProductModel, new_stock: int) -> int:
        # UPDATE products SET stock=?, version=v+1 WHERE id=? AND version=v
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product.id, ProductModel.version == product.version)
            .values(stock=new_stock, version=product.version + 1)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount


class CategoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, category_id: int) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def find_by_name(self, name: str) -> CategoryModel | None:
        return self.db.execute(
            select(CategoryModel).where(CategoryModel.name == name)
        ).scalar_one_or_none()

    def create(self, category: CategoryModel) -> CategoryModel:
        self.db.add(category)
        self.db.flush()
        return category
