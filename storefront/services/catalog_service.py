# storefront/services/catalog_service.py
from typing import List

from sqlalchemy.orm import Session

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel
from storefront.domain.errors import NotFound, DuplicateCategory
from storefront.domain.filters import ProductFilters
from storefront.domain.money import money
from storefront.domain.schemas import CategoryCreate, ProductCreate
from storefront.repos.product_repo import ProductRepo, CategoryRepo
from storefront.repos.unit_of_work import UnitOfWork, step
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CatalogService:
    """Products and the category tree, plain data access."""

    def __init__(self, db: Session):
        self.db = db
        self.products = ProductRepo(db)
        self.categories = CategoryRepo(db)

    def create_category(self, payload: CategoryCreate) -> CategoryModel:
        with UnitOfWork(self.db):
            existing = self.categories.find_by_name(payload.name)
            if existing:
                #same name and parent is a repeat of an earlier create
                if existing.parent_id != payload.parent_id:
                    raise DuplicateCategory(payload.name)
                return existing

            if payload.parent_id is not None and not self.categories.find_by_id(payload.parent_id):
                raise NotFound("parent category", payload.parent_id)

            with step("create-category"):
                category = self.categories.create(
                    CategoryModel(name=payload.name, parent_id=payload.parent_id)
                )
            category_id = category.id

        logger.info(f"Created category {category_id} ({payload.name})")
        return self.get_category(category_id)

    def get_category(self, category_id: int) -> CategoryModel:
        category = self.categories.find_by_id(category_id)
        if not category:
            raise NotFound("category", category_id)
        return category

    def create_product(self, payload: ProductCreate) -> ProductModel:
        with UnitOfWork(self.db):
            if not self.categories.find_by_id(payload.category_id):
                raise NotFound("category", payload.category_id)

            with step("create-product"):
                product = self.products.create(
                    ProductModel(
                        name=payload.name,
                        description=payload.description,
                        price=money(payload.price),
                        currency=payload.currency,
                        stock=payload.stock,
                        is_active=payload.is_active,
                        category_id=payload.category_id,
                        version=1,
                    )
                )
            product_id = product.id

        logger.info(f"Created product {product_id} ({payload.name}), stock {payload.stock}")
        return self.get_product(product_id)

    def get_product(self, product_id: int) -> ProductModel:
        with step("get-product"):
            product = self.products.find_by_id(product_id)
        if not product:
            raise NotFound("product", product_id)
        return product

    def delete_product(self, product_id: int) -> None:
        """
        Soft delete. Carts and orders keep their rows and the product just stops
        being found, so checkout rejects it and cancellation skips its restock.
        """
        with UnitOfWork(self.db):
            product = self.get_product(product_id)
            with step("delete-product"):
                self.products.soft_delete(product)

        logger.info(f"Deleted product {product_id}")

    def search_products(self, filters: ProductFilters) -> List[ProductModel]:
        with step("get-products"):
            return self.products.search(filters)
