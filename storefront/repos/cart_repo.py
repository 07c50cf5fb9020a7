# storefront/repos/cart_repo.py
from decimal import Decimal
from typing import List

from sqlalchemy import select, update, delete
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.filters import CartFilters
from storefront.utils.clock import utcnow


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def _with_items(self):
        return select(CartModel).options(selectinload(CartModel.items))

    def find_by_user(self, user_id: int) -> CartModel | None:
        return self.db.execute(
            self._with_items().where(CartModel.user_id == user_id)
        ).scalar_one_or_none()

    def find_by_id(self, cart_id: int) -> CartModel | None:
        return self.db.execute(
            self._with_items().where(CartModel.id == cart_id)
        ).scalar_one_or_none()

    def search(self, filters: CartFilters) -> List[CartModel]:
        stmt = self._with_items()

        if filters.user_id is not None:
            stmt = stmt.where(CartModel.user_id == filters.user_id)
        if filters.total_min is not None:
            stmt = stmt.where(CartModel.total >= filters.total_min)
        if filters.total_max is not None:
            stmt = stmt.where(CartModel.total <= filters.total_max)
        if filters.created_after is not None:
            stmt = stmt.where(CartModel.created_at >= filters.created_after)
        if filters.created_before is not None:
            stmt = stmt.where(CartModel.created_at <= filters.created_before)

        return list(self.db.execute(stmt.order_by(CartModel.id)).scalars().all())

    def create(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.flush()
        return cart

    def update_total(self, cart: CartModel, total: Decimal) -> int:
        #optimistic locking on version
        #UPDATE carts SET total=?, version=2 WHERE id=1 AND version=1
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart.id, CartModel.version == cart.version)
            .values(total=total, version=cart.version + 1, updated_at=utcnow())
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount


class CartItemRepo:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, item_id: int) -> CartItemModel | None:
        return self.db.get(CartItemModel, item_id)

    def create(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def update(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_by_id(self, item_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(CartItemModel.id == item_id)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount

    def delete_by_cart_id(self, cart_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(CartItemModel.cart_id == cart_id)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount
