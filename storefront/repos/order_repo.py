# storefront/repos/order_repo.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.order import OrderModel
from storefront.domain.filters import OrderFilters


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def _with_items(self):
        return select(OrderModel).options(selectinload(OrderModel.items))

    def find_by_id(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            self._with_items().where(OrderModel.id == order_id)
        ).scalar_one_or_none()

    def find_by_user(self, user_id: int) -> List[OrderModel]:
        return list(
            self.db.execute(
                self._with_items()
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.id)
            ).scalars().all()
        )

    def find_all(self) -> List[OrderModel]:
        return list(self.db.execute(self._with_items().order_by(OrderModel.id)).scalars().all())

    def search(self, filters: OrderFilters) -> List[OrderModel]:
        stmt = self._with_items()

        if filters.user_id is not None:
            stmt = stmt.where(OrderModel.user_id == filters.user_id)
        if filters.status is not None:
            stmt = stmt.where(OrderModel.status == filters.status.value)
        if filters.total_min is not None:
            stmt = stmt.where(OrderModel.total >= filters.total_min)
        if filters.total_max is not None:
            stmt = stmt.where(OrderModel.total <= filters.total_max)
        if filters.created_after is not None:
            stmt = stmt.where(OrderModel.created_at >= filters.created_after)
        if filters.created_before is not None:
            stmt = stmt.where(OrderModel.created_at <= filters.created_before)

        return list(self.db.execute(stmt.order_by(OrderModel.id)).scalars().all())

    def create(self, order: OrderModel) -> OrderModel:
        #flush assigns order.id and the item ids
        self.db.add(order)
        self.db.flush()
        return order

    def update(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order
