# storefront/services/order_service.py
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.product import ProductModel
from storefront.domain.enums import OrderStatus, PaymentMethod, ALLOWED_TRANSITIONS
from storefront.domain.errors import (
    NotFound,
    CartEmpty,
    AddressNotFound,
    InsufficientStock,
    InvalidStatusTransition,
    ConcurrencyConflict,
    ProductLookupFailed,
    InvalidChoice,
)
from storefront.domain.filters import OrderFilters
from storefront.domain.money import money, line_total, ZERO
from storefront.repos.cart_repo import CartRepo, CartItemRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.unit_of_work import UnitOfWork, step
from storefront.repos.user_repo import AddressRepo
from storefront.utils.clock import utcnow
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    """
    Order domain: checkout (cart -> order), status changes and cancellation.
    The only service that touches carts, products and orders in one operation,
    so every command runs in a single unit of work and a failure leaves no partial writes.
    """

    def __init__(self, db: Session, strict_transitions: bool = False):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.item_repo = CartItemRepo(db)
        self.product_repo = ProductRepo(db)
        self.address_repo = AddressRepo(db)
        self.strict_transitions = strict_transitions

    #queries
    def get_by_id(self, order_id: int) -> OrderModel:
        with step("get-order"):
            order = self.repo.find_by_id(order_id)
        if not order:
            raise NotFound("order", order_id)
        return order

    def get_by_user_id(self, user_id: int) -> List[OrderModel]:
        with step("get-orders"):
            return self.repo.find_by_user(user_id)

    def get_all(self) -> List[OrderModel]:
        with step("get-orders"):
            return self.repo.find_all()

    def search(self, filters: OrderFilters) -> List[OrderModel]:
        with step("get-orders"):
            return self.repo.search(filters)

    #commands
    def create_from_cart(
        self,
        user_id: int,
        payment_method: PaymentMethod,
        shipping_address_id: int,
    ) -> OrderModel:
        """
        Checkout.

        1. cart must exist and have items
        2. shipping address must exist
        3. for every cart item (stored order): lock product, check stock,
           decrement it, snapshot name and current price into an order item
        4. create the PENDING order
        5. delete the cart items and reset the cart total, the cart row is kept
        """
        payment_method = _parse(PaymentMethod, payment_method, "payment method")

        with UnitOfWork(self.db):
            with step("get-cart"):
                cart = self.cart_repo.find_by_user(user_id)
            #no cart and empty cart are the same error
            if cart is None or not cart.items:
                raise CartEmpty()

            with step("get-address"):
                address = self.address_repo.find_by_id(shipping_address_id)
            if address is None:
                raise AddressNotFound(shipping_address_id)

            order_items = []
            total = ZERO

            for item in cart.items:
                product = self._lock_product(item.product_id)

                if product.stock < item.quantity:
                    logger.warning(
                        f"Checkout for user {user_id} rejected: product {product.id} "
                        f"has {product.stock}, requested {item.quantity}"
                    )
                    raise InsufficientStock(product.name, product.stock, item.quantity)

                self._write_stock(product, product.stock - item.quantity, "update-stock")

                subtotal = line_total(product.price, item.quantity)
                order_items.append(
                    OrderItemModel(
                        product_id=product.id,
                        name=product.name,
                        unit_price=money(product.price),
                        quantity=item.quantity,
                        subtotal=subtotal,
                    )
                )
                total += subtotal

            order = OrderModel(
                user_id=user_id,
                status=OrderStatus.PENDING.value,
                payment_method=payment_method.value,
                shipping_address_id=shipping_address_id,
                items=order_items,
                total=money(total),
            )
            with step("create-order"):
                self.repo.create(order)

            with step("clear-cart"):
                self.item_repo.delete_by_cart_id(cart.id)

            with step("update-cart"):
                rowcount = self.cart_repo.update_total(cart, ZERO)
            if rowcount == 0:
                raise ConcurrencyConflict("cart", cart.id)

            order_id = order.id

        logger.info(f"Order {order_id} created from cart of user {user_id}, total {money(total)}")
        return self.get_by_id(order_id)

    def update_status(self, order_id: int, status: OrderStatus) -> OrderModel:
        status = _parse(OrderStatus, status, "order status")

        with UnitOfWork(self.db):
            order = self.get_by_id(order_id)
            current = OrderStatus(order.status)

            if self.strict_transitions and status not in ALLOWED_TRANSITIONS[current]:
                raise InvalidStatusTransition(current.value, status.value)

            #permissive by default, any status is accepted
            order.status = status.value
            if status == OrderStatus.PAID:
                order.paid_at = utcnow()
            elif status == OrderStatus.SHIPPED:
                order.shipped_at = utcnow()

            with step("update-order"):
                self.repo.update(order)

        logger.info(f"Order {order_id} status {current.value} -> {status.value}")
        return self.get_by_id(order_id)

    def cancel_order(self, order_id: int) -> OrderModel:
        """
        Cancels the order and puts the stock back.
        Cancelling a cancelled order is a no-op, stock is not restored twice.
        Items whose product no longer exists are skipped.
        """
        with UnitOfWork(self.db):
            order = self.get_by_id(order_id)

            if order.status == OrderStatus.CANCELLED.value:
                logger.info(f"Order {order_id} already cancelled")
                return order

            for item in order.items:
                with step("get-product"):
                    product = self.product_repo.find_for_update(item.product_id)
                if product is None:
                    logger.info(
                        f"Product {item.product_id} of order {order_id} no longer exists, "
                        f"stock not restored"
                    )
                    continue

                self._write_stock(product, product.stock + item.quantity, "restore-stock")
                logger.info(f"Restored {item.quantity} units of product {product.id}")

            order.status = OrderStatus.CANCELLED.value
            order.cancelled_at = utcnow()
            with step("update-order"):
                self.repo.update(order)

        logger.info(f"Order {order_id} cancelled")
        return self.get_by_id(order_id)

    #helpers
    def _lock_product(self, product_id: int) -> ProductModel:
        try:
            product = self.product_repo.find_for_update(product_id)
        except SQLAlchemyError as e:
            raise ProductLookupFailed(product_id, e) from e
        if product is None:
            raise ProductLookupFailed(product_id, NotFound("product", product_id))
        return product

    def _write_stock(self, product: ProductModel, new_stock: int, step_name: str) -> None:
        with step(step_name):
            rowcount = self.product_repo.update_stock(product, new_stock)
        if rowcount == 0:
            logger.warning(f"Version conflict on product {product.id} (version {product.version})")
            raise ConcurrencyConflict("product", product.id)


def _parse(enum_cls, value, field: str):
    try:
        return enum_cls(value)
    except ValueError as e:
        raise InvalidChoice(field, value) from e
