# storefront/services/cart_service.py
from decimal import Decimal
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import NotFound, InvalidQuantity, ConcurrencyConflict
from storefront.domain.filters import CartFilters
from storefront.domain.money import (
    money,
    line_total,
    ZERO,
    MAX_QUANTITY,
    MAX_LINE_AMOUNT,
    MAX_TOTAL,
)
from storefront.repos.cart_repo import CartRepo, CartItemRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.unit_of_work import UnitOfWork, step
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Use cases for the cart domain.
    commands (add, update, remove, clear) change state, each inside one unit of work
    queries (get, search) are read only

    The cached cart total is adjusted incrementally on every command,
    it is never recomputed from the item rows.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CartRepo(db)
        self.item_repo = CartItemRepo(db)
        self.product_repo = ProductRepo(db)

    #query
    def get_by_user_id(self, user_id: int) -> CartModel:
        with step("get-cart"):
            cart = self.repo.find_by_user(user_id)
        if not cart:
            raise NotFound("cart", user_id)
        return cart

    def search(self, filters: CartFilters) -> List[CartModel]:
        with step("get-carts"):
            return self.repo.search(filters)

    #commands
    def add_product(self, user_id: int, product_id: int, quantity: int) -> CartModel:
        if quantity <= 0 or quantity > MAX_QUANTITY:
            raise InvalidQuantity(quantity)

        with UnitOfWork(self.db):
            with step("get-cart"):
                cart = self.repo.find_by_user(user_id)

            if not cart:
                with step("create-cart"):
                    try:
                        cart = self.repo.create(CartModel(user_id=user_id, total=ZERO, version=1))
                    except IntegrityError as e:
                        #another request created this user's cart first
                        logger.warning(f"Cart for user {user_id} created concurrently")
                        raise ConcurrencyConflict("cart", user_id) from e
                logger.info(f"Created cart {cart.id} for user {user_id}")

            with step("get-product"):
                product = self.product_repo.find_by_id(product_id)
            if not product:
                raise NotFound("product", product_id)

            #no stock check here, stock is only checked at checkout
            #every add is a new row, same product added twice gives two items
            item = CartItemModel(
                cart_id=cart.id,
                product_id=product.id,
                quantity=quantity,
                unit_price=money(product.price),
                subtotal=line_total(product.price, quantity),
            )
            self._check_amounts(quantity, item.subtotal, money(cart.total) + item.subtotal)

            with step("create-item"):
                self.item_repo.create(item)

            self._save_total(cart, money(cart.total) + item.subtotal)

            logger.info(
                f"Added product {product_id} x{quantity} to cart {cart.id}, "
                f"subtotal {item.subtotal}"
            )

        return self._refreshed(user_id)

    def update_item(self, item_id: int, quantity: int) -> CartModel:
        with UnitOfWork(self.db):
            item, cart = self._load_item_and_cart(item_id)

            if quantity < 0 or quantity > MAX_QUANTITY:
                raise InvalidQuantity(quantity)

            if quantity == 0:
                #quantity 0 means remove
                self._save_total(cart, money(cart.total) - money(item.subtotal))
                with step("delete-item"):
                    self.item_repo.delete_by_id(item.id)
                logger.info(f"Removed item {item_id} from cart {cart.id} (quantity 0)")
            else:
                old = money(item.subtotal)
                subtotal = line_total(item.unit_price, quantity)
                self._check_amounts(quantity, subtotal, money(cart.total) + (subtotal - old))
                item.quantity = quantity
                item.subtotal = subtotal
                with step("update-item"):
                    self.item_repo.update(item)
                self._save_total(cart, money(cart.total) + (item.subtotal - old))
                logger.info(f"Item {item_id} in cart {cart.id} set to quantity {quantity}")

            user_id = cart.user_id

        return self._refreshed(user_id)

    def remove_item(self, item_id: int) -> CartModel:
        with UnitOfWork(self.db):
            item, cart = self._load_item_and_cart(item_id)

            self._save_total(cart, money(cart.total) - money(item.subtotal))
            with step("delete-item"):
                self.item_repo.delete_by_id(item.id)

            user_id = cart.user_id
            logger.info(f"Removed item {item_id} from cart {cart.id}")

        return self._refreshed(user_id)

    def clear_cart(self, user_id: int) -> CartModel:
        with UnitOfWork(self.db):
            with step("get-cart"):
                cart = self.repo.find_by_user(user_id)
            if not cart:
                raise NotFound("cart", user_id)

            with step("clear-cart"):
                removed = self.item_repo.delete_by_cart_id(cart.id)
            self._save_total(cart, ZERO)

            logger.info(f"Cleared cart {cart.id}, {removed} items removed")

        return self._refreshed(user_id)

    #helpers
    def _load_item_and_cart(self, item_id: int):
        with step("get-item"):
            item = self.item_repo.find_by_id(item_id)
        if not item:
            raise NotFound("cart item", item_id)

        with step("get-cart"):
            cart = self.repo.find_by_id(item.cart_id)
        if not cart:
            raise NotFound("cart", item.cart_id)

        return item, cart

    def _check_amounts(self, quantity: int, subtotal: Decimal, total: Decimal) -> None:
        #amounts the money columns cannot hold are a bad quantity, not a database error
        if subtotal > MAX_LINE_AMOUNT or total > MAX_TOTAL:
            raise InvalidQuantity(quantity)

    def _save_total(self, cart: CartModel, total: Decimal) -> None:
        with step("update-cart"):
            rowcount = self.repo.update_total(cart, money(total))

        # UPDATE ... WHERE version = old, 0 rows means somebody else saved the cart first
        if rowcount == 0:
            logger.warning(f"Version conflict on cart {cart.id} (version {cart.version})")
            raise ConcurrencyConflict("cart", cart.id)

    def _refreshed(self, user_id: int) -> CartModel:
        return self.get_by_user_id(user_id)
