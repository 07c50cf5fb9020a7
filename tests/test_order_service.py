from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from storefront.data.models import ProductModel
from storefront.domain.enums import OrderStatus, PaymentMethod
from storefront.domain.errors import (
    NotFound,
    CartEmpty,
    AddressNotFound,
    InsufficientStock,
    InvalidStatusTransition,
    ConcurrencyConflict,
    PersistenceFailure,
    ProductLookupFailed,
    InvalidChoice,
)
from storefront.domain.filters import OrderFilters
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.cart_service import CartService
from storefront.services.catalog_service import CatalogService
from storefront.services.order_service import OrderService


def as_utc(value):
    # sqlite gives datetimes back without tzinfo
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def stock_of(db, product_id):
    db.expire_all()
    return db.get(ProductModel, product_id).stock


@pytest.fixture
def carts(db):
    return CartService(db)


@pytest.fixture
def orders(db):
    return OrderService(db)


@pytest.fixture
def shopper(factory):
    user = factory.user()
    address = factory.address(city="Krakow")
    return user, address


def checkout(orders, user, address, method=PaymentMethod.CARD):
    return orders.create_from_cart(user.id, method, address.id)


def test_checkout_without_cart_raises_cart_empty(orders, shopper, factory, db):
    user, address = shopper
    product = factory.product(stock=5)

    with pytest.raises(CartEmpty):
        checkout(orders, user, address)

    assert orders.get_all() == []
    assert stock_of(db, product.id) == 5


def test_checkout_with_cleared_cart_raises_cart_empty(orders, carts, shopper, factory):
    user, address = shopper
    product = factory.product()
    carts.add_product(user.id, product.id, 1)
    carts.clear_cart(user.id)

    with pytest.raises(CartEmpty):
        checkout(orders, user, address)


def test_checkout_with_unknown_address_raises(orders, carts, shopper, factory, db):
    user, _ = shopper
    product = factory.product(stock=5)
    carts.add_product(user.id, product.id, 1)

    with pytest.raises(AddressNotFound):
        orders.create_from_cart(user.id, PaymentMethod.BLIK, 9999)

    assert stock_of(db, product.id) == 5


def test_checkout_with_insufficient_stock_names_product(orders, carts, shopper, factory, db):
    user, address = shopper
    product = factory.product(name="Monitor", stock=3)
    carts.add_product(user.id, product.id, 5)

    with pytest.raises(InsufficientStock) as exc:
        checkout(orders, user, address)

    assert exc.value.product_name == "Monitor"
    assert "Monitor" in str(exc.value)
    assert orders.get_all() == []
    assert stock_of(db, product.id) == 3


def test_failed_checkout_rolls_back_earlier_stock_decrements(orders, carts, shopper, factory, db):
    user, address = shopper
    plenty = factory.product(name="Mouse", stock=10)
    scarce = factory.product(name="Monitor", stock=1)
    carts.add_product(user.id, plenty.id, 4)
    carts.add_product(user.id, scarce.id, 2)

    with pytest.raises(InsufficientStock):
        checkout(orders, user, address)

    #first item was decremented inside the loop, the rollback must undo it
    assert stock_of(db, plenty.id) == 10
    assert stock_of(db, scarce.id) == 1
    cart = carts.get_by_user_id(user.id)
    assert len(cart.items) == 2


def test_duplicate_items_are_checked_against_remaining_stock(orders, carts, shopper, factory, db):
    user, address = shopper
    product = factory.product(stock=3)
    carts.add_product(user.id, product.id, 2)
    carts.add_product(user.id, product.id, 2)

    with pytest.raises(InsufficientStock):
        checkout(orders, user, address)

    assert stock_of(db, product.id) == 3


def test_checkout_creates_pending_order_and_empties_cart(orders, carts, shopper, factory, db):
    user, address = shopper
    keyboard = factory.product(name="Keyboard", price="50.00", stock=10)
    mouse = factory.product(name="Mouse", price="50.00", stock=4)
    carts.add_product(user.id, keyboard.id, 2)
    carts.add_product(user.id, mouse.id, 1)

    order = checkout(orders, user, address, PaymentMethod.PAYPAL)

    assert order.id is not None
    assert order.total == Decimal("150.00")
    assert order.status == OrderStatus.PENDING.value
    assert order.payment_method == PaymentMethod.PAYPAL.value
    assert order.shipping_address_id == address.id
    assert [(i.product_id, i.quantity) for i in order.items] == [(keyboard.id, 2), (mouse.id, 1)]
    assert order.total == sum((i.subtotal for i in order.items), Decimal("0.00"))
    assert order.paid_at is None and order.shipped_at is None and order.cancelled_at is None

    assert stock_of(db, keyboard.id) == 8
    assert stock_of(db, mouse.id) == 3

    cart = carts.get_by_user_id(user.id)
    assert cart.items == []
    assert cart.total == Decimal("0.00")


def test_order_total_matches_cart_lines(orders, carts, shopper, factory):
    user, address = shopper
    a = factory.product(name="A", price="3.33")
    b = factory.product(name="B", price="12.49")
    carts.add_product(user.id, a.id, 3)
    cart = carts.add_product(user.id, b.id, 2)
    expected = sum((i.unit_price * i.quantity for i in cart.items), Decimal("0.00"))

    order = checkout(orders, user, address)

    assert order.total == expected == Decimal("34.97")


def test_order_items_are_decoupled_from_product(orders, carts, shopper, factory, db):
    user, address = shopper
    product = factory.product(name="Keyboard", price="50.00")
    carts.add_product(user.id, product.id, 1)
    order = checkout(orders, user, address)

    product.name = "Keyboard v2"
    product.price = Decimal("75.00")
    db.commit()

    order = orders.get_by_id(order.id)
    assert order.items[0].name == "Keyboard"
    assert order.items[0].unit_price == Decimal("50.00")
    assert order.total == Decimal("50.00")


def test_cart_is_reusable_after_checkout(orders, carts, shopper, factory):
    user, address = shopper
    product = factory.product()
    cart = carts.add_product(user.id, product.id, 1)
    cart_id = cart.id
    checkout(orders, user, address)

    cart = carts.add_product(user.id, product.id, 2)

    assert cart.id == cart_id
    assert [i.quantity for i in cart.items] == [2]


def test_cancel_restores_stock(orders, carts, shopper, factory, db):
    user, address = shopper
    product = factory.product(stock=7)
    carts.add_product(user.id, product.id, 2)
    order = checkout(orders, user, address)
    assert stock_of(db, product.id) == 5

    order = orders.cancel_order(order.id)

    assert stock_of(db, product.id) == 7
    assert order.status == OrderStatus.CANCELLED.value
    assert abs(datetime.now(timezone.utc) - as_utc(order.cancelled_at)) < timedelta(seconds=1)


def test_cancel_twice_does_not_restore_stock_twice(orders, carts, shopper, factory, db):
    user, address = shopper
    product = factory.product(stock=7)
    carts.add_product(user.id, product.id, 2)
    order = checkout(orders, user, address)
    first = orders.cancel_order(order.id)
    cancelled_at = first.cancelled_at

    second = orders.cancel_order(order.id)

    assert second.status == OrderStatus.CANCELLED.value
    assert second.cancelled_at == cancelled_at
    assert stock_of(db, product.id) == 7


def test_cancel_skips_deleted_products(orders, carts, shopper, factory, db):
    user, address = shopper
    gone = factory.product(name="Discontinued", stock=5)
    kept = factory.product(name="Mouse", stock=5)
    carts.add_product(user.id, gone.id, 1)
    carts.add_product(user.id, kept.id, 2)
    order = checkout(orders, user, address)

    CatalogService(db).delete_product(gone.id)

    order = orders.cancel_order(order.id)

    assert order.status == OrderStatus.CANCELLED.value
    assert stock_of(db, kept.id) == 5
    assert stock_of(db, gone.id) == 4
    #snapshot still names the deleted product
    assert order.items[0].name == "Discontinued"


def test_cancel_unknown_order_raises_not_found(orders):
    with pytest.raises(NotFound) as exc:
        orders.cancel_order(404)

    assert exc.value.entity == "order"


def test_update_status_stamps_paid_and_shipped(orders, carts, shopper, factory):
    user, address = shopper
    product = factory.product()
    carts.add_product(user.id, product.id, 1)
    order = checkout(orders, user, address)

    order = orders.update_status(order.id, OrderStatus.PAID)
    assert order.status == OrderStatus.PAID.value
    assert order.paid_at is not None
    assert order.shipped_at is None

    order = orders.update_status(order.id, OrderStatus.SHIPPED)
    assert order.status == OrderStatus.SHIPPED.value
    assert order.shipped_at is not None
    assert order.cancelled_at is None


def test_update_status_is_permissive_by_default(orders, carts, shopper, factory, db):
    user, address = shopper
    product = factory.product(stock=5)
    carts.add_product(user.id, product.id, 1)
    order = checkout(orders, user, address)
    orders.update_status(order.id, OrderStatus.SHIPPED)

    order = orders.update_status(order.id, OrderStatus.PENDING)

    assert order.status == OrderStatus.PENDING.value


def test_cancelled_via_status_update_does_not_touch_stock(orders, carts, shopper, factory, db):
    user, address = shopper
    product = factory.product(stock=5)
    carts.add_product(user.id, product.id, 2)
    order = checkout(orders, user, address)

    order = orders.update_status(order.id, OrderStatus.CANCELLED)

    assert order.status == OrderStatus.CANCELLED.value
    assert order.cancelled_at is None
    assert stock_of(db, product.id) == 3


def test_strict_transitions_reject_illegal_moves(db, carts, shopper, factory):
    user, address = shopper
    strict = OrderService(db, strict_transitions=True)
    product = factory.product()
    carts.add_product(user.id, product.id, 1)
    order = checkout(strict, user, address)

    with pytest.raises(InvalidStatusTransition):
        strict.update_status(order.id, OrderStatus.SHIPPED)

    order = strict.update_status(order.id, OrderStatus.PAID)
    order = strict.update_status(order.id, OrderStatus.SHIPPED)
    assert order.status == OrderStatus.SHIPPED.value

    with pytest.raises(InvalidStatusTransition):
        strict.update_status(order.id, OrderStatus.PENDING)
    assert strict.get_by_id(order.id).status == OrderStatus.SHIPPED.value


def test_update_status_unknown_order_raises_not_found(orders):
    with pytest.raises(NotFound):
        orders.update_status(1, OrderStatus.PAID)


def test_unknown_payment_method_raises_invalid_choice(orders, carts, shopper, factory, db):
    user, address = shopper
    product = factory.product(stock=5)
    carts.add_product(user.id, product.id, 1)

    with pytest.raises(InvalidChoice) as exc:
        orders.create_from_cart(user.id, "BITCOIN", address.id)

    assert str(exc.value) == "invalid payment method: BITCOIN"
    assert stock_of(db, product.id) == 5
    assert len(carts.get_by_user_id(user.id).items) == 1


def test_unknown_status_raises_invalid_choice(orders, carts, shopper, factory):
    user, address = shopper
    product = factory.product()
    carts.add_product(user.id, product.id, 1)
    order = checkout(orders, user, address)

    with pytest.raises(InvalidChoice) as exc:
        orders.update_status(order.id, "LOST")

    assert exc.value.field == "order status"
    assert orders.get_by_id(order.id).status == OrderStatus.PENDING.value


def test_checkout_with_deleted_product_fails_lookup(orders, carts, shopper, factory, db):
    user, address = shopper
    product = factory.product(stock=5)
    carts.add_product(user.id, product.id, 1)
    CatalogService(db).delete_product(product.id)

    with pytest.raises(ProductLookupFailed) as exc:
        checkout(orders, user, address)

    assert exc.value.product_id == product.id
    assert orders.get_all() == []


def test_persistence_failure_names_step_and_rolls_back(orders, carts, shopper, factory, db, monkeypatch):
    user, address = shopper
    product = factory.product(stock=5)
    carts.add_product(user.id, product.id, 2)

    def broken_create(self, order):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(OrderRepo, "create", broken_create)

    with pytest.raises(PersistenceFailure) as exc:
        checkout(orders, user, address)

    assert exc.value.step == "create-order"
    assert "disk full" in str(exc.value)
    assert stock_of(db, product.id) == 5
    assert len(carts.get_by_user_id(user.id).items) == 1


def test_product_lookup_failure_is_wrapped(orders, carts, shopper, factory, monkeypatch):
    user, address = shopper
    product = factory.product()
    carts.add_product(user.id, product.id, 1)

    def broken_find(self, product_id):
        raise SQLAlchemyError("connection reset")

    monkeypatch.setattr(ProductRepo, "find_for_update", broken_find)

    with pytest.raises(ProductLookupFailed) as exc:
        checkout(orders, user, address)

    assert exc.value.step == "get-product"
    assert exc.value.product_id == product.id


def test_concurrent_stock_write_is_detected(orders, carts, shopper, factory, db, monkeypatch):
    user, address = shopper
    product = factory.product(stock=10)
    carts.add_product(user.id, product.id, 3)

    original = ProductRepo.find_for_update

    def racing_find(self, product_id):
        found = original(self, product_id)
        #another checkout writes the same product between our read and our write
        self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(version=ProductModel.version + 1)
            .execution_options(synchronize_session=False)
        )
        return found

    monkeypatch.setattr(ProductRepo, "find_for_update", racing_find)

    with pytest.raises(ConcurrencyConflict) as exc:
        checkout(orders, user, address)

    assert exc.value.entity == "product"
    assert orders.get_all() == []
    assert stock_of(db, product.id) == 10


def test_order_queries_and_search(orders, carts, factory):
    alice, bob = factory.user(), factory.user()
    address = factory.address()
    cheap = factory.product(name="Pen", price="2.00", stock=100)
    pricey = factory.product(name="Monitor", price="900.00", stock=100)

    carts.add_product(alice.id, cheap.id, 1)
    first = orders.create_from_cart(alice.id, PaymentMethod.CARD, address.id)
    carts.add_product(alice.id, pricey.id, 1)
    second = orders.create_from_cart(alice.id, PaymentMethod.BLIK, address.id)
    carts.add_product(bob.id, cheap.id, 3)
    third = orders.create_from_cart(bob.id, PaymentMethod.PAYPO, address.id)
    orders.update_status(second.id, OrderStatus.PAID)

    assert [o.id for o in orders.get_by_user_id(alice.id)] == [first.id, second.id]
    assert [o.id for o in orders.get_all()] == [first.id, second.id, third.id]
    assert orders.get_by_id(third.id).user_id == bob.id

    def ids(**kwargs):
        return [o.id for o in orders.search(OrderFilters(**kwargs))]

    assert ids() == [first.id, second.id, third.id]
    assert ids(user_id=bob.id) == [third.id]
    assert ids(status=OrderStatus.PAID) == [second.id]
    assert ids(total_min=Decimal("5")) == [second.id, third.id]
    assert ids(total_min=Decimal("1"), total_max=Decimal("5")) == [first.id]
    hour_ago = datetime.now(timezone.utc) - timedelta(hours=1)
    assert ids(created_after=hour_ago) == [first.id, second.id, third.id]
    assert ids(created_before=hour_ago) == []


def test_get_unknown_order_raises_not_found(orders):
    with pytest.raises(NotFound):
        orders.get_by_id(77)
