# storefront/domain/errors.py
"""
Domain errors raised by the services.

Routers translate them into HTTP responses (see storefront.api.errors);
nothing here is retried.
"""


class StorefrontError(Exception):
    """Base class for every error the services raise on purpose."""


class NotFound(StorefrontError):
    def __init__(self, entity: str, entity_id=None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class InvalidQuantity(StorefrontError):
    def __init__(self, quantity: int):
        self.quantity = quantity
        super().__init__("invalid quantity")


class CartEmpty(StorefrontError):
    def __init__(self):
        super().__init__("cart is empty")


class AddressNotFound(StorefrontError):
    def __init__(self, address_id: int):
        self.address_id = address_id
        super().__init__("shipping address not found")


class InsufficientStock(StorefrontError):
    def __init__(self, product_name: str, available: int, requested: int):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(f"not enough stock for product {product_name}")


class InvalidStatusTransition(StorefrontError):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"cannot change order status from {current} to {requested}")


class ConcurrencyConflict(StorefrontError):
    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} was modified by another operation")


class PersistenceFailure(StorefrontError):
    """Wraps a database error with the name of the step that failed."""

    def __init__(self, step: str, cause: Exception):
        self.step = step
        self.cause = cause
        super().__init__(f"failed to {step.replace('-', ' ')}: {cause}")


class ProductLookupFailed(PersistenceFailure):
    def __init__(self, product_id: int, cause: Exception):
        self.product_id = product_id
        super().__init__("get-product", cause)


class InvalidChoice(StorefrontError):
    """An enum-like field got a value outside its allowed set."""

    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f"invalid {field}: {value}")


class DuplicateCategory(StorefrontError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"category {name} already exists under another parent")
