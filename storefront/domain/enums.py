# storefront/domain/enums.py
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    SHIPPED = "SHIPPED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    """Stored as a tag only, no payment is executed."""

    CARD = "CARD"
    BLIK = "BLIK"
    PAYPAL = "PAYPAL"
    PAYPO = "PAYPO"
    GOOGLE_PAY = "GOOGLE_PAY"
    APPLE_PAY = "APPLE_PAY"
    ONLINE_TRANSFER = "ONLINE_TRANSFER"


#used only when STRICT_STATUS_TRANSITIONS is on
ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.CANCELLED},
    OrderStatus.CANCELLED: set(),
}
