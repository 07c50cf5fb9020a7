# storefront/domain/money.py
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def money(value) -> Decimal:
    """Quantizes any amount to two fractional digits before it is written."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(unit_price, quantity: int) -> Decimal:
    return money(money(unit_price) * quantity)


#column limits: quantity Integer, line amounts Numeric(10, 2), cart total Numeric(12, 2)
MAX_QUANTITY = 2**31 - 1
MAX_LINE_AMOUNT = Decimal("99999999.99")
MAX_TOTAL = Decimal("9999999999.99")
