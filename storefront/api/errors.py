# storefront/api/errors.py
from fastapi import HTTPException

from storefront.domain.errors import (
    StorefrontError,
    NotFound,
    InvalidQuantity,
    CartEmpty,
    AddressNotFound,
    InsufficientStock,
    InvalidStatusTransition,
    ConcurrencyConflict,
    InvalidChoice,
    DuplicateCategory,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_STATUS_CODES = (
    (NotFound, 404),
    (InvalidQuantity, 400),
    (CartEmpty, 400),
    (AddressNotFound, 400),
    (InsufficientStock, 400),
    (InvalidStatusTransition, 400),
    (InvalidChoice, 400),
    (ConcurrencyConflict, 409),
    (DuplicateCategory, 409),
)


def http_error(exc: StorefrontError) -> HTTPException:
    for error_type, status_code in _STATUS_CODES:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))

    logger.error(f"Unhandled domain error {type(exc).__name__}: {exc}")
    return HTTPException(status_code=500, detail=str(exc))
