"""
Translation of domain errors into HTTP responses.
"""

import math

from fastapi import HTTPException, status

from shop.errors import (
    CooldownActive,
    InvalidSettings,
    InvalidTransition,
    NoReplaysLeft,
    PaymentDeclined,
    ShopError,
    StaleProduct,
    UnknownTier,
    UnknownVariant,
)


def to_http_exception(error: ShopError) -> HTTPException:
    """Map a ShopError to the HTTPException a route should raise."""
    if isinstance(error, CooldownActive):
        return HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=str(error),
            headers={"Retry-After": str(max(1, math.ceil(error.retry_after)))},
        )
    if isinstance(error, (UnknownTier, UnknownVariant)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, (InvalidTransition, StaleProduct, NoReplaysLeft)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, PaymentDeclined):
        return HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=str(error))
    if isinstance(error, InvalidSettings):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
