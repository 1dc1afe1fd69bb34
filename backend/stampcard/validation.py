from __future__ import annotations

import math
from typing import Any


# Purchases above this are rejected outright (50,000 cents = 500 EUR)
MAX_AMOUNT_CENTS = 50_000

WALLET_ID_MAX_LENGTH = 128


class ValidationError(ValueError):
    """400-level input problem."""


def require_wallet_id(value: Any) -> str:
    """Wallet ids are opaque, non-empty strings."""
    if not isinstance(value, str) or not value:
        raise ValidationError("walletId missing")
    if len(value) > WALLET_ID_MAX_LENGTH:
        raise ValidationError(f"walletId must be at most {WALLET_ID_MAX_LENGTH} characters")
    return value


def parse_amount_cents(value: Any) -> int:
    """
    Validates a purchase amount in cents.

    Accepts JSON numbers with an integral value (1099, 1099.0). Rejects
    booleans, strings, NaN/Infinity and fractional cents. Range is
    (0, MAX_AMOUNT_CENTS].
    """
    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError("amountCents must be number")

    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise ValidationError("amountCents must be number")
        value = int(value)

    if value <= 0:
        raise ValidationError("amount must be > 0")
    if value > MAX_AMOUNT_CENTS:
        raise ValidationError("amount too high")

    return value


def require_fields(payload: dict, *names: str) -> tuple[str, ...]:
    """
    Pull required non-empty string fields out of a JSON payload.

    Raises ValidationError naming all required fields if any is missing.
    """
    values = tuple(payload.get(name) for name in names)
    if not all(isinstance(v, str) and v for v in values):
        raise ValidationError(f"{'/'.join(names)} required")
    return values
