"""Shared high-precision Decimal utilities for token amounts.

All conversions from raw uint256 values run under a 78-digit context to
avoid rounding artifacts with very large values (up to 10^77).
"""

from __future__ import annotations

import decimal
from decimal import Decimal

# 78 digits of precision, enough for uint256 values (up to ~10^77)
DECIMAL_HIGH_PREC_CONTEXT = decimal.Context(prec=78)


def to_decimal(raw: int, decimals: int) -> Decimal:
    """Convert a raw token amount to whole-token units."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return Decimal(raw) / (Decimal(10) ** decimals)


def safe_div(numerator: Decimal, denominator: Decimal) -> Decimal | None:
    """Divide with high precision, returning None for a zero denominator."""
    if denominator == 0:
        return None
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return numerator / denominator


def decimal_gt(a: Decimal, b: Decimal) -> bool:
    """Compare a > b with high precision for exactness."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return (a - b) > 0


__all__ = [
    "DECIMAL_HIGH_PREC_CONTEXT",
    "to_decimal",
    "safe_div",
    "decimal_gt",
]
