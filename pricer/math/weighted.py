"""Weighted pool (Balancer) spot price math."""

from __future__ import annotations

import decimal
from decimal import Decimal

from pricer.math.decimals import DECIMAL_HIGH_PREC_CONTEXT


def weighted_spot_price(
    balance_lookup: Decimal,
    weight_lookup: Decimal,
    balance_secondary: Decimal,
    weight_secondary: Decimal,
    price_secondary: Decimal,
) -> Decimal:
    """USD price of the lookup token implied by a weighted pool.

    price = (balance_secondary / weight_secondary) / (balance_lookup / weight_lookup)
            * price_secondary

    Balances are in whole-token units and weights are normalized fractions.

    Raises:
        ValueError: If a balance or weight is not positive
    """
    if balance_lookup <= 0 or balance_secondary <= 0:
        raise ValueError("Weighted pool balances must be positive")
    if weight_lookup <= 0 or weight_secondary <= 0:
        raise ValueError("Weighted pool weights must be positive")

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        spot = (balance_secondary / weight_secondary) / (balance_lookup / weight_lookup)
        return spot * price_secondary


__all__ = ["weighted_spot_price"]
