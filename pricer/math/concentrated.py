"""Concentrated-liquidity (Uniswap V3) price and position math.

Spot prices come from `sqrtPriceX96`, the square root of token1/token0 in
raw units as a Q64.96 fixed-point number. Position amounts follow the
whitepaper formulas for a position with liquidity L over [tickLower,
tickUpper):

    price below range:  amount0 = L * (sqrtB - sqrtA) / (sqrtA * sqrtB)
    price above range:  amount1 = L * (sqrtB - sqrtA)
    price in range:     amount0 = L * (sqrtB - sqrtP) / (sqrtP * sqrtB)
                        amount1 = L * (sqrtP - sqrtA)

All results are raw token amounts (not decimal-normalized).
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass
from decimal import Decimal

from pricer.constants import MAX_TICK, MIN_TICK, Q96, Q192, TICK_BASE
from pricer.math.decimals import DECIMAL_HIGH_PREC_CONTEXT


@dataclass(frozen=True)
class PositionAmounts:
    """Raw token amounts represented by a position."""

    amount0: Decimal
    amount1: Decimal


def sqrt_price_x96_to_price(sqrt_price_x96: int) -> Decimal:
    """Raw token1-per-token0 price: sqrtPriceX96^2 / 2^192."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return Decimal(sqrt_price_x96) ** 2 / Decimal(Q192)


def sqrt_price_x96_to_sqrt_price(sqrt_price_x96: int) -> Decimal:
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return Decimal(sqrt_price_x96) / Decimal(Q96)


def tick_to_sqrt_price(tick: int) -> Decimal:
    """sqrt(1.0001^tick)."""
    if tick < MIN_TICK or tick > MAX_TICK:
        raise ValueError(f"Tick {tick} outside [{MIN_TICK}, {MAX_TICK}]")
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return (TICK_BASE**tick).sqrt()


def token_price_in_other(
    sqrt_price_x96: int,
    token_is_token0: bool,
    decimals0: int,
    decimals1: int,
) -> Decimal:
    """Price of one whole token expressed in whole units of the other pool token.

    Args:
        sqrt_price_x96: Pool sqrt price
        token_is_token0: True to price token0 in token1, False for the reverse
        decimals0: token0 decimals
        decimals1: token1 decimals

    Raises:
        ValueError: If the sqrt price is zero (uninitialized pool)
    """
    if sqrt_price_x96 <= 0:
        raise ValueError("Pool sqrt price is zero")

    raw_price01 = sqrt_price_x96_to_price(sqrt_price_x96)
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        if token_is_token0:
            return raw_price01 * Decimal(10) ** (decimals0 - decimals1)
        return (Decimal(1) / raw_price01) * Decimal(10) ** (decimals1 - decimals0)


def position_token_amounts(
    liquidity: int,
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    sqrt_price_x96: int,
) -> PositionAmounts:
    """Raw token0/token1 amounts held by a position at the current pool state."""
    if tick_lower >= tick_upper:
        raise ValueError(f"Invalid tick range [{tick_lower}, {tick_upper}]")

    sqrt_a = tick_to_sqrt_price(tick_lower)
    sqrt_b = tick_to_sqrt_price(tick_upper)
    sqrt_p = sqrt_price_x96_to_sqrt_price(sqrt_price_x96)

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        liq = Decimal(liquidity)
        if current_tick <= tick_lower:
            return PositionAmounts(
                amount0=liq * (sqrt_b - sqrt_a) / (sqrt_a * sqrt_b),
                amount1=Decimal(0),
            )
        if current_tick >= tick_upper:
            return PositionAmounts(
                amount0=Decimal(0),
                amount1=liq * (sqrt_b - sqrt_a),
            )
        return PositionAmounts(
            amount0=liq * (sqrt_b - sqrt_p) / (sqrt_p * sqrt_b),
            amount1=liq * (sqrt_p - sqrt_a),
        )


__all__ = [
    "PositionAmounts",
    "sqrt_price_x96_to_price",
    "sqrt_price_x96_to_sqrt_price",
    "tick_to_sqrt_price",
    "token_price_in_other",
    "position_token_amounts",
]
