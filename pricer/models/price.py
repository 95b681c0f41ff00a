"""Price result returned by venue handlers and the router."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class PriceResult:
    """USD price of one token unit as implied by a venue.

    Attributes:
        price: USD per whole token
        liquidity: Depth backing the price, only used to rank candidates
    """

    price: Decimal
    liquidity: Decimal

    def with_liquidity(self, liquidity: Decimal) -> PriceResult:
        return PriceResult(price=self.price, liquidity=liquidity)


__all__ = ["PriceResult"]
