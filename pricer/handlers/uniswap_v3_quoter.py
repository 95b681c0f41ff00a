"""Quoter-based pricing for concentrated-liquidity pools."""

from __future__ import annotations

import decimal
from collections.abc import Sequence
from decimal import Decimal
from typing import TYPE_CHECKING

import structlog

from pricer.constants import NO_SQRT_PRICE_LIMIT
from pricer.errors import CallReverted
from pricer.handlers.base import PriceLookup
from pricer.handlers.uniswap_v3 import UniswapV3Handler
from pricer.math.decimals import DECIMAL_HIGH_PREC_CONTEXT, to_decimal
from pricer.models.price import PriceResult
from pricer.models.types import normalize_address
from pricer.models.venues import VenueKind

if TYPE_CHECKING:
    from pricer.chain.reader import ChainReader

logger = structlog.get_logger()


def quote_unit_price(
    reader: ChainReader,
    quoter: str,
    token: str,
    other: str,
    fee: int,
    token_decimals: int,
    other_decimals: int,
    other_price: Decimal,
    block: int,
) -> Decimal | None:
    """USD price of `token` from a simulated swap of one whole unit into `other`.

    Returns None if the quote reverts.
    """
    try:
        amount_out = reader.quote_exact_input_single(
            quoter,
            token,
            other,
            10**token_decimals,
            fee,
            NO_SQRT_PRICE_LIMIT,
            block,
        )
    except CallReverted as e:
        logger.debug(
            "quote_exact_input_failed",
            quoter=quoter,
            token_in=token,
            token_out=other,
            fee=fee,
            block=block,
            error=str(e),
        )
        return None

    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return to_decimal(amount_out, other_decimals) * other_price


class UniswapV3QuoterHandler(UniswapV3Handler):
    """Concentrated-liquidity pool priced through a QuoterV2 contract.

    Used where direct tick math is impractical. The quote includes the pool
    fee and price impact of a one-unit swap.
    """

    kind = VenueKind.UNISWAP_V3_QUOTER

    def __init__(
        self,
        reader: ChainReader,
        tokens: Sequence[str],
        pool: str,
        quoter: str,
        position_manager: str | None = None,
    ):
        super().__init__(reader, tokens, pool, position_manager)
        self.quoter = normalize_address(quoter)

    def get_price(self, token: str, price_lookup: PriceLookup, block: int) -> PriceResult | None:
        self._require_token(token)

        try:
            pool_tokens = self._pool_tokens(block)
            fee = self.reader.fee(self.pool, block)
        except CallReverted as e:
            logger.debug("v3_contract_reverted", pool=self.pool, block=block, error=str(e))
            return None

        other = pool_tokens.other(token)
        other_result = price_lookup(other, block, self.get_id())
        if other_result is None or other_result.price == 0:
            return None

        price = quote_unit_price(
            self.reader,
            self.quoter,
            token,
            other,
            fee,
            pool_tokens.decimals_of(token),
            pool_tokens.decimals_of(other),
            other_result.price,
            block,
        )
        if price is None:
            return None

        try:
            liquidity = self._quote_side_liquidity(pool_tokens, other, other_result.price, block)
        except CallReverted as e:
            logger.debug("v3_contract_reverted", pool=self.pool, block=block, error=str(e))
            return None

        return PriceResult(price=price, liquidity=liquidity)
