"""Constant-product (Uniswap V2) pool handler."""

from __future__ import annotations

import decimal
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

import structlog

from pricer.errors import CallReverted
from pricer.handlers.base import PriceLookup, VenueHandler
from pricer.math.decimals import DECIMAL_HIGH_PREC_CONTEXT, safe_div, to_decimal
from pricer.models.price import PriceResult
from pricer.models.types import addresses_equal, normalize_address
from pricer.models.venues import VenueKind

if TYPE_CHECKING:
    from pricer.chain.reader import ChainReader

logger = structlog.get_logger()


@dataclass(frozen=True)
class PairState:
    """Decimal-normalized pool reserves at a block."""

    token0: str
    token1: str
    reserve0: Decimal
    reserve1: Decimal

    def reserve_of(self, token: str) -> Decimal:
        if addresses_equal(token, self.token0):
            return self.reserve0
        if addresses_equal(token, self.token1):
            return self.reserve1
        raise ValueError(f"Token {token} not in pool")

    def other(self, token: str) -> str:
        return self.token1 if addresses_equal(token, self.token0) else self.token0


class UniswapV2Handler(VenueHandler):
    """Prices a token from the reserves of a constant-product pair.

    price(A) = reserve(B) / reserve(A) * price(B), with B resolved through
    the price lookup. Liquidity is the USD value of the B reserve.
    """

    kind = VenueKind.UNISWAP_V2

    def __init__(self, reader: ChainReader, tokens: Sequence[str], pool: str):
        super().__init__(reader, tokens)
        self.pool = normalize_address(pool)

    def get_id(self) -> str:
        return self.pool

    def exists(self, block: int | None = None) -> bool:
        return self._contract_answers(self.pool, self.reader.get_reserves, block)

    def _pair_state(self, block: int) -> PairState:
        token0 = self.reader.token0(self.pool, block)
        token1 = self.reader.token1(self.pool, block)
        reserve0, reserve1 = self.reader.get_reserves(self.pool, block)
        return PairState(
            token0=token0,
            token1=token1,
            reserve0=self._token_amount(token0, reserve0, block),
            reserve1=self._token_amount(token1, reserve1, block),
        )

    def _try_pair_state(self, block: int) -> PairState | None:
        try:
            return self._pair_state(block)
        except CallReverted as e:
            logger.debug("v2_contract_reverted", pool=self.pool, block=block, error=str(e))
            return None

    def get_price(self, token: str, price_lookup: PriceLookup, block: int) -> PriceResult | None:
        self._require_token(token)

        state = self._try_pair_state(block)
        if state is None:
            return None

        reserve_token = state.reserve_of(token)
        other = state.other(token)
        reserve_other = state.reserve_of(other)
        if reserve_token == 0 or reserve_other == 0:
            logger.debug("v2_zero_reserves", pool=self.pool, block=block)
            return None

        other_result = price_lookup(other, block, self.get_id())
        if other_result is None:
            return None

        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            price = reserve_other / reserve_token * other_result.price
            liquidity = reserve_other * other_result.price

        logger.debug(
            "v2_price",
            pool=self.pool,
            token=normalize_address(token),
            price=str(price),
            block=block,
        )
        return PriceResult(price=price, liquidity=liquidity)

    def get_total_value(
        self,
        excluded_tokens: Sequence[str],
        price_lookup: PriceLookup,
        block: int,
    ) -> Decimal | None:
        state = self._try_pair_state(block)
        if state is None:
            return None

        total = Decimal(0)
        for token in (state.token0, state.token1):
            if self._is_excluded(token, excluded_tokens):
                continue
            result = price_lookup(token, block, self.get_id())
            if result is None:
                logger.warning("v2_total_value_unpriced_token", pool=self.pool, token=token)
                return None
            with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
                total += state.reserve_of(token) * result.price
        return total

    def get_unit_price(self, price_lookup: PriceLookup, block: int) -> Decimal | None:
        total_value = self.get_total_value([], price_lookup, block)
        if total_value is None:
            return None
        try:
            raw_supply = self.reader.total_supply(self.pool, block)
            supply = self._token_amount(self.pool, raw_supply, block)
        except CallReverted:
            return None
        return safe_div(total_value, supply)

    def get_balance(self, wallet: str, block: int) -> Decimal:
        try:
            raw = self.reader.balance_of(self.pool, wallet, block)
            return to_decimal(raw, self.reader.decimals(self.pool, block))
        except CallReverted as e:
            logger.debug("v2_contract_reverted", pool=self.pool, block=block, error=str(e))
            return Decimal(0)

    def get_underlying_token_balance(self, wallet: str, token: str, block: int) -> Decimal:
        self._require_token(token)

        state = self._try_pair_state(block)
        if state is None:
            return Decimal(0)
        try:
            balance = self.reader.balance_of(self.pool, wallet, block)
            supply = self.reader.total_supply(self.pool, block)
        except CallReverted as e:
            logger.debug("v2_contract_reverted", pool=self.pool, block=block, error=str(e))
            return Decimal(0)
        if supply == 0:
            return Decimal(0)
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            return Decimal(balance) / Decimal(supply) * state.reserve_of(token)
