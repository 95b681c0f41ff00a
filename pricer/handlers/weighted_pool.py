"""Weighted pool (Balancer) handler."""

from __future__ import annotations

import decimal
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

import structlog

from pricer.constants import WEIGHT_DECIMALS
from pricer.errors import CallReverted
from pricer.handlers.base import PriceLookup, VenueHandler
from pricer.math.decimals import DECIMAL_HIGH_PREC_CONTEXT, safe_div, to_decimal
from pricer.math.weighted import weighted_spot_price
from pricer.models.price import PriceResult
from pricer.models.types import addresses_equal, normalize_address
from pricer.models.venues import VenueKind

if TYPE_CHECKING:
    from pricer.chain.reader import ChainReader

logger = structlog.get_logger()


@dataclass(frozen=True)
class WeightedPoolState:
    """Pool tokens with decimal-normalized balances and weights."""

    pool: str
    tokens: list[str]
    balances: list[Decimal]
    weights: list[Decimal]

    def index_of(self, token: str) -> int | None:
        for i, t in enumerate(self.tokens):
            if addresses_equal(t, token):
                return i
        return None


class WeightedPoolHandler(VenueHandler):
    """Prices a token against the first resolvable member of a weighted pool.

    price = (r_secondary / w_secondary) / (r_lookup / w_lookup) * price_secondary

    Members with zero balance or no resolvable price are skipped. Liquidity
    is the USD value of the secondary token's balance.
    """

    kind = VenueKind.WEIGHTED_POOL

    def __init__(self, reader: ChainReader, tokens: Sequence[str], vault: str, pool_id: str):
        super().__init__(reader, tokens)
        self.vault = normalize_address(vault)
        self.pool_id = pool_id.lower()

    def get_id(self) -> str:
        return self.pool_id

    def exists(self, block: int | None = None) -> bool:
        block = self._resolve_block(block)
        try:
            self.reader.get_pool(self.vault, self.pool_id, block)
        except CallReverted:
            logger.debug("venue_not_deployed", handler=self.pool_id, block=block)
            return False
        return True

    def _pool_token(self, block: int) -> str:
        return self.reader.get_pool(self.vault, self.pool_id, block)

    def _pool_state(self, block: int) -> WeightedPoolState:
        pool = self._pool_token(block)
        tokens, raw_balances = self.reader.get_pool_tokens(self.vault, self.pool_id, block)
        raw_weights = self.reader.normalized_weights(pool, block)
        return WeightedPoolState(
            pool=pool,
            tokens=tokens,
            balances=[
                self._token_amount(t, b, block) for t, b in zip(tokens, raw_balances, strict=True)
            ],
            weights=[to_decimal(w, WEIGHT_DECIMALS) for w in raw_weights],
        )

    def _try_pool_state(self, block: int) -> WeightedPoolState | None:
        try:
            return self._pool_state(block)
        except CallReverted as e:
            logger.debug("weighted_pool_reverted", pool_id=self.pool_id, block=block, error=str(e))
            return None

    def get_price(self, token: str, price_lookup: PriceLookup, block: int) -> PriceResult | None:
        self._require_token(token)

        state = self._try_pool_state(block)
        if state is None:
            return None

        lookup_index = state.index_of(token)
        if lookup_index is None or state.balances[lookup_index] == 0:
            logger.debug("weighted_pool_lookup_token_missing", pool_id=self.pool_id, token=token)
            return None

        for i, secondary in enumerate(state.tokens):
            if i == lookup_index or state.balances[i] == 0:
                continue
            secondary_result = price_lookup(secondary, block, self.get_id())
            if secondary_result is None:
                continue

            price = weighted_spot_price(
                balance_lookup=state.balances[lookup_index],
                weight_lookup=state.weights[lookup_index],
                balance_secondary=state.balances[i],
                weight_secondary=state.weights[i],
                price_secondary=secondary_result.price,
            )
            with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
                liquidity = state.balances[i] * secondary_result.price
            logger.debug(
                "weighted_pool_price",
                pool_id=self.pool_id,
                token=normalize_address(token),
                secondary=secondary,
                price=str(price),
                block=block,
            )
            return PriceResult(price=price, liquidity=liquidity)

        logger.debug(
            "weighted_pool_no_secondary_token", pool_id=self.pool_id, token=token, block=block
        )
        return None

    def get_total_value(
        self,
        excluded_tokens: Sequence[str],
        price_lookup: PriceLookup,
        block: int,
    ) -> Decimal | None:
        state = self._try_pool_state(block)
        if state is None:
            return None

        total = Decimal(0)
        for token, balance in zip(state.tokens, state.balances, strict=True):
            if self._is_excluded(token, excluded_tokens):
                continue
            result = price_lookup(token, block, self.get_id())
            if result is None:
                logger.warning("weighted_pool_unpriced_token", pool_id=self.pool_id, token=token)
                return None
            with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
                total += balance * result.price
        return total

    def get_unit_price(self, price_lookup: PriceLookup, block: int) -> Decimal | None:
        total_value = self.get_total_value([], price_lookup, block)
        if total_value is None:
            return None
        try:
            pool = self._pool_token(block)
            supply = self._token_amount(pool, self.reader.total_supply(pool, block), block)
        except CallReverted:
            return None
        return safe_div(total_value, supply)

    def get_balance(self, wallet: str, block: int) -> Decimal:
        try:
            pool = self._pool_token(block)
            return self._token_amount(pool, self.reader.balance_of(pool, wallet, block), block)
        except CallReverted as e:
            logger.debug("weighted_pool_reverted", pool_id=self.pool_id, block=block, error=str(e))
            return Decimal(0)

    def get_underlying_token_balance(self, wallet: str, token: str, block: int) -> Decimal:
        self._require_token(token)

        state = self._try_pool_state(block)
        if state is None:
            return Decimal(0)
        index = state.index_of(token)
        if index is None:
            return Decimal(0)
        try:
            balance = self.reader.balance_of(state.pool, wallet, block)
            supply = self.reader.total_supply(state.pool, block)
        except CallReverted as e:
            logger.debug("weighted_pool_reverted", pool_id=self.pool_id, block=block, error=str(e))
            return Decimal(0)
        if supply == 0:
            return Decimal(0)
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            return Decimal(balance) / Decimal(supply) * state.balances[index]
