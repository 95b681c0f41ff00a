"""Managed concentrated-liquidity vault (Kodiak island style) handler.

An island holds a single concentrated position in an underlying pool and
issues fungible shares against it. Prices come from an external quoter
over the underlying pool. Shares may be staked in a reward vault, in which
case wallet balances are read from the reward vault instead of the island.
"""

from __future__ import annotations

import decimal
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

import structlog

from pricer.errors import CallReverted
from pricer.handlers.base import PriceLookup, VenueHandler
from pricer.handlers.uniswap_v3_quoter import quote_unit_price
from pricer.math.decimals import DECIMAL_HIGH_PREC_CONTEXT, safe_div, to_decimal
from pricer.models.price import PriceResult
from pricer.models.types import addresses_equal, normalize_address
from pricer.models.venues import VenueKind

if TYPE_CHECKING:
    from pricer.chain.reader import ChainReader

logger = structlog.get_logger()


@dataclass(frozen=True)
class IslandState:
    token0: str
    token1: str
    decimals0: int
    decimals1: int
    amount0: Decimal
    amount1: Decimal

    def is_token0(self, token: str) -> bool:
        return addresses_equal(token, self.token0)

    def other(self, token: str) -> str:
        return self.token1 if self.is_token0(token) else self.token0

    def decimals_of(self, token: str) -> int:
        return self.decimals0 if self.is_token0(token) else self.decimals1

    def amount_of(self, token: str) -> Decimal:
        if self.is_token0(token):
            return self.amount0
        if addresses_equal(token, self.token1):
            return self.amount1
        raise ValueError(f"Token {token} not in island")


class ManagedLiquidityHandler(VenueHandler):
    """Island shares over a concentrated position, priced through a quoter.

    The handler id is the reward vault when one is configured, otherwise
    the island.
    """

    kind = VenueKind.MANAGED_LIQUIDITY

    def __init__(
        self,
        reader: ChainReader,
        tokens: Sequence[str],
        island: str,
        quoter: str,
        reward_vault: str | None = None,
    ):
        super().__init__(reader, tokens)
        self.island = normalize_address(island)
        self.quoter = normalize_address(quoter)
        self.reward_vault = normalize_address(reward_vault) if reward_vault else None

    def get_id(self) -> str:
        return self.reward_vault or self.island

    def exists(self, block: int | None = None) -> bool:
        return self._contract_answers(self.island, self.reader.island_pool, block)

    def _island_state(self, block: int) -> IslandState:
        token0 = self.reader.token0(self.island, block)
        token1 = self.reader.token1(self.island, block)
        decimals0 = self.reader.decimals(token0, block)
        decimals1 = self.reader.decimals(token1, block)
        amount0, amount1 = self.reader.underlying_balances(self.island, block)
        return IslandState(
            token0=token0,
            token1=token1,
            decimals0=decimals0,
            decimals1=decimals1,
            amount0=to_decimal(amount0, decimals0),
            amount1=to_decimal(amount1, decimals1),
        )

    def _try_island_state(self, block: int) -> IslandState | None:
        try:
            return self._island_state(block)
        except CallReverted as e:
            logger.debug("island_contract_reverted", island=self.island, block=block, error=str(e))
            return None

    def get_price(self, token: str, price_lookup: PriceLookup, block: int) -> PriceResult | None:
        self._require_token(token)

        state = self._try_island_state(block)
        if state is None:
            return None
        try:
            fee = self.reader.fee(self.reader.island_pool(self.island, block), block)
        except CallReverted as e:
            logger.debug("island_contract_reverted", island=self.island, block=block, error=str(e))
            return None

        other = state.other(token)
        other_result = price_lookup(other, block, self.get_id())
        if other_result is None or other_result.price == 0:
            return None

        price = quote_unit_price(
            self.reader,
            self.quoter,
            token,
            other,
            fee,
            state.decimals_of(token),
            state.decimals_of(other),
            other_result.price,
            block,
        )
        if price is None:
            return None

        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            liquidity = state.amount_of(other) * other_result.price
        return PriceResult(price=price, liquidity=liquidity)

    def get_total_value(
        self,
        excluded_tokens: Sequence[str],
        price_lookup: PriceLookup,
        block: int,
    ) -> Decimal | None:
        state = self._try_island_state(block)
        if state is None:
            return None

        total = Decimal(0)
        for token in (state.token0, state.token1):
            if self._is_excluded(token, excluded_tokens):
                continue
            result = price_lookup(token, block, self.get_id())
            if result is None:
                logger.warning("island_unpriced_token", island=self.island, token=token)
                return None
            with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
                total += state.amount_of(token) * result.price
        return total

    def get_unit_price(self, price_lookup: PriceLookup, block: int) -> Decimal | None:
        total_value = self.get_total_value([], price_lookup, block)
        if total_value is None:
            return None
        try:
            supply = self._token_amount(
                self.island, self.reader.total_supply(self.island, block), block
            )
        except CallReverted:
            return None
        return safe_div(total_value, supply)

    def _reward_vault_deployed(self, block: int) -> bool:
        if self.reward_vault is None:
            return False
        try:
            self.reader.stake_token(self.reward_vault, block)
        except CallReverted:
            logger.debug("reward_vault_not_deployed", reward_vault=self.reward_vault, block=block)
            return False
        return True

    def get_balance(self, wallet: str, block: int) -> Decimal:
        try:
            if self.reward_vault is None:
                raw = self.reader.balance_of(self.island, wallet, block)
            elif self._reward_vault_deployed(block):
                raw = self.reader.balance_of(self.reward_vault, wallet, block)
            else:
                return Decimal(0)
            # Reward vault stakes are denominated in island shares
            return to_decimal(raw, self.reader.decimals(self.island, block))
        except CallReverted as e:
            logger.debug("island_contract_reverted", island=self.island, block=block, error=str(e))
            return Decimal(0)

    def get_underlying_token_balance(self, wallet: str, token: str, block: int) -> Decimal:
        self._require_token(token)

        balance = self.get_balance(wallet, block)
        if balance == 0:
            return Decimal(0)
        state = self._try_island_state(block)
        if state is None:
            return Decimal(0)
        try:
            raw_supply = self.reader.total_supply(self.island, block)
            supply = self._token_amount(self.island, raw_supply, block)
        except CallReverted as e:
            logger.debug("island_contract_reverted", island=self.island, block=block, error=str(e))
            return Decimal(0)
        if supply == 0:
            return Decimal(0)
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            return balance / supply * state.amount_of(token)
