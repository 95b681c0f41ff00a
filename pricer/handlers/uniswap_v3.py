"""Concentrated-liquidity (Uniswap V3) pool handler.

Spot prices are computed from the pool's `sqrtPriceX96`. Because V3 pools
do not expose aggregate reserves, values are based on the ERC-20 balances
the pool holds. Wallet holdings are NFT positions enumerated through a
position manager and converted to token amounts with the tick-range math
in `pricer.math.concentrated`.
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
from pricer.math.concentrated import position_token_amounts, token_price_in_other
from pricer.math.decimals import DECIMAL_HIGH_PREC_CONTEXT, to_decimal
from pricer.models.price import PriceResult
from pricer.models.types import addresses_equal, normalize_address
from pricer.models.venues import VenueKind

if TYPE_CHECKING:
    from pricer.chain.reader import ChainReader, Position, Slot0

logger = structlog.get_logger()


@dataclass(frozen=True)
class PoolTokens:
    """Pool token ordering and decimals at a block."""

    token0: str
    token1: str
    decimals0: int
    decimals1: int

    def is_token0(self, token: str) -> bool:
        return addresses_equal(token, self.token0)

    def other(self, token: str) -> str:
        return self.token1 if self.is_token0(token) else self.token0

    def decimals_of(self, token: str) -> int:
        return self.decimals0 if self.is_token0(token) else self.decimals1


class UniswapV3Handler(VenueHandler):
    """Prices a token from the spot price of a concentrated-liquidity pool.

    Liquidity is the USD value of the other token's balance held by the pool.
    Without a position manager, wallet underlying balances are zero.
    """

    kind = VenueKind.UNISWAP_V3

    def __init__(
        self,
        reader: ChainReader,
        tokens: Sequence[str],
        pool: str,
        position_manager: str | None = None,
    ):
        super().__init__(reader, tokens)
        self.pool = normalize_address(pool)
        self.position_manager = normalize_address(position_manager) if position_manager else None

    def get_id(self) -> str:
        return self.pool

    def exists(self, block: int | None = None) -> bool:
        return self._contract_answers(self.pool, self.reader.slot0, block)

    def _pool_tokens(self, block: int) -> PoolTokens:
        token0 = self.reader.token0(self.pool, block)
        token1 = self.reader.token1(self.pool, block)
        return PoolTokens(
            token0=token0,
            token1=token1,
            decimals0=self.reader.decimals(token0, block),
            decimals1=self.reader.decimals(token1, block),
        )

    def _pool_balance(self, token: str, decimals: int, block: int) -> Decimal:
        return to_decimal(self.reader.balance_of(token, self.pool, block), decimals)

    def _quote_side_liquidity(
        self, pool_tokens: PoolTokens, other: str, other_price: Decimal, block: int
    ) -> Decimal:
        balance = self._pool_balance(other, pool_tokens.decimals_of(other), block)
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            return balance * other_price

    def get_price(self, token: str, price_lookup: PriceLookup, block: int) -> PriceResult | None:
        self._require_token(token)

        try:
            pool_tokens = self._pool_tokens(block)
            slot0 = self.reader.slot0(self.pool, block)
        except CallReverted as e:
            logger.debug("v3_contract_reverted", pool=self.pool, block=block, error=str(e))
            return None

        if slot0.sqrt_price_x96 == 0:
            logger.debug("v3_pool_uninitialized", pool=self.pool, block=block)
            return None

        other = pool_tokens.other(token)
        other_result = price_lookup(other, block, self.get_id())
        if other_result is None:
            return None

        ratio = token_price_in_other(
            slot0.sqrt_price_x96,
            pool_tokens.is_token0(token),
            pool_tokens.decimals0,
            pool_tokens.decimals1,
        )
        try:
            liquidity = self._quote_side_liquidity(pool_tokens, other, other_result.price, block)
        except CallReverted as e:
            logger.debug("v3_contract_reverted", pool=self.pool, block=block, error=str(e))
            return None

        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            price = ratio * other_result.price
        logger.debug(
            "v3_price",
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
        try:
            pool_tokens = self._pool_tokens(block)
        except CallReverted as e:
            logger.debug("v3_contract_reverted", pool=self.pool, block=block, error=str(e))
            return None

        total = Decimal(0)
        for token, decimals in (
            (pool_tokens.token0, pool_tokens.decimals0),
            (pool_tokens.token1, pool_tokens.decimals1),
        ):
            if self._is_excluded(token, excluded_tokens):
                continue
            result = price_lookup(token, block, self.get_id())
            if result is None:
                logger.warning("v3_total_value_unpriced_token", pool=self.pool, token=token)
                return None
            balance = self._pool_balance(token, decimals, block)
            with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
                total += balance * result.price
        return total

    def get_unit_price(self, price_lookup: PriceLookup, block: int) -> Decimal | None:
        # No fungible supply: one "unit" is the whole pool
        return self.get_total_value([], price_lookup, block)

    def get_balance(self, wallet: str, block: int) -> Decimal:
        # Positions are non-fungible
        return Decimal(0)

    def _matches_pool(self, position: Position, pool_tokens: PoolTokens, fee: int) -> bool:
        return (
            addresses_equal(position.token0, pool_tokens.token0)
            and addresses_equal(position.token1, pool_tokens.token1)
            and position.fee == fee
        )

    def get_positions(self, wallet: str, block: int) -> list[Position]:
        """Positions `wallet` holds in this pool through the position manager."""
        if self.position_manager is None:
            return []
        pool_tokens = self._pool_tokens(block)
        fee = self.reader.fee(self.pool, block)
        positions = self.reader.positions_of(self.position_manager, wallet, block)
        return [p for p in positions if self._matches_pool(p, pool_tokens, fee)]

    def get_underlying_token_balance(self, wallet: str, token: str, block: int) -> Decimal:
        self._require_token(token)
        if self.position_manager is None:
            return Decimal(0)

        try:
            pool_tokens = self._pool_tokens(block)
            slot0: Slot0 = self.reader.slot0(self.pool, block)
            positions = self.get_positions(wallet, block)
        except CallReverted as e:
            logger.debug("v3_contract_reverted", pool=self.pool, block=block, error=str(e))
            return Decimal(0)
        is_token0 = pool_tokens.is_token0(token)

        raw_total = Decimal(0)
        for position in positions:
            if position.liquidity == 0:
                continue
            amounts = position_token_amounts(
                position.liquidity,
                position.tick_lower,
                position.tick_upper,
                slot0.tick,
                slot0.sqrt_price_x96,
            )
            with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
                raw_total += amounts.amount0 if is_token0 else amounts.amount1

        logger.debug(
            "v3_underlying_balance",
            pool=self.pool,
            wallet=normalize_address(wallet),
            token=normalize_address(token),
            raw_amount=str(raw_total),
            block=block,
        )
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            return raw_total / Decimal(10) ** pool_tokens.decimals_of(token)
