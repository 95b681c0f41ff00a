"""Valuation of liquidity owned by a set of wallets.

Dispatches on the handler's kind tag: concentrated-liquidity venues hold
non-fungible positions and are valued from the wallet's underlying token
amounts, while fungible venues are valued as share balance times unit
price, scaled by the fraction of pool value not made up of excluded tokens.
"""

from __future__ import annotations

import decimal
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

import structlog

from pricer.errors import OperationNotSupportedError
from pricer.math.decimals import DECIMAL_HIGH_PREC_CONTEXT, safe_div
from pricer.models.types import contains_address, normalize_address
from pricer.models.venues import VenueKind

if TYPE_CHECKING:
    from pricer.handlers.base import PriceLookup, VenueHandler

logger = structlog.get_logger()


@dataclass(frozen=True)
class OwnedLiquidity:
    """Value of one wallet's holding in one venue.

    Attributes:
        wallet: Holder address
        handler_id: Venue holding the liquidity
        balance: Share balance (zero for non-fungible positions)
        value: USD value of the holding, excluding excluded tokens
        token_amounts: Underlying token quantities attributable to the wallet
    """

    wallet: str
    handler_id: str
    balance: Decimal
    value: Decimal
    token_amounts: dict[str, Decimal] = field(default_factory=dict)


Valuer = Callable[
    ["VenueHandler", str, "PriceLookup", int, Sequence[str]],
    "OwnedLiquidity | None",
]


def _value_positions(
    handler: VenueHandler,
    wallet: str,
    price_lookup: PriceLookup,
    block: int,
    excluded_tokens: Sequence[str],
) -> OwnedLiquidity | None:
    amounts: dict[str, Decimal] = {}
    value = Decimal(0)
    for token in handler.get_tokens():
        amount = handler.get_underlying_token_balance(wallet, token, block)
        amounts[token] = amount
        if amount == 0 or contains_address(excluded_tokens, token):
            continue
        result = price_lookup(token, block, handler.get_id())
        if result is None:
            logger.warning("owned_liquidity_unpriced_token", handler=handler.get_id(), token=token)
            return None
        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            value += amount * result.price

    return OwnedLiquidity(
        wallet=wallet,
        handler_id=handler.get_id(),
        balance=Decimal(0),
        value=value,
        token_amounts=amounts,
    )


def _value_shares(
    handler: VenueHandler,
    wallet: str,
    price_lookup: PriceLookup,
    block: int,
    excluded_tokens: Sequence[str],
) -> OwnedLiquidity | None:
    balance = handler.get_balance(wallet, block)
    if balance == 0:
        return OwnedLiquidity(
            wallet=wallet, handler_id=handler.get_id(), balance=balance, value=Decimal(0)
        )

    unit_price = handler.get_unit_price(price_lookup, block)
    if unit_price is None:
        logger.warning("owned_liquidity_no_unit_price", handler=handler.get_id(), block=block)
        return None

    ratio = Decimal(1)
    if excluded_tokens:
        included = handler.get_total_value(excluded_tokens, price_lookup, block)
        total = handler.get_total_value([], price_lookup, block)
        if included is None or total is None:
            return None
        ratio = safe_div(included, total) or Decimal(0)

    amounts = {
        token: handler.get_underlying_token_balance(wallet, token, block)
        for token in handler.get_tokens()
    }
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        value = balance * unit_price * ratio
    return OwnedLiquidity(
        wallet=wallet,
        handler_id=handler.get_id(),
        balance=balance,
        value=value,
        token_amounts=amounts,
    )


VALUERS: dict[VenueKind, Valuer] = {
    VenueKind.UNISWAP_V2: _value_shares,
    VenueKind.WEIGHTED_POOL: _value_shares,
    VenueKind.MANAGED_LIQUIDITY: _value_shares,
    VenueKind.UNISWAP_V3: _value_positions,
    VenueKind.UNISWAP_V3_QUOTER: _value_positions,
}


def get_owned_liquidity(
    handler: VenueHandler,
    wallets: Sequence[str],
    price_lookup: PriceLookup,
    block: int,
    excluded_tokens: Sequence[str] = (),
) -> list[OwnedLiquidity]:
    """Value each wallet's holding in `handler` at `block`.

    Wallets with no value are omitted. Venues not deployed at `block` yield
    an empty list.

    Raises:
        OperationNotSupportedError: If the venue kind cannot be held as liquidity
    """
    valuer = VALUERS.get(handler.kind)
    if valuer is None:
        raise OperationNotSupportedError(handler.get_id(), "get_owned_liquidity")

    if not handler.exists(block):
        return []

    records = []
    for wallet in wallets:
        record = valuer(handler, normalize_address(wallet), price_lookup, block, excluded_tokens)
        if record is None or record.value == 0:
            continue
        logger.debug(
            "owned_liquidity",
            handler=handler.get_id(),
            wallet=record.wallet,
            value=str(record.value),
            block=block,
        )
        records.append(record)
    return records


__all__ = ["OwnedLiquidity", "get_owned_liquidity"]
