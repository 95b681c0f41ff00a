"""Recursive USD price resolution across venue handlers.

The router asks every handler that matches a token for a price and keeps
the result with the greatest liquidity. Handlers price their secondary
tokens through a `PriceLookup` bound to the current resolution path, so
each lookup may recurse back into the router for a different token.

Cycle avoidance:
    - a handler is never asked about a token while it is itself resolving
      a price (self-reference)
    - a handler covering exactly the same token set as the requesting
      handler is skipped (e.g. two fee tiers of one pair)
    - with `CycleGuard.PATH`, every handler already on the resolution path
      is skipped too, which bounds recursion depth by the handler count
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

import structlog

from pricer.config import CycleGuard
from pricer.errors import ConfigurationError
from pricer.math.decimals import decimal_gt
from pricer.models.types import normalize_address

if TYPE_CHECKING:
    from pricer.config import PricingConfig
    from pricer.handlers.base import PriceLookup, VenueHandler
    from pricer.models.price import PriceResult

logger = structlog.get_logger()


@dataclass(frozen=True)
class RoutingContext:
    """State threaded through one resolution call tree.

    Attributes:
        current_pool_id: Handler requesting the price, if any
        visited: Handlers already on the resolution path
        depth: Number of nested lookups above this one
    """

    current_pool_id: str | None = None
    visited: frozenset[str] = field(default_factory=frozenset)
    depth: int = 0

    def descend(self, current_pool_id: str | None, track_path: bool) -> RoutingContext:
        visited = self.visited
        if track_path and current_pool_id is not None:
            visited = visited | {current_pool_id}
        return RoutingContext(
            current_pool_id=current_pool_id, visited=visited, depth=self.depth + 1
        )


def _token_set(handler: VenueHandler) -> frozenset[str]:
    return frozenset(normalize_address(t) for t in handler.get_tokens())


def _same_token_set(handler: VenueHandler, current: VenueHandler | None) -> bool:
    if current is None or not (handler.dedupe_by_tokens and current.dedupe_by_tokens):
        return False
    tokens = _token_set(handler)
    return bool(tokens) and tokens == _token_set(current)


def get_usd_rate(
    token: str,
    handlers: Sequence[VenueHandler],
    price_lookup: PriceLookup,
    block: int,
    current_pool_id: str | None = None,
    visited: frozenset[str] = frozenset(),
) -> PriceResult | None:
    """Best USD price for `token` among `handlers`.

    Handlers are tried in registration order; a later result replaces the
    current best only if it reports strictly greater liquidity, so the
    first registered handler wins ties.

    Args:
        token: Token to price
        handlers: Configured handlers in registration order
        price_lookup: Lookup handed to each handler for secondary tokens
        block: Block height
        current_pool_id: Id of the handler requesting this price
        visited: Handler ids to skip (the current resolution path)

    Returns:
        The deepest PriceResult, or None if no handler resolves the token
    """
    current_pool_handler = None
    if current_pool_id is not None:
        current_pool_handler = next((h for h in handlers if h.get_id() == current_pool_id), None)

    best: PriceResult | None = None
    best_id: str | None = None
    for handler in handlers:
        handler_id = handler.get_id()
        if handler_id == current_pool_id or handler_id in visited:
            continue
        if _same_token_set(handler, current_pool_handler):
            continue
        if not handler.matches(token):
            continue

        result = handler.get_price(token, price_lookup, block)
        if result is None:
            continue

        if best is None or decimal_gt(result.liquidity, best.liquidity):
            best = result
            best_id = handler_id

    if best is not None:
        logger.debug(
            "usd_rate_resolved",
            token=normalize_address(token),
            handler=best_id,
            price=str(best.price),
            liquidity=str(best.liquidity),
            block=block,
        )
    return best


class PriceRouter:
    """Entry point resolving USD prices with a fixed handler configuration."""

    def __init__(self, config: PricingConfig):
        self.config = config

    @property
    def handlers(self) -> tuple[VenueHandler, ...]:
        return self.config.handlers

    def _bind(self, context: RoutingContext) -> PriceLookup:
        track_path = self.config.cycle_guard is CycleGuard.PATH

        def lookup(
            token: str,
            block: int,
            current_pool_id: str | None = None,
        ) -> PriceResult | None:
            child = context.descend(current_pool_id, track_path)
            return self._resolve(token, block, child)

        return lookup

    def _resolve(self, token: str, block: int, context: RoutingContext) -> PriceResult | None:
        if context.depth > self.config.max_depth:
            logger.debug(
                "price_lookup_depth_exceeded",
                token=normalize_address(token),
                depth=context.depth,
                block=block,
            )
            return None
        return get_usd_rate(
            token,
            self.config.handlers,
            self._bind(context),
            block,
            current_pool_id=context.current_pool_id,
            visited=context.visited,
        )

    def lookup(
        self,
        token: str,
        block: int,
        current_pool_id: str | None = None,
    ) -> PriceResult | None:
        """PriceLookup entry point for callers outside a resolution path."""
        return self._bind(RoutingContext())(token, block, current_pool_id)

    def get_price_result(self, token: str, block: int) -> PriceResult | None:
        return self._resolve(token, block, RoutingContext())

    def get_price(self, token: str, block: int) -> Decimal:
        """USD price of `token` at `block`; zero (with a warning) if unresolved."""
        result = self.get_price_result(token, block)
        if result is None:
            logger.warning("price_unresolved", token=normalize_address(token), block=block)
            return Decimal(0)
        return result.price

    def latest_block(self) -> int:
        if self.config.reader is None:
            raise ConfigurationError("No chain reader configured")
        return self.config.reader.latest_block()


__all__ = ["PriceRouter", "RoutingContext", "get_usd_rate"]
