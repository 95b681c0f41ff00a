"""Base class and protocols for venue handlers.

A venue handler prices the tokens of one liquidity venue (a pool, a vault,
a price feed or an address alias). Handlers never look up other handlers
directly: any secondary token is priced through the `PriceLookup` passed
into each call, which is what lets the router swap handler sets per
network without changing handler code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal
from typing import TYPE_CHECKING, ClassVar, Protocol

import structlog

from pricer.errors import CallReverted, OperationNotSupportedError, TokenNotInVenueError
from pricer.math.decimals import to_decimal
from pricer.models.types import contains_address, normalize_address

if TYPE_CHECKING:
    from pricer.chain.reader import ChainReader
    from pricer.models.price import PriceResult
    from pricer.models.venues import VenueKind

logger = structlog.get_logger()


class PriceLookup(Protocol):
    """Callback resolving the USD price of another token.

    `current_pool_id` is the id of the handler making the request, so the
    router can avoid asking that venue about its own price.
    """

    def __call__(
        self,
        token: str,
        block: int,
        current_pool_id: str | None,
    ) -> PriceResult | None: ...


class VenueHandler(ABC):
    """Base class for venue handlers.

    Subclasses set `kind` and implement `get_id`, `exists` and `get_price`.
    The valuation operations default to raising `OperationNotSupportedError`
    so venues priced as atomic instruments only override what they support.
    """

    kind: ClassVar[VenueKind]
    # Whether the router may skip this handler when it covers the same
    # token set as the handler currently being priced.
    dedupe_by_tokens: ClassVar[bool] = True

    def __init__(self, reader: ChainReader, tokens: Sequence[str]):
        self.reader = reader
        self.tokens = [normalize_address(t) for t in tokens]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.get_id()!r})"

    @abstractmethod
    def get_id(self) -> str:
        """Stable identifier, unique among configured handlers."""

    @abstractmethod
    def exists(self, block: int | None = None) -> bool:
        """Whether the venue contract answers at `block` (latest if None)."""

    def matches(self, token: str) -> bool:
        """Case-insensitive membership test against the configured tokens."""
        return contains_address(self.tokens, token)

    def get_tokens(self) -> list[str]:
        return list(self.tokens)

    @abstractmethod
    def get_price(
        self,
        token: str,
        price_lookup: PriceLookup,
        block: int,
    ) -> PriceResult | None:
        """USD price of `token` implied by this venue, or None if unavailable.

        Raises:
            TokenNotInVenueError: If `token` is not one of the venue's tokens
        """

    def get_total_value(
        self,
        excluded_tokens: Sequence[str],
        price_lookup: PriceLookup,
        block: int,
    ) -> Decimal | None:
        """USD value of every constituent token not listed in `excluded_tokens`."""
        raise OperationNotSupportedError(self.get_id(), "get_total_value")

    def get_unit_price(self, price_lookup: PriceLookup, block: int) -> Decimal | None:
        """USD value of one venue share."""
        raise OperationNotSupportedError(self.get_id(), "get_unit_price")

    def get_balance(self, wallet: str, block: int) -> Decimal:
        """Venue share balance held by `wallet`."""
        raise OperationNotSupportedError(self.get_id(), "get_balance")

    def get_underlying_token_balance(self, wallet: str, token: str, block: int) -> Decimal:
        """Quantity of `token` attributable to `wallet`'s share of the venue."""
        raise OperationNotSupportedError(self.get_id(), "get_underlying_token_balance")

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def _require_token(self, token: str) -> None:
        if not self.matches(token):
            raise TokenNotInVenueError(self.get_id(), token)

    def _resolve_block(self, block: int | None) -> int:
        return self.reader.latest_block() if block is None else block

    def _contract_answers(
        self,
        address: str,
        read: Callable[[str, int], object],
        block: int | None,
    ) -> bool:
        """Run a read against `address` and report whether it succeeded."""
        block = self._resolve_block(block)
        try:
            read(address, block)
        except CallReverted:
            logger.debug("venue_not_deployed", handler=self.get_id(), address=address, block=block)
            return False
        return True

    def _token_amount(self, token: str, raw: int, block: int) -> Decimal:
        return to_decimal(raw, self.reader.decimals(token, block))

    @staticmethod
    def _is_excluded(token: str, excluded_tokens: Iterable[str]) -> bool:
        return contains_address(excluded_tokens, token)


__all__ = ["PriceLookup", "VenueHandler"]
