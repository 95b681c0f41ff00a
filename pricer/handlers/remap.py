"""Alias one token address to another for pricing."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from pricer.constants import INFINITE_LIQUIDITY
from pricer.handlers.base import PriceLookup, VenueHandler
from pricer.models.price import PriceResult
from pricer.models.types import normalize_address
from pricer.models.venues import VenueKind

if TYPE_CHECKING:
    from pricer.chain.reader import ChainReader

logger = structlog.get_logger()


class RemapHandler(VenueHandler):
    """Prices `asset` with whatever price resolves for `destination`.

    Used for wrapped or bridged tokens pegged 1:1 to a canonical asset.
    With `infinite_liquidity` set, the result always wins the tie-break.
    """

    kind = VenueKind.REMAP
    dedupe_by_tokens = False

    def __init__(
        self,
        reader: ChainReader,
        asset: str,
        destination: str,
        infinite_liquidity: bool = False,
    ):
        super().__init__(reader, [asset])
        self.asset = normalize_address(asset)
        self.destination = normalize_address(destination)
        self.infinite_liquidity = infinite_liquidity

    def get_id(self) -> str:
        return f"{self.asset}-{self.destination}"

    def exists(self, block: int | None = None) -> bool:
        return True

    def get_price(self, token: str, price_lookup: PriceLookup, block: int) -> PriceResult | None:
        self._require_token(token)

        result = price_lookup(self.destination, block, self.get_id())
        if result is None:
            logger.debug(
                "remap_destination_unresolved",
                asset=self.asset,
                destination=self.destination,
                block=block,
            )
            return None

        if self.infinite_liquidity:
            return result.with_liquidity(INFINITE_LIQUIDITY)
        return result
