"""Fixed one-dollar pricing for USD-pegged tokens."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import TYPE_CHECKING

from pricer.constants import STABLECOIN_PRICE
from pricer.handlers.base import PriceLookup, VenueHandler
from pricer.models.price import PriceResult
from pricer.models.venues import VenueKind

if TYPE_CHECKING:
    from pricer.chain.reader import ChainReader


class StablecoinHandler(VenueHandler):
    """Prices every configured token at exactly 1 USD.

    Liquidity is reported as zero, so any venue with real depth wins the
    router's tie-break and the peg only applies when nothing else resolves.
    """

    kind = VenueKind.STABLECOIN
    dedupe_by_tokens = False

    def __init__(self, reader: ChainReader, tokens: Sequence[str], handler_id: str = "stablecoin"):
        super().__init__(reader, tokens)
        self._id = handler_id

    def get_id(self) -> str:
        return self._id

    def exists(self, block: int | None = None) -> bool:
        return True

    def get_price(self, token: str, price_lookup: PriceLookup, block: int) -> PriceResult | None:
        self._require_token(token)
        return PriceResult(price=STABLECOIN_PRICE, liquidity=Decimal(0))

    def get_total_value(
        self,
        excluded_tokens: Sequence[str],
        price_lookup: PriceLookup,
        block: int,
    ) -> Decimal | None:
        return None

    def get_unit_price(self, price_lookup: PriceLookup, block: int) -> Decimal | None:
        return None

    def get_balance(self, wallet: str, block: int) -> Decimal:
        return Decimal(0)
