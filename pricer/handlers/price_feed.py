"""Chainlink-style price feed handler."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from pricer.constants import INFINITE_LIQUIDITY
from pricer.errors import CallReverted
from pricer.handlers.base import PriceLookup, VenueHandler
from pricer.math.decimals import to_decimal
from pricer.models.price import PriceResult
from pricer.models.types import normalize_address
from pricer.models.venues import VenueKind

if TYPE_CHECKING:
    from pricer.chain.reader import ChainReader

logger = structlog.get_logger()


class PriceFeedHandler(VenueHandler):
    """Prices a base token from an aggregator's latest USD answer.

    Feed prices are treated as authoritative and report the infinite
    liquidity sentinel.
    """

    kind = VenueKind.PRICE_FEED
    dedupe_by_tokens = False

    def __init__(self, reader: ChainReader, token: str, feed: str):
        super().__init__(reader, [token])
        self.feed = normalize_address(feed)

    def get_id(self) -> str:
        return self.feed

    def exists(self, block: int | None = None) -> bool:
        return self._contract_answers(self.feed, self.reader.latest_answer, block)

    def get_price(self, token: str, price_lookup: PriceLookup, block: int) -> PriceResult | None:
        self._require_token(token)

        try:
            answer = self.reader.latest_answer(self.feed, block)
            decimals = self.reader.decimals(self.feed, block)
        except CallReverted as e:
            logger.debug("price_feed_reverted", feed=self.feed, block=block, error=str(e))
            return None

        if answer <= 0:
            logger.warning(
                "price_feed_non_positive_answer", feed=self.feed, answer=answer, block=block
            )
            return None

        return PriceResult(price=to_decimal(answer, decimals), liquidity=INFINITE_LIQUIDITY)
