"""ERC-4626 vault share handler."""

from __future__ import annotations

import decimal
from typing import TYPE_CHECKING

import structlog

from pricer.constants import INFINITE_LIQUIDITY
from pricer.errors import CallReverted
from pricer.handlers.base import PriceLookup, VenueHandler
from pricer.math.decimals import DECIMAL_HIGH_PREC_CONTEXT, to_decimal
from pricer.models.price import PriceResult
from pricer.models.types import normalize_address
from pricer.models.venues import VenueKind

if TYPE_CHECKING:
    from pricer.chain.reader import ChainReader

logger = structlog.get_logger()


class ERC4626Handler(VenueHandler):
    """Prices vault shares as price(asset) * convertToAssets(1 share).

    Only the share token matches; the underlying asset is left to other
    venues. The vault is an atomic instrument, so valuation operations are
    not supported.
    """

    kind = VenueKind.ERC4626

    def __init__(self, reader: ChainReader, vault: str):
        super().__init__(reader, [vault])
        self.vault = normalize_address(vault)

    def get_id(self) -> str:
        return self.vault

    def exists(self, block: int | None = None) -> bool:
        return self._contract_answers(self.vault, self.reader.vault_asset, block)

    def get_price(self, token: str, price_lookup: PriceLookup, block: int) -> PriceResult | None:
        self._require_token(token)

        try:
            asset = self.reader.vault_asset(self.vault, block)
            share_decimals = self.reader.decimals(self.vault, block)
            asset_decimals = self.reader.decimals(asset, block)
            assets_per_share = self.reader.convert_to_assets(self.vault, 10**share_decimals, block)
        except CallReverted as e:
            logger.debug("erc4626_contract_reverted", vault=self.vault, block=block, error=str(e))
            return None

        asset_result = price_lookup(asset, block, self.get_id())
        if asset_result is None:
            return None

        with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
            price = asset_result.price * to_decimal(assets_per_share, asset_decimals)
        return PriceResult(price=price, liquidity=INFINITE_LIQUIDITY)
