"""Venue handlers."""

from pricer.handlers.base import PriceLookup, VenueHandler
from pricer.handlers.erc4626 import ERC4626Handler
from pricer.handlers.managed_liquidity import ManagedLiquidityHandler
from pricer.handlers.price_feed import PriceFeedHandler
from pricer.handlers.remap import RemapHandler
from pricer.handlers.stablecoin import StablecoinHandler
from pricer.handlers.uniswap_v2 import UniswapV2Handler
from pricer.handlers.uniswap_v3 import UniswapV3Handler
from pricer.handlers.uniswap_v3_quoter import UniswapV3QuoterHandler
from pricer.handlers.weighted_pool import WeightedPoolHandler

__all__ = [
    "PriceLookup",
    "VenueHandler",
    "StablecoinHandler",
    "RemapHandler",
    "PriceFeedHandler",
    "UniswapV2Handler",
    "UniswapV3Handler",
    "UniswapV3QuoterHandler",
    "WeightedPoolHandler",
    "ERC4626Handler",
    "ManagedLiquidityHandler",
]
