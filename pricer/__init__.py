"""USD price resolution for on-chain tokens.

Prices are discovered by walking a configured set of liquidity venues
(constant-product pools, concentrated-liquidity pools, weighted pools,
ERC-4626 vaults, price feeds and address remaps) and keeping the
deepest quote for each token.
"""

from pricer.config import CycleGuard, PricingConfig, build_pricing_config, load_venue_set
from pricer.errors import (
    CallReverted,
    ConfigurationError,
    OperationNotSupportedError,
    PricingError,
    TokenNotInVenueError,
)
from pricer.models.price import PriceResult
from pricer.routing.router import PriceRouter, get_usd_rate

__version__ = "0.1.0"

__all__ = [
    "CallReverted",
    "ConfigurationError",
    "CycleGuard",
    "OperationNotSupportedError",
    "PriceResult",
    "PriceRouter",
    "PricingConfig",
    "PricingError",
    "TokenNotInVenueError",
    "build_pricing_config",
    "get_usd_rate",
    "load_venue_set",
]
