"""Numeric constants shared by the venue handlers."""

from decimal import Decimal

# Fixed-point scale of Uniswap V3 sqrt prices
Q96 = 2**96
Q192 = 2**192

# Price ratio between adjacent ticks
TICK_BASE = Decimal("1.0001")

# Tick range supported by Uniswap V3 pools
MIN_TICK = -887272
MAX_TICK = 887272

# Liquidity reported by sources that must win every tie-break
# (price feeds, ERC-4626 share pricing, remaps flagged as infinite).
INFINITE_LIQUIDITY = Decimal(2**64 - 1)

STABLECOIN_PRICE = Decimal(1)

# Balancer normalized weights are 18-decimal fixed point
WEIGHT_DECIMALS = 18

# sqrtPriceLimitX96 = 0 means no limit
NO_SQRT_PRICE_LIMIT = 0
