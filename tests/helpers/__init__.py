"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Token, venue and wallet addresses
- factories: Chain reader and price lookup factories
"""

from tests.helpers.constants import (
    BLOCK,
    DAI,
    FPIS,
    FRAX,
    OHM,
    SUSDS,
    TOKEN_DECIMALS,
    USDC,
    USDS,
    WALLET,
    WETH,
)
from tests.helpers.factories import StaticPriceLookup, make_reader, units

__all__ = [
    # Constants
    "OHM",
    "WETH",
    "USDC",
    "DAI",
    "FRAX",
    "FPIS",
    "USDS",
    "SUSDS",
    "TOKEN_DECIMALS",
    "WALLET",
    "BLOCK",
    # Factories
    "StaticPriceLookup",
    "make_reader",
    "units",
]
