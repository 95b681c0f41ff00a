"""Pydantic models describing the configured liquidity venues.

A venue file is a JSON document with a network name and an ordered list of
venues. Order matters: among candidates reporting equal liquidity the
router keeps the one registered first.

Example:
    {
        "network": "ethereum",
        "venues": [
            {"kind": "stablecoin", "tokens": ["0x6b17...1d0f"]},
            {"kind": "uniswap_v2", "pool": "0x...", "tokens": ["0x...", "0x..."]}
        ]
    }
"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field, model_validator

from pricer.models.types import Bytes32, NormalizedAddress


class VenueKind(str, Enum):
    """Kind tag carried by every venue handler."""

    STABLECOIN = "stablecoin"
    REMAP = "remap"
    PRICE_FEED = "price_feed"
    UNISWAP_V2 = "uniswap_v2"
    UNISWAP_V3 = "uniswap_v3"
    UNISWAP_V3_QUOTER = "uniswap_v3_quoter"
    WEIGHTED_POOL = "weighted_pool"
    ERC4626 = "erc4626"
    MANAGED_LIQUIDITY = "managed_liquidity"


class StablecoinVenue(BaseModel):
    """Tokens pegged to one USD."""

    kind: Literal["stablecoin"] = "stablecoin"
    id: str = "stablecoin"
    tokens: list[NormalizedAddress] = Field(min_length=1)


class RemapVenue(BaseModel):
    """Price `asset` as if it were `destination`."""

    kind: Literal["remap"] = "remap"
    asset: NormalizedAddress
    destination: NormalizedAddress
    infinite_liquidity: bool = Field(default=False, alias="infiniteLiquidity")

    model_config = {"populate_by_name": True}


class PriceFeedVenue(BaseModel):
    """Chainlink-style aggregator answering the USD price of one token."""

    kind: Literal["price_feed"] = "price_feed"
    token: NormalizedAddress
    feed: NormalizedAddress


class UniswapV2Venue(BaseModel):
    kind: Literal["uniswap_v2"] = "uniswap_v2"
    pool: NormalizedAddress
    tokens: list[NormalizedAddress] = Field(min_length=2, max_length=2)


class UniswapV3Venue(BaseModel):
    kind: Literal["uniswap_v3"] = "uniswap_v3"
    pool: NormalizedAddress
    tokens: list[NormalizedAddress] = Field(min_length=2, max_length=2)
    position_manager: NormalizedAddress | None = Field(default=None, alias="positionManager")

    model_config = {"populate_by_name": True}


class UniswapV3QuoterVenue(BaseModel):
    kind: Literal["uniswap_v3_quoter"] = "uniswap_v3_quoter"
    pool: NormalizedAddress
    quoter: NormalizedAddress
    tokens: list[NormalizedAddress] = Field(min_length=2, max_length=2)
    position_manager: NormalizedAddress | None = Field(default=None, alias="positionManager")

    model_config = {"populate_by_name": True}


class WeightedPoolVenue(BaseModel):
    kind: Literal["weighted_pool"] = "weighted_pool"
    vault: NormalizedAddress
    pool_id: Bytes32 = Field(alias="poolId")
    tokens: list[NormalizedAddress] = Field(min_length=2)

    model_config = {"populate_by_name": True}


class ERC4626Venue(BaseModel):
    kind: Literal["erc4626"] = "erc4626"
    vault: NormalizedAddress


class ManagedLiquidityVenue(BaseModel):
    """Island-style vault issuing fungible shares over a concentrated position."""

    kind: Literal["managed_liquidity"] = "managed_liquidity"
    island: NormalizedAddress
    quoter: NormalizedAddress
    tokens: list[NormalizedAddress] = Field(min_length=2, max_length=2)
    reward_vault: NormalizedAddress | None = Field(default=None, alias="rewardVault")

    model_config = {"populate_by_name": True}


Venue = Annotated[
    StablecoinVenue
    | RemapVenue
    | PriceFeedVenue
    | UniswapV2Venue
    | UniswapV3Venue
    | UniswapV3QuoterVenue
    | WeightedPoolVenue
    | ERC4626Venue
    | ManagedLiquidityVenue,
    Field(discriminator="kind"),
]


class VenueSet(BaseModel):
    """Ordered venue configuration for one network."""

    network: str
    venues: list[Venue] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_token_lists(self) -> "VenueSet":
        for venue in self.venues:
            tokens = getattr(venue, "tokens", None)
            if tokens is not None and len(set(tokens)) != len(tokens):
                raise ValueError(f"Duplicate tokens in {venue.kind} venue: {tokens}")
        return self


__all__ = [
    "VenueKind",
    "Venue",
    "VenueSet",
    "StablecoinVenue",
    "RemapVenue",
    "PriceFeedVenue",
    "UniswapV2Venue",
    "UniswapV3Venue",
    "UniswapV3QuoterVenue",
    "WeightedPoolVenue",
    "ERC4626Venue",
    "ManagedLiquidityVenue",
]
