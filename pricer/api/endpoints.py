"""API endpoints for the price service."""

from __future__ import annotations

import asyncio
from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from pricer.chain.web3_reader import Web3ChainReader
from pricer.config import Settings, build_pricing_config, load_venue_set
from pricer.errors import CallReverted, ConfigurationError
from pricer.models.types import is_valid_address, normalize_address
from pricer.routing.router import PriceRouter

logger = structlog.get_logger()

router = APIRouter()


class PriceResponse(BaseModel):
    """USD price of a token at a block.

    Decimal values are serialized as strings to keep full precision.
    """

    token: str
    block: int
    price: str
    liquidity: str | None = None
    resolved: bool


class VenueInfo(BaseModel):
    id: str
    kind: str
    tokens: list[str] = Field(default_factory=list)


class VenuesResponse(BaseModel):
    network: str
    venues: list[VenueInfo]


@lru_cache(maxsize=1)
def get_default_router() -> PriceRouter:
    """Build the process-wide router from environment settings."""
    settings = Settings.from_env()
    if not settings.rpc_url or not settings.venues_file:
        raise ConfigurationError("PRICER_RPC_URL and PRICER_VENUES_FILE must be set")

    reader = Web3ChainReader(settings.rpc_url)
    config = build_pricing_config(
        load_venue_set(settings.venues_file),
        reader,
        cycle_guard=settings.cycle_guard,
        max_depth=settings.max_depth,
    )
    return PriceRouter(config)


def get_price_router() -> PriceRouter:
    """Dependency provider for the price router.

    Override this in tests to inject a router over in-memory chain state:
        app.dependency_overrides[get_price_router] = lambda: router

    Raises:
        HTTPException: 503 if the service is not configured
    """
    try:
        return get_default_router()
    except ConfigurationError as e:
        logger.error("price_router_unavailable", error=str(e))
        raise HTTPException(status_code=503, detail=str(e)) from e


@router.get("/venues")
async def list_venues(price_router: PriceRouter = Depends(get_price_router)) -> VenuesResponse:
    """List configured venues in registration order."""
    return VenuesResponse(
        network=price_router.config.network,
        venues=[
            VenueInfo(id=h.get_id(), kind=h.kind.value, tokens=h.get_tokens())
            for h in price_router.handlers
        ],
    )


@router.get("/price/{token}")
async def get_price(
    token: str,
    block: int | None = Query(default=None, ge=0),
    price_router: PriceRouter = Depends(get_price_router),
) -> PriceResponse:
    """Resolve the USD price of a token.

    Error Handling:
        - Invalid token address: 422
        - Chain head unavailable: 502
        - Unresolvable token: price "0" with resolved=false
    """
    if not is_valid_address(normalize_address(token)):
        raise HTTPException(status_code=422, detail=f"Invalid token address: {token}")
    token = normalize_address(token)

    loop = asyncio.get_running_loop()
    if block is None:
        try:
            block = await loop.run_in_executor(None, price_router.latest_block)
        except (CallReverted, ConfigurationError) as e:
            logger.error("latest_block_unavailable", error=str(e))
            raise HTTPException(status_code=502, detail="Chain head unavailable") from e

    logger.info("price_requested", token=token, block=block)
    result = await loop.run_in_executor(None, price_router.get_price_result, token, block)

    if result is None:
        logger.warning("price_unresolved", token=token, block=block)
        return PriceResponse(token=token, block=block, price="0", resolved=False)

    return PriceResponse(
        token=token,
        block=block,
        price=str(result.price),
        liquidity=str(result.liquidity),
        resolved=True,
    )
