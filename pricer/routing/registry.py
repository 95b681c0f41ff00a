"""Registry mapping venue kinds to handler builders.

This module provides a HandlerRegistry class that builds handlers from
venue configuration by dispatching on the venue's kind tag, so adding a
venue type never requires touching routing code.

Type Safety Note:
    Builders are typed for their specific venue model (e.g.
    `Callable[[UniswapV2Venue, ChainReader], VenueHandler]`) but stored
    under the general `Venue` union. Registration needs `type: ignore` due
    to contravariance of function argument types; lookups are keyed by the
    venue kind, which guarantees the model matches at runtime.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import structlog

from pricer.errors import ConfigurationError
from pricer.handlers import (
    ERC4626Handler,
    ManagedLiquidityHandler,
    PriceFeedHandler,
    RemapHandler,
    StablecoinHandler,
    UniswapV2Handler,
    UniswapV3Handler,
    UniswapV3QuoterHandler,
    WeightedPoolHandler,
)
from pricer.models.venues import (
    ERC4626Venue,
    ManagedLiquidityVenue,
    PriceFeedVenue,
    RemapVenue,
    StablecoinVenue,
    UniswapV2Venue,
    UniswapV3QuoterVenue,
    UniswapV3Venue,
    Venue,
    VenueKind,
    WeightedPoolVenue,
)

if TYPE_CHECKING:
    from pricer.chain.reader import ChainReader
    from pricer.handlers.base import VenueHandler

logger = structlog.get_logger()


class HandlerBuilder(Protocol):
    """Protocol for functions creating a handler from venue configuration."""

    def __call__(self, venue: Venue, reader: ChainReader) -> VenueHandler:
        """Build the handler for one configured venue."""
        ...


class HandlerRegistry:
    """Registry of handler builders keyed by venue kind.

    Usage:
        registry = HandlerRegistry()
        registry.register(VenueKind.UNISWAP_V2, build_uniswap_v2)

        handler = registry.build(venue, reader)
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._builders: dict[VenueKind, HandlerBuilder] = {}

    def register(self, kind: VenueKind, builder: HandlerBuilder) -> None:
        """Register the builder for a venue kind, replacing any previous one."""
        self._builders[kind] = builder

    def is_registered(self, kind: VenueKind) -> bool:
        return kind in self._builders

    @property
    def registered_kinds(self) -> list[VenueKind]:
        return list(self._builders)

    def build(self, venue: Venue, reader: ChainReader) -> VenueHandler:
        """Build a handler for a configured venue.

        Raises:
            ConfigurationError: If no builder is registered for the venue kind
        """
        kind = VenueKind(venue.kind)
        builder = self._builders.get(kind)
        if builder is None:
            raise ConfigurationError(f"No handler registered for venue kind {kind.value!r}")
        return builder(venue, reader)

    def build_all(self, venues: list[Venue], reader: ChainReader) -> tuple[VenueHandler, ...]:
        """Build handlers in configuration order, rejecting duplicate ids."""
        handlers: list[VenueHandler] = []
        seen: set[str] = set()
        for venue in venues:
            handler = self.build(venue, reader)
            handler_id = handler.get_id()
            if handler_id in seen:
                raise ConfigurationError(f"Duplicate venue id: {handler_id}")
            seen.add(handler_id)
            handlers.append(handler)

        logger.debug("handlers_built", count=len(handlers))
        return tuple(handlers)


def _build_stablecoin(venue: StablecoinVenue, reader: ChainReader) -> VenueHandler:
    return StablecoinHandler(reader, venue.tokens, handler_id=venue.id)


def _build_remap(venue: RemapVenue, reader: ChainReader) -> VenueHandler:
    return RemapHandler(reader, venue.asset, venue.destination, venue.infinite_liquidity)


def _build_price_feed(venue: PriceFeedVenue, reader: ChainReader) -> VenueHandler:
    return PriceFeedHandler(reader, venue.token, venue.feed)


def _build_uniswap_v2(venue: UniswapV2Venue, reader: ChainReader) -> VenueHandler:
    return UniswapV2Handler(reader, venue.tokens, venue.pool)


def _build_uniswap_v3(venue: UniswapV3Venue, reader: ChainReader) -> VenueHandler:
    return UniswapV3Handler(reader, venue.tokens, venue.pool, venue.position_manager)


def _build_uniswap_v3_quoter(venue: UniswapV3QuoterVenue, reader: ChainReader) -> VenueHandler:
    return UniswapV3QuoterHandler(
        reader, venue.tokens, venue.pool, venue.quoter, venue.position_manager
    )


def _build_weighted_pool(venue: WeightedPoolVenue, reader: ChainReader) -> VenueHandler:
    return WeightedPoolHandler(reader, venue.tokens, venue.vault, venue.pool_id)


def _build_erc4626(venue: ERC4626Venue, reader: ChainReader) -> VenueHandler:
    return ERC4626Handler(reader, venue.vault)


def _build_managed_liquidity(venue: ManagedLiquidityVenue, reader: ChainReader) -> VenueHandler:
    return ManagedLiquidityHandler(
        reader, venue.tokens, venue.island, venue.quoter, venue.reward_vault
    )


def build_default_registry() -> HandlerRegistry:
    """Create a registry with builders for every built-in venue kind."""
    registry = HandlerRegistry()
    registry.register(VenueKind.STABLECOIN, _build_stablecoin)  # type: ignore[arg-type]
    registry.register(VenueKind.REMAP, _build_remap)  # type: ignore[arg-type]
    registry.register(VenueKind.PRICE_FEED, _build_price_feed)  # type: ignore[arg-type]
    registry.register(VenueKind.UNISWAP_V2, _build_uniswap_v2)  # type: ignore[arg-type]
    registry.register(VenueKind.UNISWAP_V3, _build_uniswap_v3)  # type: ignore[arg-type]
    registry.register(
        VenueKind.UNISWAP_V3_QUOTER, _build_uniswap_v3_quoter  # type: ignore[arg-type]
    )
    registry.register(VenueKind.WEIGHTED_POOL, _build_weighted_pool)  # type: ignore[arg-type]
    registry.register(VenueKind.ERC4626, _build_erc4626)  # type: ignore[arg-type]
    registry.register(
        VenueKind.MANAGED_LIQUIDITY, _build_managed_liquidity  # type: ignore[arg-type]
    )
    return registry


__all__ = ["HandlerBuilder", "HandlerRegistry", "build_default_registry"]
