"""Pricing and service configuration.

Venue configuration is loaded from a JSON file into a `VenueSet` and turned
into a `PricingConfig` holding the ordered handler tuple. The service and
CLI read their settings from environment variables.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from pricer.errors import ConfigurationError
from pricer.models.venues import VenueSet
from pricer.routing.registry import HandlerRegistry, build_default_registry

if TYPE_CHECKING:
    from pricer.chain.reader import ChainReader
    from pricer.handlers.base import VenueHandler

logger = structlog.get_logger()

DEFAULT_MAX_DEPTH = 32


class CycleGuard(str, Enum):
    """How the router avoids resolution cycles.

    POOL skips only the requesting handler and handlers over the same token
    set. PATH additionally skips every handler already on the resolution
    path, which guarantees termination for cycles through distinct pools.
    """

    POOL = "pool"
    PATH = "path"


@dataclass(frozen=True)
class PricingConfig:
    """Handler configuration for a PriceRouter.

    Attributes:
        handlers: Handlers in registration order (first wins liquidity ties)
        cycle_guard: Cycle avoidance mode
        max_depth: Maximum nested lookups before a path is abandoned
        reader: Chain reader the handlers were built with, used for the chain head
        network: Network the venues belong to
    """

    handlers: tuple[VenueHandler, ...]
    cycle_guard: CycleGuard = CycleGuard.PATH
    max_depth: int = DEFAULT_MAX_DEPTH
    reader: ChainReader | None = None
    network: str = "unknown"

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ConfigurationError(f"max_depth must be positive: {self.max_depth}")
        ids = [h.get_id() for h in self.handlers]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate venue ids: {duplicates}")

    def handler_by_id(self, handler_id: str) -> VenueHandler | None:
        return next((h for h in self.handlers if h.get_id() == handler_id), None)


def load_venue_set(path: str | Path) -> VenueSet:
    """Load and validate a venue configuration file.

    Raises:
        ConfigurationError: If the file is missing, not JSON, or invalid
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read venue file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Venue file {path} is not valid JSON: {e}") from e

    try:
        venue_set = VenueSet.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid venue file {path}: {e}") from e

    logger.info(
        "venues_loaded",
        path=str(path),
        network=venue_set.network,
        count=len(venue_set.venues),
    )
    return venue_set


def build_pricing_config(
    venue_set: VenueSet,
    reader: ChainReader,
    cycle_guard: CycleGuard = CycleGuard.PATH,
    max_depth: int = DEFAULT_MAX_DEPTH,
    registry: HandlerRegistry | None = None,
) -> PricingConfig:
    """Build handlers for every configured venue, preserving file order."""
    registry = registry or build_default_registry()
    return PricingConfig(
        handlers=registry.build_all(venue_set.venues, reader),
        cycle_guard=cycle_guard,
        max_depth=max_depth,
        reader=reader,
        network=venue_set.network,
    )


@dataclass(frozen=True)
class Settings:
    """Service settings read from environment variables.

    - PRICER_RPC_URL: JSON-RPC endpoint (archive node for historical blocks)
    - PRICER_VENUES_FILE: Venue configuration JSON
    - PRICER_CYCLE_GUARD: "path" (default) or "pool"
    - PRICER_MAX_DEPTH: Maximum nested lookups (default: 32)
    """

    rpc_url: str | None = None
    venues_file: str | None = None
    cycle_guard: CycleGuard = CycleGuard.PATH
    max_depth: int = DEFAULT_MAX_DEPTH

    @classmethod
    def from_env(cls) -> Settings:
        guard = os.environ.get("PRICER_CYCLE_GUARD", CycleGuard.PATH.value).lower()
        try:
            cycle_guard = CycleGuard(guard)
        except ValueError as e:
            raise ConfigurationError(f"Invalid PRICER_CYCLE_GUARD: {guard!r}") from e

        return cls(
            rpc_url=os.environ.get("PRICER_RPC_URL"),
            venues_file=os.environ.get("PRICER_VENUES_FILE"),
            cycle_guard=cycle_guard,
            max_depth=int(os.environ.get("PRICER_MAX_DEPTH", str(DEFAULT_MAX_DEPTH))),
        )


__all__ = [
    "CycleGuard",
    "PricingConfig",
    "Settings",
    "build_pricing_config",
    "load_venue_set",
]
