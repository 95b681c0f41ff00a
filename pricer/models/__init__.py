"""Data models for price resolution."""

from pricer.models.price import PriceResult
from pricer.models.types import (
    Address,
    Bytes32,
    addresses_equal,
    contains_address,
    is_valid_address,
    normalize_address,
)
from pricer.models.venues import Venue, VenueKind, VenueSet

__all__ = [
    # Types
    "Address",
    "Bytes32",
    "normalize_address",
    "is_valid_address",
    "addresses_equal",
    "contains_address",
    # Results
    "PriceResult",
    # Venue configuration
    "Venue",
    "VenueKind",
    "VenueSet",
]
