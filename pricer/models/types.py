"""Shared address and identifier types."""

from collections.abc import Iterable
from typing import Annotated

from pydantic import AfterValidator, Field

# Ethereum address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# Balancer pool id (32 bytes)
Bytes32 = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{64}$")]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an Ethereum address to lowercase.

    Args:
        address: An Ethereum address (with or without 0x prefix)
        validate: If True, raises ValueError for invalid addresses.

    Returns:
        Lowercase address with 0x prefix

    Raises:
        ValueError: If validate=True and address is not a valid Ethereum address
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a valid Ethereum address."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def addresses_equal(a: str, b: str) -> bool:
    """Case-insensitive address comparison."""
    return normalize_address(a) == normalize_address(b)


def contains_address(addresses: Iterable[str], address: str) -> bool:
    """Case-insensitive membership test."""
    target = normalize_address(address)
    return any(normalize_address(a) == target for a in addresses)


# Address normalized to lowercase after pattern validation
NormalizedAddress = Annotated[Address, AfterValidator(normalize_address)]


__all__ = [
    "Address",
    "Bytes32",
    "NormalizedAddress",
    "normalize_address",
    "is_valid_address",
    "addresses_equal",
    "contains_address",
]
