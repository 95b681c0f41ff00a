"""Read-only chain state access used by the venue handlers.

Every method reads contract state at a block height and raises
`CallReverted` when the call reverts or the contract is not deployed yet.
Amounts are raw integers in the token's smallest unit; decimal
normalisation is left to the handlers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class Slot0:
    """Current state of a concentrated-liquidity pool."""

    sqrt_price_x96: int
    tick: int


@dataclass(frozen=True)
class Position:
    """A concentrated-liquidity position held through a position manager."""

    token_id: int
    token0: str
    token1: str
    fee: int
    tick_lower: int
    tick_upper: int
    liquidity: int


class ChainReader(Protocol):
    """Protocol for chain state readers.

    This allows swapping between an RPC-backed reader and an in-memory one
    for tests and offline runs.
    """

    def latest_block(self) -> int:
        """Return the current chain head."""
        ...

    # ERC-20

    def decimals(self, token: str, block: int) -> int: ...

    def total_supply(self, token: str, block: int) -> int: ...

    def balance_of(self, token: str, owner: str, block: int) -> int: ...

    # Uniswap V2 / V3 pools

    def token0(self, pool: str, block: int) -> str: ...

    def token1(self, pool: str, block: int) -> str: ...

    def get_reserves(self, pool: str, block: int) -> tuple[int, int]:
        """Return (reserve0, reserve1) of a constant-product pool."""
        ...

    def slot0(self, pool: str, block: int) -> Slot0: ...

    def fee(self, pool: str, block: int) -> int:
        """Return the pool fee tier in hundredths of a bip (e.g. 3000)."""
        ...

    def positions_of(self, manager: str, owner: str, block: int) -> list[Position]:
        """Return every position `owner` holds through a position manager."""
        ...

    def quote_exact_input_single(
        self,
        quoter: str,
        token_in: str,
        token_out: str,
        amount_in: int,
        fee: int,
        sqrt_price_limit_x96: int,
        block: int,
    ) -> int:
        """Return the output amount of a simulated exact-input swap."""
        ...

    # ERC-4626

    def vault_asset(self, vault: str, block: int) -> str: ...

    def convert_to_assets(self, vault: str, shares: int, block: int) -> int: ...

    # Balancer

    def get_pool_tokens(self, vault: str, pool_id: str, block: int) -> tuple[list[str], list[int]]:
        """Return (tokens, balances) registered for a pool id."""
        ...

    def get_pool(self, vault: str, pool_id: str, block: int) -> str:
        """Return the pool token address for a pool id."""
        ...

    def normalized_weights(self, pool: str, block: int) -> list[int]:
        """Return 18-decimal normalized weights in pool token order."""
        ...

    # Managed liquidity islands and reward vaults

    def island_pool(self, island: str, block: int) -> str: ...

    def underlying_balances(self, island: str, block: int) -> tuple[int, int]: ...

    def stake_token(self, reward_vault: str, block: int) -> str: ...

    # Price feeds

    def latest_answer(self, feed: str, block: int) -> int: ...


__all__ = ["ChainReader", "Position", "Slot0"]
