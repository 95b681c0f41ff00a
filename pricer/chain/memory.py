"""In-memory chain reader for tests and offline valuation.

Contract state is registered up front with the `add_*` helpers. Every read
checks that the contract was deployed at the requested block and raises
`CallReverted` otherwise, mirroring an `eth_call` against a missing
contract.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pricer.chain.reader import Position, Slot0
from pricer.errors import CallReverted
from pricer.models.types import addresses_equal, normalize_address


@dataclass
class QuoteKey:
    """Key for looking up quotes in InMemoryChainReader."""

    quoter: str
    token_in: str
    token_out: str
    fee: int
    amount_in: int

    def __hash__(self) -> int:
        return hash(
            (
                normalize_address(self.quoter),
                normalize_address(self.token_in),
                normalize_address(self.token_out),
                self.fee,
                self.amount_in,
            )
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QuoteKey):
            return False
        return (
            addresses_equal(self.quoter, other.quoter)
            and addresses_equal(self.token_in, other.token_in)
            and addresses_equal(self.token_out, other.token_out)
            and self.fee == other.fee
            and self.amount_in == other.amount_in
        )


@dataclass
class _BalancerPool:
    pool: str
    tokens: list[str]
    balances: list[int]


@dataclass
class _Vault:
    asset: str
    # Raw assets returned for one whole share
    assets_per_share: int


@dataclass
class _Island:
    pool: str
    underlying: tuple[int, int]


@dataclass
class InMemoryChainReader:
    """Chain reader backed by dictionaries.

    Tracks every call in `calls` as (method, address) for assertions.
    """

    block: int = 0
    calls: list[tuple[str, str]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._deployed_at: dict[str, int] = {}
        self._reverting: set[tuple[str, str]] = set()
        self._decimals: dict[str, int] = {}
        self._supply: dict[str, int] = {}
        self._balances: dict[tuple[str, str], int] = {}
        self._pair_tokens: dict[str, tuple[str, str]] = {}
        self._reserves: dict[str, tuple[int, int]] = {}
        self._slot0: dict[str, Slot0] = {}
        self._fees: dict[str, int] = {}
        self._positions: dict[tuple[str, str], list[Position]] = {}
        self._quotes: dict[QuoteKey, int] = {}
        self._vaults: dict[str, _Vault] = {}
        self._balancer: dict[tuple[str, str], _BalancerPool] = {}
        self._weights: dict[str, list[int]] = {}
        self._islands: dict[str, _Island] = {}
        self._stake_tokens: dict[str, str] = {}
        self._answers: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def deploy(self, address: str, block: int = 0) -> None:
        """Mark a contract as deployed from `block` onwards."""
        addr = normalize_address(address)
        if addr not in self._deployed_at or block < self._deployed_at[addr]:
            self._deployed_at[addr] = block

    def set_reverting(self, address: str, method: str) -> None:
        """Make every call to `method` on `address` revert."""
        self._reverting.add((normalize_address(address), method))

    def add_token(
        self,
        token: str,
        decimals: int = 18,
        total_supply: int = 0,
        deployed_at: int = 0,
    ) -> None:
        token = normalize_address(token)
        self.deploy(token, deployed_at)
        self._decimals[token] = decimals
        self._supply[token] = total_supply

    def set_balance(self, token: str, owner: str, amount: int) -> None:
        self._balances[(normalize_address(token), normalize_address(owner))] = amount

    def add_v2_pool(
        self,
        pool: str,
        token0: str,
        token1: str,
        reserve0: int,
        reserve1: int,
        total_supply: int = 0,
        deployed_at: int = 0,
    ) -> None:
        """Register a constant-product pool; the pool is its own 18-decimal LP token."""
        pool = normalize_address(pool)
        self.add_token(pool, 18, total_supply, deployed_at)
        self._pair_tokens[pool] = (normalize_address(token0), normalize_address(token1))
        self._reserves[pool] = (reserve0, reserve1)

    def add_v3_pool(
        self,
        pool: str,
        token0: str,
        token1: str,
        fee: int,
        sqrt_price_x96: int,
        tick: int,
        deployed_at: int = 0,
    ) -> None:
        pool = normalize_address(pool)
        self.deploy(pool, deployed_at)
        self._pair_tokens[pool] = (normalize_address(token0), normalize_address(token1))
        self._fees[pool] = fee
        self._slot0[pool] = Slot0(sqrt_price_x96=sqrt_price_x96, tick=tick)

    def add_position(self, manager: str, owner: str, position: Position) -> None:
        self.deploy(manager)
        key = (normalize_address(manager), normalize_address(owner))
        self._positions.setdefault(key, []).append(position)

    def add_quote(
        self,
        quoter: str,
        token_in: str,
        token_out: str,
        fee: int,
        amount_in: int,
        amount_out: int,
    ) -> None:
        self.deploy(quoter)
        self._quotes[QuoteKey(quoter, token_in, token_out, fee, amount_in)] = amount_out

    def add_vault(
        self,
        vault: str,
        asset: str,
        assets_per_share: int,
        decimals: int = 18,
        deployed_at: int = 0,
    ) -> None:
        """Register an ERC-4626 vault converting one whole share to `assets_per_share`."""
        vault = normalize_address(vault)
        self.add_token(vault, decimals, deployed_at=deployed_at)
        self._vaults[vault] = _Vault(normalize_address(asset), assets_per_share)

    def add_balancer_pool(
        self,
        vault: str,
        pool_id: str,
        pool: str,
        tokens: list[str],
        balances: list[int],
        weights: list[int],
        total_supply: int = 0,
        deployed_at: int = 0,
    ) -> None:
        if not (len(tokens) == len(balances) == len(weights)):
            raise ValueError("tokens, balances and weights must have the same length")
        self.deploy(vault, deployed_at)
        self.add_token(pool, 18, total_supply, deployed_at)
        self._balancer[(normalize_address(vault), pool_id.lower())] = _BalancerPool(
            pool=normalize_address(pool),
            tokens=[normalize_address(t) for t in tokens],
            balances=list(balances),
        )
        self._weights[normalize_address(pool)] = list(weights)

    def add_island(
        self,
        island: str,
        pool: str,
        token0: str,
        token1: str,
        underlying0: int,
        underlying1: int,
        total_supply: int = 0,
        deployed_at: int = 0,
    ) -> None:
        island = normalize_address(island)
        self.add_token(island, 18, total_supply, deployed_at)
        self._pair_tokens[island] = (normalize_address(token0), normalize_address(token1))
        self._islands[island] = _Island(normalize_address(pool), (underlying0, underlying1))

    def add_reward_vault(self, reward_vault: str, stake_token: str, deployed_at: int = 0) -> None:
        self.add_token(reward_vault, 18, deployed_at=deployed_at)
        self._stake_tokens[normalize_address(reward_vault)] = normalize_address(stake_token)

    def add_price_feed(self, feed: str, answer: int, decimals: int = 8) -> None:
        feed = normalize_address(feed)
        self.add_token(feed, decimals)
        self._answers[feed] = answer

    # ------------------------------------------------------------------
    # ChainReader
    # ------------------------------------------------------------------

    def _call(self, method: str, address: str, block: int) -> str:
        addr = normalize_address(address)
        self.calls.append((method, addr))
        deployed_at = self._deployed_at.get(addr)
        if deployed_at is None:
            raise CallReverted(addr, method, "no contract")
        if block < deployed_at:
            raise CallReverted(addr, method, f"not deployed at block {block}")
        if (addr, method) in self._reverting:
            raise CallReverted(addr, method)
        return addr

    @staticmethod
    def _lookup(table: dict, key, address: str, method: str):  # type: ignore[no-untyped-def]
        try:
            return table[key]
        except KeyError:
            raise CallReverted(address, method, "function not implemented") from None

    def latest_block(self) -> int:
        return self.block

    def decimals(self, token: str, block: int) -> int:
        addr = self._call("decimals", token, block)
        return self._lookup(self._decimals, addr, addr, "decimals")

    def total_supply(self, token: str, block: int) -> int:
        addr = self._call("totalSupply", token, block)
        return self._lookup(self._supply, addr, addr, "totalSupply")

    def balance_of(self, token: str, owner: str, block: int) -> int:
        addr = self._call("balanceOf", token, block)
        return self._balances.get((addr, normalize_address(owner)), 0)

    def token0(self, pool: str, block: int) -> str:
        addr = self._call("token0", pool, block)
        return self._lookup(self._pair_tokens, addr, addr, "token0")[0]

    def token1(self, pool: str, block: int) -> str:
        addr = self._call("token1", pool, block)
        return self._lookup(self._pair_tokens, addr, addr, "token1")[1]

    def get_reserves(self, pool: str, block: int) -> tuple[int, int]:
        addr = self._call("getReserves", pool, block)
        return self._lookup(self._reserves, addr, addr, "getReserves")

    def slot0(self, pool: str, block: int) -> Slot0:
        addr = self._call("slot0", pool, block)
        return self._lookup(self._slot0, addr, addr, "slot0")

    def fee(self, pool: str, block: int) -> int:
        addr = self._call("fee", pool, block)
        return self._lookup(self._fees, addr, addr, "fee")

    def positions_of(self, manager: str, owner: str, block: int) -> list[Position]:
        addr = self._call("positions", manager, block)
        return list(self._positions.get((addr, normalize_address(owner)), []))

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
        addr = self._call("quoteExactInputSingle", quoter, block)
        key = QuoteKey(addr, token_in, token_out, fee, amount_in)
        if key not in self._quotes:
            raise CallReverted(addr, "quoteExactInputSingle", "no liquidity")
        return self._quotes[key]

    def vault_asset(self, vault: str, block: int) -> str:
        addr = self._call("asset", vault, block)
        return self._lookup(self._vaults, addr, addr, "asset").asset

    def convert_to_assets(self, vault: str, shares: int, block: int) -> int:
        addr = self._call("convertToAssets", vault, block)
        entry = self._lookup(self._vaults, addr, addr, "convertToAssets")
        return shares * entry.assets_per_share // 10 ** self._decimals[addr]

    def get_pool_tokens(self, vault: str, pool_id: str, block: int) -> tuple[list[str], list[int]]:
        addr = self._call("getPoolTokens", vault, block)
        entry = self._lookup(self._balancer, (addr, pool_id.lower()), addr, "getPoolTokens")
        return list(entry.tokens), list(entry.balances)

    def get_pool(self, vault: str, pool_id: str, block: int) -> str:
        addr = self._call("getPool", vault, block)
        return self._lookup(self._balancer, (addr, pool_id.lower()), addr, "getPool").pool

    def normalized_weights(self, pool: str, block: int) -> list[int]:
        addr = self._call("getNormalizedWeights", pool, block)
        return list(self._lookup(self._weights, addr, addr, "getNormalizedWeights"))

    def island_pool(self, island: str, block: int) -> str:
        addr = self._call("pool", island, block)
        return self._lookup(self._islands, addr, addr, "pool").pool

    def underlying_balances(self, island: str, block: int) -> tuple[int, int]:
        addr = self._call("getUnderlyingBalances", island, block)
        return self._lookup(self._islands, addr, addr, "getUnderlyingBalances").underlying

    def stake_token(self, reward_vault: str, block: int) -> str:
        addr = self._call("stakeToken", reward_vault, block)
        return self._lookup(self._stake_tokens, addr, addr, "stakeToken")

    def latest_answer(self, feed: str, block: int) -> int:
        addr = self._call("latestAnswer", feed, block)
        return self._lookup(self._answers, addr, addr, "latestAnswer")

    def call_count(self, method: str | None = None) -> int:
        """Number of reads made, optionally restricted to one method."""
        if method is None:
            return len(self.calls)
        return sum(1 for m, _ in self.calls if m == method)


__all__ = ["InMemoryChainReader", "QuoteKey"]
