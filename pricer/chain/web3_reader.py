"""Chain reader backed by a web3 JSON-RPC provider."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import structlog

from pricer.chain.abis import (
    BALANCER_VAULT_ABI,
    ERC4626_ABI,
    ERC20_ABI,
    ISLAND_ABI,
    POSITION_MANAGER_ABI,
    PRICE_FEED_ABI,
    QUOTER_V2_ABI,
    REWARD_VAULT_ABI,
    UNISWAP_V2_PAIR_ABI,
    UNISWAP_V3_POOL_ABI,
    WEIGHTED_POOL_ABI,
)
from pricer.chain.reader import Position, Slot0
from pricer.errors import CallReverted
from pricer.models.types import normalize_address

logger = structlog.get_logger()

T = TypeVar("T")


class Web3ChainReader:
    """Reader that issues eth_call requests at historical blocks.

    Reverts and undecodable responses (no code at the address) are raised
    as `CallReverted`; transport errors propagate unchanged.
    """

    def __init__(self, web3_provider: str):
        """Initialize reader with web3 provider.

        Args:
            web3_provider: HTTP RPC URL (an archive node for historical blocks)
        """
        try:
            from web3 import Web3
            from web3.exceptions import BadFunctionCallOutput, ContractLogicError
        except ImportError as e:
            raise ImportError(
                "web3 package required for Web3ChainReader. Install with: pip install web3"
            ) from e

        self.w3 = Web3(Web3.HTTPProvider(web3_provider))
        self._to_checksum = Web3.to_checksum_address
        self._revert_errors: tuple[type[Exception], ...] = (
            ContractLogicError,
            BadFunctionCallOutput,
        )
        self._contracts: dict[tuple[str, int], Any] = {}

    def _contract(self, address: str, abi: list[dict]) -> Any:
        key = (normalize_address(address), id(abi))
        if key not in self._contracts:
            self._contracts[key] = self.w3.eth.contract(
                address=self._to_checksum(address), abi=abi
            )
        return self._contracts[key]

    def _read(self, address: str, method: str, block: int, call: Callable[[], T]) -> T:
        try:
            return call()
        except self._revert_errors as e:
            logger.debug(
                "contract_call_reverted",
                address=address,
                method=method,
                block=block,
                error=str(e),
            )
            raise CallReverted(normalize_address(address), method, str(e)) from e

    def latest_block(self) -> int:
        return int(self.w3.eth.block_number)

    def decimals(self, token: str, block: int) -> int:
        fn = self._contract(token, ERC20_ABI).functions.decimals()
        return int(self._read(token, "decimals", block, lambda: fn.call(block_identifier=block)))

    def total_supply(self, token: str, block: int) -> int:
        fn = self._contract(token, ERC20_ABI).functions.totalSupply()
        return int(self._read(token, "totalSupply", block, lambda: fn.call(block_identifier=block)))

    def balance_of(self, token: str, owner: str, block: int) -> int:
        fn = self._contract(token, ERC20_ABI).functions.balanceOf(self._to_checksum(owner))
        return int(self._read(token, "balanceOf", block, lambda: fn.call(block_identifier=block)))

    def token0(self, pool: str, block: int) -> str:
        fn = self._contract(pool, UNISWAP_V2_PAIR_ABI).functions.token0()
        return normalize_address(
            self._read(pool, "token0", block, lambda: fn.call(block_identifier=block))
        )

    def token1(self, pool: str, block: int) -> str:
        fn = self._contract(pool, UNISWAP_V2_PAIR_ABI).functions.token1()
        return normalize_address(
            self._read(pool, "token1", block, lambda: fn.call(block_identifier=block))
        )

    def get_reserves(self, pool: str, block: int) -> tuple[int, int]:
        fn = self._contract(pool, UNISWAP_V2_PAIR_ABI).functions.getReserves()
        result = self._read(pool, "getReserves", block, lambda: fn.call(block_identifier=block))
        # (reserve0, reserve1, blockTimestampLast)
        return int(result[0]), int(result[1])

    def slot0(self, pool: str, block: int) -> Slot0:
        fn = self._contract(pool, UNISWAP_V3_POOL_ABI).functions.slot0()
        result = self._read(pool, "slot0", block, lambda: fn.call(block_identifier=block))
        return Slot0(sqrt_price_x96=int(result[0]), tick=int(result[1]))

    def fee(self, pool: str, block: int) -> int:
        fn = self._contract(pool, UNISWAP_V3_POOL_ABI).functions.fee()
        return int(self._read(pool, "fee", block, lambda: fn.call(block_identifier=block)))

    def positions_of(self, manager: str, owner: str, block: int) -> list[Position]:
        functions = self._contract(manager, POSITION_MANAGER_ABI).functions
        owner_cs = self._to_checksum(owner)
        count = int(
            self._read(
                manager,
                "balanceOf",
                block,
                lambda: functions.balanceOf(owner_cs).call(block_identifier=block),
            )
        )

        positions = []
        for index in range(count):
            token_id = int(
                self._read(
                    manager,
                    "tokenOfOwnerByIndex",
                    block,
                    lambda: functions.tokenOfOwnerByIndex(owner_cs, index).call(
                        block_identifier=block
                    ),
                )
            )
            raw = self._read(
                manager,
                "positions",
                block,
                lambda: functions.positions(token_id).call(block_identifier=block),
            )
            positions.append(
                Position(
                    token_id=token_id,
                    token0=normalize_address(raw[2]),
                    token1=normalize_address(raw[3]),
                    fee=int(raw[4]),
                    tick_lower=int(raw[5]),
                    tick_upper=int(raw[6]),
                    liquidity=int(raw[7]),
                )
            )
        return positions

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
        fn = self._contract(quoter, QUOTER_V2_ABI).functions.quoteExactInputSingle(
            (
                self._to_checksum(token_in),
                self._to_checksum(token_out),
                amount_in,
                fee,
                sqrt_price_limit_x96,
            )
        )
        result = self._read(
            quoter, "quoteExactInputSingle", block, lambda: fn.call(block_identifier=block)
        )
        # Result is (amountOut, sqrtPriceX96After, initializedTicksCrossed, gasEstimate)
        return int(result[0])

    def vault_asset(self, vault: str, block: int) -> str:
        fn = self._contract(vault, ERC4626_ABI).functions.asset()
        return normalize_address(
            self._read(vault, "asset", block, lambda: fn.call(block_identifier=block))
        )

    def convert_to_assets(self, vault: str, shares: int, block: int) -> int:
        fn = self._contract(vault, ERC4626_ABI).functions.convertToAssets(shares)
        return int(
            self._read(vault, "convertToAssets", block, lambda: fn.call(block_identifier=block))
        )

    def get_pool_tokens(self, vault: str, pool_id: str, block: int) -> tuple[list[str], list[int]]:
        fn = self._contract(vault, BALANCER_VAULT_ABI).functions.getPoolTokens(
            bytes.fromhex(pool_id.removeprefix("0x"))
        )
        result = self._read(vault, "getPoolTokens", block, lambda: fn.call(block_identifier=block))
        # (tokens, balances, lastChangeBlock)
        return [normalize_address(t) for t in result[0]], [int(b) for b in result[1]]

    def get_pool(self, vault: str, pool_id: str, block: int) -> str:
        fn = self._contract(vault, BALANCER_VAULT_ABI).functions.getPool(
            bytes.fromhex(pool_id.removeprefix("0x"))
        )
        result = self._read(vault, "getPool", block, lambda: fn.call(block_identifier=block))
        return normalize_address(result[0])

    def normalized_weights(self, pool: str, block: int) -> list[int]:
        fn = self._contract(pool, WEIGHTED_POOL_ABI).functions.getNormalizedWeights()
        result = self._read(
            pool, "getNormalizedWeights", block, lambda: fn.call(block_identifier=block)
        )
        return [int(w) for w in result]

    def island_pool(self, island: str, block: int) -> str:
        fn = self._contract(island, ISLAND_ABI).functions.pool()
        return normalize_address(
            self._read(island, "pool", block, lambda: fn.call(block_identifier=block))
        )

    def underlying_balances(self, island: str, block: int) -> tuple[int, int]:
        fn = self._contract(island, ISLAND_ABI).functions.getUnderlyingBalances()
        result = self._read(
            island, "getUnderlyingBalances", block, lambda: fn.call(block_identifier=block)
        )
        return int(result[0]), int(result[1])

    def stake_token(self, reward_vault: str, block: int) -> str:
        fn = self._contract(reward_vault, REWARD_VAULT_ABI).functions.stakeToken()
        return normalize_address(
            self._read(reward_vault, "stakeToken", block, lambda: fn.call(block_identifier=block))
        )

    def latest_answer(self, feed: str, block: int) -> int:
        fn = self._contract(feed, PRICE_FEED_ABI).functions.latestAnswer()
        return int(self._read(feed, "latestAnswer", block, lambda: fn.call(block_identifier=block)))


__all__ = ["Web3ChainReader"]
