"""Tests for the in-memory chain reader."""

import pytest

from pricer.chain.memory import InMemoryChainReader, QuoteKey
from pricer.chain.reader import Position
from pricer.errors import CallReverted
from tests.helpers import BLOCK, DAI, OHM, SUSDS, USDS, WALLET, units
from tests.helpers.constants import (
    OHM_DAI_V2_POOL,
    POSITION_MANAGER,
    QUOTER,
    WETH_USD_FEED,
)


class TestDeployment:
    def test_unknown_contract_reverts(self) -> None:
        reader = InMemoryChainReader()

        with pytest.raises(CallReverted, match="no contract"):
            reader.decimals(OHM, BLOCK)

    def test_call_before_deployment_reverts(self) -> None:
        reader = InMemoryChainReader()
        reader.add_token(OHM, 9, deployed_at=BLOCK)

        with pytest.raises(CallReverted, match="not deployed"):
            reader.decimals(OHM, BLOCK - 1)
        assert reader.decimals(OHM, BLOCK) == 9

    def test_reverting_method(self, reader) -> None:
        reader.set_reverting(OHM, "totalSupply")

        with pytest.raises(CallReverted) as exc_info:
            reader.total_supply(OHM, BLOCK)
        assert exc_info.value.method == "totalSupply"
        assert reader.decimals(OHM, BLOCK) == 9

    def test_unimplemented_function_reverts(self, reader) -> None:
        with pytest.raises(CallReverted, match="function not implemented"):
            reader.get_reserves(OHM, BLOCK)

    def test_addresses_case_insensitive(self, reader) -> None:
        assert reader.decimals("0x" + OHM[2:].upper(), BLOCK) == 9


class TestState:
    def test_pair(self, ohm_dai_reader) -> None:
        assert ohm_dai_reader.token0(OHM_DAI_V2_POOL, BLOCK) == OHM
        assert ohm_dai_reader.token1(OHM_DAI_V2_POOL, BLOCK) == DAI
        assert ohm_dai_reader.get_reserves(OHM_DAI_V2_POOL, BLOCK) == (
            units(1000, 9),
            units(12000, 18),
        )
        assert ohm_dai_reader.decimals(OHM_DAI_V2_POOL, BLOCK) == 18

    def test_balances_default_to_zero(self, reader) -> None:
        reader.set_balance(OHM, WALLET, 5)

        assert reader.balance_of(OHM, WALLET, BLOCK) == 5
        assert reader.balance_of(DAI, WALLET, BLOCK) == 0

    def test_vault_conversion(self, reader) -> None:
        reader.add_vault(SUSDS, USDS, assets_per_share=units("1.5", 18))

        assert reader.vault_asset(SUSDS, BLOCK) == USDS
        assert reader.convert_to_assets(SUSDS, units(2, 18), BLOCK) == units(3, 18)

    def test_quotes(self, reader) -> None:
        reader.add_quote(QUOTER, OHM, DAI, 3000, 10**9, units(12, 18))

        assert reader.quote_exact_input_single(QUOTER, OHM, DAI, 10**9, 3000, 0, BLOCK) == units(
            12, 18
        )
        with pytest.raises(CallReverted, match="no liquidity"):
            reader.quote_exact_input_single(QUOTER, DAI, OHM, 10**18, 3000, 0, BLOCK)

    def test_positions(self, reader) -> None:
        position = Position(1, OHM, DAI, 3000, -100, 100, 10**18)
        reader.add_position(POSITION_MANAGER, WALLET, position)

        assert reader.positions_of(POSITION_MANAGER, WALLET, BLOCK) == [position]
        assert reader.positions_of(POSITION_MANAGER, DAI, BLOCK) == []

    def test_price_feed(self, reader) -> None:
        reader.add_price_feed(WETH_USD_FEED, answer=2000 * 10**8)

        assert reader.latest_answer(WETH_USD_FEED, BLOCK) == 2000 * 10**8
        assert reader.decimals(WETH_USD_FEED, BLOCK) == 8

    def test_balancer_pool_lengths_checked(self, reader) -> None:
        with pytest.raises(ValueError, match="same length"):
            reader.add_balancer_pool(
                DAI, "0x" + "00" * 32, OHM, [OHM, DAI], [1, 2], [5 * 10**17]
            )


class TestCallTracking:
    def test_calls_recorded(self, reader) -> None:
        reader.decimals(OHM, BLOCK)
        reader.decimals(DAI, BLOCK)
        reader.balance_of(OHM, WALLET, BLOCK)

        assert reader.calls == [("decimals", OHM), ("decimals", DAI), ("balanceOf", OHM)]
        assert reader.call_count() == 3
        assert reader.call_count("decimals") == 2

    def test_latest_block(self) -> None:
        assert InMemoryChainReader(block=42).latest_block() == 42


class TestQuoteKey:
    def test_case_insensitive(self) -> None:
        key = QuoteKey(QUOTER, OHM, DAI, 3000, 10**9)
        upper = QuoteKey(QUOTER.upper().replace("0X", "0x"), OHM, DAI, 3000, 10**9)

        assert key == upper
        assert hash(key) == hash(upper)
