"""Tests for the web3-backed chain reader with a mocked provider."""

from unittest.mock import MagicMock

import pytest
from web3.exceptions import ContractLogicError

from pricer.chain.web3_reader import Web3ChainReader
from pricer.errors import CallReverted
from tests.helpers import BLOCK, OHM, WALLET
from tests.helpers.constants import BALANCER_VAULT, QUOTER, WEIGHTED_POOL, WEIGHTED_POOL_ID


@pytest.fixture
def web3_reader() -> Web3ChainReader:
    reader = Web3ChainReader("http://localhost:8545")
    reader.w3 = MagicMock()
    return reader


def functions(reader: Web3ChainReader) -> MagicMock:
    return reader.w3.eth.contract.return_value.functions


class TestReads:
    def test_call_at_block(self, web3_reader) -> None:
        functions(web3_reader).decimals.return_value.call.return_value = 9

        assert web3_reader.decimals(OHM, BLOCK) == 9
        functions(web3_reader).decimals.return_value.call.assert_called_once_with(
            block_identifier=BLOCK
        )

    def test_addresses_normalized(self, web3_reader) -> None:
        functions(web3_reader).token0.return_value.call.return_value = "0x" + OHM[2:].upper()

        assert web3_reader.token0(WEIGHTED_POOL, BLOCK) == OHM

    def test_quote_returns_amount_out(self, web3_reader) -> None:
        quote = functions(web3_reader).quoteExactInputSingle
        quote.return_value.call.return_value = (12 * 10**18, 2**96, 1, 80_000)

        amount_out = web3_reader.quote_exact_input_single(
            QUOTER, OHM, WALLET, 10**9, 3000, 0, BLOCK
        )

        assert amount_out == 12 * 10**18

    def test_pool_id_sent_as_bytes(self, web3_reader) -> None:
        get_pool = functions(web3_reader).getPool
        get_pool.return_value.call.return_value = (WEIGHTED_POOL, 1)

        assert web3_reader.get_pool(BALANCER_VAULT, WEIGHTED_POOL_ID, BLOCK) == WEIGHTED_POOL
        get_pool.assert_called_once_with(bytes.fromhex(WEIGHTED_POOL_ID[2:]))

    def test_contracts_cached(self, web3_reader) -> None:
        functions(web3_reader).decimals.return_value.call.return_value = 9

        web3_reader.decimals(OHM, BLOCK)
        web3_reader.decimals(OHM, BLOCK)

        assert web3_reader.w3.eth.contract.call_count == 1


class TestReverts:
    def test_revert_raised_as_call_reverted(self, web3_reader) -> None:
        call = functions(web3_reader).latestAnswer.return_value.call
        call.side_effect = ContractLogicError("execution reverted")

        with pytest.raises(CallReverted) as exc_info:
            web3_reader.latest_answer(OHM, BLOCK)
        assert exc_info.value.method == "latestAnswer"
        assert exc_info.value.address == OHM

    def test_transport_errors_propagate(self, web3_reader) -> None:
        functions(web3_reader).decimals.return_value.call.side_effect = ConnectionError("down")

        with pytest.raises(ConnectionError):
            web3_reader.decimals(OHM, BLOCK)
