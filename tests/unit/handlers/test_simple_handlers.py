"""Tests for the stablecoin, remap and price feed handlers."""

from decimal import Decimal

import pytest

from pricer.constants import INFINITE_LIQUIDITY
from pricer.errors import OperationNotSupportedError, TokenNotInVenueError
from pricer.handlers.price_feed import PriceFeedHandler
from pricer.handlers.remap import RemapHandler
from pricer.handlers.stablecoin import StablecoinHandler
from pricer.models.price import PriceResult
from tests.helpers import BLOCK, DAI, OHM, USDC, WALLET, WETH, StaticPriceLookup
from tests.helpers.constants import WETH_USD_FEED

BRIDGED_WETH = "0x82af49447d8a07e3bd95bd0d56f35241523fbab1"


class TestStablecoinHandler:
    @pytest.fixture
    def handler(self, reader) -> StablecoinHandler:
        return StablecoinHandler(reader, [DAI, USDC])

    def test_price_is_one_with_zero_liquidity(self, handler) -> None:
        result = handler.get_price(USDC, StaticPriceLookup({}), BLOCK)

        assert result == PriceResult(price=Decimal(1), liquidity=Decimal(0))

    def test_does_not_recurse(self, handler) -> None:
        lookup = StaticPriceLookup({})
        handler.get_price(DAI, lookup, BLOCK)

        assert lookup.calls == []

    def test_foreign_token_raises(self, handler) -> None:
        with pytest.raises(TokenNotInVenueError):
            handler.get_price(OHM, StaticPriceLookup({}), BLOCK)

    def test_valuation(self, handler) -> None:
        lookup = StaticPriceLookup({})

        assert handler.get_total_value([], lookup, BLOCK) is None
        assert handler.get_unit_price(lookup, BLOCK) is None
        assert handler.get_balance(WALLET, BLOCK) == Decimal(0)

    def test_underlying_not_supported(self, handler) -> None:
        with pytest.raises(OperationNotSupportedError):
            handler.get_underlying_token_balance(WALLET, DAI, BLOCK)

    def test_id(self, reader) -> None:
        assert StablecoinHandler(reader, [DAI]).get_id() == "stablecoin"
        assert StablecoinHandler(reader, [DAI], handler_id="pegs").get_id() == "pegs"

    def test_always_exists(self, handler) -> None:
        assert handler.exists()
        assert not handler.dedupe_by_tokens


class TestRemapHandler:
    def test_forwards_to_destination(self, reader) -> None:
        handler = RemapHandler(reader, BRIDGED_WETH, WETH)
        lookup = StaticPriceLookup({WETH: 2000}, liquidity=Decimal(5))

        result = handler.get_price(BRIDGED_WETH, lookup, BLOCK)

        assert result == PriceResult(price=Decimal(2000), liquidity=Decimal(5))
        assert lookup.calls == [(WETH, BLOCK, f"{BRIDGED_WETH}-{WETH}")]

    def test_infinite_liquidity(self, reader) -> None:
        handler = RemapHandler(reader, BRIDGED_WETH, WETH, infinite_liquidity=True)

        result = handler.get_price(BRIDGED_WETH, StaticPriceLookup({WETH: 2000}), BLOCK)

        assert result is not None
        assert result.price == Decimal(2000)
        assert result.liquidity == INFINITE_LIQUIDITY

    def test_unresolved_destination(self, reader) -> None:
        handler = RemapHandler(reader, BRIDGED_WETH, WETH)

        assert handler.get_price(BRIDGED_WETH, StaticPriceLookup({}), BLOCK) is None

    def test_matches_only_asset(self, reader) -> None:
        handler = RemapHandler(reader, BRIDGED_WETH, WETH)

        assert handler.matches(BRIDGED_WETH)
        assert not handler.matches(WETH)
        with pytest.raises(TokenNotInVenueError):
            handler.get_price(WETH, StaticPriceLookup({WETH: 2000}), BLOCK)

    def test_valuation_not_supported(self, reader) -> None:
        handler = RemapHandler(reader, BRIDGED_WETH, WETH)

        with pytest.raises(OperationNotSupportedError):
            handler.get_total_value([], StaticPriceLookup({}), BLOCK)
        with pytest.raises(OperationNotSupportedError):
            handler.get_balance(WALLET, BLOCK)


class TestPriceFeedHandler:
    def test_price_from_answer(self, reader) -> None:
        reader.add_price_feed(WETH_USD_FEED, answer=200012345678, decimals=8)
        handler = PriceFeedHandler(reader, WETH, WETH_USD_FEED)

        result = handler.get_price(WETH, StaticPriceLookup({}), BLOCK)

        assert result == PriceResult(price=Decimal("2000.12345678"), liquidity=INFINITE_LIQUIDITY)

    @pytest.mark.parametrize("answer", [0, -1])
    def test_non_positive_answer(self, reader, answer) -> None:
        reader.add_price_feed(WETH_USD_FEED, answer=answer)
        handler = PriceFeedHandler(reader, WETH, WETH_USD_FEED)

        assert handler.get_price(WETH, StaticPriceLookup({}), BLOCK) is None

    def test_missing_feed(self, reader) -> None:
        handler = PriceFeedHandler(reader, WETH, WETH_USD_FEED)

        assert handler.get_price(WETH, StaticPriceLookup({}), BLOCK) is None
        assert not handler.exists(BLOCK)

    def test_id_is_feed(self, reader) -> None:
        assert PriceFeedHandler(reader, WETH, WETH_USD_FEED).get_id() == WETH_USD_FEED
