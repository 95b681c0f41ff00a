"""Tests for the ERC-4626 vault handler."""

from decimal import Decimal

import pytest

from pricer.constants import INFINITE_LIQUIDITY
from pricer.errors import OperationNotSupportedError, TokenNotInVenueError
from pricer.handlers.erc4626 import ERC4626Handler
from tests.helpers import BLOCK, SUSDS, USDC, USDS, WALLET, StaticPriceLookup, units


@pytest.fixture
def handler(reader) -> ERC4626Handler:
    reader.add_vault(SUSDS, USDS, assets_per_share=units("1.04", 18))
    return ERC4626Handler(reader, SUSDS)


class TestGetPrice:
    def test_share_price_uses_conversion_ratio(self, handler) -> None:
        result = handler.get_price(SUSDS, StaticPriceLookup({USDS: 1}), BLOCK)

        assert result is not None
        assert result.price == Decimal("1.04")

    def test_share_price_scales_with_asset_price(self, handler) -> None:
        result = handler.get_price(SUSDS, StaticPriceLookup({USDS: "2.5"}), BLOCK)

        assert result is not None
        assert result.price == Decimal("2.6")

    def test_reports_infinite_liquidity(self, handler) -> None:
        result = handler.get_price(SUSDS, StaticPriceLookup({USDS: 1}), BLOCK)

        assert result is not None
        assert result.liquidity == INFINITE_LIQUIDITY

    def test_asset_priced_with_vault_id(self, handler) -> None:
        lookup = StaticPriceLookup({USDS: 1})
        handler.get_price(SUSDS, lookup, BLOCK)

        assert lookup.calls == [(USDS, BLOCK, SUSDS)]

    def test_asset_with_different_decimals(self, reader) -> None:
        vault = "0x8888888888888888888888888888888888888888"
        reader.add_vault(vault, USDC, assets_per_share=units("1.05", 6), decimals=18)
        handler = ERC4626Handler(reader, vault)

        result = handler.get_price(vault, StaticPriceLookup({USDC: 1}), BLOCK)

        assert result is not None
        assert result.price == Decimal("1.05")

    def test_unresolved_asset(self, handler) -> None:
        assert handler.get_price(SUSDS, StaticPriceLookup({}), BLOCK) is None

    def test_not_deployed(self, reader) -> None:
        vault = "0x9999999999999999999999999999999999999999"
        reader.add_vault(vault, USDS, assets_per_share=units(1, 18), deployed_at=BLOCK + 1)
        handler = ERC4626Handler(reader, vault)

        assert handler.get_price(vault, StaticPriceLookup({USDS: 1}), BLOCK) is None
        assert not handler.exists(BLOCK)


class TestMatching:
    def test_matches_only_vault(self, handler) -> None:
        assert handler.matches(SUSDS)
        assert not handler.matches(USDS)

    def test_underlying_asset_raises(self, handler) -> None:
        with pytest.raises(TokenNotInVenueError):
            handler.get_price(USDS, StaticPriceLookup({USDS: 1}), BLOCK)


class TestUnsupportedOperations:
    def test_total_value(self, handler) -> None:
        with pytest.raises(OperationNotSupportedError, match="get_total_value"):
            handler.get_total_value([], StaticPriceLookup({USDS: 1}), BLOCK)

    def test_unit_price(self, handler) -> None:
        with pytest.raises(OperationNotSupportedError):
            handler.get_unit_price(StaticPriceLookup({USDS: 1}), BLOCK)

    def test_balance(self, handler) -> None:
        with pytest.raises(OperationNotSupportedError, match="get_balance"):
            handler.get_balance(WALLET, BLOCK)

    def test_underlying_token_balance(self, handler) -> None:
        with pytest.raises(OperationNotSupportedError):
            handler.get_underlying_token_balance(WALLET, USDS, BLOCK)
