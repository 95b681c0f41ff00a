"""Tests for concentrated-liquidity price and position math."""

from decimal import Decimal

import pytest

from pricer.constants import Q96
from pricer.math.concentrated import (
    position_token_amounts,
    sqrt_price_x96_to_price,
    tick_to_sqrt_price,
    token_price_in_other,
)

FPIS_FRAX_SQRT_PRICE = 74413935457348545615865577209
OHM_WETH_SQRT_PRICE = 198259033222864761237442349019430
OHM_USDC_SQRT_PRICE = 11823183971744406029263508776


class TestSpotPrice:
    """Tests for sqrtPriceX96 conversions."""

    def test_q96_is_unit_price(self) -> None:
        assert sqrt_price_x96_to_price(Q96) == Decimal(1)

    def test_token1_priced_in_token0(self) -> None:
        """FPIS (token1) priced in FRAX (token0)."""
        price = token_price_in_other(FPIS_FRAX_SQRT_PRICE, False, 18, 18)

        assert float(price) == pytest.approx(1.13357594386, rel=1e-10)

    def test_orientation_inverse(self) -> None:
        """Pricing each side of the pool yields reciprocal prices."""
        price0 = token_price_in_other(FPIS_FRAX_SQRT_PRICE, True, 18, 18)
        price1 = token_price_in_other(FPIS_FRAX_SQRT_PRICE, False, 18, 18)

        assert float(price0 * price1) == pytest.approx(1.0, rel=1e-12)

    def test_decimal_adjustment(self) -> None:
        """OHM (9 decimals) priced in WETH (18 decimals)."""
        price = token_price_in_other(OHM_WETH_SQRT_PRICE, True, 9, 18)

        expected = (OHM_WETH_SQRT_PRICE / 2**96) ** 2 * 1e-9
        assert float(price) == pytest.approx(expected, rel=1e-9)

    def test_decimal_adjustment_inverse(self) -> None:
        ohm_in_weth = token_price_in_other(OHM_WETH_SQRT_PRICE, True, 9, 18)
        weth_in_ohm = token_price_in_other(OHM_WETH_SQRT_PRICE, False, 9, 18)

        assert float(ohm_in_weth * weth_in_ohm) == pytest.approx(1.0, rel=1e-12)

    def test_zero_sqrt_price_rejected(self) -> None:
        with pytest.raises(ValueError, match="zero"):
            token_price_in_other(0, True, 18, 18)


class TestTickMath:
    """Tests for tick to sqrt price conversion."""

    def test_tick_zero(self) -> None:
        assert tick_to_sqrt_price(0) == Decimal(1)

    def test_positive_and_negative_ticks_are_reciprocal(self) -> None:
        up = tick_to_sqrt_price(1000)
        down = tick_to_sqrt_price(-1000)

        assert float(up * down) == pytest.approx(1.0, rel=1e-12)

    def test_known_tick(self) -> None:
        # 1.0001^20000 ~= 7.3883
        assert float(tick_to_sqrt_price(20000) ** 2) == pytest.approx(1.0001**20000, rel=1e-9)

    def test_out_of_range_tick(self) -> None:
        with pytest.raises(ValueError, match="outside"):
            tick_to_sqrt_price(887273)


class TestPositionAmounts:
    """Tests for the three position cases."""

    def test_below_range_is_all_token0(self) -> None:
        amounts = position_token_amounts(10**18, 100, 200, 50, Q96)

        assert amounts.amount0 > 0
        assert amounts.amount1 == 0

    def test_at_lower_bound_is_all_token0(self) -> None:
        amounts = position_token_amounts(10**18, 100, 200, 100, Q96)

        assert amounts.amount0 > 0
        assert amounts.amount1 == 0

    def test_above_range_is_all_token1(self) -> None:
        amounts = position_token_amounts(10**18, -200, -100, 0, Q96)

        assert amounts.amount0 == 0
        assert amounts.amount1 > 0

    def test_at_upper_bound_is_all_token1(self) -> None:
        amounts = position_token_amounts(10**18, -200, -100, -100, Q96)

        assert amounts.amount0 == 0
        assert amounts.amount1 > 0

    def test_below_range_formula(self) -> None:
        liquidity = 10**18
        amounts = position_token_amounts(liquidity, 100, 200, 0, Q96)

        sqrt_a = 1.0001 ** (100 / 2)
        sqrt_b = 1.0001 ** (200 / 2)
        expected = liquidity * (sqrt_b - sqrt_a) / (sqrt_a * sqrt_b)
        assert float(amounts.amount0) == pytest.approx(expected, rel=1e-9)

    def test_in_range_splits_between_tokens(self) -> None:
        """Symmetric range around price 1 holds equal raw amounts."""
        amounts = position_token_amounts(10**18, -1000, 1000, 0, Q96)

        assert amounts.amount0 > 0
        assert amounts.amount1 > 0
        assert float(amounts.amount0) == pytest.approx(float(amounts.amount1), rel=1e-12)

    def test_full_range_ohm_weth(self) -> None:
        amounts = position_token_amounts(
            346355586036686019, -887220, 887220, 156507, OHM_WETH_SQRT_PRICE
        )

        assert float(amounts.amount0 / Decimal(10**9)) == pytest.approx(138410.423, rel=1e-6)
        assert float(amounts.amount1 / Decimal(10**18)) == pytest.approx(866.7135, rel=1e-6)

    def test_partial_range_ohm_usdc(self) -> None:
        amounts = position_token_amounts(
            11264485942092, -44200, 887220, -38048, OHM_USDC_SQRT_PRICE
        )

        assert float(amounts.amount0 / Decimal(10**9)) == pytest.approx(75484.2794, rel=1e-6)
        assert float(amounts.amount1 / Decimal(10**6)) == pytest.approx(445136.3419, rel=1e-6)

    def test_invalid_range(self) -> None:
        with pytest.raises(ValueError, match="Invalid tick range"):
            position_token_amounts(1, 200, 100, 150, Q96)
