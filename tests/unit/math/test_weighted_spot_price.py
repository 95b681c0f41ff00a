"""Tests for weighted pool spot price and decimal helpers."""

from decimal import Decimal

import pytest

from pricer.math.decimals import decimal_gt, safe_div, to_decimal
from pricer.math.weighted import weighted_spot_price


class TestWeightedSpotPrice:
    def test_equal_weights_is_reserve_ratio(self) -> None:
        price = weighted_spot_price(
            balance_lookup=Decimal(1000),
            weight_lookup=Decimal("0.5"),
            balance_secondary=Decimal(12000),
            weight_secondary=Decimal("0.5"),
            price_secondary=Decimal(1),
        )

        assert price == Decimal(12)

    def test_unequal_weights(self) -> None:
        """80/20 pool: (r_s / w_s) / (r_l / w_l) * p_s."""
        price = weighted_spot_price(
            balance_lookup=Decimal("221499.73"),
            weight_lookup=Decimal("0.8"),
            balance_secondary=Decimal("1080.26"),
            weight_secondary=Decimal("0.2"),
            price_secondary=Decimal(2000),
        )

        expected = (1080.26 / 0.2) / (221499.73 / 0.8) * 2000
        assert float(price) == pytest.approx(expected, rel=1e-12)

    def test_scales_with_secondary_price(self) -> None:
        kwargs = dict(
            balance_lookup=Decimal(10),
            weight_lookup=Decimal("0.5"),
            balance_secondary=Decimal(20),
            weight_secondary=Decimal("0.5"),
        )

        assert weighted_spot_price(**kwargs, price_secondary=Decimal(3)) == 3 * weighted_spot_price(
            **kwargs, price_secondary=Decimal(1)
        )

    @pytest.mark.parametrize(
        "balance_lookup,weight_lookup",
        [(Decimal(0), Decimal("0.5")), (Decimal(1), Decimal(0))],
    )
    def test_rejects_non_positive_inputs(self, balance_lookup, weight_lookup) -> None:
        with pytest.raises(ValueError, match="positive"):
            weighted_spot_price(
                balance_lookup=balance_lookup,
                weight_lookup=weight_lookup,
                balance_secondary=Decimal(1),
                weight_secondary=Decimal("0.5"),
                price_secondary=Decimal(1),
            )


class TestDecimalHelpers:
    def test_to_decimal(self) -> None:
        assert to_decimal(1_500_000, 6) == Decimal("1.5")

    def test_to_decimal_keeps_uint256_precision(self) -> None:
        raw = 2**256 - 1
        assert str(to_decimal(raw, 18)) == (
            "115792089237316195423570985008687907853269984665640564039457.584007913129639935"
        )

    def test_safe_div_zero(self) -> None:
        assert safe_div(Decimal(1), Decimal(0)) is None

    def test_decimal_gt(self) -> None:
        assert decimal_gt(Decimal(2), Decimal(1))
        assert not decimal_gt(Decimal(1), Decimal(1))
