"""Unit tests for amount and price formatting."""

import pytest

from src.dlmm_common.amounts import (
    calculate_real_price,
    format_amount,
    format_price,
    truncate_address,
)


class TestFormatAmount:
    @pytest.mark.parametrize(
        ("amount", "decimals", "expected"),
        [
            (1_500_000, 6, "1.500000"),
            (0, 6, "0.000000"),
            (1, 9, "0.000000001"),
            (42, 0, "42"),
            (-2_500_000, 6, "-2.500000"),
        ],
    )
    def test_format(self, amount: int, decimals: int, expected: str) -> None:
        assert format_amount(amount, decimals) == expected

    def test_exact_for_huge_amounts(self) -> None:
        assert format_amount(10**30 + 1, 9) == "1000000000000000000000.000000001"


class TestPrices:
    def test_real_price_scales_by_decimal_difference(self) -> None:
        assert calculate_real_price("0.15", 9, 6) == pytest.approx(150.0)

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("0.00005", "0.050000"),
            ("0.005", "5.0000"),
            ("0.15", "150.00"),
        ],
    )
    def test_precision_by_magnitude(self, raw: str, expected: str) -> None:
        assert format_price(raw, 9, 6) == expected

    @pytest.mark.parametrize("raw", [None, "", "-", 0])
    def test_unknown_price(self, raw: object) -> None:
        assert format_price(raw, 9, 6) == "-"


class TestTruncateAddress:
    def test_short_address_unchanged(self) -> None:
        assert truncate_address("ABC") == "ABC"

    def test_truncates_head_and_tail(self) -> None:
        assert truncate_address("3msVd34R5KxonDzyNSV5nT19UtUeJ2x4q7yxGzvwPhjq") == "3msV...Phjq"

    def test_odd_length(self) -> None:
        assert truncate_address("ABCDEFGHIJ", 5) == "ABC...IJ"
