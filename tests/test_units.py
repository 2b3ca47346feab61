"""Unit tests for base-unit conversion and amount validation."""

from __future__ import annotations

from decimal import Decimal

import pytest

from erc20desk.flow.units import (
    format_display,
    from_base_units,
    parse_amount,
    to_base_units,
    validate_amount,
)


class TestValidateAmount:
    """0 < amount <= balance, everything else is invalid."""

    def test_boundary_is_inclusive(self) -> None:
        assert validate_amount("2.5", "2.5") is True

    def test_just_above_balance(self) -> None:
        assert validate_amount("2.5001", "2.5") is False

    def test_within_balance(self) -> None:
        assert validate_amount("0.000000000000000001", Decimal("1")) is True

    @pytest.mark.parametrize("amount", ["0", "0.0", "-1", "-0.5", "abc", "", "  ", "NaN", "Infinity", "1e"])
    def test_invalid_amounts(self, amount: str) -> None:
        assert validate_amount(amount, "100") is False

    def test_none_is_invalid(self) -> None:
        assert validate_amount(None, "1") is False  # type: ignore[arg-type]

    def test_zero_balance_rejects_everything(self) -> None:
        assert validate_amount("0.0001", "0") is False

    def test_whitespace_is_trimmed(self) -> None:
        assert validate_amount(" 1 ", "1") is True

    def test_more_than_18_decimal_places(self) -> None:
        assert validate_amount("1.0000000000000000001", "2") is False
        assert validate_amount("1.000000000000000001", "2") is True

    def test_respects_token_decimals(self) -> None:
        assert validate_amount("0.1234567", "1", decimals=6) is False
        assert validate_amount("0.123456", "1", decimals=6) is True


class TestBaseUnits:
    """Conversion under the 18-decimal convention."""

    @pytest.mark.parametrize(
        "raw",
        [0, 1, 10**18, 1_500_000_000_000_000_000, 123456789012345678901234567890, 2**256 - 1],
    )
    def test_round_trip(self, raw: int) -> None:
        assert to_base_units(from_base_units(raw)) == raw

    def test_display_of_one_and_a_half(self) -> None:
        assert format_display(from_base_units(1_500_000_000_000_000_000)) == "1.5000"

    def test_to_base_units_from_string(self) -> None:
        assert to_base_units("2.5") == 2_500_000_000_000_000_000

    def test_smallest_unit(self) -> None:
        assert to_base_units("0.000000000000000001") == 1

    def test_too_many_decimals(self) -> None:
        with pytest.raises(ValueError, match="decimal places"):
            to_base_units("0.0000000000000000001")

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError):
            to_base_units("-1")

    def test_float_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_amount(0.1)  # type: ignore[arg-type]

    def test_custom_decimals(self) -> None:
        assert to_base_units("1.25", decimals=6) == 1_250_000
        assert from_base_units(1_250_000, decimals=6) == Decimal("1.25")


class TestFormatDisplay:
    """Four fixed decimal places."""

    def test_zero(self) -> None:
        assert format_display(from_base_units(0)) == "0.0000"

    def test_pads_whole_numbers(self) -> None:
        assert format_display(Decimal("12")) == "12.0000"

    def test_rounds_half_up(self) -> None:
        assert format_display(Decimal("0.00005")) == "0.0001"
        assert format_display(Decimal("0.00004999")) == "0.0000"

    def test_large_value_keeps_integer_digits(self) -> None:
        raw = 123456789 * 10**18
        assert format_display(from_base_units(raw)) == "123456789.0000"
