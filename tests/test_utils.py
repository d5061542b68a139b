"""Tests for utility functions."""

from decimal import Decimal

import pytest

from xcm_api.constants import get_token_decimals
from xcm_api.exceptions import ValidationError
from xcm_api.utils import (
    estimate_xcm_fee,
    format_balance,
    from_planck,
    is_valid_parachain_id,
    seed_name,
    to_planck,
    validate_transfer,
)


class TestPlanckConversion:
    """Test conversion between human amounts and the smallest unit."""

    def test_to_planck_string(self):
        assert to_planck("1.5") == 1_500_000_000_000

    def test_to_planck_custom_decimals(self):
        assert to_planck("2", 10) == 20_000_000_000

    def test_to_planck_rounds_down(self):
        assert to_planck("0.0000000000019") == 1

    def test_to_planck_rejects_negative(self):
        with pytest.raises(ValidationError) as exc_info:
            to_planck(-1)
        assert exc_info.value.field == "amount"

    def test_to_planck_rejects_garbage(self):
        with pytest.raises(ValidationError):
            to_planck("lots")

    def test_from_planck(self):
        assert from_planck(1_000_000_000_000) == Decimal("1")
        assert from_planck("25", 1) == Decimal("2.5")


class TestFormatBalance:
    """Test SI-prefixed balance formatting."""

    def test_small_balance(self):
        assert format_balance(1_000_000_000_000) == "1.0000 UNIT"

    def test_kilo_prefix(self):
        assert format_balance(1_500_000_000_000_000) == "1.5000 kUNIT"

    def test_mega_prefix_with_symbol(self):
        assert format_balance(2 * 10**16, 10, "DOT") == "2.0000 MDOT"

    def test_zero(self):
        assert format_balance(0) == "0.0000 UNIT"

    def test_truncates_dust(self):
        assert format_balance(123_456_789) == "0.0001 UNIT"


class TestTransferValidation:
    """Test transfer request validation."""

    def test_valid_request(self):
        assert validate_transfer(1000, 1001, "1000000000000", "UNIT") == []

    def test_integer_amount(self):
        assert validate_transfer(1000, 1001, 5, "UNIT") == []

    def test_source_out_of_range(self):
        assert validate_transfer(999, 1001, "1", "UNIT") == ["Invalid source parachain ID"]

    def test_destination_out_of_range(self):
        assert validate_transfer(1000, 5000, "1", "UNIT") == ["Invalid destination parachain ID"]

    def test_same_chain(self):
        errors = validate_transfer(1000, 1000, "1", "UNIT")
        assert errors == ["Source and destination parachains cannot be the same"]

    @pytest.mark.parametrize("amount", ["0", "-5", "1.5", "abc", None])
    def test_invalid_amount(self, amount):
        assert validate_transfer(1000, 1001, amount, "UNIT") == ["Invalid transfer amount"]

    def test_missing_symbol(self):
        assert validate_transfer(1000, 1001, "1", "") == ["Invalid token symbol"]

    def test_collects_every_problem(self):
        errors = validate_transfer(1, 1, "0", None)
        assert errors == [
            "Invalid source parachain ID",
            "Invalid destination parachain ID",
            "Source and destination parachains cannot be the same",
            "Invalid transfer amount",
            "Invalid token symbol",
        ]

    def test_parachain_id_range(self):
        assert is_valid_parachain_id(1000)
        assert is_valid_parachain_id(4999)
        assert not is_valid_parachain_id(0)
        assert not is_valid_parachain_id(True)
        assert not is_valid_parachain_id("1000")


class TestMisc:
    def test_fee_estimate(self):
        # 0.01 UNIT base fee plus 0.1% of the amount
        assert estimate_xcm_fee(1_000_000) == 10_000_000_000 + 1_000

    def test_seed_name(self):
        assert seed_name("//Alice") == "Alice"
        assert seed_name("bottom drive obey lake curtain smoke basket hold race lonely fit walk") == "custom"

    def test_token_decimals(self):
        assert get_token_decimals("dot") == 10
        assert get_token_decimals("UNIT") == 12
        assert get_token_decimals("XYZ", default=18) == 18
