import pytest

from portfolio_calc.engine.validation import (
    PERCENTAGES,
    REBALANCE_PERCENTAGES,
    ValidationErrors,
    WeightedListValidator,
    parse_number,
    validate_amount,
    validate_percentage_bounds,
    validate_percentage_sum,
    validate_symbol,
)
from portfolio_calc.models import TargetStock


def _targets(*pcts):
    return [TargetStock(f"S{i}", pct) for i, pct in enumerate(pcts)]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("", "Amount is required"),
        ("   ", "Amount is required"),
        ("abc", "Please enter a valid positive number"),
        ("0", "Please enter a valid positive number"),
        ("-5", "Please enter a valid positive number"),
        ("nan", "Please enter a valid positive number"),
        ("inf", "Please enter a valid positive number"),
        ("1000", None),
        ("0.01", None),
    ],
)
def test_validate_amount(raw, expected):
    assert validate_amount(raw) == expected


def test_percentage_sum_allows_empty_list_and_small_drift():
    assert validate_percentage_sum([]) is None
    assert validate_percentage_sum(_targets(33.333, 33.333, 33.334)) is None
    assert validate_percentage_sum(_targets(60, 40.005)) is None


def test_percentage_sum_reports_total_to_one_decimal():
    message = validate_percentage_sum(_targets(60, 30))
    assert message == "Total percentage is 90.0%. Please adjust to equal 100%"
    assert "100.1%" in validate_percentage_sum(_targets(60, 40.06))


def test_percentage_sum_uses_stored_values():
    assert validate_percentage_sum(_targets(110, -10)) is None
    assert validate_percentage_sum(_targets(100, float("nan"))) is None
    assert "110.0%" in validate_percentage_sum(_targets(110, float("inf")))


@pytest.mark.parametrize("raw", ["-1", "100.5", "250"])
def test_percentage_bounds_rejects_out_of_range(raw):
    assert validate_percentage_bounds(raw) == "Percentage must be between 0 and 100"


@pytest.mark.parametrize("raw", ["0", "100", "42.5", "", "junk"])
def test_percentage_bounds_accepts_range_and_treats_junk_as_zero(raw):
    assert validate_percentage_bounds(raw) is None


def test_validate_symbol_rejects_empty_and_case_insensitive_duplicates():
    assert validate_symbol("  ", ["VTI"]) == "Please enter a stock symbol"
    assert validate_symbol(" vti ", ["VTI"]) == "Stock already exists in your portfolio"
    assert validate_symbol("VXUS", ["vti"], duplicate_message="dup") is None
    assert validate_symbol("vti", ["VTI"], duplicate_message="dup") == "dup"


def test_parse_number_is_lenient():
    assert parse_number(" 12.5 ") == 12.5
    assert parse_number(3) == 3.0
    assert parse_number(None) is None
    assert parse_number(float("nan")) is None
    assert parse_number("1e400") is None
    assert parse_number(True) is None


def test_weighted_list_validators_use_independent_keys():
    errors = ValidationErrors()
    deposit = WeightedListValidator(PERCENTAGES)
    rebalance = WeightedListValidator(REBALANCE_PERCENTAGES)

    deposit.check(_targets(50), errors)
    rebalance.check(_targets(100), errors)
    assert PERCENTAGES in errors
    assert REBALANCE_PERCENTAGES not in errors

    deposit.check(_targets(50, 50), errors)
    assert PERCENTAGES not in errors


def test_validation_errors_clear_all_and_selected():
    errors = ValidationErrors({"a": "x", "b": "y", "c": "z"})
    errors.clear("a", "missing")
    assert set(errors) == {"b", "c"}
    errors.clear()
    assert len(errors) == 0
