"""Validation gate for deposit and rebalance calculations.

Every predicate is pure and returns an error message or ``None``. Callers
record the outcome in a :class:`ValidationErrors` map, where the presence of a
key is the failure signal.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, Iterator, Mapping, Optional, Sequence

from portfolio_calc.models import TargetStock

DEFAULT_TOLERANCE = 0.01

AMOUNT = "amount"
PERCENTAGES = "percentages"
REBALANCE_PERCENTAGES = "rebalancePercentages"
NEW_STOCK = "newStock"
NEW_POSITION = "newPosition"
NEW_REBALANCE_STOCK = "newRebalanceStock"


def stock_key(index: int) -> str:
    return f"stock-{index}"


def rebalance_stock_key(index: int) -> str:
    return f"rebalance-stock-{index}"


class ValidationErrors(Mapping[str, str]):
    """Keyed error messages; an absent key means currently valid."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._errors: Dict[str, str] = dict(initial or {})

    def __getitem__(self, key: str) -> str:
        return self._errors[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def __repr__(self) -> str:
        return f"ValidationErrors({self._errors!r})"

    def set(self, key: str, message: str) -> None:
        self._errors[key] = message

    def clear(self, *keys: str) -> None:
        """Drop the given keys, or every key when called without arguments."""

        if not keys:
            self._errors.clear()
            return
        for key in keys:
            self._errors.pop(key, None)

    def record(self, key: str, message: Optional[str]) -> Optional[str]:
        if message is None:
            self.clear(key)
        else:
            self.set(key, message)
        return message

    def to_dict(self) -> Dict[str, str]:
        return dict(self._errors)


def parse_number(raw: object) -> Optional[float]:
    """Lenient numeric parse; anything non-finite or malformed is ``None``."""

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    if not math.isfinite(value):
        return None
    return value


def non_negative(raw: object) -> float:
    """Coerce a quantity for computation: NaN, negatives and junk become 0."""

    value = parse_number(raw)
    if value is None or value < 0:
        return 0.0
    return value


def stored_percentage(raw: object) -> float:
    """A target weight as stored, sign kept; only junk and non-finite values become 0."""

    value = parse_number(raw)
    return 0.0 if value is None else value


def validate_amount(raw: Optional[str]) -> Optional[str]:
    if raw is None or not str(raw).strip():
        return "Amount is required"
    value = parse_number(raw)
    if value is None or value <= 0:
        return "Please enter a valid positive number"
    return None


def percentage_total(targets: Iterable[TargetStock]) -> float:
    return sum(stored_percentage(t.target_percentage) for t in targets)


def validate_percentage_sum(
    targets: Sequence[TargetStock], tolerance: float = DEFAULT_TOLERANCE
) -> Optional[str]:
    if not targets:
        return None
    total = percentage_total(targets)
    if abs(total - 100) > tolerance:
        return f"Total percentage is {total:.1f}%. Please adjust to equal 100%"
    return None


def parse_percentage(raw: object) -> float:
    # An unparseable field is treated as 0, matching what the input box shows.
    value = parse_number(raw)
    return 0.0 if value is None else value


def validate_percentage_bounds(raw: object) -> Optional[str]:
    value = parse_percentage(raw)
    if value < 0 or value > 100:
        return "Percentage must be between 0 and 100"
    return None


def normalize_symbol(raw: Optional[str]) -> str:
    return (raw or "").strip().upper()


def validate_symbol(
    symbol: Optional[str],
    existing: Iterable[str],
    duplicate_message: str = "Stock already exists in your portfolio",
) -> Optional[str]:
    normalized = normalize_symbol(symbol)
    if not normalized:
        return "Please enter a stock symbol"
    if any(normalize_symbol(item) == normalized for item in existing):
        return duplicate_message
    return None


class WeightedListValidator:
    """Sum-to-100 check for one target list, reported under its own key.

    Deposit and rebalance targets each get an instance so one list being out of
    balance never blocks the other mode.
    """

    def __init__(self, error_key: str, tolerance: float = DEFAULT_TOLERANCE) -> None:
        self.error_key = error_key
        self.tolerance = tolerance

    def check(self, targets: Sequence[TargetStock], errors: ValidationErrors) -> Optional[str]:
        return errors.record(self.error_key, validate_percentage_sum(targets, self.tolerance))


__all__ = [
    "AMOUNT",
    "DEFAULT_TOLERANCE",
    "NEW_POSITION",
    "NEW_REBALANCE_STOCK",
    "NEW_STOCK",
    "PERCENTAGES",
    "REBALANCE_PERCENTAGES",
    "ValidationErrors",
    "WeightedListValidator",
    "non_negative",
    "normalize_symbol",
    "parse_number",
    "parse_percentage",
    "percentage_total",
    "rebalance_stock_key",
    "stock_key",
    "stored_percentage",
    "validate_amount",
    "validate_percentage_bounds",
    "validate_percentage_sum",
    "validate_symbol",
]
