"""Split a cash deposit across target weights."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import List, Optional, Sequence

from portfolio_calc.models import AllocationLine, TargetStock

from .prices import PriceCache
from .validation import (
    AMOUNT,
    DEFAULT_TOLERANCE,
    PERCENTAGES,
    ValidationErrors,
    WeightedListValidator,
    parse_number,
    stored_percentage,
    validate_amount,
)

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


def round_half_up(value: float) -> Decimal:
    """Round to cents, half away from zero (1.005 -> 1.01).

    Non-finite input is returned unrounded.
    """

    exact = Decimal(repr(value))
    if not exact.is_finite():
        return exact
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, exact.adjusted() + 3)
        return exact.quantize(_CENT, rounding=ROUND_HALF_UP)


@dataclass
class DepositAllocator:
    errors: ValidationErrors = field(default_factory=ValidationErrors)
    tolerance: float = DEFAULT_TOLERANCE

    def __post_init__(self) -> None:
        self._targets_check = WeightedListValidator(PERCENTAGES, self.tolerance)

    def allocate(
        self,
        amount: Optional[str],
        targets: Sequence[TargetStock],
        prices: PriceCache,
    ) -> Optional[List[AllocationLine]]:
        if amount is None or not str(amount).strip():
            return None

        amount_error = validate_amount(amount)
        if amount_error:
            self.errors.set(AMOUNT, amount_error)
            return None

        if self._targets_check.check(targets, self.errors):
            return None

        self.errors.clear(AMOUNT, PERCENTAGES)

        total = parse_number(amount) or 0.0
        lines: List[AllocationLine] = []
        for target in targets:
            pct = stored_percentage(target.target_percentage)
            dollars = round_half_up(total * pct / 100)
            price = prices.price(target.symbol)
            shares = float(dollars) / price if price else None
            lines.append(
                AllocationLine(
                    symbol=target.symbol,
                    target_percentage=pct,
                    dollar_amount=f"{dollars:.2f}",
                    price=price,
                    shares=shares,
                    display_name=target.display_name,
                )
            )
        logger.debug("Allocated %.2f across %d targets", total, len(lines))
        return lines
