"""Rebalance logic."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from portfolio_calc.models import Action, Holding, QuantityMode, RebalanceLine, TargetStock

from .prices import PriceCache
from .validation import (
    DEFAULT_TOLERANCE,
    REBALANCE_PERCENTAGES,
    ValidationErrors,
    WeightedListValidator,
    non_negative,
    stored_percentage,
)

logger = logging.getLogger(__name__)

_ACTION_ORDER = {Action.SELL: 0, Action.BUY: 1, Action.HOLD: 2}


def resolve_holding(holding: Holding, prices: PriceCache) -> Tuple[float, float]:
    """Return ``(current_value, current_shares)`` for one holding."""

    price = prices.price(holding.symbol)
    if holding.quantity_mode is QuantityMode.SHARES:
        shares = non_negative(holding.shares)
        return (shares * price if price else 0.0), shares
    value = non_negative(holding.value)
    return value, (value / price if price else 0.0)


def total_portfolio_value(holdings: Sequence[Holding], prices: PriceCache) -> float:
    return sum(resolve_holding(h, prices)[0] for h in holdings)


@dataclass
class RebalancePlanner:
    errors: ValidationErrors = field(default_factory=ValidationErrors)
    tolerance: float = DEFAULT_TOLERANCE
    hold_threshold: float = 0.01

    def __post_init__(self) -> None:
        self._targets_check = WeightedListValidator(REBALANCE_PERCENTAGES, self.tolerance)

    def _action(self, difference: float) -> Action:
        if abs(difference) <= self.hold_threshold:
            return Action.HOLD
        return Action.BUY if difference > 0 else Action.SELL

    def plan(
        self,
        holdings: Sequence[Holding],
        targets: Sequence[TargetStock],
        prices: PriceCache,
    ) -> Optional[List[RebalanceLine]]:
        values: Dict[str, float] = {}
        shares: Dict[str, float] = {}
        for holding in holdings:
            value, held = resolve_holding(holding, prices)
            values[holding.symbol] = values.get(holding.symbol, 0.0) + value
            shares[holding.symbol] = shares.get(holding.symbol, 0.0) + held

        equity = sum(values.values())
        if equity <= 0:
            # Freshly added positions have no value yet; not a user error.
            return None

        if self._targets_check.check(targets, self.errors):
            return None

        lines: List[RebalanceLine] = []
        target_symbols = set()
        for target in targets:
            target_symbols.add(target.symbol)
            pct = stored_percentage(target.target_percentage)
            current_value = values.get(target.symbol, 0.0)
            target_value = equity * pct / 100
            difference = target_value - current_value
            action = self._action(difference)
            price = prices.price(target.symbol)
            trade = abs(difference) / price if price and action is not Action.HOLD else 0.0
            lines.append(
                RebalanceLine(
                    symbol=target.symbol,
                    target_percentage=pct,
                    current_value=current_value,
                    current_percentage_of_portfolio=current_value / equity * 100,
                    target_value=target_value,
                    difference=difference,
                    action=action,
                    price=price,
                    shares_to_trade=trade,
                    current_shares=shares.get(target.symbol, 0.0),
                    display_name=target.display_name,
                )
            )

        for holding in holdings:
            sym = holding.symbol
            if sym in target_symbols:
                continue
            target_symbols.add(sym)
            current_value = values[sym]
            price = prices.price(sym)
            held = shares[sym]
            lines.append(
                RebalanceLine(
                    symbol=sym,
                    target_percentage=0.0,
                    current_value=current_value,
                    current_percentage_of_portfolio=current_value / equity * 100,
                    target_value=0.0,
                    difference=-current_value,
                    action=Action.SELL,
                    price=price,
                    shares_to_trade=current_value / price if price and current_value > 0 else held,
                    current_shares=held,
                    display_name=holding.display_name,
                )
            )

        lines.sort(key=lambda line: _ACTION_ORDER[line.action])
        logger.debug("Rebalance plan over equity %.2f: %d lines", equity, len(lines))
        return lines
