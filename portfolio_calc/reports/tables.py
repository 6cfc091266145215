"""Tabular views of allocation and rebalance results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import pandas as pd

from portfolio_calc.models import Action, AllocationLine, RebalanceLine

ALLOCATION_COLUMNS = ["symbol", "name", "target_pct", "amount", "price", "shares"]
REBALANCE_COLUMNS = [
    "symbol",
    "name",
    "action",
    "current_value",
    "current_pct",
    "target_pct",
    "target_value",
    "difference",
    "price",
    "shares_to_trade",
    "current_shares",
]


@dataclass
class RebalanceSummary:
    total_value: float
    total_buys: float
    total_sells: float
    counts: Dict[str, int] = field(default_factory=dict)


def build_allocation_report(lines: Sequence[AllocationLine]) -> pd.DataFrame:
    rows: List[dict] = [
        {
            "symbol": line.symbol,
            "name": line.display_name or "",
            "target_pct": line.target_percentage,
            "amount": line.dollar_amount,
            "price": line.price,
            "shares": line.shares,
        }
        for line in lines
    ]
    return pd.DataFrame(rows, columns=ALLOCATION_COLUMNS)


def build_rebalance_report(lines: Sequence[RebalanceLine]) -> pd.DataFrame:
    """One row per line, in plan order (sells, buys, holds)."""

    rows: List[dict] = []
    for line in lines:
        rows.append(
            {
                "symbol": line.symbol,
                "name": line.display_name or "",
                "action": line.action.value,
                "current_value": round(line.current_value, 2),
                "current_pct": round(line.current_percentage_of_portfolio, 2),
                "target_pct": line.target_percentage,
                "target_value": round(line.target_value, 2),
                "difference": round(line.difference, 2),
                "price": line.price,
                "shares_to_trade": round(line.shares_to_trade, 4),
                "current_shares": round(line.current_shares, 4),
            }
        )
    return pd.DataFrame(rows, columns=REBALANCE_COLUMNS)


def summarize_rebalance(lines: Sequence[RebalanceLine]) -> RebalanceSummary:
    counts = {action.value: 0 for action in Action}
    buys = sells = total = 0.0
    for line in lines:
        counts[line.action.value] += 1
        total += line.current_value
        if line.action is Action.BUY:
            buys += line.difference
        elif line.action is Action.SELL:
            sells += -line.difference
    return RebalanceSummary(total_value=total, total_buys=buys, total_sells=sells, counts=counts)
