"""Allocation and rebalancing engine."""

from .allocator import DepositAllocator, round_half_up
from .prices import CASH_SYMBOL, UNAVAILABLE, UNKNOWN, Generation, PriceCache, PriceResolver
from .rebalance import RebalancePlanner, resolve_holding, total_portfolio_value
from .validation import ValidationErrors, WeightedListValidator

__all__ = [
    "CASH_SYMBOL",
    "DepositAllocator",
    "Generation",
    "PriceCache",
    "PriceResolver",
    "RebalancePlanner",
    "UNAVAILABLE",
    "UNKNOWN",
    "ValidationErrors",
    "WeightedListValidator",
    "resolve_holding",
    "round_half_up",
    "total_portfolio_value",
]
