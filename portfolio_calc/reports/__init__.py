"""Reporting helpers."""

from .tables import RebalanceSummary, build_allocation_report, build_rebalance_report, summarize_rebalance

__all__ = ["RebalanceSummary", "build_allocation_report", "build_rebalance_report", "summarize_rebalance"]
