import pytest

from portfolio_calc.engine import DepositAllocator, PriceCache, RebalancePlanner
from portfolio_calc.models import Holding, QuantityMode, TargetStock
from portfolio_calc.reports import build_allocation_report, build_rebalance_report, summarize_rebalance


def test_allocation_report_columns():
    lines = DepositAllocator().allocate(
        "250", [TargetStock("VTI", 60, "Vanguard Total Stock Market ETF"), TargetStock("BND", 40)], PriceCache({"VTI": 250.0})
    )
    df = build_allocation_report(lines)
    assert list(df["symbol"]) == ["VTI", "BND"]
    assert list(df["amount"]) == ["150.00", "100.00"]
    assert df.loc[0, "shares"] == pytest.approx(0.6)
    assert df.loc[0, "name"] == "Vanguard Total Stock Market ETF"


def test_rebalance_report_and_summary():
    holdings = [Holding("A", QuantityMode.VALUE, value=29), Holding("B", QuantityMode.VALUE, value=71)]
    lines = RebalancePlanner().plan(holdings, [TargetStock("A", 80), TargetStock("B", 20)], PriceCache({"A": 10.0}))

    df = build_rebalance_report(lines)
    assert list(df["action"]) == ["sell", "buy"]
    assert df.loc[1, "shares_to_trade"] == pytest.approx(5.1)

    summary = summarize_rebalance(lines)
    assert summary.total_value == pytest.approx(100)
    assert summary.total_buys == pytest.approx(51)
    assert summary.total_sells == pytest.approx(51)
    assert summary.counts == {"buy": 1, "sell": 1, "hold": 0}


def test_empty_reports_keep_columns():
    assert build_rebalance_report([]).empty
    assert "shares_to_trade" in build_rebalance_report([]).columns
    assert list(build_allocation_report([]).columns) == ["symbol", "name", "target_pct", "amount", "price", "shares"]
