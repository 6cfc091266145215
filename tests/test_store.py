import yaml

from portfolio_calc.data.samples import sample_names, sample_portfolio
from portfolio_calc.data.store import ListKind, PortfolioStore
from portfolio_calc.models import Holding, QuantityMode, TargetStock


def test_store_drops_inactive_quantity_and_empty_fields(tmp_path):
    store = PortfolioStore(tmp_path / "docs")
    holding = Holding("VTI", QuantityMode.SHARES, shares=5, value=999)
    store.save(ListKind.POSITIONS, "alice@example.com", [holding, Holding("CASH", QuantityMode.VALUE, value=100)])

    raw = yaml.safe_load(store.path_for("alice@example.com").read_text())
    assert raw["positions"] == [
        {"symbol": "VTI", "quantity_mode": "shares", "shares": 5},
        {"symbol": "CASH", "quantity_mode": "value", "value": 100},
    ]

    loaded = store.load(ListKind.POSITIONS, "alice@example.com")
    assert loaded[0] == Holding("VTI", QuantityMode.SHARES, shares=5)
    assert loaded[1].value == 100


def test_store_keeps_list_kinds_separate(tmp_path):
    store = PortfolioStore(tmp_path)
    store.save("targets", "bob", [TargetStock("VTI", 100, "Vanguard Total Stock Market ETF")])
    store.save(ListKind.REBALANCE_TARGETS, "bob", [TargetStock("BND", 100)])

    assert store.load(ListKind.TARGETS, "bob") == [TargetStock("VTI", 100, "Vanguard Total Stock Market ETF")]
    assert store.load(ListKind.REBALANCE_TARGETS, "bob") == [TargetStock("BND", 100)]
    assert store.load(ListKind.POSITIONS, "bob") == []
    assert not store.has(ListKind.POSITIONS, "bob")
    assert store.load(ListKind.TARGETS, "nobody") == []


def test_saving_empty_list_persists_deletion(tmp_path):
    store = PortfolioStore(tmp_path)
    store.save(ListKind.POSITIONS, "carol", [Holding("VTI", QuantityMode.VALUE, value=10)])
    store.save(ListKind.POSITIONS, "carol", [])
    assert store.has(ListKind.POSITIONS, "carol")
    assert store.load(ListKind.POSITIONS, "carol") == []


def test_sample_portfolios_are_fresh_copies():
    assert "Vanguard 3-Fund Portfolio" in sample_names()
    first = sample_portfolio("Fidelity 2-Fund Portfolio")
    first[0].target_percentage = 1
    assert sample_portfolio("Fidelity 2-Fund Portfolio")[0].target_percentage == 80
    assert sample_portfolio("missing") is None
