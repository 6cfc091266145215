from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pandas as pd
import pytest

from portfolio_calc.config import load_config
from portfolio_calc.data import sources
from portfolio_calc.data.sources import (
    PriceLookupError,
    StaticPriceLookup,
    SymbolLookupError,
    YahooPriceLookup,
    YahooSymbolLookup,
    get_lookups,
)


def test_fetch_price_uses_fast_info(monkeypatch):
    monkeypatch.setattr(
        sources.yf, "Ticker", lambda symbol: SimpleNamespace(fast_info={"last_price": 123.45})
    )
    assert asyncio.run(YahooPriceLookup()("VTI")) == pytest.approx(123.45)


def test_fetch_price_falls_back_to_history(monkeypatch):
    called = {}

    def fake_download(symbol, period, progress, auto_adjust):
        called["symbol"] = symbol
        called["period"] = period
        idx = pd.date_range("2024-01-01", periods=3, freq="D")
        return pd.DataFrame({"Close": [10.0, 11.0, float("nan")]}, index=idx)

    monkeypatch.setattr(sources.yf, "Ticker", lambda symbol: SimpleNamespace(fast_info={"last_price": None}))
    monkeypatch.setattr(sources.yf, "download", fake_download)

    assert sources.fetch_price("FZROX") == pytest.approx(11.0)
    assert called == {"symbol": "FZROX", "period": "5d"}


def test_fetch_price_returns_none_without_data(monkeypatch):
    monkeypatch.setattr(sources.yf, "Ticker", lambda symbol: SimpleNamespace(fast_info={}))
    monkeypatch.setattr(sources.yf, "download", lambda *args, **kwargs: pd.DataFrame())
    assert sources.fetch_price("ZZZZ") is None


def test_fetch_price_wraps_transport_errors(monkeypatch):
    def boom(symbol):
        raise ConnectionError("reset")

    monkeypatch.setattr(sources.yf, "Ticker", boom)
    with pytest.raises(PriceLookupError):
        sources.fetch_price("VTI")


def test_company_name_prefers_exact_us_listing(monkeypatch):
    quotes = [
        {"symbol": "VTI.MX", "longname": "Vanguard Total Stock Market ETF (Mexico)"},
        {"symbol": "VTI240119C00200000", "shortname": "VTI Jan 2024 200 Call"},
        {"symbol": "VTIP", "shortname": "Vanguard Short-Term Inflation-Protected"},
        {"symbol": "VTI", "longname": "Vanguard Total Stock Market Index Fund ETF Shares"},
    ]
    monkeypatch.setattr(sources.yf, "Search", lambda *args, **kwargs: SimpleNamespace(quotes=quotes))
    name = asyncio.run(YahooSymbolLookup()("vti"))
    assert name == "Vanguard Total Stock Market Index Fund ETF Shares"


def test_company_name_none_when_not_found(monkeypatch):
    monkeypatch.setattr(sources.yf, "Search", lambda *args, **kwargs: SimpleNamespace(quotes=[]))
    assert sources.fetch_company_name("QQQQQ") is None


def test_company_name_wraps_errors(monkeypatch):
    def boom(*args, **kwargs):
        raise TimeoutError("slow")

    monkeypatch.setattr(sources.yf, "Search", boom)
    with pytest.raises(SymbolLookupError):
        sources.fetch_company_name("VTI")


def test_static_lookups_from_config():
    config = load_config(
        {
            "lookup": {
                "provider": "static",
                "static_prices": {"vti": 250.0, "dead": None},
                "static_names": {"VTI": "Vanguard Total Stock Market ETF"},
            }
        }
    )
    price_lookup, symbol_lookup = get_lookups(config)
    assert isinstance(price_lookup, StaticPriceLookup)
    assert asyncio.run(price_lookup("VTI")) == 250.0
    assert asyncio.run(price_lookup("DEAD")) is None
    assert asyncio.run(symbol_lookup("vti")) == "Vanguard Total Stock Market ETF"
    assert asyncio.run(symbol_lookup("DEAD")) == "DEAD"
    assert asyncio.run(symbol_lookup("NOPE")) is None


def test_yahoo_is_default_provider():
    price_lookup, symbol_lookup = get_lookups(load_config())
    assert isinstance(price_lookup, YahooPriceLookup)
    assert isinstance(symbol_lookup, YahooSymbolLookup)
