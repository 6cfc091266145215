"""Price and symbol lookups backed by Yahoo Finance."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Mapping, Optional, Protocol

import pandas as pd
import yfinance as yf

from portfolio_calc.config import AppConfig, LookupProvider

from .tickers import filter_search_results

logger = logging.getLogger(__name__)


class PriceLookupError(RuntimeError):
    """Transient failure talking to the quote service."""


class SymbolLookupError(RuntimeError):
    """Transient failure talking to the symbol search service."""


class PriceSource(Protocol):
    async def __call__(self, symbol: str) -> Optional[float]: ...


class SymbolSource(Protocol):
    async def __call__(self, symbol: str) -> Optional[str]: ...


def _valid_price(value: object) -> Optional[float]:
    try:
        price = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if price != price or price <= 0:
        return None
    return price


def _last_close(data: pd.DataFrame) -> Optional[float]:
    if data is None or data.empty or "Close" not in data.columns:
        return None
    closes = data["Close"]
    if isinstance(closes, pd.DataFrame):
        closes = closes.iloc[:, 0]
    closes = closes.dropna()
    if closes.empty:
        return None
    return _valid_price(closes.iloc[-1])


def fetch_price(symbol: str) -> Optional[float]:
    """Blocking quote fetch; ``None`` means Yahoo has no price for ``symbol``."""

    try:
        price = _valid_price(yf.Ticker(symbol).fast_info["last_price"])
    except KeyError:
        price = None
    except Exception as exc:
        raise PriceLookupError(f"quote request for {symbol} failed: {exc}") from exc
    if price is not None:
        return price
    try:
        data = yf.download(symbol, period="5d", progress=False, auto_adjust=False)
    except Exception as exc:
        raise PriceLookupError(f"history request for {symbol} failed: {exc}") from exc
    price = _last_close(data)
    if price is None:
        logger.warning("No price data available for %s", symbol)
    return price


def fetch_company_name(symbol: str, max_results: int = 10) -> Optional[str]:
    """Blocking symbol search; ``None`` means the symbol is not recognized."""

    try:
        quotes = yf.Search(symbol, max_results=max_results, news_count=0).quotes
    except Exception as exc:
        raise SymbolLookupError(f"symbol search for {symbol} failed: {exc}") from exc
    results = filter_search_results(
        {
            "symbol": q.get("symbol", ""),
            "description": q.get("longname") or q.get("shortname") or q.get("symbol", ""),
        }
        for q in quotes or []
    )
    if not results:
        return None
    for item in results:
        if item["symbol"].upper() == symbol.upper():
            return item["description"]
    return results[0]["description"]


class YahooPriceLookup:
    async def __call__(self, symbol: str) -> Optional[float]:
        return await asyncio.to_thread(fetch_price, symbol)


class YahooSymbolLookup:
    async def __call__(self, symbol: str) -> Optional[str]:
        return await asyncio.to_thread(fetch_company_name, symbol)


class StaticPriceLookup:
    """Offline lookup answering from a fixed mapping."""

    def __init__(self, prices: Mapping[str, Optional[float]]):
        self.prices: Dict[str, Optional[float]] = {k.upper(): v for k, v in prices.items()}

    async def __call__(self, symbol: str) -> Optional[float]:
        return _valid_price(self.prices.get(symbol.upper()))


class StaticSymbolLookup:
    def __init__(self, names: Mapping[str, str], known: Optional[Mapping[str, object]] = None):
        self.names = {k.upper(): v for k, v in names.items()}
        self.known = {k.upper() for k in (known or {})}

    async def __call__(self, symbol: str) -> Optional[str]:
        key = symbol.upper()
        if key in self.names:
            return self.names[key]
        return key if key in self.known else None


def get_lookups(config: AppConfig) -> tuple[PriceSource, SymbolSource]:
    if config.lookup.provider == LookupProvider.STATIC:
        prices = config.lookup.static_prices or {}
        return StaticPriceLookup(prices), StaticSymbolLookup(config.lookup.static_names, prices)
    return YahooPriceLookup(), YahooSymbolLookup()
