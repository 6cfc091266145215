"""Collaborators around the engine: quote lookups, storage and presets."""

from .samples import DEFAULT_SAMPLE, sample_names, sample_portfolio
from .sources import (
    PriceLookupError,
    StaticPriceLookup,
    StaticSymbolLookup,
    SymbolLookupError,
    YahooPriceLookup,
    YahooSymbolLookup,
    get_lookups,
)
from .store import ListKind, PortfolioStore
from . import tickers

__all__ = [
    "DEFAULT_SAMPLE",
    "ListKind",
    "PortfolioStore",
    "PriceLookupError",
    "StaticPriceLookup",
    "StaticSymbolLookup",
    "SymbolLookupError",
    "YahooPriceLookup",
    "YahooSymbolLookup",
    "get_lookups",
    "sample_names",
    "sample_portfolio",
    "tickers",
]
