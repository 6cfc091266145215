"""Ticker classification heuristics used to filter symbol search results."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional

# Exchange suffixes that mark a non-US listing.
NON_US_SUFFIXES = (
    ".SZ", ".SS", ".SH",
    ".TO", ".V",
    ".L", ".LN",
    ".HK",
    ".MX",
    ".BC", ".BO",
    ".T", ".TA",
    ".AS", ".DE", ".PA", ".BR", ".SA", ".SW", ".ST", ".CO", ".OL", ".HE",
    ".IS", ".LS", ".MC", ".MI", ".VI", ".AT", ".IR",
    ".DU", ".F", ".HA", ".MU", ".BE",
    ".SG", ".KL", ".JK", ".BK", ".NS", ".KS", ".TW", ".TWO",
    ".AU", ".NZ", ".AX",
)

COMMON_FUTURES = frozenset({"ESF", "NQF", "CLF", "GCF", "ZCF", "HGF", "SIF", "YMF"})

_OPTION_CODE = re.compile(r"\d{6}[CP]\d+")
_OPTION_WORDS = ("CALL", "PUT", "OPTION")
_SHARE_CLASS = re.compile(r"^\.\w$")


def base_ticker(symbol: str) -> str:
    dot = symbol.find(".")
    return symbol[:dot] if dot > 0 else symbol


def is_option(symbol: str, description: Optional[str] = None) -> bool:
    upper = symbol.upper()
    desc = (description or "").upper()
    if any(word in desc for word in _OPTION_WORDS):
        return True
    if _OPTION_CODE.search(upper):
        return True
    base = base_ticker(symbol)
    if base and len(upper) > len(base) + 3:
        suffix = upper[len(base):]
        if re.search(r"\d", suffix) and ("C" in suffix or "P" in suffix):
            return True
    return False


def is_futures(symbol: str, description: Optional[str] = None) -> bool:
    upper = symbol.upper()
    if "FUTURE" in (description or "").upper():
        return True
    if upper.endswith("=F"):
        return True
    return "." not in upper and upper in COMMON_FUTURES


def is_us_ticker(symbol: str) -> bool:
    if "." not in symbol:
        return True
    upper = symbol.upper()
    if upper.endswith(NON_US_SUFFIXES):
        return False
    # A lone letter after the dot is a US share class (BRK.B).
    return bool(_SHARE_CLASS.match(upper[upper.rfind("."):]))


def is_primary_ticker(symbol: str) -> bool:
    if "." not in symbol:
        return True
    return is_us_ticker(symbol) and len(symbol) - symbol.rfind(".") == 2


def filter_search_results(results: Iterable[Dict[str, str]]) -> List[Dict[str, str]]:
    """Keep US equity/fund listings, primary tickers first."""

    kept = [
        item
        for item in results
        if item.get("symbol")
        and item.get("description")
        and not is_option(item["symbol"], item["description"])
        and not is_futures(item["symbol"], item["description"])
        and is_us_ticker(item["symbol"])
    ]
    return sorted(kept, key=lambda item: not is_primary_ticker(item["symbol"]))
