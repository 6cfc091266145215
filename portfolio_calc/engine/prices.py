"""Per-session price cache and the policy for filling it."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

logger = logging.getLogger(__name__)

CASH_SYMBOL = "CASH"
CASH_NAME = "Cash USD"
CASH_PRICE = 1.0


class _Sentinel:
    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name

    def __bool__(self) -> bool:
        return False


UNKNOWN = _Sentinel("UNKNOWN")
UNAVAILABLE = _Sentinel("UNAVAILABLE")
_FAILED = _Sentinel("FAILED")

PriceEntry = Union[float, _Sentinel]
PriceLookup = Callable[[str], Awaitable[Optional[float]]]


def _usable(price: object) -> bool:
    return isinstance(price, (int, float)) and not isinstance(price, bool) and math.isfinite(price) and price > 0


class PriceCache:
    """Last-known price per symbol.

    A symbol is UNKNOWN until looked up, then holds either a positive price or
    UNAVAILABLE. Entries are never invalidated except by :meth:`clear`.
    """

    def __init__(self, prices: Optional[Mapping[str, Optional[float]]] = None) -> None:
        self._entries: Dict[str, PriceEntry] = {}
        for sym, price in (prices or {}).items():
            self.set(sym, price)

    def get(self, symbol: str) -> PriceEntry:
        return self._entries.get(symbol, UNKNOWN)

    def price(self, symbol: str) -> Optional[float]:
        entry = self.get(symbol)
        return float(entry) if _usable(entry) else None

    def set(self, symbol: str, price: Optional[float]) -> None:
        if _usable(price):
            self._entries[symbol] = float(price)  # type: ignore[arg-type]
        else:
            self._entries[symbol] = UNAVAILABLE

    def mark_unavailable(self, symbol: str) -> None:
        self._entries[symbol] = UNAVAILABLE

    def pin_cash(self) -> None:
        self._entries[CASH_SYMBOL] = CASH_PRICE

    def clear(self, symbol: Optional[str] = None) -> None:
        if symbol is None:
            self._entries.clear()
        else:
            self._entries.pop(symbol, None)

    def missing(self, symbols: Iterable[str]) -> List[str]:
        """Symbols still UNKNOWN, deduplicated in first-seen order."""

        seen: List[str] = []
        for sym in symbols:
            if sym and sym not in seen and sym not in self._entries:
                seen.append(sym)
        return seen

    def snapshot(self) -> Dict[str, Optional[float]]:
        return {sym: self.price(sym) for sym in self._entries}

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._entries


class Generation:
    """Monotonic token used to detect superseded async work."""

    def __init__(self) -> None:
        self._value = 0

    @property
    def value(self) -> int:
        return self._value

    def bump(self) -> int:
        self._value += 1
        return self._value

    def is_current(self, token: int) -> bool:
        return token == self._value


class PriceResolver:
    """Resolves UNKNOWN cache entries without ever applying stale results."""

    def __init__(self, cache: PriceCache, lookup: PriceLookup, timeout: float = 5.0) -> None:
        self.cache = cache
        self.lookup = lookup
        self.timeout = timeout
        self.generation = Generation()
        self._tracked: tuple = ()

    @property
    def tracked(self) -> Sequence[str]:
        return self._tracked

    def track(self, symbols: Iterable[str]) -> int:
        """Set the symbols of interest; changing them invalidates pending lookups."""

        symbols = tuple(dict.fromkeys(s for s in symbols if s))
        if symbols != self._tracked:
            self._tracked = symbols
            self.generation.bump()
        return self.generation.value

    async def _lookup_one(self, symbol: str) -> Union[Optional[float], _Sentinel]:
        try:
            return await asyncio.wait_for(self.lookup(symbol), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Price lookup for %s timed out after %.1fs", symbol, self.timeout)
            return None
        except Exception as exc:
            # Transient: the entry stays UNKNOWN so the next resolve retries it.
            logger.warning("Price lookup for %s failed: %s", symbol, exc)
            return _FAILED

    async def resolve(self) -> List[str]:
        token = self.generation.value
        missing = self.cache.missing(self._tracked)
        if not missing:
            return []
        logger.debug("Resolving prices for %s (generation %d)", missing, token)
        prices = await asyncio.gather(*(self._lookup_one(sym) for sym in missing))
        if not self.generation.is_current(token):
            logger.debug("Discarding superseded price lookup for %s", missing)
            return []
        applied: List[str] = []
        for sym, price in zip(missing, prices):
            if price is _FAILED or sym in self.cache:
                continue
            self.cache.set(sym, price)
            applied.append(sym)
        return applied


__all__ = [
    "CASH_NAME",
    "CASH_PRICE",
    "CASH_SYMBOL",
    "Generation",
    "PriceCache",
    "PriceEntry",
    "PriceLookup",
    "PriceResolver",
    "UNAVAILABLE",
    "UNKNOWN",
]
