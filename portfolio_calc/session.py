"""Per-user calculator session.

The session owns the editable lists, the price cache and the validation error
map, and re-runs the engine against the latest snapshot on request. Nothing in
here is module-level state: every user gets its own session object.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from portfolio_calc.config import EngineConfig
from portfolio_calc.data.samples import DEFAULT_SAMPLE, sample_portfolio
from portfolio_calc.data.sources import PriceSource, SymbolSource
from portfolio_calc.data.store import ListKind, PortfolioStore
from portfolio_calc.engine.allocator import DepositAllocator
from portfolio_calc.engine.prices import CASH_NAME, CASH_SYMBOL, Generation, PriceCache, PriceResolver
from portfolio_calc.engine.rebalance import RebalancePlanner, total_portfolio_value
from portfolio_calc.engine.validation import (
    AMOUNT,
    NEW_POSITION,
    NEW_REBALANCE_STOCK,
    NEW_STOCK,
    PERCENTAGES,
    REBALANCE_PERCENTAGES,
    ValidationErrors,
    WeightedListValidator,
    normalize_symbol,
    parse_percentage,
    rebalance_stock_key,
    stock_key,
    validate_percentage_bounds,
    validate_symbol,
)
from portfolio_calc.models import AllocationLine, Holding, QuantityMode, RebalanceLine, TargetStock

logger = logging.getLogger(__name__)


class Mode(str, Enum):
    DEPOSIT = "deposit"
    REBALANCE = "rebalance"


class CalculatorSession:
    def __init__(
        self,
        price_lookup: PriceSource,
        symbol_lookup: SymbolSource,
        *,
        store: Optional[PortfolioStore] = None,
        user_id: Optional[str] = None,
        engine: Optional[EngineConfig] = None,
        timeout: float = 5.0,
        targets: Optional[Sequence[TargetStock]] = None,
        rebalance_targets: Optional[Sequence[TargetStock]] = None,
        holdings: Optional[Sequence[Holding]] = None,
        prices: Optional[PriceCache] = None,
    ) -> None:
        engine = engine or EngineConfig()
        self.symbol_lookup = symbol_lookup
        self.store = store
        self.user_id = user_id
        self.timeout = timeout

        self.mode = Mode.DEPOSIT
        self.amount = ""
        self.loading = False
        self.errors = ValidationErrors()
        self.targets: List[TargetStock] = list(targets) if targets is not None else sample_portfolio(DEFAULT_SAMPLE)
        self.rebalance_targets: List[TargetStock] = (
            list(rebalance_targets) if rebalance_targets is not None else sample_portfolio(DEFAULT_SAMPLE)
        )
        self.holdings: List[Holding] = list(holdings or [])
        self.prices = prices if prices is not None else PriceCache()

        self.resolver = PriceResolver(self.prices, price_lookup, timeout)
        self.allocator = DepositAllocator(self.errors, engine.tolerance)
        self.planner = RebalancePlanner(self.errors, engine.tolerance, engine.hold_threshold)
        self._deposit_check = WeightedListValidator(PERCENTAGES, engine.tolerance)
        self._rebalance_check = WeightedListValidator(REBALANCE_PERCENTAGES, engine.tolerance)
        self._adds = Generation()

    # -- persistence -------------------------------------------------------

    def _persist(self, kind: ListKind) -> None:
        if self.store is None or not self.user_id:
            return
        items: Sequence[Union[Holding, TargetStock]]
        if kind is ListKind.POSITIONS:
            items = self.holdings
        elif kind is ListKind.REBALANCE_TARGETS:
            items = self.rebalance_targets
        else:
            items = self.targets
        try:
            self.store.save(kind, self.user_id, items)
        except Exception:
            logger.exception("Error saving %s for user %s", kind.value, self.user_id)

    def save_all(self) -> None:
        for kind in ListKind:
            self._persist(kind)

    def load(self) -> None:
        """Restore saved lists for the session's user; missing documents keep defaults."""

        if self.store is None or not self.user_id:
            return
        try:
            if self.store.has(ListKind.POSITIONS, self.user_id):
                self.holdings = self.store.load(ListKind.POSITIONS, self.user_id)
            if self.store.has(ListKind.REBALANCE_TARGETS, self.user_id):
                self.rebalance_targets = self.store.load(ListKind.REBALANCE_TARGETS, self.user_id)
            if self.store.has(ListKind.TARGETS, self.user_id):
                self.targets = self.store.load(ListKind.TARGETS, self.user_id)
        except Exception:
            logger.exception("Error loading saved portfolio for user %s", self.user_id)

    # -- symbol metadata ---------------------------------------------------

    async def _company_name(self, symbol: str, keys: Iterable[str], failure: str) -> Tuple[bool, Optional[str]]:
        """Look up ``symbol``; ``(False, None)`` means the add must stop."""

        keys = tuple(keys)
        token = self._adds.bump()
        self.loading = True
        try:
            name = await asyncio.wait_for(self.symbol_lookup(symbol), timeout=self.timeout)
        except Exception as exc:
            if self._adds.is_current(token):
                logger.warning("Symbol lookup for %s failed: %s", symbol, exc)
                for key in keys:
                    self.errors.set(key, failure)
            return False, None
        finally:
            if self._adds.is_current(token):
                self.loading = False
        if not self._adds.is_current(token):
            logger.debug("Dropping superseded lookup for %s", symbol)
            return False, None
        if name is None:
            for key in keys:
                self.errors.set(key, f"Couldn't find {symbol}")
            return False, None
        return True, name or None

    # -- deposit targets ---------------------------------------------------

    def set_amount(self, raw: str) -> None:
        self.amount = raw
        self.errors.clear(AMOUNT)

    def set_mode(self, mode: Union[Mode, str]) -> None:
        self.mode = Mode(mode)

    async def add_stock(self, symbol: str) -> bool:
        normalized = normalize_symbol(symbol)
        error = validate_symbol(normalized, (t.symbol for t in self.targets))
        if error:
            self.errors.set(NEW_STOCK, error)
            return False
        ok, name = await self._company_name(normalized, [NEW_STOCK], "Failed to add stock. Please try again.")
        if not ok:
            return False
        if any(t.symbol == normalized for t in self.targets):
            self.errors.set(NEW_STOCK, "Stock already exists in your portfolio")
            return False
        self.targets.append(TargetStock(normalized, 0.0, name))
        self.errors.clear(NEW_STOCK)
        self._persist(ListKind.TARGETS)
        return True

    def add_cash(self) -> bool:
        self.prices.pin_cash()
        if any(t.symbol == CASH_SYMBOL for t in self.targets):
            return False
        self.targets.append(TargetStock(CASH_SYMBOL, 0.0, CASH_NAME))
        self._deposit_check.check(self.targets, self.errors)
        self._persist(ListKind.TARGETS)
        return True

    def remove_stock(self, index: int) -> None:
        if 0 <= index < len(self.targets):
            del self.targets[index]
            self._persist(ListKind.TARGETS)
        self._deposit_check.check(self.targets, self.errors)

    def update_stock_percentage(self, index: int, raw: str) -> None:
        error = validate_percentage_bounds(raw)
        if error:
            self.errors.set(stock_key(index), error)
            return
        if 0 <= index < len(self.targets):
            self.targets[index].target_percentage = parse_percentage(raw)
            self._persist(ListKind.TARGETS)
        self.errors.clear(stock_key(index))
        self._deposit_check.check(self.targets, self.errors)

    def load_sample_portfolio(self, name: str) -> bool:
        targets = sample_portfolio(name)
        if targets is None:
            return False
        self.targets = targets
        self.errors.clear()
        self._persist(ListKind.TARGETS)
        return True

    # -- holdings ----------------------------------------------------------

    async def add_position(self, symbol: str) -> bool:
        normalized = normalize_symbol(symbol)
        error = validate_symbol(normalized, (h.symbol for h in self.holdings), "Position already exists")
        if error:
            self.errors.set(NEW_POSITION, error)
            return False
        ok, name = await self._company_name(normalized, [NEW_POSITION], "Failed to add position. Please try again.")
        if not ok:
            return False
        if any(h.symbol == normalized for h in self.holdings):
            self.errors.set(NEW_POSITION, "Position already exists")
            return False
        self.holdings.append(Holding(normalized, QuantityMode.VALUE, value=0.0, display_name=name))
        self.errors.clear(NEW_POSITION)
        self._persist(ListKind.POSITIONS)
        return True

    def remove_position(self, index: int) -> None:
        if 0 <= index < len(self.holdings):
            del self.holdings[index]
            self._persist(ListKind.POSITIONS)

    def update_position(
        self,
        index: int,
        quantity_mode: Optional[Union[QuantityMode, str]] = None,
        shares: Optional[float] = None,
        value: Optional[float] = None,
    ) -> None:
        if not 0 <= index < len(self.holdings):
            return
        holding = self.holdings[index]
        if shares is not None:
            holding.shares = shares
        if value is not None:
            holding.value = value
        if quantity_mode is not None:
            holding.switch_mode(QuantityMode(quantity_mode))
        self._persist(ListKind.POSITIONS)

    # -- rebalance targets -------------------------------------------------

    async def add_rebalance_stock(self, symbol: str) -> bool:
        normalized = normalize_symbol(symbol)
        error = validate_symbol(normalized, (t.symbol for t in self.rebalance_targets), "Stock already exists")
        if error:
            self.errors.set(NEW_REBALANCE_STOCK, error)
            return False
        ok, name = await self._company_name(
            normalized, [NEW_REBALANCE_STOCK], "Failed to add stock. Please try again."
        )
        if not ok:
            return False
        if any(t.symbol == normalized for t in self.rebalance_targets):
            self.errors.set(NEW_REBALANCE_STOCK, "Stock already exists")
            return False
        self.rebalance_targets.append(TargetStock(normalized, 0.0, name))
        self.errors.clear(NEW_REBALANCE_STOCK)
        self._rebalance_check.check(self.rebalance_targets, self.errors)
        self._persist(ListKind.REBALANCE_TARGETS)
        return True

    def remove_rebalance_stock(self, index: int) -> None:
        if 0 <= index < len(self.rebalance_targets):
            del self.rebalance_targets[index]
            self._persist(ListKind.REBALANCE_TARGETS)
        self._rebalance_check.check(self.rebalance_targets, self.errors)

    def update_rebalance_percentage(self, index: int, raw: str) -> None:
        key = rebalance_stock_key(index)
        error = validate_percentage_bounds(raw)
        if error:
            self.errors.set(key, error)
            return
        if 0 <= index < len(self.rebalance_targets):
            self.rebalance_targets[index].target_percentage = parse_percentage(raw)
            self._persist(ListKind.REBALANCE_TARGETS)
        self.errors.clear(key)
        self._rebalance_check.check(self.rebalance_targets, self.errors)

    async def add_asset_to_both(self, symbol: str) -> bool:
        keys = (NEW_POSITION, NEW_REBALANCE_STOCK)
        normalized = normalize_symbol(symbol)
        if not normalized:
            for key in keys:
                self.errors.set(key, "Please enter a stock symbol")
            return False
        in_holdings = any(h.symbol == normalized for h in self.holdings)
        in_targets = any(t.symbol == normalized for t in self.rebalance_targets)
        if in_holdings and in_targets:
            for key in keys:
                self.errors.set(key, "Asset already exists")
            return False
        ok, name = await self._company_name(normalized, keys, "Failed to add asset. Please try again.")
        if not ok:
            return False
        if not any(h.symbol == normalized for h in self.holdings):
            self.holdings.append(Holding(normalized, QuantityMode.SHARES, shares=0.0, display_name=name))
            self._persist(ListKind.POSITIONS)
        if not any(t.symbol == normalized for t in self.rebalance_targets):
            self.rebalance_targets.append(TargetStock(normalized, 0.0, name))
            self._persist(ListKind.REBALANCE_TARGETS)
        self.errors.clear(*keys)
        return True

    def add_cash_to_both(self) -> bool:
        self.prices.pin_cash()
        added = False
        if not any(h.symbol == CASH_SYMBOL for h in self.holdings):
            self.holdings.append(Holding(CASH_SYMBOL, QuantityMode.VALUE, value=0.0, display_name=CASH_NAME))
            self._persist(ListKind.POSITIONS)
            added = True
        if not any(t.symbol == CASH_SYMBOL for t in self.rebalance_targets):
            self.rebalance_targets.append(TargetStock(CASH_SYMBOL, 0.0, CASH_NAME))
            self._persist(ListKind.REBALANCE_TARGETS)
            added = True
        return added

    # -- prices & calculations ---------------------------------------------

    def tracked_symbols(self, mode: Optional[Mode] = None) -> List[str]:
        mode = Mode(mode or self.mode)
        if mode is Mode.DEPOSIT:
            return [t.symbol for t in self.targets]
        return [t.symbol for t in self.rebalance_targets] + [h.symbol for h in self.holdings]

    async def refresh_prices(self, mode: Optional[Mode] = None) -> List[str]:
        symbols = self.tracked_symbols(mode)
        if CASH_SYMBOL in symbols:
            self.prices.pin_cash()
        self.resolver.track(symbols)
        return await self.resolver.resolve()

    def calculate_allocations(self) -> Optional[List[AllocationLine]]:
        return self.allocator.allocate(self.amount, self.targets, self.prices)

    def calculate_rebalance(self) -> Optional[List[RebalanceLine]]:
        if not self.holdings or not self.rebalance_targets:
            return None
        return self.planner.plan(self.holdings, self.rebalance_targets, self.prices)

    @property
    def total_portfolio_value(self) -> float:
        return total_portfolio_value(self.holdings, self.prices)


__all__ = ["CalculatorSession", "Mode"]
