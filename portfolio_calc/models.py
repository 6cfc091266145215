"""Domain types shared by the allocation engine and its collaborators."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional


class QuantityMode(str, Enum):
    """How a holding's size was entered."""

    SHARES = "shares"
    VALUE = "value"


class Action(str, Enum):
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


@dataclass
class TargetStock:
    symbol: str
    target_percentage: float = 0.0
    display_name: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "TargetStock":
        return cls(
            symbol=str(payload["symbol"]),
            target_percentage=float(payload.get("target_percentage", 0.0) or 0.0),
            display_name=payload.get("display_name"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"symbol": self.symbol, "target_percentage": self.target_percentage}
        if self.display_name is not None:
            data["display_name"] = self.display_name
        return data


@dataclass
class Holding:
    symbol: str
    quantity_mode: QuantityMode = QuantityMode.VALUE
    shares: Optional[float] = None
    value: Optional[float] = None
    display_name: Optional[str] = None

    def switch_mode(self, mode: QuantityMode) -> None:
        """Change input mode, dropping the quantity that no longer applies."""

        self.quantity_mode = QuantityMode(mode)
        if self.quantity_mode is QuantityMode.SHARES:
            self.value = None
        else:
            self.shares = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Holding":
        mode = QuantityMode(payload.get("quantity_mode", QuantityMode.VALUE.value))
        holding = cls(
            symbol=str(payload["symbol"]),
            quantity_mode=mode,
            shares=payload.get("shares"),
            value=payload.get("value"),
            display_name=payload.get("display_name"),
        )
        holding.switch_mode(mode)
        return holding

    def to_dict(self) -> Dict[str, Any]:
        """Serialisable form with only the active quantity and no empty fields."""

        data: Dict[str, Any] = {"symbol": self.symbol, "quantity_mode": self.quantity_mode.value}
        if self.quantity_mode is QuantityMode.SHARES and self.shares is not None:
            data["shares"] = self.shares
        if self.quantity_mode is QuantityMode.VALUE and self.value is not None:
            data["value"] = self.value
        if self.display_name is not None:
            data["display_name"] = self.display_name
        return data


@dataclass
class AllocationLine:
    symbol: str
    target_percentage: float
    dollar_amount: str
    price: Optional[float] = None
    shares: Optional[float] = None
    display_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RebalanceLine:
    symbol: str
    target_percentage: float
    current_value: float
    current_percentage_of_portfolio: float
    target_value: float
    difference: float
    action: Action
    price: Optional[float]
    shares_to_trade: float
    current_shares: float
    display_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["action"] = self.action.value
        return data


__all__ = [
    "Action",
    "AllocationLine",
    "Holding",
    "QuantityMode",
    "RebalanceLine",
    "TargetStock",
]
