"""Configuration models and loader for the portfolio calculator."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, PositiveFloat, field_validator, model_validator

from portfolio_calc.models import Holding, TargetStock


class LookupProvider(str, Enum):
    YAHOO = "yahoo"
    STATIC = "static"


class EngineConfig(BaseModel):
    tolerance: PositiveFloat = 0.01
    hold_threshold: PositiveFloat = 0.01


class LookupConfig(BaseModel):
    provider: LookupProvider = LookupProvider.YAHOO
    timeout_seconds: PositiveFloat = 5.0
    static_prices: Optional[Dict[str, Optional[float]]] = None
    static_names: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_payload(self) -> "LookupConfig":
        if self.provider == LookupProvider.STATIC and self.static_prices is None:
            raise ValueError("static provider requires static_prices")
        return self


class StorageConfig(BaseModel):
    root: Optional[Path] = None
    user_id: Optional[str] = None

    @model_validator(mode="after")
    def _user_needs_root(self) -> "StorageConfig":
        if self.user_id and self.root is None:
            raise ValueError("storage.user_id requires storage.root")
        return self


class LoggingConfig(BaseModel):
    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def known_level(cls, level: str) -> str:
        level = level.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown logging level {level}")
        return level


class AppConfig(BaseModel):
    engine: EngineConfig = Field(default_factory=EngineConfig)
    lookup: LookupConfig = Field(default_factory=LookupConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class TargetEntry(BaseModel):
    symbol: str
    percentage: float = Field(0.0, ge=0.0, le=100.0)
    name: Optional[str] = None

    def to_target(self) -> TargetStock:
        return TargetStock(self.symbol.strip().upper(), self.percentage, self.name)


class HoldingEntry(BaseModel):
    symbol: str
    shares: Optional[float] = None
    value: Optional[float] = None
    name: Optional[str] = None

    @model_validator(mode="after")
    def _one_quantity(self) -> "HoldingEntry":
        if (self.shares is None) == (self.value is None):
            raise ValueError(f"holding {self.symbol} needs exactly one of shares or value")
        return self

    def to_holding(self) -> Holding:
        mode = "shares" if self.shares is not None else "value"
        return Holding.from_dict(
            {
                "symbol": self.symbol.strip().upper(),
                "quantity_mode": mode,
                "shares": self.shares,
                "value": self.value,
                "display_name": self.name,
            }
        )


class PortfolioFile(BaseModel):
    """A portfolio description as written by hand in YAML."""

    targets: List[TargetEntry] = Field(default_factory=list)
    holdings: List[HoldingEntry] = Field(default_factory=list)
    prices: Dict[str, Optional[float]] = Field(default_factory=dict)
    sample: Optional[str] = None

    @model_validator(mode="after")
    def _unique_symbols(self) -> "PortfolioFile":
        for label, symbols in (
            ("targets", [t.symbol.strip().upper() for t in self.targets]),
            ("holdings", [h.symbol.strip().upper() for h in self.holdings]),
        ):
            if len(symbols) != len(set(symbols)):
                raise ValueError(f"duplicate symbols in {label}")
        return self


def _read_payload(source: Union[str, Path, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(source, (str, Path)):
        path = Path(source)
        return yaml.safe_load(path.read_text()) or {}
    if isinstance(source, dict):
        return source
    raise TypeError("config source must be a path or mapping")


def load_config(source: Union[str, Path, Dict[str, Any], None] = None) -> AppConfig:
    """Load and validate the application config from a path or raw mapping."""

    if source is None:
        return AppConfig()
    return AppConfig.model_validate(_read_payload(source))


def load_portfolio(source: Union[str, Path, Dict[str, Any]]) -> PortfolioFile:
    return PortfolioFile.model_validate(_read_payload(source))


__all__ = [
    "AppConfig",
    "EngineConfig",
    "HoldingEntry",
    "LoggingConfig",
    "LookupConfig",
    "LookupProvider",
    "PortfolioFile",
    "StorageConfig",
    "TargetEntry",
    "load_config",
    "load_portfolio",
]
