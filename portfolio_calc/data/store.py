"""YAML document store for saved portfolios, one file per user."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

import yaml

from portfolio_calc.models import Holding, TargetStock


class ListKind(str, Enum):
    POSITIONS = "positions"
    REBALANCE_TARGETS = "rebalance_targets"
    TARGETS = "targets"


_SAFE_ID = re.compile(r"[^A-Za-z0-9_.-]")


def _clean(record: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in record.items() if v is not None}


def serialize(items: Sequence[Union[Holding, TargetStock]]) -> List[Dict[str, Any]]:
    return [_clean(item.to_dict()) for item in items]


def deserialize(kind: ListKind, payload: List[Dict[str, Any]]) -> List[Any]:
    if kind is ListKind.POSITIONS:
        return [Holding.from_dict(item) for item in payload]
    return [TargetStock.from_dict(item) for item in payload]


@dataclass
class PortfolioStore:
    """Key-value store keyed by user id; each user document holds every list kind."""

    root: Path

    def __post_init__(self) -> None:
        self.root = Path(self.root)

    def path_for(self, user_id: str) -> Path:
        return self.root / f"{_SAFE_ID.sub('_', user_id)}.yml"

    def _read(self, user_id: str) -> Dict[str, Any]:
        path = self.path_for(user_id)
        if not path.exists():
            return {}
        return yaml.safe_load(path.read_text()) or {}

    def save(self, kind: ListKind, user_id: str, items: Sequence[Union[Holding, TargetStock]]) -> None:
        kind = ListKind(kind)
        document = self._read(user_id)
        document[kind.value] = serialize(items)
        self.root.mkdir(parents=True, exist_ok=True)
        self.path_for(user_id).write_text(yaml.safe_dump(document, sort_keys=True))

    def load(self, kind: ListKind, user_id: str) -> List[Any]:
        kind = ListKind(kind)
        return deserialize(kind, self._read(user_id).get(kind.value) or [])

    def has(self, kind: ListKind, user_id: str) -> bool:
        return ListKind(kind).value in self._read(user_id)
