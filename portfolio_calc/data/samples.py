"""Built-in sample portfolios."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from portfolio_calc.models import TargetStock

_SPUS = ("SPUS", "The SP Funds S&P 500 Sharia Industry Exclusions ETF")
_SPTE = ("SPTE", "The SP Funds S&P Global Technology ETF")
_SPWO = ("SPWO", "The SP Funds S&P World ETF")
_SPSK = ("SPSK", "The SP Funds Dow Jones Global Sukuk ETF")
_SPRE = ("SPRE", "The SP Funds S&P Global Reit Sharia ETF")
_GLD = ("GLD", "SPDR Gold Shares")
_CASH = ("CASH", "Cash USD")

_SAMPLES: Dict[str, List[Tuple[Tuple[str, str], float]]] = {
    "Fidelity 2-Fund Portfolio": [
        (("FZROX", "Fidelity ZERO Total Market Index Fund"), 80),
        (("FZILX", "Fidelity ZERO International Index Fund"), 20),
    ],
    "Vanguard 3-Fund Portfolio": [
        (("VTI", "Vanguard Total Stock Market ETF"), 60),
        (("VXUS", "Vanguard Total International Stock ETF"), 30),
        (("BND", "Vanguard Total Bond Market ETF"), 10),
    ],
    "Schwab 3-Fund Portfolio": [
        (("SCHB", "Schwab U.S. Broad Market ETF"), 60),
        (("SCHF", "Schwab International Equity ETF"), 30),
        (("SCHZ", "Schwab U.S. Aggregate Bond ETF"), 10),
    ],
    # Several Sharia presets do not total 100% as published; loading one
    # surfaces the percentage error until the user adjusts it.
    "Sharia Portfolio Aggressive": [
        (_SPUS, 40), (_SPTE, 38), (_SPWO, 20), (_SPSK, 5), (_SPRE, 5), (_CASH, 2),
    ],
    "Sharia Portfolio Growth": [
        (_SPUS, 35), (_SPSK, 20), (_SPRE, 8), (_SPTE, 27), (_SPWO, 8), (_CASH, 2),
    ],
    "Sharia Portfolio Moderate": [
        (_SPSK, 35), (_SPUS, 30), (_SPTE, 18), (_SPRE, 10), (_SPWO, 5), (_CASH, 2),
    ],
    "Sharia Portfolio Income": [
        (_SPSK, 47), (_SPUS, 25), (_SPRE, 10), (_SPTE, 9), (_SPWO, 6), (_GLD, 3), (_CASH, 2),
    ],
    "Sharia Portfolio Conservative": [
        (_SPSK, 58), (_SPUS, 20), (_SPRE, 10), (_SPWO, 5), (_GLD, 5), (_CASH, 2),
    ],
    "Sharia Portfolio Sukuk": [
        (_SPSK, 43),
        (("AMAPX", "Amana Participation Investor"), 10),
        (_SPUS, 10),
        (("WISEX", "Azzad Wise Capital"), 10),
        (_SPRE, 13),
        (_GLD, 6),
        (_SPWO, 5),
        (_CASH, 2),
    ],
}

DEFAULT_SAMPLE = "Fidelity 2-Fund Portfolio"


def sample_names() -> List[str]:
    return list(_SAMPLES)


def sample_portfolio(name: str) -> Optional[List[TargetStock]]:
    """Fresh copy of a sample's targets, or ``None`` for an unknown name."""

    entries = _SAMPLES.get(name)
    if entries is None:
        return None
    return [TargetStock(sym, float(pct), display) for (sym, display), pct in entries]
