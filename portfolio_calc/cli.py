"""Command line entry points."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Mapping, NoReturn, Optional

from portfolio_calc.config import AppConfig, PortfolioFile, load_config, load_portfolio
from portfolio_calc.data import PortfolioStore, StaticPriceLookup, StaticSymbolLookup, get_lookups
from portfolio_calc.data.samples import sample_names, sample_portfolio
from portfolio_calc.engine import PriceCache
from portfolio_calc.engine.validation import AMOUNT, validate_amount
from portfolio_calc.models import TargetStock
from portfolio_calc.reports import build_allocation_report, build_rebalance_report, summarize_rebalance
from portfolio_calc.session import CalculatorSession, Mode

logger = logging.getLogger(__name__)

SAMPLE = "sample"


class UnknownSampleError(ValueError):
    pass


def setup_logging(level: str = "INFO") -> None:
    # stdout carries the JSON payload, so logs go to stderr.
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _targets(portfolio: PortfolioFile) -> List[TargetStock]:
    if portfolio.sample:
        sampled = sample_portfolio(portfolio.sample)
        if sampled is None:
            raise UnknownSampleError(f"Unknown sample portfolio: {portfolio.sample}")
        return sampled
    return [t.to_target() for t in portfolio.targets]


def build_session(config: AppConfig, portfolio: PortfolioFile, offline: bool = False) -> CalculatorSession:
    if offline:
        price_lookup, symbol_lookup = StaticPriceLookup(portfolio.prices), StaticSymbolLookup({})
    else:
        price_lookup, symbol_lookup = get_lookups(config)
    store = PortfolioStore(config.storage.root) if config.storage.root else None

    session = CalculatorSession(
        price_lookup,
        symbol_lookup,
        store=store,
        user_id=config.storage.user_id,
        engine=config.engine,
        timeout=config.lookup.timeout_seconds,
        targets=_targets(portfolio),
        rebalance_targets=_targets(portfolio),
        holdings=[h.to_holding() for h in portfolio.holdings],
        prices=PriceCache({k.upper(): v for k, v in portfolio.prices.items()}),
    )
    if config.storage.user_id and not portfolio.targets and not portfolio.sample and not portfolio.holdings:
        session.load()
    return session


def _fail(errors: Mapping[str, str]) -> NoReturn:
    print(json.dumps({"errors": dict(errors)}))
    sys.exit(1)


def _open_session(args: argparse.Namespace, config: AppConfig) -> CalculatorSession:
    try:
        return build_session(config, load_portfolio(args.portfolio), offline=args.offline)
    except UnknownSampleError as exc:
        _fail({SAMPLE: str(exc)})


def _emit(df, payload: dict, output: Optional[Path]) -> None:
    if output:
        df.to_csv(output, index=False)
        print(f"Saved report to {output}")
    else:
        print(json.dumps(payload, default=str))


def _run_deposit(args: argparse.Namespace, config: AppConfig) -> None:
    session = _open_session(args, config)
    amount_error = validate_amount(args.amount)
    if amount_error:
        _fail({AMOUNT: amount_error})
        return
    session.set_amount(args.amount)
    asyncio.run(session.refresh_prices(Mode.DEPOSIT))
    lines = session.calculate_allocations()
    if lines is None:
        _fail(session.errors)
        return
    if args.save:
        session.save_all()
    payload = {"mode": Mode.DEPOSIT.value, "amount": args.amount, "lines": [line.to_dict() for line in lines]}
    _emit(build_allocation_report(lines), payload, args.output)


def _run_rebalance(args: argparse.Namespace, config: AppConfig) -> None:
    session = _open_session(args, config)
    session.set_mode(Mode.REBALANCE)
    asyncio.run(session.refresh_prices(Mode.REBALANCE))
    lines = session.calculate_rebalance()
    if lines is None:
        if session.errors:
            _fail(session.errors)
            return
        logger.info("Portfolio has no value yet; nothing to rebalance")
        lines = []
    if args.save:
        session.save_all()
    summary = summarize_rebalance(lines)
    payload = {
        "mode": Mode.REBALANCE.value,
        "total_portfolio_value": summary.total_value,
        "total_buys": summary.total_buys,
        "total_sells": summary.total_sells,
        "counts": summary.counts,
        "lines": [line.to_dict() for line in lines],
    }
    _emit(build_rebalance_report(lines), payload, args.output)


def main() -> None:
    parser = argparse.ArgumentParser(description="Portfolio allocation calculator")
    parser.add_argument("--config", type=Path, help="Optional YAML config")
    subparsers = parser.add_subparsers(dest="command", required=True)

    deposit_parser = subparsers.add_parser("deposit", help="Split a deposit across targets")
    deposit_parser.add_argument("--portfolio", required=True, type=Path)
    deposit_parser.add_argument("--amount", required=True)

    rebalance_parser = subparsers.add_parser("rebalance", help="Plan trades toward targets")
    rebalance_parser.add_argument("--portfolio", required=True, type=Path)

    for sub in (deposit_parser, rebalance_parser):
        sub.add_argument("--output", type=Path, help="Optional CSV output path")
        sub.add_argument("--offline", action="store_true", help="Use only prices from the portfolio file")
        sub.add_argument("--save", action="store_true", help="Persist lists for the configured user")

    subparsers.add_parser("samples", help="List sample portfolios")

    args = parser.parse_args()
    config = load_config(args.config)
    setup_logging(config.logging.level)

    if args.command == "deposit":
        _run_deposit(args, config)
    elif args.command == "rebalance":
        _run_rebalance(args, config)
    elif args.command == "samples":
        payload = {
            name: [t.to_dict() for t in sample_portfolio(name) or []]
            for name in sample_names()
        }
        print(json.dumps(payload))


if __name__ == "__main__":  # pragma: no cover
    main()
