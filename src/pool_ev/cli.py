"""CLI entrypoint for pool-ev."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from pool_ev.coupon import Coupon, load_coupon
from pool_ev.errors import PoolEVError
from pool_ev.export import row_record, rows_to_csv
from pool_ev.filters import FULL_BAND, FilterParams
from pool_ev.payout import PoolParams
from pool_ev.pipeline import RoundAnalysis, analyze_selection
from pool_ev.pricing import compute_all
from pool_ev.row_builder import calculate_row_count
from pool_ev.settings import Settings
from pool_ev.summary import classify_coupon


TOP_N_FROM_SETTINGS = "settings"


class CLIError(RuntimeError):
    """User-facing CLI error."""


def _load(args: argparse.Namespace) -> Coupon:
    path = Path(args.coupon).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"coupon file not found: {path}")
    return load_coupon(path)


def _band(value: list[float] | None) -> tuple[float, float]:
    if value is None:
        return FULL_BAND
    return float(value[0]), float(value[1])


def _print_json(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _cmd_count(args: argparse.Namespace) -> int:
    coupon = _load(args)
    match_ids = [match.id for match in coupon.matches]
    print(calculate_row_count(coupon.selections, match_ids))
    return 0


def _cmd_classify(args: argparse.Namespace) -> int:
    coupon = _load(args)
    classification = classify_coupon(compute_all(coupon.matches))
    if classification is None:
        raise CLIError("coupon has no matches")
    _print_json(asdict(classification))
    return 0


def _analysis_payload(analysis: RoundAnalysis, *, limit: int) -> dict[str, Any]:
    match_ids = [computed.id for computed in analysis.matches]
    return {
        "row_count": analysis.row_count,
        "sampled": analysis.sampled,
        "built": asdict(analysis.built_summary) if analysis.built_summary else None,
        "kept": asdict(analysis.kept_summary) if analysis.kept_summary else None,
        "outcome_distribution": (
            asdict(analysis.outcome_distribution) if analysis.outcome_distribution else None
        ),
        "payout": asdict(analysis.payout) if analysis.payout else None,
        "stages": [asdict(report) for report in analysis.filtered.stages],
        "advisories": [asdict(advisory) for advisory in analysis.advisories],
        "classification": asdict(analysis.classification) if analysis.classification else None,
        "rows": [row_record(row, match_ids) for row in analysis.kept_rows[: max(0, limit)]],
    }


def _cmd_analyze(args: argparse.Namespace) -> int:
    settings = Settings()
    if args.seed is not None:
        settings = settings.model_copy(update={"sample_seed": args.seed})
    coupon = _load(args)
    if not coupon.selections:
        raise CLIError("coupon has no selections")
    top_n = args.top_n
    if top_n == TOP_N_FROM_SETTINGS:
        top_n = settings.default_top_n
    filters = FilterParams(
        value_keep_percent=args.keep_value,
        probability_keep_percent=args.keep_probability,
        money_ev_band=_band(args.money_ev_band),
        payout_band=_band(args.payout_band),
        top_n=top_n,
    )
    pool = None
    if args.turnover > 0:
        pool = PoolParams(
            turnover=args.turnover,
            bonus=args.bonus,
            retention=settings.payout_retention,
            stake=settings.row_stake,
        )
    analysis = analyze_selection(
        coupon.matches,
        coupon.selections,
        filters=filters,
        pool=pool,
        lookup_odds=coupon.lookup_odds if args.use_lookup else None,
        settings=settings,
    )
    if args.format == "csv":
        sys.stdout.write(rows_to_csv(analysis.kept_rows))
        return 0
    _print_json(_analysis_payload(analysis, limit=args.limit))
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pool-ev")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for diagnostics on stderr",
    )
    subparsers = parser.add_subparsers(dest="command")

    count = subparsers.add_parser("count", help="Print the row space size of the selections")
    count.add_argument("--coupon", required=True, help="Coupon JSON path")
    count.set_defaults(func=_cmd_count)

    classify = subparsers.add_parser("classify", help="Classify the coupon by favourite spread")
    classify.add_argument("--coupon", required=True, help="Coupon JSON path")
    classify.set_defaults(func=_cmd_classify)

    analyze = subparsers.add_parser("analyze", help="Build, score and filter rows")
    analyze.add_argument("--coupon", required=True, help="Coupon JSON path")
    analyze.add_argument("--keep-value", type=float, default=100.0, help="Top %% by value index")
    analyze.add_argument(
        "--keep-probability", type=float, default=100.0, help="Top %% by joint probability"
    )
    analyze.add_argument("--turnover", type=float, default=0.0, help="Total stake volume")
    analyze.add_argument("--bonus", type=float, default=0.0, help="Extra pool money")
    analyze.add_argument(
        "--money-ev-band",
        type=float,
        nargs=2,
        metavar=("MIN", "MAX"),
        help="Monetary EV percentile band",
    )
    analyze.add_argument(
        "--payout-band",
        type=float,
        nargs=2,
        metavar=("MIN", "MAX"),
        help="Expected payout percentile band",
    )
    analyze.add_argument(
        "--top-n",
        type=int,
        nargs="?",
        const=TOP_N_FROM_SETTINGS,
        default=None,
        help="Keep the N rows with the highest monetary EV (default N from settings)",
    )
    analyze.add_argument("--use-lookup", action="store_true", help="Apply coupon lookup_odds")
    analyze.add_argument("--seed", type=int, default=None, help="Sampling seed")
    analyze.add_argument("--format", choices=["json", "csv"], default="json")
    analyze.add_argument("--limit", type=int, default=20, help="Rows included in JSON output")
    analyze.set_defaults(func=_cmd_analyze)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), stream=sys.stderr)
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0
    try:
        return int(func(args))
    except (CLIError, PoolEVError, FileNotFoundError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
