#!/usr/bin/env python3
"""
Fixture report: statistics, confidence and recent matches for one fixture.

Reads the three CSV sources of a fixture and prints the fixture view as
JSON (or a short text summary).

Usage:
    python scripts/fixture_report.py --similar PL__ID537__top12_enriched.csv \
        --panels PL__ID537__panels.csv --archive E0.csv
    python scripts/fixture_report.py --similar top.csv --archive E0.csv \
        --fixture-date 2026-02-01 --home "Arsenal FC" --away "Chelsea" --text
    python scripts/fixture_report.py --round top.csv --panels panels.csv
"""

import argparse
import json
import logging
import sys

from rodada.config import get_settings
from rodada.etl.csv_source import read_csv_rows
from rodada.features.round_summary import build_round_summary
from rodada.fixture_view import build_fixture_view


def _fmt(x, nd=2) -> str:
    return "-" if x is None else f"{x:.{nd}f}"


def print_text(view) -> None:
    meta = view.meta
    print(f"Fixture {meta.fixture_id or '?'}  {meta.competition}  MD {meta.matchday}  {meta.utc_date}")
    for side, stats in (("HOME", view.statistics.home_stats), ("AWAY", view.statistics.away_stats)):
        print(f"\n{side} ({stats.n_picks} enriched picks)")
        for key, metric in stats.metrics.items():
            conf = metric.confidence
            pct = "-" if conf.percent is None else f"{conf.percent}%"
            print(
                f"  {key:<16} simple={_fmt(metric.simple_mean):>6} "
                f"weighted={_fmt(metric.weighted_mean):>6}  {pct:>4} {conf.label}"
            )

    for label, anchor, recent in (
        ("home", view.home_anchor, view.home_recent),
        ("away", view.away_anchor, view.away_recent),
    ):
        score = _fmt(anchor.similarity_score, 3)
        print(f"\nRecent {label} matches of {anchor.best_canonical_candidate!r} (score {score})")
        for pick in recent:
            print(f"  #{pick.rank:<2} {pick.date:<12} {pick.home_name} x {pick.away_name}  {pick.score}")

    for warning in view.warnings:
        print(f"\nWARNING: {warning}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Fixture statistics report")
    parser.add_argument("--similar", type=str, help="Similar-games (enriched top) CSV")
    parser.add_argument("--panels", type=str, help="Panel CSV (pre-aggregated, one row per side)")
    parser.add_argument("--archive", type=str, help="League archive CSV (e.g. football-data E0.csv)")
    parser.add_argument("--round", type=str, help="Top CSV: print the round overview instead")
    parser.add_argument("--base-name", type=str, help="File base name (PL__ID1__Home_vs_Away__top12) used to infer team names")
    parser.add_argument("--fixture-date", type=str, help="ISO or DD/MM/YYYY; defaults to panel metadata")
    parser.add_argument("--home", type=str, help="Home team display name")
    parser.add_argument("--away", type=str, help="Away team display name")
    parser.add_argument("--home-anchor", type=str, help="Upstream canonical archive name (home)")
    parser.add_argument("--away-anchor", type=str, help="Upstream canonical archive name (away)")
    parser.add_argument("--limit", type=int, help="Recent matches per side")
    parser.add_argument("--text", action="store_true", help="Human-readable output")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else get_settings().LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    panel_rows = read_csv_rows(args.panels) if args.panels else []

    if args.round:
        summary = build_round_summary(
            read_csv_rows(args.round), panel_rows, base_name=args.base_name
        )
        print(json.dumps(summary.to_dict(), indent=2, ensure_ascii=False))
        return 0

    if not args.similar and not args.panels:
        parser.error("--similar or --panels is required")

    view = build_fixture_view(
        similar_rows=read_csv_rows(args.similar) if args.similar else [],
        panel_rows=panel_rows,
        archive_rows=read_csv_rows(args.archive) if args.archive else [],
        fixture_date=args.fixture_date,
        home_seed=args.home,
        away_seed=args.away,
        home_anchor=args.home_anchor,
        away_anchor=args.away_anchor,
        limit=args.limit,
        base_name=args.base_name,
    )

    if args.text:
        print_text(view)
    else:
        print(json.dumps(view.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
