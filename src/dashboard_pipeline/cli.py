"""Command-line interface for inspecting the pipeline's output.

Provides subcommands: `status`, `list` and `series`. Each command is
implemented as a `cmd_*` function that accepts an argparse namespace and
writes to stdout; nothing derived is written to disk.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dashboard_pipeline.aggregate.missions import normalize_mission_filters
from dashboard_pipeline.config import get_settings
from dashboard_pipeline.logging_config import configure_logging
from dashboard_pipeline.state import ALL, SOURCES, VIEW_NAMES, AppState

log = logging.getLogger(__name__)


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _loaded_state(args: argparse.Namespace) -> AppState:
    """Build an `AppState` from the environment and load every source."""
    state = AppState(get_settings())
    state.load()

    changes: dict[str, object] = {}
    for name in ("year", "continent", "crypto", "country", "top_n"):
        value = getattr(args, name, None)
        if value is not None:
            changes[name] = value
    if getattr(args, "growth_years", None):
        changes["growth_years"] = tuple(args.growth_years)
    if getattr(args, "companies", None) or getattr(args, "statuses", None):
        changes["missions"] = normalize_mission_filters(
            companies=args.companies,
            statuses=args.statuses,
        )
    if changes:
        state.select(**changes)
    return state


# --------------------------------------------------
# Commands
# --------------------------------------------------
def cmd_status(args: argparse.Namespace) -> int:
    """Print row counts (or the load error) for every source."""
    state = _loaded_state(args)
    failed = 0
    for name in SOURCES:
        res = state.result(name)
        if res.ok:
            print(f"{name:<12} ok      rows={len(res.rows)} dropped={res.dropped}")
        else:
            failed += 1
            print(f"{name:<12} NO DATA {res.error}")
    return 1 if failed else 0


def cmd_list(_: argparse.Namespace) -> int:
    """Print the available view names."""
    for name in VIEW_NAMES:
        print(name)
    return 0


def cmd_series(args: argparse.Namespace) -> int:
    """Print one view as JSON; exits non-zero when the view has no data."""
    state = _loaded_state(args)
    views = state.views()
    if args.name not in views:
        log.error("Unknown view %r (see `list`)", args.name)
        return 2

    view = views[args.name]()
    payload = {"view": view.name, "no_data": view.no_data, "error": view.error, "records": view.as_dicts()}
    json.dump(payload, sys.stdout, indent=2 if args.pretty else None)
    sys.stdout.write("\n")
    return 1 if view.no_data else 0


# --------------------------------------------------
# CLI
# --------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(prog="dashboard-pipeline")
    p.add_argument("--log-file", type=Path, default=Path("logs/pipeline.log"))
    p.add_argument("--verbose", action="store_true")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("status")
    sub.add_parser("list")

    p_series = sub.add_parser("series")
    p_series.add_argument("name")
    p_series.add_argument("--year", type=int, default=None)
    p_series.add_argument("--continent", default=None, help=f"continent name or {ALL!r}")
    p_series.add_argument("--crypto", default=None, help=f"symbol or {ALL!r}")
    p_series.add_argument("--country", default=None)
    p_series.add_argument("--top-n", type=int, default=None)
    p_series.add_argument("--growth-year", dest="growth_years", type=int, action="append", default=None)
    p_series.add_argument("--company", dest="companies", action="append", default=None)
    p_series.add_argument("--status", dest="statuses", action="append", default=None)
    p_series.add_argument("--pretty", action="store_true")

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    args = build_parser().parse_args(argv)
    # stdout carries command output; logs go to stderr
    configure_logging(
        args.log_file,
        level=logging.DEBUG if args.verbose else logging.INFO,
        stream=sys.stderr,
    )

    if args.cmd == "status":
        return cmd_status(args)
    if args.cmd == "list":
        return cmd_list(args)
    if args.cmd == "series":
        return cmd_series(args)
    raise SystemExit(2)


if __name__ == "__main__":
    raise SystemExit(main())
