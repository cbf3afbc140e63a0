"""CLI entry points."""

from pathlib import Path
from typing import List, Optional, Sequence
import argparse
import json
import logging
import sys

from propcheck.config import Config
from propcheck.exceptions import PropCheckError
from propcheck.normalization.schema import validate_table
from propcheck.normalization.snapshot import (
    game_logs_from_list,
    player_from_dict,
    snapshot_from_dict,
    validate_stat,
)
from propcheck.ops.logging import configure_logging
from propcheck.pipeline import analyze_prop
from propcheck.simulation.teammate_impact import TeammateLog, simulate_teammate_absence
from propcheck.simulation.what_if import WhatIfModification, simulate_snapshot

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 2


def _read_json(path: str):
    return json.loads(Path(path).read_text(encoding="utf-8"))


def _parse_modification(raw: str) -> WhatIfModification:
    """``kind=value`` or a bare ``kind``. JSON values are decoded."""
    if "=" not in raw:
        return WhatIfModification(kind=raw.strip())
    kind, value = raw.split("=", 1)
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    return WhatIfModification(kind=kind.strip(), value=parsed)


def _emit(payload: dict, text: Optional[str], output_format: str) -> None:
    if output_format == "text" and text is not None:
        print(text)
    else:
        print(json.dumps(payload, indent=2, sort_keys=False))


def _run_analyze(args: argparse.Namespace, config: Config) -> int:
    snapshot = snapshot_from_dict(_read_json(args.snapshot))
    report = analyze_prop(snapshot, config=config, max_games=args.max_games)
    _emit(report.to_dict(), report.explain(), args.format)
    return EXIT_OK


def _run_what_if(args: argparse.Namespace, config: Config) -> int:
    snapshot = snapshot_from_dict(_read_json(args.snapshot))
    modifications = [_parse_modification(raw) for raw in args.mod or []]
    result = simulate_snapshot(snapshot, modifications, config)
    _emit(result.to_dict(), result.summary, args.format)
    return EXIT_OK


def _load_teammates(payload: dict) -> List[TeammateLog]:
    rows = payload.get("teammates") or []
    validate_table("teammates", rows)
    return [
        TeammateLog(
            player=player_from_dict(row["player"]),
            game_logs=game_logs_from_list(row["game_logs"]),
        )
        for row in rows
    ]


def _run_teammates(args: argparse.Namespace, config: Config) -> int:
    payload = _read_json(args.payload)
    stat = validate_stat(payload.get("stat"))
    impacts = simulate_teammate_absence(
        payload.get("absent_player_dates") or [],
        _load_teammates(payload),
        stat,
        config,
    )
    lines = [
        f"{item.player_name}: {item.avg_with:.1f} -> {item.avg_without:.1f} "
        f"({item.delta:+.1f}, {item.pct_change:+.0f}%) {item.direction}"
        for item in impacts
    ] or ["No teammate has enough games on both sides of the absence"]
    _emit({"stat": stat, "impacts": [item.to_dict() for item in impacts]}, "\n".join(lines), args.format)
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="propcheck")
    parser.add_argument("--config", dest="config_path", help="Path to JSON or .env config file")
    parser.add_argument("--run-id", dest="run_id", help="Tag log lines with a run id")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser("analyze", help="Full verdict and analytics for a snapshot")
    analyze_parser.add_argument("snapshot", help="Snapshot JSON file")
    analyze_parser.add_argument("--max-games", dest="max_games", type=int, default=None)
    analyze_parser.add_argument("--format", choices=["json", "text"], default="json")

    what_if_parser = subparsers.add_parser("what-if", help="Rerun the verdict with modifications")
    what_if_parser.add_argument("snapshot", help="Snapshot JSON file")
    what_if_parser.add_argument(
        "--mod",
        action="append",
        help="Modification as kind=value, e.g. change_line=24.5 or change_venue=away (repeatable)",
    )
    what_if_parser.add_argument("--format", choices=["json", "text"], default="json")

    teammates_parser = subparsers.add_parser("teammates", help="Teammate output with a player out")
    teammates_parser.add_argument("payload", help="JSON with stat, absent_player_dates and teammates")
    teammates_parser.add_argument("--format", choices=["json", "text"], default="json")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.run_id)

    try:
        config = Config.load(args.config_path)
        if args.command == "analyze":
            return _run_analyze(args, config)
        if args.command == "what-if":
            return _run_what_if(args, config)
        if args.command == "teammates":
            return _run_teammates(args, config)
    except PropCheckError as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_INVALID
    except (OSError, ValueError) as exc:
        logger.error("Could not read input: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_INVALID
    parser.error(f"unknown command {args.command}")
    return EXIT_INVALID


if __name__ == "__main__":
    raise SystemExit(main())
