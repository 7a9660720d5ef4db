"""
Command-line front end over a Pit Scout data directory.

Usage:
    python -m pit_scout.cli --data-dir data import-teams teams.json
    python -m pit_scout.cli add-match 12 --red 1 2 3 --blue 4 5 6
    python -m pit_scout.cli record-result 12 80 95
    python -m pit_scout.cli matches
    python -m pit_scout.cli team-stats 118
    python -m pit_scout.cli stats-table --out output/team_stats.parquet
    python -m pit_scout.cli export dump.json
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .errors import PitScoutError
from .matches import MatchRecordStore, new_match
from .profiles import performance
from .profiles.identity import TeamRegistry, import_teams
from .profiles.scouting import ScoutingLog
from .scoring.rulesets import resolve_ruleset
from .settings import EngineConfig, load_engine_config
from .storage import transfer
from .storage.adapter import InMemoryAdapter, JsonFileAdapter, PersistenceAdapter

logger = logging.getLogger(__name__)


def build_adapter(config: EngineConfig) -> PersistenceAdapter:
    if config.storage.backend == "memory":
        return InMemoryAdapter(capacity_bytes=config.storage.capacity_bytes)
    if config.storage.backend == "file":
        return JsonFileAdapter(config.data_dir)
    raise ValueError(f"Unknown storage backend: {config.storage.backend}")


def cmd_import_teams(args, adapter, config) -> None:
    teams = import_teams(adapter, transfer.read_dump(args.path))
    print(f"Imported {len(teams)} teams")


def cmd_add_match(args, adapter, config) -> None:
    status = "completed" if args.red_score is not None and args.blue_score is not None else "scheduled"
    match = new_match(
        args.match_number,
        args.red,
        args.blue,
        comp_level=args.level,
        red_score=args.red_score,
        blue_score=args.blue_score,
        status=status,
    )
    MatchRecordStore(adapter).add(match)
    print(f"Added match {match.match_number} ({match.status})")


def cmd_record_result(args, adapter, config) -> None:
    match = MatchRecordStore(adapter).record_result(args.match_number, args.red_total, args.blue_total)
    print(f"Match {match.match_number}: red {match.red_total} - blue {match.blue_total} ({match.winning_alliance})")


def cmd_delete_match(args, adapter, config) -> None:
    MatchRecordStore(adapter).remove(args.match_number)
    print(f"Deleted match {args.match_number}")


def cmd_matches(args, adapter, config) -> None:
    matches = MatchRecordStore(adapter).list()
    if not matches:
        print("No matches found")
        return
    for m in matches:
        red = " ".join(str(t) for t in m.red_alliance)
        blue = " ".join(str(t) for t in m.blue_alliance)
        result = f"{m.red_total}-{m.blue_total} {m.winning_alliance}" if m.is_completed else m.status
        print(f"{m.match_number:>4}  {m.comp_level:<13}  red [{red}]  blue [{blue}]  {result}")


def _inputs(adapter):
    entries = ScoutingLog(adapter).entries()
    matches = MatchRecordStore(adapter).list()
    teams = TeamRegistry(adapter).list()
    return entries, matches, teams


def cmd_team_stats(args, adapter, config) -> None:
    entries, matches, _ = _inputs(adapter)
    ruleset = resolve_ruleset(config.scouting_ruleset)
    stats = performance.aggregate(entries, matches, args.team, ruleset)
    for key, value in stats.to_dict().items():
        print(f"{key}: {value}")


def cmd_top(args, adapter, config) -> None:
    entries, matches, teams = _inputs(adapter)
    ruleset = resolve_ruleset(config.scouting_ruleset)
    best = performance.top_performer(entries, matches, teams, ruleset)
    if best is None:
        print("No top performer yet")
    else:
        print(f"{best.team_number} {best.nickname}".strip())


def cmd_stats_table(args, adapter, config) -> None:
    entries, matches, teams = _inputs(adapter)
    ruleset = resolve_ruleset(config.scouting_ruleset)
    df = performance.team_stats_table(entries, matches, teams, ruleset)
    if args.out:
        path = performance.write_team_stats(df, args.out)
        print(f"Wrote {len(df)} rows to {path}")
    elif len(df) == 0:
        print("No teams found")
    else:
        print(df.to_string(index=False))


def cmd_export(args, adapter, config) -> None:
    path = transfer.write_dump(adapter, args.path)
    print(f"Exported to {path}")


def cmd_import_dump(args, adapter, config) -> None:
    imported = transfer.import_dump(adapter, transfer.read_dump(args.path))
    print(f"Imported {len(imported)} keys")


def cmd_clear(args, adapter, config) -> None:
    removed = transfer.clear_cached_data(adapter)
    print(f"Cleared {len(removed)} keys")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pit_scout", description="Pit Scout scouting data tools")
    parser.add_argument("--data-dir", type=str, default=None, help="Data directory (overrides config)")
    parser.add_argument("--config", type=str, default=None, help="Engine config (JSON or YAML)")
    parser.add_argument("--verbose", "-v", action="store_true")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("import-teams", help="Import teams from a JSON payload")
    p.add_argument("path")
    p.set_defaults(func=cmd_import_teams)

    p = sub.add_parser("add-match", help="Add a match")
    p.add_argument("match_number", type=int)
    p.add_argument("--red", type=int, nargs=3, required=True)
    p.add_argument("--blue", type=int, nargs=3, required=True)
    p.add_argument("--level", type=str, default="qualification")
    p.add_argument("--red-score", type=int, default=None)
    p.add_argument("--blue-score", type=int, default=None)
    p.set_defaults(func=cmd_add_match)

    p = sub.add_parser("record-result", help="Record final alliance totals")
    p.add_argument("match_number", type=int)
    p.add_argument("red_total", type=int)
    p.add_argument("blue_total", type=int)
    p.set_defaults(func=cmd_record_result)

    p = sub.add_parser("delete-match", help="Delete a match and its owned records")
    p.add_argument("match_number", type=int)
    p.set_defaults(func=cmd_delete_match)

    p = sub.add_parser("matches", help="List matches")
    p.set_defaults(func=cmd_matches)

    p = sub.add_parser("team-stats", help="Performance summary for one team")
    p.add_argument("team", type=int)
    p.set_defaults(func=cmd_team_stats)

    p = sub.add_parser("top", help="Top performer by average total")
    p.set_defaults(func=cmd_top)

    p = sub.add_parser("stats-table", help="Per-team statistics table")
    p.add_argument("--out", type=str, default=None, help="Write to .csv or .parquet")
    p.set_defaults(func=cmd_stats_table)

    p = sub.add_parser("export", help="Export every key to one JSON file")
    p.add_argument("path")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("import-dump", help="Overwrite keys from an export file")
    p.add_argument("path")
    p.set_defaults(func=cmd_import_dump)

    p = sub.add_parser("clear", help="Clear cached data (keeps settings)")
    p.set_defaults(func=cmd_clear)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_engine_config(args.config) if args.config else EngineConfig()
    except (OSError, ValueError) as e:
        print(f"Error (config): {e}", file=sys.stderr)
        return 1
    if args.data_dir:
        config.data_dir = args.data_dir

    try:
        adapter = build_adapter(config)
        args.func(args, adapter, config)
    except PitScoutError as e:
        print(f"Error ({e.category}): {e.message}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error (io): {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
