"""
Performance bucket: per-team statistics from scouting entries and match results.

Everything here is a pure function of its inputs (scouting entries, matches,
teams). Nothing is cached: statistics are recomputed on every call, so they can
never drift from the underlying records.

Metrics per team:
- auto_avg, teleop_avg, endgame_avg, total_avg: mean points per scouting entry,
  rounded half-up to whole points
- matches_played: matches with the team in either alliance
- win_rate: wins / matches_played * 100, rounded; a win is a completed match
  won by the team's alliance

Usage:
    from pit_scout.profiles import performance

    stats = performance.aggregate(entries, matches, 118)
    best = performance.top_performer(entries, matches, teams)
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import numpy as np
import pandas as pd

from ..mappings import PHASES, STATUS_COMPLETED
from ..matches.schemas import Match
from ..scoring.engine import compute_phase_scores
from ..scoring.rulesets import Ruleset, CRESCENDO_2024
from .identity import Team

# Scouting-form counters follow the 2024 table unless a caller says otherwise
SCOUTING_RULESET = CRESCENDO_2024

SCORE_COLUMNS = ["team_number", "match_number", "auto", "teleop", "endgame", "total"]


@dataclass
class TeamPerformance:
    team_number: int
    auto_avg: int = 0
    teleop_avg: int = 0
    endgame_avg: int = 0
    total_avg: int = 0
    matches_played: int = 0
    win_rate: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero for positive values.

    >>> round_half_up(2.5)
    3
    """
    if value is None or pd.isna(value):
        return 0
    return int(np.floor(value + 0.5))


def _match_dict(match: Union[Match, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(match, Match):
        return match.to_dict()
    return match


def _team_number(team: Union[Team, Dict[str, Any]]) -> Optional[int]:
    if isinstance(team, Team):
        return team.team_number
    return team.get("team_number")


def score_entries(
    entries: Iterable[Dict[str, Any]],
    ruleset: Ruleset = SCOUTING_RULESET,
) -> pd.DataFrame:
    """
    Score every scouting entry.

    Returns
    -------
    pd.DataFrame
        One row per entry in input order with columns
        team_number, match_number, auto, teleop, endgame, total
    """
    rows = []
    for entry in entries:
        phases = compute_phase_scores(entry, ruleset)
        rows.append({
            "team_number": entry.get("team_number"),
            "match_number": entry.get("match_number"),
            **phases,
            "total": sum(phases.values()),
        })

    if not rows:
        return pd.DataFrame(columns=SCORE_COLUMNS)

    return pd.DataFrame(rows, columns=SCORE_COLUMNS)


def _match_record(
    matches: Iterable[Union[Match, Dict[str, Any]]],
    team_number: int,
) -> Dict[str, int]:
    """Matches played and won by a team."""
    played = 0
    wins = 0
    for raw in matches:
        match = _match_dict(raw)
        red = match.get("red_alliance") or []
        blue = match.get("blue_alliance") or []
        if team_number in red:
            alliance = "red"
        elif team_number in blue:
            alliance = "blue"
        else:
            continue

        played += 1
        if match.get("status") == STATUS_COMPLETED and match.get("winning_alliance") == alliance:
            wins += 1

    return {"matches_played": played, "wins": wins}


def aggregate(
    entries: Iterable[Dict[str, Any]],
    matches: Iterable[Union[Match, Dict[str, Any]]],
    team_number: int,
    ruleset: Ruleset = SCOUTING_RULESET,
) -> TeamPerformance:
    """
    Performance summary for one team.

    Zero scouting entries give zero averages; zero matches played give a zero
    win rate. Never raises on well-formed input.
    """
    scores = score_entries(entries, ruleset)
    team_scores = scores[scores["team_number"] == team_number]
    record = _match_record(matches, team_number)

    result = TeamPerformance(team_number=team_number, matches_played=record["matches_played"])

    if len(team_scores) > 0:
        means = team_scores[list(PHASES) + ["total"]].astype(float).mean()
        result.auto_avg = round_half_up(means["auto"])
        result.teleop_avg = round_half_up(means["teleop"])
        result.endgame_avg = round_half_up(means["endgame"])
        result.total_avg = round_half_up(means["total"])

    if record["matches_played"] > 0:
        result.win_rate = round_half_up(record["wins"] / record["matches_played"] * 100)

    return result


def mean_totals(
    entries: Iterable[Dict[str, Any]],
    ruleset: Ruleset = SCOUTING_RULESET,
) -> pd.Series:
    """
    Unrounded mean total per scouted team, in order of first observation.
    """
    scores = score_entries(entries, ruleset)
    if len(scores) == 0:
        return pd.Series(dtype=float, name="total_avg")
    means = scores.groupby("team_number", sort=False)["total"].mean()
    return means.astype(float).rename("total_avg")


def top_performer(
    entries: Iterable[Dict[str, Any]],
    matches: Iterable[Union[Match, Dict[str, Any]]],
    teams: Iterable[Union[Team, Dict[str, Any]]],
    ruleset: Ruleset = SCOUTING_RULESET,
) -> Optional[Union[Team, Dict[str, Any]]]:
    """
    Team with the strictly greatest mean total.

    Tie-break: the first team in scouting-entry order keeps the lead (a later
    team must score strictly more). A best mean of 0 yields None, and so does a
    best team that is missing from ``teams``. ``matches`` does not affect the
    ranking; it is accepted so callers pass the same inputs as to aggregate.
    """
    means = mean_totals(entries, ruleset)

    best_team: Optional[int] = None
    best_score = 0.0
    for team_number, score in means.items():
        if score > best_score:
            best_score = score
            best_team = team_number

    if best_team is None:
        return None

    for team in teams:
        if _team_number(team) == best_team:
            return team
    return None


def match_performance(
    entries: Iterable[Dict[str, Any]],
    team_number: int,
    ruleset: Ruleset = SCOUTING_RULESET,
) -> pd.DataFrame:
    """
    Per-match phase points for one team (chart series).

    Columns: name, match_number, auto, teleop, endgame, total
    """
    scores = score_entries(entries, ruleset)
    team_scores = scores[scores["team_number"] == team_number].reset_index(drop=True)
    names = [
        f"Match {m}" if pd.notna(m) else f"Match {i + 1}"
        for i, m in enumerate(team_scores["match_number"])
    ]
    team_scores.insert(0, "name", names)
    return team_scores.drop(columns=["team_number"])


def phase_breakdown(
    entries: Iterable[Dict[str, Any]],
    team_number: int,
    ruleset: Ruleset = SCOUTING_RULESET,
) -> List[Dict[str, Any]]:
    """Average points per phase as [{name, value}] for a pie chart."""
    perf = aggregate(entries, [], team_number, ruleset)
    return [
        {"name": "Auto", "value": perf.auto_avg},
        {"name": "Teleop", "value": perf.teleop_avg},
        {"name": "Endgame", "value": perf.endgame_avg},
    ]


def scouting_summary(
    entries: List[Dict[str, Any]],
    matches: List[Union[Match, Dict[str, Any]]],
    teams: List[Union[Team, Dict[str, Any]]],
    ruleset: Ruleset = SCOUTING_RULESET,
) -> Dict[str, Any]:
    """
    Dashboard counters.

    Returns
    -------
    dict
        teams_scouted_count, matches_scouted_count, completed_matches_count,
        top_performer
    """
    scouted_teams = {e.get("team_number") for e in entries}
    scouted_matches = {e.get("match_number") for e in entries}
    completed = sum(1 for m in matches if _match_dict(m).get("status") == STATUS_COMPLETED)

    return {
        "teams_scouted_count": len(scouted_teams),
        "matches_scouted_count": len(scouted_matches),
        "completed_matches_count": completed,
        "top_performer": top_performer(entries, matches, teams, ruleset),
    }


def team_stats_table(
    entries: List[Dict[str, Any]],
    matches: List[Union[Match, Dict[str, Any]]],
    teams: List[Union[Team, Dict[str, Any]]],
    ruleset: Ruleset = SCOUTING_RULESET,
) -> pd.DataFrame:
    """
    One row of TeamPerformance per known or scouted team.

    Sorted by total_avg descending, then team_number ascending.
    """
    numbers = [_team_number(t) for t in teams]
    for e in entries:
        if e.get("team_number") not in numbers:
            numbers.append(e.get("team_number"))

    rows = [aggregate(entries, matches, n, ruleset).to_dict() for n in numbers if n is not None]
    columns = list(TeamPerformance.__dataclass_fields__)
    if not rows:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(rows, columns=columns)
    nicknames = {
        _team_number(t): (t.nickname if isinstance(t, Team) else t.get("nickname", ""))
        for t in teams
    }
    df.insert(1, "nickname", df["team_number"].map(nicknames).fillna(""))
    return df.sort_values(["total_avg", "team_number"], ascending=[False, True]).reset_index(drop=True)


def write_team_stats(df: pd.DataFrame, path: Union[str, Path]) -> Path:
    """Write a stats table to .parquet or .csv, chosen by extension."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    if p.suffix.lower() == ".parquet":
        df.to_parquet(p, index=False)
    elif p.suffix.lower() == ".csv":
        df.to_csv(p, index=False)
    else:
        raise ValueError(f"Unsupported output extension: {p.suffix}")
    return p
