"""Whole-meet scoring pass (pure, no persistence).

score_meet() takes a MeetSnapshot and returns new lineup/relay rows with
place/points/final time filled in, plus fresh team totals and standings.
The host persists the result; nothing here touches storage.

View modes:
- simulated: every event is ranked from seed (or override) times; real
  results are ignored.
- real: only rows with applied real results keep a place; others are cleared.
- hybrid: events with any real result use real results only; every other
  event is simulated.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Sequence, TypeVar

from .aggregate import (
    aggregate_team_scores,
    default_event_order,
    event_order_from_names,
    score_progression,
    team_standings,
)
from .placement import PlacementEntry, placements_by_id, resolve_placements
from .scoring_table import (
    ScoringTable,
    generate_scoring_table,
    round_half_up,
    scoring_table_from_mappings,
)
from .timecodec import format_seconds_to_time
from .types import (
    EventType,
    MeetLineup,
    MeetSnapshot,
    MeetTeam,
    RelayEntry,
    ViewMode,
)
from .validation import MeetSettings

logger = logging.getLogger(__name__)

VIEW_MODES: tuple[ViewMode, ...] = ("simulated", "real", "hybrid")

Row = TypeVar("Row", MeetLineup, RelayEntry)


@dataclass(frozen=True)
class ScoredMeet:
    lineups: tuple[MeetLineup, ...]
    relays: tuple[RelayEntry, ...]
    teams: tuple[MeetTeam, ...]
    standings: tuple[MeetTeam, ...]
    scoring_table: ScoringTable

    def team(self, team_id: str) -> MeetTeam | None:
        for team in self.teams:
            if team.team_id == team_id:
                return team
        return None


def build_scoring_table(settings: MeetSettings) -> ScoringTable:
    """Persisted custom tables win; otherwise generate from the settings."""
    if settings.individual_scoring:
        relay = settings.relay_scoring
        if not relay:
            relay = {
                place: round_half_up(points * settings.relay_multiplier)
                for place, points in settings.individual_scoring.items()
            }
        return scoring_table_from_mappings(
            settings.scoring_places, settings.individual_scoring, relay
        )
    return generate_scoring_table(
        settings.scoring_places,
        settings.scoring_start_points,
        settings.relay_multiplier,
    )


def _group_by_event(rows: Iterable[Row]) -> dict[str, list[Row]]:
    grouped: dict[str, list[Row]] = {}
    for row in rows:
        grouped.setdefault(row.event_id, []).append(row)
    return grouped


def has_excluded_athlete(row: MeetLineup | RelayEntry, excluded_athletes: set[str]) -> bool:
    """True when the lineup's athlete, or any relay member, is excluded."""
    if isinstance(row, RelayEntry):
        return any(member in excluded_athletes for member in row.members if member)
    return row.athlete_id in excluded_athletes


def real_result_events(
    lineups: Sequence[MeetLineup], relays: Sequence[RelayEntry], view: ViewMode
) -> set[str]:
    """Event ids placed from real results under `view`.

    In the real view every event is, including events with no results yet.
    """
    rows = (*lineups, *relays)
    if view == "simulated":
        return set()
    if view == "real":
        return {r.event_id for r in rows}
    return {r.event_id for r in rows if r.real_result_applied}


def _simulated_final_text(row: MeetLineup | RelayEntry, event_type: EventType) -> str | None:
    if row.override_time_seconds is not None:
        return format_seconds_to_time(row.override_time_seconds, event_type == "diving")
    return row.seed_time


def _place_event(
    rows: Sequence[Row],
    event_type: EventType,
    table: ScoringTable,
    use_real: bool,
    excluded_athletes: set[str],
) -> list[Row]:
    if use_real:
        ranked = [row for row in rows if row.real_result_applied]
        entries = [
            PlacementEntry(row.id, row.final_time_seconds, row.place) for row in ranked
        ]
    else:
        ranked = [row for row in rows if not has_excluded_athlete(row, excluded_athletes)]
        entries = [PlacementEntry(row.id, row.effective_seconds) for row in ranked]

    by_id = placements_by_id(resolve_placements(entries, event_type, table, table.places))
    out: list[Row] = []
    for row in rows:
        placement = by_id.get(row.id)
        if placement is None:
            out.append(
                replace(row, place=None, points=0, final_time=None, final_time_seconds=None)
            )
        elif use_real:
            out.append(replace(row, place=placement.place, points=placement.points))
        else:
            out.append(
                replace(
                    row,
                    place=placement.place,
                    points=placement.points,
                    final_time=_simulated_final_text(row, event_type),
                    final_time_seconds=row.effective_seconds,
                )
            )
    return out


def place_rows(
    lineups: Sequence[MeetLineup],
    relays: Sequence[RelayEntry],
    table: ScoringTable,
    view: ViewMode = "hybrid",
    excluded_athletes: set[str] | None = None,
    only_events: set[str] | None = None,
) -> tuple[tuple[MeetLineup, ...], tuple[RelayEntry, ...]]:
    """Place every event (or only `only_events`) and return new rows in input order."""
    if view not in VIEW_MODES:
        raise ValueError(f"view must be one of {VIEW_MODES}, got {view!r}")
    excluded = excluded_athletes or set()
    real_events = real_result_events(lineups, relays, view)

    placed: dict[str, MeetLineup | RelayEntry] = {}
    for event_id, rows in _group_by_event(lineups).items():
        if only_events is not None and event_id not in only_events:
            continue
        event_type = rows[0].event_type
        for row in _place_event(rows, event_type, table, event_id in real_events, excluded):
            placed[row.id] = row
    for event_id, rows in _group_by_event(relays).items():
        if only_events is not None and event_id not in only_events:
            continue
        for row in _place_event(rows, "relay", table, event_id in real_events, excluded):
            placed[row.id] = row

    return (
        tuple(placed.get(l.id, l) for l in lineups),
        tuple(placed.get(r.id, r) for r in relays),
    )


def exhibition_ids(meet: MeetSnapshot) -> set[str]:
    out: set[str] = set()
    for team in meet.teams:
        out.update(team.selection.exhibition_athlete_ids)
    return out


def score_meet(meet: MeetSnapshot, view: ViewMode = "hybrid") -> ScoredMeet:
    """
    Recompute every place, point and team total for the meet.

    Raises:
      ScoringConfigurationError: the meet's scoring settings are invalid;
        nothing is scored in that case.
    """
    table = build_scoring_table(meet.settings)
    lineups, relays = place_rows(
        meet.lineups, meet.relays, table, view, excluded_athletes=exhibition_ids(meet)
    )
    teams = aggregate_team_scores(lineups, relays, meet.teams)
    logger.debug(
        f"Scored meet ({view}): {len(lineups)} lineups, {len(relays)} relays, "
        f"{len(teams)} teams"
    )
    return ScoredMeet(
        lineups=lineups,
        relays=relays,
        teams=teams,
        standings=team_standings(teams),
        scoring_table=table,
    )


def initial_event_order(meet: MeetSnapshot) -> tuple[str, ...] | None:
    """Event ids in the standard program order for a new meet of this type.

    Dual meets have no standard order; the host stores None and the default
    individual/relay/diving order applies.
    """
    names = default_event_order(meet.settings.meet_type)
    order = event_order_from_names(meet.events, names)
    return tuple(order) or None


def meet_progression(scored: ScoredMeet, meet: MeetSnapshot, cumulative: bool = True):
    """Score progression for an already-scored meet in program order."""
    return score_progression(
        meet.events,
        scored.lineups,
        scored.relays,
        meet.teams,
        event_order=meet.event_order,
        cumulative=cumulative,
    )
