"""Team totals, standings and score progression.

Team totals are rebuilt from scratch on every call; nothing is patched
incrementally, so running twice on the same rows gives the same MeetTeam rows.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping, Sequence

from .roster import counted_athlete_ids
from .timecodec import normalize_event_name
from .types import Event, MeetLineup, MeetTeam, RelayEntry, TeamEntry

DEFAULT_CHAMPIONSHIP_EVENT_ORDER = (
    "200 Medley Relay",
    "800 Free Relay",
    "500 Free",
    "200 IM",
    "50 Free",
    "1M Diving",
    "200 Free Relay",
    "1000 Free",
    "100 Fly",
    "400 IM",
    "200 Free",
    "100 Breast",
    "100 Back",
    "400 Medley Relay",
    "1650 Free",
    "200 Back",
    "100 Free",
    "200 Breast",
    "200 Fly",
    "3M Diving",
    "400 Free Relay",
)

_TYPE_ORDER = {"individual": 0, "relay": 1, "diving": 2}


@dataclass(frozen=True)
class ProgressionPoint:
    event_id: str
    event_name: str
    event_number: int
    scores: Mapping[str, float]


def default_event_order(meet_type: Literal["championship", "dual"]) -> list[str]:
    """Program order by event name; dual meets have none."""
    if meet_type == "championship":
        return list(DEFAULT_CHAMPIONSHIP_EVENT_ORDER)
    return []


def event_order_from_names(events: Sequence[Event], names: Sequence[str]) -> list[str]:
    """Map a name-based program order onto this meet's event ids."""
    by_key: dict[str, str] = {}
    for event in events:
        by_key.setdefault(normalize_event_name(event.name), event.id)
    order: list[str] = []
    for name in names:
        event_id = by_key.get(normalize_event_name(name))
        if event_id is not None and event_id not in order:
            order.append(event_id)
    return order


def _counted_sets(
    teams: Sequence[TeamEntry], lineups: Sequence[MeetLineup]
) -> dict[str, set[str]]:
    return {team.team_id: counted_athlete_ids(team, lineups) for team in teams}


def _relay_scores(relay: RelayEntry, exhibition: set[str]) -> bool:
    """A relay scores only when none of its swimmers is an exhibition athlete."""
    return not any(member in exhibition for member in relay.members if member)


def _exhibition_ids(teams: Sequence[TeamEntry]) -> set[str]:
    out: set[str] = set()
    for team in teams:
        out.update(team.selection.exhibition_athlete_ids)
    return out


def aggregate_team_scores(
    lineups: Sequence[MeetLineup],
    relays: Sequence[RelayEntry],
    teams: Sequence[TeamEntry],
) -> tuple[MeetTeam, ...]:
    """Per-team individual/diving/relay sums, in team input order.

    Only counted athletes score (test-spot non-scorers and exhibition
    athletes are excluded).
    """
    counted = _counted_sets(teams, lineups)
    exhibition = _exhibition_ids(teams)
    out: list[MeetTeam] = []
    for team in teams:
        athletes = counted[team.team_id]
        individual = 0.0
        diving = 0.0
        for lineup in lineups:
            if lineup.team_id != team.team_id or lineup.athlete_id not in athletes:
                continue
            if lineup.event_type == "diving":
                diving += lineup.points or 0
            elif lineup.event_type == "individual":
                individual += lineup.points or 0
        relay = sum(
            r.points or 0
            for r in relays
            if r.team_id == team.team_id and _relay_scores(r, exhibition)
        )
        out.append(
            MeetTeam(
                team_id=team.team_id,
                individual_score=individual,
                diving_score=diving,
                relay_score=relay,
                total_score=individual + diving + relay,
            )
        )
    return tuple(out)


def team_standings(meet_teams: Sequence[MeetTeam]) -> tuple[MeetTeam, ...]:
    """Teams by total descending; ties keep input order."""
    return tuple(sorted(meet_teams, key=lambda t: -t.total_score))


def sort_events(
    events: Sequence[Event], event_order: Sequence[str] | None = None
) -> list[Event]:
    """Program order.

    With a custom order (event ids): those events first, in that order,
    unknown ids ignored, unlisted events appended in default order.
    Default: individual, relay, diving, then by name.
    """
    default = sorted(events, key=lambda e: (_TYPE_ORDER.get(e.event_type, 3), e.name))
    if not event_order:
        return default
    by_id = {event.id: event for event in events}
    ordered: list[Event] = []
    seen: set[str] = set()
    for event_id in event_order:
        event = by_id.get(event_id)
        if event is not None and event_id not in seen:
            ordered.append(event)
            seen.add(event_id)
    ordered.extend(e for e in default if e.id not in seen)
    return ordered


def score_progression(
    events: Sequence[Event],
    lineups: Sequence[MeetLineup],
    relays: Sequence[RelayEntry],
    teams: Sequence[TeamEntry],
    event_order: Sequence[str] | None = None,
    cumulative: bool = True,
) -> tuple[ProgressionPoint, ...]:
    """Team scores after each event in program order.

    cumulative=True gives running totals (the last point equals the team
    totals); cumulative=False gives each event's points only.
    """
    counted = _counted_sets(teams, lineups)
    exhibition = _exhibition_ids(teams)
    running = {team.team_id: 0.0 for team in teams}
    points: list[ProgressionPoint] = []

    for number, event in enumerate(sort_events(events, event_order), start=1):
        delta = {team.team_id: 0.0 for team in teams}
        for lineup in lineups:
            if lineup.event_id != event.id or lineup.team_id not in delta:
                continue
            if lineup.athlete_id in counted[lineup.team_id]:
                delta[lineup.team_id] += lineup.points or 0
        for relay in relays:
            if relay.event_id != event.id or relay.team_id not in delta:
                continue
            if _relay_scores(relay, exhibition):
                delta[relay.team_id] += relay.points or 0

        for team_id, value in delta.items():
            running[team_id] += value
        points.append(
            ProgressionPoint(
                event_id=event.id,
                event_name=event.name,
                event_number=number,
                scores=dict(running) if cumulative else delta,
            )
        )
    return tuple(points)
