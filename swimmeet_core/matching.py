"""Real-results reconciliation: match structured result rows to rosters.

Upstream parsing hands us (place|time, name, school, event) rows. Matching
names and school labels is fuzzy, so every lookup returns a tagged variant
instead of raising:
- Resolved: exactly one match.
- Unresolved: a reason ("no_team", "no_match", "ambiguous") and the
  candidates a reconciliation UI can offer.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Generic, Literal, Mapping, Sequence, TypeVar, Union

from .timecodec import parse_optional_time
from .types import Athlete, MeetLineup
from .validation import InputSanitizer

logger = logging.getLogger(__name__)

T = TypeVar("T")

UnresolvedReason = Literal["no_team", "no_match", "ambiguous", "bad_time"]

NICKNAMES: dict[str, tuple[str, ...]] = {
    "mike": ("michael",),
    "alex": ("alexander", "alexandra"),
    "matt": ("matthew",),
    "nick": ("nicholas",),
    "sam": ("samuel", "samantha"),
    "dan": ("daniel", "danielle"),
    "chris": ("christopher", "christine"),
    "jake": ("jacob",),
    "ben": ("benjamin",),
    "joe": ("joseph",),
    "tom": ("thomas",),
    "steve": ("steven", "stephen"),
    "beth": ("elizabeth",),
    "liz": ("elizabeth",),
    "kate": ("katherine", "katelyn"),
}

SCHOOL_ABBREVIATIONS = {
    "harv": "harvard",
    "prin": "princeton",
    "penn": "penn",
    "yale": "yale",
    "brown": "brown",
    "brow": "brown",
    "dart": "dartmouth",
    "columbia": "columbia",
    "cubc": "columbia",
    "cornell": "cornell",
    "coru": "cornell",
}


@dataclass(frozen=True)
class Resolved(Generic[T]):
    value: T
    kind: Literal["resolved"] = "resolved"


@dataclass(frozen=True)
class Unresolved(Generic[T]):
    reason: UnresolvedReason
    candidates: tuple[T, ...] = ()
    kind: Literal["unresolved"] = "unresolved"


MatchResult = Union[Resolved[T], Unresolved[T]]


@dataclass(frozen=True)
class TeamLabel:
    team_id: str
    name: str
    school_name: str | None = None
    short_name: str | None = None


@dataclass(frozen=True)
class ResultRow:
    """One structured result line for an individual or diving event."""
    event_id: str
    name: str
    school: str
    place: int | None = None
    time_text: str | None = None


@dataclass(frozen=True)
class ResultAssignment:
    event_id: str
    team_id: str
    athlete_id: str
    place: int | None
    time_text: str | None
    time_seconds: float | None


def _norm(text: str) -> str:
    return re.sub(r"\s+", " ", (text or "").lower().strip())


def normalize_parsed_name(parsed_name: str) -> tuple[str, str]:
    """("First", "Last") from "Last, First" or "First Last"."""
    s = InputSanitizer.sanitize_athlete_name(parsed_name or "")
    if "," in s:
        last, _, first = s.partition(",")
        return first.strip(), last.strip()
    parts = s.split(" ")
    if len(parts) >= 2:
        return parts[0], " ".join(parts[1:])
    return (parts[0] if parts and parts[0] else ""), ""


def first_name_variants(first_name: str) -> set[str]:
    """The name itself plus nickname/formal equivalents."""
    name = _norm(first_name)
    variants = {name}
    variants.update(NICKNAMES.get(name, ()))
    for nick, formals in NICKNAMES.items():
        if name in formals:
            variants.add(nick)
    return variants


def match_athlete_by_name(
    parsed_name: str, athletes: Sequence[Athlete]
) -> MatchResult[Athlete]:
    """
    Match a result-row name to one athlete.

    Last names must agree (case-insensitive). First names match exactly or
    through nicknames; failing that, a shared first initial is accepted
    when it singles out one athlete.
    """
    if not athletes:
        return Unresolved("no_match")
    first, last = normalize_parsed_name(parsed_name)
    last_n = _norm(last)
    variants = first_name_variants(first) if first else set()

    exact: list[Athlete] = []
    initial: list[Athlete] = []
    for athlete in athletes:
        if _norm(athlete.last_name) != last_n:
            continue
        a_first = _norm(athlete.first_name)
        if not first or a_first in variants:
            exact.append(athlete)
        elif a_first[:1] and a_first[:1] == _norm(first)[:1]:
            initial.append(athlete)

    for group in (exact, initial):
        if len(group) == 1:
            return Resolved(group[0])
        if len(group) > 1:
            return Unresolved("ambiguous", tuple(group))
    return Unresolved("no_match")


def build_school_to_team_map(teams: Sequence[TeamLabel]) -> dict[str, str]:
    """School label variants (full, first word, short code, abbreviations) → team id."""
    mapping: dict[str, str] = {}
    for team in teams:
        school = (team.school_name or team.name or "").strip()
        short = (team.short_name or "").strip()
        if school:
            mapping[_norm(school)] = team.team_id
            mapping[_norm(school.split()[0])] = team.team_id
        if short:
            mapping[_norm(short)] = team.team_id
            # "PRIN-M" → "prin"
            mapping[_norm(short.split("-")[0])] = team.team_id
    for team in teams:
        school = _norm(team.school_name or team.name or "")
        words = school.split(" ")
        for abbr, full in SCHOOL_ABBREVIATIONS.items():
            if full in words:
                mapping.setdefault(abbr, team.team_id)
    return mapping


def resolve_school(label: str, school_map: Mapping[str, str]) -> str | None:
    return school_map.get(_norm(label))


def resolve_result_row(
    row: ResultRow,
    school_map: Mapping[str, str],
    athletes: Sequence[Athlete],
) -> MatchResult[ResultAssignment]:
    """Turn one result row into an assignment, or say why it could not be."""
    team_id = resolve_school(row.school, school_map)
    if team_id is None:
        logger.warning(f"Result row {row.name!r}: unknown school {row.school!r}")
        return Unresolved("no_team")

    try:
        seconds = parse_optional_time(row.time_text)
    except ValueError:
        logger.warning(f"Result row {row.name!r}: bad time {row.time_text!r}")
        return Unresolved("bad_time")

    roster = [a for a in athletes if a.team_id == team_id]
    match = match_athlete_by_name(row.name, roster)

    def assign(athlete: Athlete) -> ResultAssignment:
        return ResultAssignment(
            event_id=row.event_id,
            team_id=team_id,
            athlete_id=athlete.id,
            place=row.place,
            time_text=row.time_text,
            time_seconds=seconds,
        )

    if isinstance(match, Resolved):
        return Resolved(assign(match.value))
    logger.warning(f"Result row {row.name!r} ({row.school}): {match.reason}")
    return Unresolved(match.reason, tuple(assign(a) for a in match.candidates))


def apply_real_results(
    lineups: Sequence[MeetLineup], assignments: Sequence[ResultAssignment]
) -> tuple[MeetLineup, ...]:
    """Lineups with real place/final time recorded for matched assignments.

    An assignment for an athlete without a lineup in that event is ignored;
    creating entries is the host's decision.
    """
    by_key = {(a.event_id, a.athlete_id): a for a in assignments}
    out: list[MeetLineup] = []
    for lineup in lineups:
        assignment = by_key.get((lineup.event_id, lineup.athlete_id))
        if assignment is None:
            out.append(lineup)
            continue
        out.append(
            replace(
                lineup,
                place=assignment.place,
                final_time=assignment.time_text,
                final_time_seconds=assignment.time_seconds,
                real_result_applied=True,
            )
        )
    return tuple(out)
