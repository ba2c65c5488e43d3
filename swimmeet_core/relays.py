"""Relay leg composition and relay-count validation.

Leg time fallback chain:
- A custom time typed by the coach always wins.
- Lead-off leg (index 0): the athlete's flat-start time, else unresolved.
- Later legs with use_relay_split: the relay split on file, else the
  flat-start time minus the correction factor (floored at 0).
- Later legs without use_relay_split: flat-start minus correction.

A relay total exists only when all four legs resolve; otherwise it is N/A,
never a zero time.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Mapping, Sequence

from .errors import RelayLegUnresolvedError, RosterLimitViolation
from .timecodec import format_seconds_to_time, normalize_event_name, parse_optional_time
from .types import Athlete, EventTime, RelayEntry
from .validation import LimitConfig

logger = logging.getLogger(__name__)

MEDLEY_STROKES = ("Back", "Breast", "Fly", "Free")
RELAY_TOTALS = (200, 400, 800)
NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class RelayConfig:
    num_legs: int
    distance_per_leg: int
    strokes: tuple[str, ...]

    @property
    def is_medley(self) -> bool:
        return self.strokes == MEDLEY_STROKES


@dataclass(frozen=True)
class RelayComposition:
    event_name: str
    leg_times: tuple[float | None, ...]
    total_seconds: float | None
    unresolved: tuple[RelayLegUnresolvedError, ...]

    @property
    def total_time(self) -> str:
        if self.total_seconds is None:
            return NOT_AVAILABLE
        return format_seconds_to_time(self.total_seconds)


def relay_config(event_name: str) -> RelayConfig:
    """Legs, per-leg distance and strokes for a relay event name.

    200 → 4x50, 400 → 4x100, 800 → 4x200 ("4x100 Free Relay" is a 400);
    medley relays swim Back, Breast, Fly, Free. Other totals fall back to 200.
    """
    key = normalize_event_name(event_name)
    match = re.match(r"^(\d+)\b", key)
    total = int(match.group(1)) if match else 200
    if total not in RELAY_TOTALS:
        logger.debug(f"{event_name!r}: no standard relay distance, using 200")
        total = 200
    legs = LimitConfig.RELAY_LEGS
    strokes = MEDLEY_STROKES if "medley" in key else ("Free",) * legs
    return RelayConfig(num_legs=legs, distance_per_leg=total // legs, strokes=strokes)


def find_event_time(
    athlete: Athlete, stroke: str, distance: int | str, is_relay_split: bool
) -> EventTime | None:
    """The athlete's time for (distance, stroke), matched on normalized names."""
    wanted = normalize_event_name(f"{distance} {stroke}")
    for event_time in athlete.event_times:
        if event_time.is_relay_split != is_relay_split:
            continue
        if normalize_event_name(event_time.event_name) == wanted:
            return event_time
    return None


def _corrected(flat: EventTime, correction_factor: float) -> float:
    return round(max(0.0, flat.time_seconds - correction_factor), 4)


def compose_relay_leg(
    athlete: Athlete | None,
    leg_index: int,
    stroke: str,
    distance: int | str,
    use_relay_split: bool,
    correction_factor: float,
    custom_time: str | float | None = None,
) -> float | None:
    """
    Effective time in seconds for one relay leg, or None when no time is usable.

    Raises:
      FormatError: the custom time text is malformed.
    """
    custom = parse_optional_time(custom_time)
    if custom is not None:
        return custom
    if athlete is None:
        return None

    flat = find_event_time(athlete, stroke, distance, is_relay_split=False)
    if leg_index == 0:
        return flat.time_seconds if flat is not None else None

    if use_relay_split:
        split = find_event_time(athlete, stroke, distance, is_relay_split=True)
        if split is not None:
            return split.time_seconds
    if flat is None:
        return None
    return _corrected(flat, correction_factor)


def compose_relay(
    event_name: str,
    members: Sequence[str | None],
    athletes: Mapping[str, Athlete],
    use_relay_splits: Sequence[bool],
    correction_factor: float,
    custom_times: Sequence[str | float | None] | None = None,
) -> RelayComposition:
    """Compose every leg of one relay and total it."""
    config = relay_config(event_name)
    custom_times = list(custom_times or [None] * config.num_legs)
    leg_times: list[float | None] = []
    unresolved: list[RelayLegUnresolvedError] = []

    for leg_index in range(config.num_legs):
        athlete_id = members[leg_index] if leg_index < len(members) else None
        athlete = athletes.get(athlete_id) if athlete_id else None
        use_split = bool(use_relay_splits[leg_index]) if leg_index < len(use_relay_splits) else True
        custom = custom_times[leg_index] if leg_index < len(custom_times) else None
        leg_time = compose_relay_leg(
            athlete,
            leg_index,
            config.strokes[leg_index],
            config.distance_per_leg,
            use_split,
            correction_factor,
            custom,
        )
        leg_times.append(leg_time)
        if leg_time is None:
            reason = "no_athlete" if athlete is None else "no_flat_start_time"
            unresolved.append(
                RelayLegUnresolvedError(
                    event_name=event_name,
                    leg_index=leg_index,
                    athlete_id=athlete_id,
                    reason=reason,
                )
            )

    total = None
    if not unresolved:
        total = round(sum(t for t in leg_times if t is not None), 4)
    else:
        logger.debug(
            f"{event_name}: {len(unresolved)} leg(s) without a time, total is {NOT_AVAILABLE}"
        )
    return RelayComposition(
        event_name=event_name,
        leg_times=tuple(leg_times),
        total_seconds=total,
        unresolved=tuple(unresolved),
    )


def build_relay_entry(
    entry_id: str,
    team_id: str,
    event_id: str,
    event_name: str,
    members: Sequence[str | None],
    athletes: Mapping[str, Athlete],
    use_relay_splits: Sequence[bool],
    correction_factor: float,
    custom_times: Sequence[str | None] | None = None,
) -> tuple[RelayEntry, RelayComposition]:
    """Compose a relay and return the entry row with its seed time filled in."""
    composition = compose_relay(
        event_name, members, athletes, use_relay_splits, correction_factor, custom_times
    )
    seed_text = None
    if composition.total_seconds is not None:
        seed_text = composition.total_time
    entry = RelayEntry(
        id=entry_id,
        team_id=team_id,
        event_id=event_id,
        members=tuple(members),
        leg_times=tuple(custom_times or (None,) * len(members)),
        use_relay_splits=tuple(bool(flag) for flag in use_relay_splits),
        seed_time=seed_text,
        seed_time_seconds=composition.total_seconds,
    )
    return entry, composition


def validate_relay_counts(
    relays: Sequence[RelayEntry],
    athletes: Mapping[str, Athlete],
    max_relays: int,
) -> list[RosterLimitViolation]:
    """Relay limit violations for one team's relay set.

    Each athlete is counted once per relay they swim in, and is flagged with
    max_relays when that exceeds the limit. An athlete listed on two legs of
    the same relay is flagged separately as duplicate_relay_leg. Never
    truncates the set.
    """
    relay_ids: dict[str, set[str]] = {}
    violations: list[RosterLimitViolation] = []

    def name(athlete_id: str) -> str:
        athlete = athletes.get(athlete_id)
        return athlete.full_name if athlete is not None else athlete_id

    for relay in relays:
        legs: dict[str, int] = {}
        for athlete_id in relay.members:
            if athlete_id:
                legs[athlete_id] = legs.get(athlete_id, 0) + 1
                relay_ids.setdefault(athlete_id, set()).add(relay.id)
        for athlete_id, count in legs.items():
            if count > 1:
                violations.append(
                    RosterLimitViolation(
                        kind="duplicate_relay_leg",
                        subject=name(athlete_id),
                        limit=1,
                        actual=count,
                        message=f"{name(athlete_id)}: swims {count} legs of relay {relay.id}",
                    )
                )

    for athlete_id, ids in relay_ids.items():
        if len(ids) <= max_relays:
            continue
        violations.append(
            RosterLimitViolation(
                kind="max_relays",
                subject=name(athlete_id),
                limit=max_relays,
                actual=len(ids),
                message=f"{name(athlete_id)}: {len(ids)} relays (max {max_relays})",
            )
        )
    return violations
