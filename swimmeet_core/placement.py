"""Placement resolver: ranks one event's entries and assigns points.

Single source of truth for event placing across simulate/real/hybrid views
and the sensitivity engine:
- Authoritative places (real results) are trusted as-is.
- Everyone else is ordered by seed: lower time wins, higher dive score wins.
- Equal seeds keep input order; there is no secondary key.
- Entries without a seed never receive a place and score 0.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from .scoring_table import ScoringTable
from .types import EventType


@dataclass(frozen=True)
class PlacementEntry:
    entry_id: str
    seed_seconds: float | None
    # Authoritative place from real results; skips re-ranking
    place: int | None = None


@dataclass(frozen=True)
class Placement:
    entry_id: str
    place: int | None
    points: float


def _has_seed(entry: PlacementEntry) -> bool:
    return entry.seed_seconds is not None and math.isfinite(float(entry.seed_seconds))


def _seed_sort_key(event_type: EventType):
    if event_type == "diving":
        return lambda entry: -float(entry.seed_seconds)
    return lambda entry: float(entry.seed_seconds)


def _free_places(taken: set[int]):
    place = 1
    while True:
        if place not in taken:
            yield place
        place += 1


def resolve_placements(
    entries: Sequence[PlacementEntry],
    event_type: EventType,
    scoring_table: ScoringTable,
    scoring_places: int | None = None,
) -> tuple[Placement, ...]:
    """
    Place one event.

    Args:
      entries: every entry in the event (any order).
      event_type: "individual" | "relay" sort ascending, "diving" descending.
      scoring_table: points lookup (relay table for relays).
      scoring_places: last scoring place; defaults to the table's size.

    Returns one Placement per entry, in input order.
    """
    cutoff = scoring_table.places if scoring_places is None else int(scoring_places)

    def points(place: int | None) -> float:
        if place is None or place > cutoff:
            return 0
        return scoring_table.points_for(event_type, place)

    assigned: dict[int, int | None] = {}
    taken: set[int] = set()
    for idx, entry in enumerate(entries):
        if entry.place is not None:
            assigned[idx] = int(entry.place)
            taken.add(int(entry.place))

    seeded = [
        idx for idx, entry in enumerate(entries)
        if idx not in assigned and _has_seed(entry)
    ]
    key = _seed_sort_key(event_type)
    # sorted() is stable: equal seeds keep input order
    seeded.sort(key=lambda idx: key(entries[idx]))

    free = _free_places(taken)
    for idx in seeded:
        assigned[idx] = next(free)

    return tuple(
        Placement(
            entry_id=entry.entry_id,
            place=assigned.get(idx),
            points=points(assigned.get(idx)),
        )
        for idx, entry in enumerate(entries)
    )


def placements_by_id(placements: Sequence[Placement]) -> dict[str, Placement]:
    return {p.entry_id: p for p in placements}
