"""Place → points tables for individual, diving and relay events.

The decay between first place and the last scoring place is a policy
(`DecayPolicy`). The default is the championship convention used by
A/B/C-final meets:

    24 places: 32 28 27 26 25 24 23 22 | 20 17 16 15 14 13 12 11 | 9 7 6 5 4 3 2 1
    16 places: 20 17 16 15 14 13 12 11 | 9 7 6 5 4 3 2 1

expressed as deductions from the first-place points so it scales with
`start_points`. Relay points are the individual points times the relay
multiplier, rounded half-up.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, Protocol, Sequence

from .errors import ScoringConfigurationError
from .types import EventType

VALID_PLACES = (16, 24)

_CHAMPIONSHIP_DEDUCTIONS: dict[int, tuple[int, ...]] = {
    24: (0, 4, 5, 6, 7, 8, 9, 10, 12, 15, 16, 17, 18, 19, 20, 21,
         23, 25, 26, 27, 28, 29, 30, 31),
    16: (0, 3, 4, 5, 6, 7, 8, 9, 11, 13, 14, 15, 16, 17, 18, 19),
}


class DecayPolicy(Protocol):
    def points(self, places: int, start_points: int) -> Sequence[float]:
        """Individual points for places 1..places."""
        ...


@dataclass(frozen=True)
class ChampionshipDecay:
    """Published championship deductions; floors at zero for small start values."""

    def points(self, places: int, start_points: int) -> Sequence[float]:
        deductions = _CHAMPIONSHIP_DEDUCTIONS.get(places)
        if deductions is None:
            raise ScoringConfigurationError(
                f"no championship scoring convention for {places} places"
            )
        return [max(0, start_points - d) for d in deductions]


@dataclass(frozen=True)
class LinearDecay:
    """One point less per place, never below `floor`."""

    floor: int = 1

    def points(self, places: int, start_points: int) -> Sequence[float]:
        return [max(self.floor, start_points - i) for i in range(places)]


DEFAULT_POLICY: DecayPolicy = ChampionshipDecay()


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class ScoringTable:
    places: int
    individual: Mapping[int, float]
    relay: Mapping[int, float]

    def points_for(self, event_type: EventType, place: int | None) -> float:
        """Points for a place; 0 for no place or a place beyond the table."""
        if place is None or place < 1 or place > self.places:
            return 0
        table = self.relay if event_type == "relay" else self.individual
        return table.get(place, 0)


def _check_monotone(kind: str, values: Sequence[float]) -> None:
    for idx, value in enumerate(values):
        if value < 0:
            raise ScoringConfigurationError(f"{kind}[{idx + 1}] is negative: {value}")
        if idx and value > values[idx - 1]:
            raise ScoringConfigurationError(
                f"{kind} table must be non-increasing: place {idx + 1} "
                f"({value}) > place {idx} ({values[idx - 1]})"
            )


def generate_scoring_table(
    places: int,
    start_points: int,
    relay_multiplier: float = 2.0,
    *,
    policy: DecayPolicy | None = None,
) -> ScoringTable:
    """
    Build the individual and relay tables.

    Args:
      places: scoring places, 16 or 24.
      start_points: first-place individual points (>= 1).
      relay_multiplier: relay points = round(individual * multiplier), >= 1.
      policy: decay curve; championship deductions when None.

    Raises:
      ScoringConfigurationError: bad parameters, or a policy whose output
        breaks the table invariants. Never falls back to defaults.
    """
    if isinstance(places, bool) or places not in VALID_PLACES:
        raise ScoringConfigurationError(
            f"scoring places must be one of {VALID_PLACES}, got {places!r}"
        )
    if isinstance(start_points, bool) or not isinstance(start_points, int) or start_points < 1:
        raise ScoringConfigurationError(f"start points must be an integer >= 1, got {start_points!r}")
    if relay_multiplier is None or not math.isfinite(relay_multiplier) or relay_multiplier < 1:
        raise ScoringConfigurationError(f"relay multiplier must be >= 1, got {relay_multiplier!r}")

    values = list((policy or DEFAULT_POLICY).points(places, start_points))
    if len(values) != places:
        raise ScoringConfigurationError(
            f"decay policy returned {len(values)} values for {places} places"
        )
    if values[0] != start_points:
        raise ScoringConfigurationError(
            f"first place must score {start_points}, policy gave {values[0]}"
        )
    _check_monotone("individual", values)

    individual = {place: values[place - 1] for place in range(1, places + 1)}
    relay = {
        place: round_half_up(points * relay_multiplier)
        for place, points in individual.items()
    }
    return ScoringTable(places=places, individual=individual, relay=relay)


def scoring_table_from_mappings(
    places: int,
    individual: Mapping[int | str, float],
    relay: Mapping[int | str, float],
) -> ScoringTable:
    """Rebuild a table from persisted place → points mappings.

    Keys may be strings (JSON storage). Missing places in the relay table
    score 0; the individual table must cover every scoring place.
    """
    if isinstance(places, bool) or places not in VALID_PLACES:
        raise ScoringConfigurationError(
            f"scoring places must be one of {VALID_PLACES}, got {places!r}"
        )
    try:
        ind = {int(k): float(v) for k, v in individual.items()}
        rel = {int(k): float(v) for k, v in relay.items()}
    except (TypeError, ValueError) as exc:
        raise ScoringConfigurationError(f"scoring table has non-numeric entries: {exc}")

    missing = [p for p in range(1, places + 1) if p not in ind]
    if missing:
        raise ScoringConfigurationError(f"individual table is missing places {missing}")

    ind_values = [ind[p] for p in range(1, places + 1)]
    rel_values = [rel.get(p, 0.0) for p in range(1, places + 1)]
    _check_monotone("individual", ind_values)
    _check_monotone("relay", rel_values)
    return ScoringTable(
        places=places,
        individual={p: ind_values[p - 1] for p in range(1, places + 1)},
        relay={p: rel_values[p - 1] for p in range(1, places + 1)},
    )


def final_band(place: int | None) -> str | None:
    """A/B/C final for a place (1–8 / 9–16 / 17–24)."""
    if place is None or place < 1 or place > 24:
        return None
    return "ABC"[(place - 1) // 8]
