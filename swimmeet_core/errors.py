"""Error types shared by the scoring engine.

Two kinds of failures exist:
- Fatal input errors (FormatError, ScoringConfigurationError) are raised.
- Advisory/structured results (RelayLegUnresolvedError, RosterLimitViolation)
  are plain frozen dataclasses returned to the caller so preview paths can
  render them without try/except plumbing.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence


class FormatError(ValueError):
    """Malformed time or score text."""

    def __init__(self, text: object, reason: str = "invalid_format"):
        self.text = text
        self.reason = reason
        super().__init__(f"Invalid time/score {text!r}: {reason}")


class ScoringConfigurationError(ValueError):
    """Scoring table parameters (or a custom table) break the table invariants."""


@dataclass(frozen=True)
class RelayLegUnresolvedError:
    """Advisory: a relay leg has no usable time, so the relay total is N/A."""

    event_name: str
    leg_index: int
    athlete_id: str | None
    reason: Literal["no_athlete", "no_flat_start_time"]


ViolationKind = Literal[
    "max_athletes",
    "max_relays",
    "duplicate_relay_leg",
    "max_indiv_events",
    "max_diving_events",
    "diving_excluded",
    "test_spot_not_selected",
    "test_spot_scorer_invalid",
    "sensitivity_not_selected",
    "sensitivity_too_many",
    "exhibition_selected",
]


@dataclass(frozen=True)
class RosterLimitViolation:
    """A roster/lineup limit broken by a selection (subject, limit, actual)."""

    kind: ViolationKind
    subject: str
    limit: float | None
    actual: float | None
    message: str


class RosterLimitExceeded(Exception):
    """Raised on save paths when a selection carries limit violations."""

    def __init__(self, violations: Sequence[RosterLimitViolation]):
        self.violations = tuple(violations)
        detail = "; ".join(v.message for v in self.violations)
        super().__init__(f"Roster limit violations: {detail}")


def ensure_no_violations(violations: Sequence[RosterLimitViolation]) -> None:
    """Block a save when any violation is present."""
    if violations:
        raise RosterLimitExceeded(violations)
