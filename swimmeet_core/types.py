"""Type definitions for meet snapshots handed to the engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional, Tuple

from .validation import MeetSettings, RosterSelection

EventType = Literal["individual", "relay", "diving"]
ViewMode = Literal["simulated", "real", "hybrid"]


@dataclass(frozen=True)
class Event:
    """An event on the meet program."""
    id: str
    name: str
    event_type: EventType


@dataclass(frozen=True)
class EventTime:
    """A best time (or dive score) on file for an athlete.

    The same event may appear twice for one athlete: once as a flat-start
    swim and once as a relay split (flying exchange).
    """
    event_name: str
    time_text: str
    time_seconds: float
    is_relay_split: bool = False


@dataclass(frozen=True)
class Athlete:
    id: str
    first_name: str
    last_name: str
    year: Optional[str] = None
    is_diver: bool = False
    team_id: Optional[str] = None
    event_times: Tuple[EventTime, ...] = ()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class MeetLineup:
    """One individual (swim or dive) entry.

    place/points are either real results (real_result_applied) or engine
    output; they are never trusted as inputs to a simulated pass.
    """
    id: str
    athlete_id: str
    event_id: str
    team_id: str
    event_type: EventType = "individual"
    seed_time: Optional[str] = None
    seed_time_seconds: Optional[float] = None
    # Coach override; wins over the seed when simulating
    override_time_seconds: Optional[float] = None
    final_time: Optional[str] = None
    final_time_seconds: Optional[float] = None
    place: Optional[int] = None
    points: Optional[float] = None
    real_result_applied: bool = False

    @property
    def effective_seconds(self) -> Optional[float]:
        if self.override_time_seconds is not None:
            return self.override_time_seconds
        return self.seed_time_seconds


@dataclass(frozen=True)
class RelayEntry:
    """One relay team entry. members[0] always swims from a flat start."""
    id: str
    team_id: str
    event_id: str
    members: Tuple[Optional[str], ...] = (None, None, None, None)
    leg_times: Tuple[Optional[str], ...] = (None, None, None, None)
    use_relay_splits: Tuple[bool, ...] = (False, True, True, True)
    seed_time: Optional[str] = None
    seed_time_seconds: Optional[float] = None
    override_time_seconds: Optional[float] = None
    final_time: Optional[str] = None
    final_time_seconds: Optional[float] = None
    place: Optional[int] = None
    points: Optional[float] = None
    real_result_applied: bool = False

    @property
    def effective_seconds(self) -> Optional[float]:
        if self.override_time_seconds is not None:
            return self.override_time_seconds
        return self.seed_time_seconds


@dataclass(frozen=True)
class MeetTeam:
    """Derived team totals; rebuilt on every scoring pass."""
    team_id: str
    individual_score: float = 0.0
    diving_score: float = 0.0
    relay_score: float = 0.0
    total_score: float = 0.0


@dataclass(frozen=True)
class TeamEntry:
    """A team taking part in the meet plus its roster choices."""
    team_id: str
    name: str = ""
    selection: RosterSelection = field(default_factory=RosterSelection)


@dataclass(frozen=True)
class MeetSnapshot:
    """Everything the engine needs for one meet, read once from storage."""
    settings: MeetSettings
    events: Tuple[Event, ...] = ()
    athletes: Tuple[Athlete, ...] = ()
    teams: Tuple[TeamEntry, ...] = ()
    lineups: Tuple[MeetLineup, ...] = ()
    relays: Tuple[RelayEntry, ...] = ()
    # Custom program order (event ids); None means default order
    event_order: Optional[Tuple[str, ...]] = None

    def event_by_id(self) -> dict[str, Event]:
        return {event.id: event for event in self.events}

    def athlete_by_id(self) -> dict[str, Athlete]:
        return {athlete.id: athlete for athlete in self.athletes}

    def team(self, team_id: str) -> Optional[TeamEntry]:
        for team in self.teams:
            if team.team_id == team_id:
                return team
        return None
