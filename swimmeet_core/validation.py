"""
Input validation schemas using Pydantic v2
Validates meet configuration, roster selections and relay save payloads
"""

import logging
import re
from typing import Dict, List, Literal, Optional, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class LimitConfig:
    """Engine-wide limits"""

    RELAY_LEGS = 4
    SENSITIVITY_MAX_ATHLETES = 3
    SENSITIVITY_MIN_PERCENT = 0.5
    SENSITIVITY_MAX_PERCENT = 10.0
    SCORING_PLACES = (16, 24)
    DEFAULT_CORRECTION_FACTOR = 0.5


_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# ==================== MEET CONFIGURATION ====================


class MeetSettings(BaseModel):
    """Meet-level configuration read from the host application"""

    meet_type: Literal["championship", "dual"] = "championship"
    scoring_places: int = Field(24, description="Scoring places (16 or 24)")
    scoring_start_points: int = Field(32, ge=1, description="First-place points")
    relay_multiplier: float = Field(2.0, ge=1.0, description="Relay points multiplier")

    max_athletes: int = Field(18, ge=0, description="Scoring roster limit")
    diver_ratio: float = Field(
        0.333, ge=0.0, le=1.0, description="Roster weight of one diver"
    )
    max_indiv_events: int = Field(3, ge=0)
    max_relays: int = Field(4, ge=0)
    max_diving_events: int = Field(2, ge=0)
    diving_included: bool = True

    correction_factor: float = Field(
        LimitConfig.DEFAULT_CORRECTION_FACTOR,
        ge=0.0,
        le=5.0,
        description="Seconds removed from a flat-start time on a flying exchange",
    )

    # Persisted custom tables (place -> points); generated from the fields above when absent
    individual_scoring: Optional[Dict[int, float]] = None
    relay_scoring: Optional[Dict[int, float]] = None

    @field_validator("scoring_places")
    @classmethod
    def validate_scoring_places(cls, v: int) -> int:
        """Only 16-place (A/B finals) and 24-place (A/B/C finals) scoring exist"""
        if v not in LimitConfig.SCORING_PLACES:
            raise ValueError(
                f"scoringPlaces must be one of {LimitConfig.SCORING_PLACES}, got {v}"
            )
        return v

    model_config = _CAMEL


# ==================== ROSTER SELECTION ====================


class RosterSelection(BaseModel):
    """A team's roster choices for one meet"""

    selected_athlete_ids: List[str] = Field(default_factory=list)
    test_spot_athlete_ids: List[str] = Field(default_factory=list)
    test_spot_scoring_athlete_id: Optional[str] = None
    sensitivity_athlete_ids: List[str] = Field(
        default_factory=list, max_length=LimitConfig.SENSITIVITY_MAX_ATHLETES
    )
    sensitivity_percent: Optional[float] = Field(
        None,
        ge=LimitConfig.SENSITIVITY_MIN_PERCENT,
        le=LimitConfig.SENSITIVITY_MAX_PERCENT,
    )
    exhibition_athlete_ids: List[str] = Field(default_factory=list)

    @field_validator(
        "selected_athlete_ids",
        "test_spot_athlete_ids",
        "sensitivity_athlete_ids",
        "exhibition_athlete_ids",
    )
    @classmethod
    def drop_blank_and_duplicate_ids(cls, v: List[str]) -> List[str]:
        """Keep first occurrence order, skip empty ids"""
        seen: set[str] = set()
        out: List[str] = []
        for athlete_id in v:
            if not athlete_id or athlete_id in seen:
                continue
            seen.add(athlete_id)
            out.append(athlete_id)
        return out

    @model_validator(mode="after")
    def validate_selection_invariants(self) -> Self:
        """Test spot, sensitivity and exhibition sets must agree with the selection"""
        selected = set(self.selected_athlete_ids)

        if self.test_spot_athlete_ids:
            if any(a not in selected for a in self.test_spot_athlete_ids):
                raise ValueError("testSpotAthleteIds must be a subset of selectedAthleteIds")
            if self.test_spot_scoring_athlete_id not in self.test_spot_athlete_ids:
                raise ValueError(
                    "testSpotScoringAthleteId must be one of testSpotAthleteIds when test spot is used"
                )

        if any(a not in selected for a in self.sensitivity_athlete_ids):
            raise ValueError("Each sensitivityAthleteId must be one of selectedAthleteIds")

        overlap = selected.intersection(self.exhibition_athlete_ids)
        if overlap:
            raise ValueError(
                f"exhibition athletes cannot be selected: {sorted(overlap)}"
            )
        return self

    model_config = _CAMEL


# ==================== RELAY SAVE ====================


class RelayLineupInput(BaseModel):
    """One relay as submitted by the relay editor"""

    event_name: str = Field(..., min_length=1, max_length=100)
    members: List[Optional[str]] = Field(
        default_factory=lambda: [None] * LimitConfig.RELAY_LEGS
    )
    times: List[Optional[str]] = Field(
        default_factory=lambda: [None] * LimitConfig.RELAY_LEGS
    )
    use_relay_splits: List[bool] = Field(default_factory=lambda: [False, True, True, True])

    @field_validator("members", "times", "use_relay_splits")
    @classmethod
    def validate_leg_count(cls, v: list) -> list:
        if len(v) != LimitConfig.RELAY_LEGS:
            raise ValueError(f"relay must have exactly {LimitConfig.RELAY_LEGS} legs")
        return v

    @field_validator("use_relay_splits")
    @classmethod
    def first_leg_is_flat_start(cls, v: List[bool]) -> List[bool]:
        """Leg 0 always starts flat; a split flag there is meaningless"""
        if v and v[0]:
            logger.debug("Ignoring relay split flag on lead-off leg")
            return [False, *v[1:]]
        return v

    model_config = _CAMEL


class RelaySaveRequest(BaseModel):
    """All relays for one team in one save"""

    relays: List[RelayLineupInput] = Field(default_factory=list)
    correction_factor: float = Field(
        LimitConfig.DEFAULT_CORRECTION_FACTOR, ge=0.0, le=5.0
    )

    model_config = _CAMEL


class InputSanitizer:
    """Utility class for input sanitization"""

    @staticmethod
    def sanitize_string(value: str, max_length: int = 255) -> str:
        """Sanitize string input"""
        if not isinstance(value, str):
            return str(value)[:max_length]

        value = value.strip()
        value = value[:max_length]
        value = value.replace("\0", "")
        return value

    @staticmethod
    def sanitize_athlete_name(name: str) -> str:
        """Sanitize an athlete name from a results row, keeping diacritics and apostrophes"""
        name = InputSanitizer.sanitize_string(name, 255)
        name = re.sub(r'[<>{}[\]\\|;()&$`"*\x00-\x1f\x7f]', "", name)
        name = re.sub(r"\s+", " ", name)
        return name.strip()

    @staticmethod
    def validate_settings(payload: dict) -> MeetSettings:
        """
        Validate a meet settings payload

        Raises:
            ValueError: If validation fails
        """
        try:
            return MeetSettings(**payload)
        except Exception as e:
            logger.warning(f"Meet settings validation failed: {e}")
            raise ValueError(f"Invalid meet settings: {str(e)}")

    @staticmethod
    def validate_roster(payload: dict) -> RosterSelection:
        """
        Validate a roster selection payload

        Raises:
            ValueError: If validation fails
        """
        try:
            return RosterSelection(**payload)
        except Exception as e:
            logger.warning(f"Roster validation failed: {e}")
            raise ValueError(f"Invalid roster: {str(e)}")

    @staticmethod
    def validate_relays(payload: dict) -> RelaySaveRequest:
        """
        Validate a relay save payload

        Raises:
            ValueError: If validation fails
        """
        try:
            return RelaySaveRequest(**payload)
        except Exception as e:
            logger.warning(f"Relay payload validation failed: {e}")
            raise ValueError(f"Invalid relays: {str(e)}")


# ==================== EXPORT ====================

__all__ = [
    "LimitConfig",
    "MeetSettings",
    "RosterSelection",
    "RelayLineupInput",
    "RelaySaveRequest",
    "InputSanitizer",
]
