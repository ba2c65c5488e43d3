from .errors import (
    FormatError,
    RelayLegUnresolvedError,
    RosterLimitExceeded,
    RosterLimitViolation,
    ScoringConfigurationError,
    ensure_no_violations,
)
from .types import (
    Athlete,
    Event,
    EventTime,
    MeetLineup,
    MeetSnapshot,
    MeetTeam,
    RelayEntry,
    TeamEntry,
)
from .validation import (
    InputSanitizer,
    LimitConfig,
    MeetSettings,
    RelayLineupInput,
    RelaySaveRequest,
    RosterSelection,
)
from .timecodec import (
    format_seconds_to_time,
    normalize_event_name,
    normalize_time_format,
    parse_time_to_seconds,
)
from .scoring_table import (
    ChampionshipDecay,
    DecayPolicy,
    LinearDecay,
    ScoringTable,
    final_band,
    generate_scoring_table,
    scoring_table_from_mappings,
)
from .placement import Placement, PlacementEntry, resolve_placements
from .relays import (
    RelayComposition,
    build_relay_entry,
    compose_relay,
    compose_relay_leg,
    relay_config,
    validate_relay_counts,
)
from .roster import (
    compute_roster_count,
    counted_athlete_ids,
    scoring_athlete_ids,
    validate_lineup_limits,
    validate_roster,
)
from .aggregate import (
    ProgressionPoint,
    aggregate_team_scores,
    score_progression,
    sort_events,
    team_standings,
)
from .meet import ScoredMeet, build_scoring_table, meet_progression, score_meet
from .sensitivity import SensitivityResult, run_sensitivity, run_team_sensitivity
from .matching import (
    Resolved,
    ResultAssignment,
    ResultRow,
    TeamLabel,
    Unresolved,
    apply_real_results,
    build_school_to_team_map,
    match_athlete_by_name,
    resolve_result_row,
)

__all__ = [
    "FormatError",
    "RelayLegUnresolvedError",
    "RosterLimitExceeded",
    "RosterLimitViolation",
    "ScoringConfigurationError",
    "ensure_no_violations",
    "Athlete",
    "Event",
    "EventTime",
    "MeetLineup",
    "MeetSnapshot",
    "MeetTeam",
    "RelayEntry",
    "TeamEntry",
    "InputSanitizer",
    "LimitConfig",
    "MeetSettings",
    "RelayLineupInput",
    "RelaySaveRequest",
    "RosterSelection",
    "format_seconds_to_time",
    "normalize_event_name",
    "normalize_time_format",
    "parse_time_to_seconds",
    "ChampionshipDecay",
    "DecayPolicy",
    "LinearDecay",
    "ScoringTable",
    "final_band",
    "generate_scoring_table",
    "scoring_table_from_mappings",
    "Placement",
    "PlacementEntry",
    "resolve_placements",
    "RelayComposition",
    "build_relay_entry",
    "compose_relay",
    "compose_relay_leg",
    "relay_config",
    "validate_relay_counts",
    "compute_roster_count",
    "counted_athlete_ids",
    "scoring_athlete_ids",
    "validate_lineup_limits",
    "validate_roster",
    "ProgressionPoint",
    "aggregate_team_scores",
    "score_progression",
    "sort_events",
    "team_standings",
    "ScoredMeet",
    "build_scoring_table",
    "meet_progression",
    "score_meet",
    "SensitivityResult",
    "run_sensitivity",
    "run_team_sensitivity",
    "Resolved",
    "ResultAssignment",
    "ResultRow",
    "TeamLabel",
    "Unresolved",
    "apply_real_results",
    "build_school_to_team_map",
    "match_athlete_by_name",
    "resolve_result_row",
]
