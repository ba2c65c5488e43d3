"""Roster accounting: scoring head count, test spot and entry limits.

Scoring roster = selected athletes, minus the test-spot candidates, plus the
one candidate whose points count. Divers weigh `diver_ratio` of a swimmer.
Exhibition athletes are never counted and never selected.
"""
from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from .errors import RosterLimitViolation
from .types import Athlete, MeetLineup, TeamEntry
from .validation import LimitConfig, MeetSettings, RosterSelection

logger = logging.getLogger(__name__)


def resolve_test_spot_scorer(
    test_spot_ids: Sequence[str], scoring_candidate_id: str | None
) -> str | None:
    """The scoring candidate, defaulting to the first one when unset or stale."""
    if not test_spot_ids:
        return None
    if scoring_candidate_id in test_spot_ids:
        return scoring_candidate_id
    return test_spot_ids[0]


def scoring_athlete_ids(
    selected_ids: Iterable[str],
    test_spot_ids: Iterable[str],
    scoring_candidate_id: str | None,
) -> list[str]:
    """Selected athletes whose points count, in selection order."""
    test_spot = set(test_spot_ids)
    if not test_spot:
        return list(selected_ids)
    return [
        athlete_id for athlete_id in selected_ids
        if athlete_id not in test_spot or athlete_id == scoring_candidate_id
    ]


def compute_roster_count(
    selected_ids: Iterable[str],
    test_spot_ids: Iterable[str],
    scoring_candidate_id: str | None,
    diver_ratio: float,
    athletes: Mapping[str, Athlete],
) -> float:
    """|swimmers| + |divers| * diver_ratio over the scoring roster.

    Unknown athlete ids count as swimmers.
    """
    if diver_ratio is None or not 0.0 <= diver_ratio <= 1.0:
        raise ValueError(f"diver_ratio must be within [0, 1], got {diver_ratio!r}")
    swimmers = 0
    divers = 0
    for athlete_id in scoring_athlete_ids(selected_ids, test_spot_ids, scoring_candidate_id):
        athlete = athletes.get(athlete_id)
        if athlete is not None and athlete.is_diver:
            divers += 1
        else:
            swimmers += 1
    return swimmers + divers * diver_ratio


def counted_athlete_ids(team: TeamEntry, lineups: Sequence[MeetLineup] = ()) -> set[str]:
    """Athletes whose points count toward the team total.

    A team with no saved selection (e.g. an opponent entered only through
    its lineups) counts every athlete entered, minus exhibition athletes.
    """
    selection = team.selection
    exhibition = set(selection.exhibition_athlete_ids)
    if not selection.selected_athlete_ids:
        entered = {l.athlete_id for l in lineups if l.team_id == team.team_id}
        return entered - exhibition
    scorer = resolve_test_spot_scorer(
        selection.test_spot_athlete_ids, selection.test_spot_scoring_athlete_id
    )
    counted = scoring_athlete_ids(
        selection.selected_athlete_ids, selection.test_spot_athlete_ids, scorer
    )
    return set(counted) - exhibition


def validate_roster(
    selection: RosterSelection,
    athletes: Mapping[str, Athlete],
    settings: MeetSettings,
) -> list[RosterLimitViolation]:
    """Every limit the selection breaks; empty when the roster is valid.

    Read/preview paths use the list directly. Save paths pass it to
    errors.ensure_no_violations.
    """
    violations: list[RosterLimitViolation] = []
    selected = set(selection.selected_athlete_ids)

    # RosterSelection already enforces these when built through pydantic;
    # model_construct() payloads skip validation, so re-check here.
    for athlete_id in selection.test_spot_athlete_ids:
        if athlete_id not in selected:
            violations.append(
                RosterLimitViolation(
                    kind="test_spot_not_selected",
                    subject=athlete_id,
                    limit=None,
                    actual=None,
                    message=f"test spot athlete {athlete_id} is not on the roster",
                )
            )
    if selection.test_spot_athlete_ids and (
        selection.test_spot_scoring_athlete_id not in selection.test_spot_athlete_ids
    ):
        violations.append(
            RosterLimitViolation(
                kind="test_spot_scorer_invalid",
                subject=str(selection.test_spot_scoring_athlete_id),
                limit=None,
                actual=None,
                message="test spot scorer must be one of the test spot athletes",
            )
        )
    if len(selection.sensitivity_athlete_ids) > LimitConfig.SENSITIVITY_MAX_ATHLETES:
        violations.append(
            RosterLimitViolation(
                kind="sensitivity_too_many",
                subject="sensitivity",
                limit=LimitConfig.SENSITIVITY_MAX_ATHLETES,
                actual=len(selection.sensitivity_athlete_ids),
                message=(
                    f"at most {LimitConfig.SENSITIVITY_MAX_ATHLETES} sensitivity athletes"
                ),
            )
        )
    for athlete_id in selection.sensitivity_athlete_ids:
        if athlete_id not in selected:
            violations.append(
                RosterLimitViolation(
                    kind="sensitivity_not_selected",
                    subject=athlete_id,
                    limit=None,
                    actual=None,
                    message=f"sensitivity athlete {athlete_id} is not on the roster",
                )
            )
    for athlete_id in selected.intersection(selection.exhibition_athlete_ids):
        violations.append(
            RosterLimitViolation(
                kind="exhibition_selected",
                subject=athlete_id,
                limit=None,
                actual=None,
                message=f"exhibition athlete {athlete_id} cannot be on the scoring roster",
            )
        )

    count = compute_roster_count(
        selection.selected_athlete_ids,
        selection.test_spot_athlete_ids,
        selection.test_spot_scoring_athlete_id,
        settings.diver_ratio,
        athletes,
    )
    if count > settings.max_athletes:
        violations.append(
            RosterLimitViolation(
                kind="max_athletes",
                subject="roster",
                limit=settings.max_athletes,
                actual=count,
                message=f"Scoring roster exceeds limit: {count:.2f} > {settings.max_athletes}",
            )
        )

    if violations:
        logger.debug(f"Roster has {len(violations)} violation(s)")
    return violations


def validate_lineup_limits(
    lineups: Sequence[MeetLineup],
    athletes: Mapping[str, Athlete],
    settings: MeetSettings,
) -> list[RosterLimitViolation]:
    """Per-athlete individual/diving entry limits for one team's lineups."""
    indiv: dict[str, int] = {}
    diving: dict[str, int] = {}
    for lineup in lineups:
        if lineup.event_type == "relay":
            continue
        bucket = diving if lineup.event_type == "diving" else indiv
        bucket[lineup.athlete_id] = bucket.get(lineup.athlete_id, 0) + 1

    def name(athlete_id: str) -> str:
        athlete = athletes.get(athlete_id)
        return athlete.full_name if athlete is not None else athlete_id

    violations: list[RosterLimitViolation] = []
    for athlete_id, count in indiv.items():
        if count > settings.max_indiv_events:
            violations.append(
                RosterLimitViolation(
                    kind="max_indiv_events",
                    subject=name(athlete_id),
                    limit=settings.max_indiv_events,
                    actual=count,
                    message=(
                        f"{name(athlete_id)}: {count} individual events "
                        f"(max {settings.max_indiv_events})"
                    ),
                )
            )
    for athlete_id, count in diving.items():
        if not settings.diving_included:
            violations.append(
                RosterLimitViolation(
                    kind="diving_excluded",
                    subject=name(athlete_id),
                    limit=0,
                    actual=count,
                    message=f"{name(athlete_id)}: diving is not part of this meet",
                )
            )
        elif count > settings.max_diving_events:
            violations.append(
                RosterLimitViolation(
                    kind="max_diving_events",
                    subject=name(athlete_id),
                    limit=settings.max_diving_events,
                    actual=count,
                    message=(
                        f"{name(athlete_id)}: {count} diving events "
                        f"(max {settings.max_diving_events})"
                    ),
                )
            )
    return violations
