"""What-if analysis: one athlete X% better or worse, everything else fixed.

For each scenario the athlete's time is substituted in every event they
swim (or dive), only those events are re-placed, and only their team is
re-aggregated. Athletes are analysed one at a time from the true baseline;
interactions between analysed athletes are not modelled.

In events placed from real results (real view, or hybrid events with
results) the athlete's real time is varied instead, and the applied results
of that event are re-ranked by time rather than by their stored places.

Because places are discrete, "better" and "worse" rarely move points by the
same amount: dropping from 8th to 9th can cost more than rising to 7th gains.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Literal, Sequence

from .aggregate import aggregate_team_scores
from .meet import build_scoring_table, exhibition_ids, place_rows, real_result_events
from .types import MeetLineup, MeetSnapshot, RelayEntry, TeamEntry, ViewMode
from .validation import LimitConfig

logger = logging.getLogger(__name__)

Scenario = Literal["better", "baseline", "worse"]


@dataclass(frozen=True)
class SensitivityEventRow:
    lineup_id: str
    event_id: str
    baseline_seconds: float | None
    better_seconds: float | None
    worse_seconds: float | None
    baseline_place: int | None
    baseline_points: float
    better_place: int | None
    better_points: float
    worse_place: int | None
    worse_points: float


@dataclass(frozen=True)
class SensitivityResult:
    athlete_id: str
    team_id: str | None
    percent: float
    athlete_points_baseline: float
    athlete_points_better: float
    athlete_points_worse: float
    team_total_baseline: float
    team_total_better: float
    team_total_worse: float
    events: tuple[SensitivityEventRow, ...]

    @property
    def scenarios(self) -> dict[Scenario, tuple[float, float]]:
        """(athlete points, team total) per scenario."""
        return {
            "better": (self.athlete_points_better, self.team_total_better),
            "baseline": (self.athlete_points_baseline, self.team_total_baseline),
            "worse": (self.athlete_points_worse, self.team_total_worse),
        }


def perturb_time(
    seconds: float, percent: float, scenario: Scenario, is_score_like: bool
) -> float:
    """Move a time/score X% in the scenario's direction.

    Lower is better for times, higher is better for dive scores.
    """
    if scenario == "baseline":
        return seconds
    pct = percent / 100.0
    improve = scenario == "better"
    if is_score_like:
        factor = 1 + pct if improve else 1 - pct
    else:
        factor = 1 - pct if improve else 1 + pct
    return round(seconds * factor, 4)


def _team_total(
    lineups: Sequence[MeetLineup], relays: Sequence[RelayEntry], team: TeamEntry
) -> float:
    return aggregate_team_scores(lineups, relays, [team])[0].total_score


def _scenario_seconds(lineup: MeetLineup, real: bool) -> float | None:
    """The time placement ranks this row by: the real time in real-result events."""
    if real:
        return lineup.final_time_seconds if lineup.real_result_applied else None
    return lineup.effective_seconds


def _run_scenario(
    athlete_id: str,
    percent: float,
    scenario: Scenario,
    baseline_lineups: tuple[MeetLineup, ...],
    baseline_relays: tuple[RelayEntry, ...],
    meet: MeetSnapshot,
    view: ViewMode,
    excluded: set[str],
    real_events: set[str],
) -> tuple[MeetLineup, ...]:
    affected = {
        lineup.event_id
        for lineup in baseline_lineups
        if lineup.athlete_id == athlete_id
        and _scenario_seconds(lineup, lineup.event_id in real_events) is not None
    }
    substituted: list[MeetLineup] = []
    for lineup in baseline_lineups:
        real = lineup.event_id in real_events
        if lineup.event_id in affected and real and lineup.final_time_seconds is not None:
            # Stored real places would pin everyone; re-rank by real time instead
            lineup = replace(lineup, place=None)
        seconds = _scenario_seconds(lineup, real)
        if lineup.athlete_id == athlete_id and seconds is not None:
            perturbed = perturb_time(
                seconds,
                percent,
                scenario,
                lineup.event_type == "diving",
            )
            if real:
                lineup = replace(lineup, final_time_seconds=perturbed)
            else:
                lineup = replace(lineup, override_time_seconds=perturbed)
        substituted.append(lineup)
    lineups, _ = place_rows(
        substituted,
        baseline_relays,
        build_scoring_table(meet.settings),
        view,
        excluded_athletes=excluded,
        only_events=affected,
    )
    return lineups


def run_sensitivity(
    athlete_id: str,
    percent: float,
    meet: MeetSnapshot,
    *,
    view: ViewMode = "hybrid",
) -> SensitivityResult:
    """
    Better/baseline/worse outcome for one athlete.

    Args:
      athlete_id: athlete to vary.
      percent: X in "X% faster/slower" (> 0).
      meet: full meet snapshot; not modified.
      view: placement view used for the baseline and both scenarios.
    """
    if percent is None or percent <= 0:
        raise ValueError(f"sensitivity percent must be > 0, got {percent!r}")

    table = build_scoring_table(meet.settings)
    excluded = exhibition_ids(meet)
    base_lineups, base_relays = place_rows(
        meet.lineups, meet.relays, table, view, excluded_athletes=excluded
    )

    real_events = real_result_events(base_lineups, base_relays, view)

    own = [l for l in base_lineups if l.athlete_id == athlete_id]
    team_id = own[0].team_id if own else None
    if team_id is None:
        athlete = meet.athlete_by_id().get(athlete_id)
        team_id = athlete.team_id if athlete is not None else None
    team = meet.team(team_id) if team_id is not None else None
    if team is None and team_id is not None:
        team = TeamEntry(team_id=team_id)

    scenario_lineups = {
        scenario: _run_scenario(
            athlete_id,
            percent,
            scenario,
            base_lineups,
            base_relays,
            meet,
            view,
            excluded,
            real_events,
        )
        for scenario in ("better", "worse")
    }
    better_by_id = {l.id: l for l in scenario_lineups["better"]}
    worse_by_id = {l.id: l for l in scenario_lineups["worse"]}

    rows: list[SensitivityEventRow] = []
    for lineup in own:
        real = lineup.event_id in real_events
        better = better_by_id[lineup.id]
        worse = worse_by_id[lineup.id]
        rows.append(
            SensitivityEventRow(
                lineup_id=lineup.id,
                event_id=lineup.event_id,
                baseline_seconds=_scenario_seconds(lineup, real),
                better_seconds=_scenario_seconds(better, real),
                worse_seconds=_scenario_seconds(worse, real),
                baseline_place=lineup.place,
                baseline_points=lineup.points or 0,
                better_place=better.place,
                better_points=better.points or 0,
                worse_place=worse.place,
                worse_points=worse.points or 0,
            )
        )

    if team is not None:
        total_baseline = _team_total(base_lineups, base_relays, team)
        total_better = _team_total(scenario_lineups["better"], base_relays, team)
        total_worse = _team_total(scenario_lineups["worse"], base_relays, team)
    else:
        total_baseline = total_better = total_worse = 0.0

    result = SensitivityResult(
        athlete_id=athlete_id,
        team_id=team_id,
        percent=percent,
        athlete_points_baseline=sum(r.baseline_points for r in rows),
        athlete_points_better=sum(r.better_points for r in rows),
        athlete_points_worse=sum(r.worse_points for r in rows),
        team_total_baseline=total_baseline,
        team_total_better=total_better,
        team_total_worse=total_worse,
        events=tuple(rows),
    )
    logger.debug(
        f"Sensitivity {athlete_id} ±{percent}%: "
        f"{result.athlete_points_worse}/{result.athlete_points_baseline}/"
        f"{result.athlete_points_better} pts"
    )
    return result


def run_team_sensitivity(
    team_id: str, meet: MeetSnapshot, *, view: ViewMode = "hybrid"
) -> dict[str, SensitivityResult]:
    """Run the team's saved sensitivity selection (at most three athletes)."""
    team = meet.team(team_id)
    if team is None:
        raise ValueError(f"team {team_id!r} is not in this meet")
    selection = team.selection
    athlete_ids = list(selection.sensitivity_athlete_ids)
    if len(athlete_ids) > LimitConfig.SENSITIVITY_MAX_ATHLETES:
        raise ValueError(
            f"at most {LimitConfig.SENSITIVITY_MAX_ATHLETES} sensitivity athletes per team, "
            f"got {len(athlete_ids)}"
        )
    if not athlete_ids or not selection.sensitivity_percent:
        return {}
    return {
        athlete_id: run_sensitivity(
            athlete_id, selection.sensitivity_percent, meet, view=view
        )
        for athlete_id in athlete_ids
    }
