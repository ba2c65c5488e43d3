from __future__ import annotations

import pytest

from swimmeet_core import (
    Athlete,
    MeetLineup,
    MeetSettings,
    RosterLimitExceeded,
    RosterSelection,
    TeamEntry,
    compute_roster_count,
    counted_athlete_ids,
    ensure_no_violations,
    scoring_athlete_ids,
    validate_lineup_limits,
    validate_roster,
)
from swimmeet_core.roster import resolve_test_spot_scorer


def _athletes(*ids, divers=()):
    return {
        athlete_id: Athlete(
            id=athlete_id,
            first_name=athlete_id.upper(),
            last_name="Swimmer",
            is_diver=athlete_id in divers,
        )
        for athlete_id in ids
    }


def _regulars(n):
    return [f"s{i}" for i in range(n)]


def test_test_spot_candidates_count_once():
    selected = _regulars(17) + ["ts1", "ts2"]
    athletes = _athletes(*selected)
    count = compute_roster_count(selected, ["ts1", "ts2"], "ts1", 0.333, athletes)
    assert count == 18

    selection = RosterSelection(
        selected_athlete_ids=selected,
        test_spot_athlete_ids=["ts1", "ts2"],
        test_spot_scoring_athlete_id="ts1",
    )
    assert validate_roster(selection, athletes, MeetSettings()) == []


def test_one_more_swimmer_breaks_the_limit():
    selected = _regulars(18) + ["ts1", "ts2"]
    athletes = _athletes(*selected)
    selection = RosterSelection(
        selected_athlete_ids=selected,
        test_spot_athlete_ids=["ts1", "ts2"],
        test_spot_scoring_athlete_id="ts1",
    )
    violations = validate_roster(selection, athletes, MeetSettings())
    assert [v.kind for v in violations] == ["max_athletes"]
    assert violations[0].actual == 19
    assert violations[0].message == "Scoring roster exceeds limit: 19.00 > 18"

    with pytest.raises(RosterLimitExceeded) as exc:
        ensure_no_violations(violations)
    assert exc.value.violations == tuple(violations)


def test_divers_weigh_a_fraction_of_a_swimmer():
    selected = _regulars(15) + ["d1", "d2", "d3"]
    athletes = _athletes(*selected, divers=("d1", "d2", "d3"))
    assert compute_roster_count(selected, [], None, 0.333, athletes) == pytest.approx(15.999)
    assert compute_roster_count(selected, [], None, 0.0, athletes) == 15


def test_unknown_athletes_count_as_swimmers():
    assert compute_roster_count(["x", "y"], [], None, 0.5, {}) == 2


@pytest.mark.parametrize("ratio", [-0.1, 1.5, None])
def test_diver_ratio_must_be_within_unit_interval(ratio):
    with pytest.raises(ValueError):
        compute_roster_count(["a"], [], None, ratio, _athletes("a"))


def test_scoring_athlete_ids_keeps_only_the_scoring_candidate():
    assert scoring_athlete_ids(["a", "b", "c"], ["b", "c"], "c") == ["a", "c"]
    assert scoring_athlete_ids(["a", "b"], [], None) == ["a", "b"]


def test_stale_scorer_falls_back_to_first_candidate():
    assert resolve_test_spot_scorer(["b", "c"], "z") == "b"
    assert resolve_test_spot_scorer(["b", "c"], "c") == "c"
    assert resolve_test_spot_scorer([], "c") is None


def test_counted_athletes_for_team_without_selection():
    team = TeamEntry(
        team_id="T2",
        selection=RosterSelection(exhibition_athlete_ids=["x"]),
    )
    lineups = [
        MeetLineup(id="L1", athlete_id="b1", event_id="E1", team_id="T2"),
        MeetLineup(id="L2", athlete_id="x", event_id="E1", team_id="T2"),
        MeetLineup(id="L3", athlete_id="a1", event_id="E1", team_id="T1"),
    ]
    assert counted_athlete_ids(team, lineups) == {"b1"}


def test_counted_athletes_drop_test_spot_non_scorers():
    team = TeamEntry(
        team_id="T1",
        selection=RosterSelection(
            selected_athlete_ids=["a", "b", "c"],
            test_spot_athlete_ids=["b", "c"],
            test_spot_scoring_athlete_id="b",
        ),
    )
    assert counted_athlete_ids(team) == {"a", "b"}


def test_validate_roster_reports_broken_selection_invariants():
    # model_construct skips the pydantic validators, as raw host payloads can
    selection = RosterSelection.model_construct(
        selected_athlete_ids=["a"],
        test_spot_athlete_ids=["b"],
        test_spot_scoring_athlete_id=None,
        sensitivity_athlete_ids=["q", "r", "s", "t"],
        sensitivity_percent=None,
        exhibition_athlete_ids=["a"],
    )
    kinds = [v.kind for v in validate_roster(selection, _athletes("a", "b"), MeetSettings())]
    assert "test_spot_not_selected" in kinds
    assert "test_spot_scorer_invalid" in kinds
    assert "sensitivity_too_many" in kinds
    assert kinds.count("sensitivity_not_selected") == 4
    assert "exhibition_selected" in kinds
    assert "max_athletes" not in kinds


def _entries(athlete_id, n, event_type="individual"):
    return [
        MeetLineup(
            id=f"{athlete_id}-{event_type}-{i}",
            athlete_id=athlete_id,
            event_id=f"{event_type}-{i}",
            team_id="T1",
            event_type=event_type,
        )
        for i in range(n)
    ]


def test_lineup_limits():
    athletes = _athletes("a", "d", divers=("d",))
    lineups = _entries("a", 4) + _entries("a", 2, "relay") + _entries("d", 3, "diving")
    violations = validate_lineup_limits(lineups, athletes, MeetSettings())
    assert [(v.kind, v.actual) for v in violations] == [
        ("max_indiv_events", 4),
        ("max_diving_events", 3),
    ]
    assert violations[0].message == "A Swimmer: 4 individual events (max 3)"


def test_diving_entries_rejected_when_diving_is_excluded():
    athletes = _athletes("d", divers=("d",))
    settings = MeetSettings(diving_included=False)
    violations = validate_lineup_limits(_entries("d", 1, "diving"), athletes, settings)
    assert [v.kind for v in violations] == ["diving_excluded"]
