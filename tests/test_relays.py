from __future__ import annotations

import pytest

from swimmeet_core import (
    Athlete,
    EventTime,
    FormatError,
    RelayEntry,
    build_relay_entry,
    compose_relay,
    compose_relay_leg,
    relay_config,
    validate_relay_counts,
)


def _athlete(athlete_id, *times, first="Ana", last="Lee"):
    return Athlete(
        id=athlete_id,
        first_name=first,
        last_name=last,
        team_id="T1",
        event_times=tuple(times),
    )


def _flat(event, seconds):
    return EventTime(event, f"{seconds:.2f}", seconds)


def _split(event, seconds):
    return EventTime(event, f"{seconds:.2f}", seconds, is_relay_split=True)


def test_missing_split_falls_back_to_flat_minus_correction():
    athlete = _athlete("a", _flat("50 Free", 20.00))
    assert compose_relay_leg(athlete, 1, "Free", 50, True, 0.5) == 19.5


def test_split_on_file_is_used_verbatim():
    athlete = _athlete("a", _flat("50 Free", 20.00), _split("50 FR", 19.20))
    assert compose_relay_leg(athlete, 2, "Free", 50, True, 0.5) == 19.2


def test_split_ignored_when_not_requested():
    athlete = _athlete("a", _flat("50 Free", 20.00), _split("50 Free", 19.20))
    assert compose_relay_leg(athlete, 1, "Free", 50, False, 0.5) == 19.5


def test_lead_off_leg_is_always_a_flat_start():
    athlete = _athlete("a", _flat("50 Free", 20.00), _split("50 Free", 19.20))
    assert compose_relay_leg(athlete, 0, "Free", 50, True, 0.5) == 20.0

    only_split = _athlete("b", _split("50 Free", 19.20))
    assert compose_relay_leg(only_split, 0, "Free", 50, True, 0.5) is None


def test_custom_time_overrides_everything():
    athlete = _athlete("a", _flat("50 Free", 20.00))
    assert compose_relay_leg(athlete, 0, "Free", 50, False, 0.5, custom_time="18.90") == 18.9
    assert compose_relay_leg(None, 3, "Free", 50, True, 0.5, custom_time=21.0) == 21.0


def test_malformed_custom_time_raises():
    athlete = _athlete("a", _flat("50 Free", 20.00))
    with pytest.raises(FormatError):
        compose_relay_leg(athlete, 1, "Free", 50, True, 0.5, custom_time="2O.00")


def test_correction_is_floored_at_zero():
    athlete = _athlete("a", _flat("50 Free", 0.30))
    assert compose_relay_leg(athlete, 1, "Free", 50, False, 0.5) == 0.0


def test_no_athlete_and_no_times():
    assert compose_relay_leg(None, 1, "Free", 50, True, 0.5) is None
    assert compose_relay_leg(_athlete("a"), 1, "Free", 50, True, 0.5) is None


def test_relay_config():
    assert relay_config("400 Free Relay").distance_per_leg == 100
    assert relay_config("800 Free Relay").distance_per_leg == 200
    medley = relay_config("200 Medley Relay")
    assert medley.distance_per_leg == 50
    assert medley.strokes == ("Back", "Breast", "Fly", "Free")
    assert medley.is_medley
    assert relay_config("200 Free Relay").strokes == ("Free",) * 4


def _medley_squad():
    return {
        "a1": _athlete("a1", _flat("50 Back", 25.00)),
        "a2": _athlete("a2", _flat("50 Breast", 27.00), _split("50 Breast", 26.50)),
        "a3": _athlete("a3", _flat("50 Fly", 23.00)),
        "a4": _athlete("a4", _flat("50 Free", 20.00)),
    }


def test_compose_medley_relay_total():
    out = compose_relay(
        "200 Medley Relay",
        ["a1", "a2", "a3", "a4"],
        _medley_squad(),
        [False, True, True, True],
        0.5,
    )
    assert out.leg_times == (25.0, 26.5, 22.5, 19.5)
    assert out.total_seconds == 93.5
    assert out.total_time == "1:33.50"
    assert out.unresolved == ()


def test_relay_total_is_not_available_when_a_leg_is_missing():
    out = compose_relay(
        "200 Medley Relay",
        ["a1", None, "a3", "a4"],
        _medley_squad(),
        [False, True, True, True],
        0.5,
    )
    assert out.total_seconds is None
    assert out.total_time == "N/A"
    assert len(out.unresolved) == 1
    assert out.unresolved[0].leg_index == 1
    assert out.unresolved[0].reason == "no_athlete"


def test_unresolved_leg_reports_missing_flat_start():
    squad = _medley_squad()
    out = compose_relay(
        "200 Medley Relay", ["a4", "a2", "a3", "a1"], squad, [False, True, True, True], 0.5
    )
    reasons = {u.leg_index: (u.athlete_id, u.reason) for u in out.unresolved}
    # a4 has no back time, a1 has no free time
    assert reasons == {0: ("a4", "no_flat_start_time"), 3: ("a1", "no_flat_start_time")}


def test_build_relay_entry_fills_seed_time():
    entry, composition = build_relay_entry(
        "R1",
        "T1",
        "E1",
        "200 Medley Relay",
        ["a1", "a2", "a3", "a4"],
        _medley_squad(),
        [False, True, True, True],
        0.5,
    )
    assert entry.seed_time == "1:33.50"
    assert entry.seed_time_seconds == 93.5
    assert entry.members == ("a1", "a2", "a3", "a4")
    assert composition.total_seconds == 93.5


def test_validate_relay_counts_flags_each_athlete_over_the_limit():
    athletes = {"a": _athlete("a"), "b": _athlete("b", first="Bea", last="Ng")}
    relays = [
        RelayEntry(id=f"R{i}", team_id="T1", event_id=f"E{i}", members=("a", "b", None, None))
        for i in range(5)
    ]
    violations = validate_relay_counts(relays, athletes, max_relays=4)
    assert [v.subject for v in violations] == ["Ana Lee", "Bea Ng"]
    assert violations[0].kind == "max_relays"
    assert violations[0].message == "Ana Lee: 5 relays (max 4)"
    assert validate_relay_counts(relays[:4], athletes, max_relays=4) == []


@pytest.mark.parametrize(
    "name,per_leg",
    [("4x100 Free Relay", 100), ("4x200 Free Relay", 200), ("4x50 Medley Relay", 50), ("Relay", 50)],
)
def test_relay_config_reads_leg_notation(name, per_leg):
    assert relay_config(name).distance_per_leg == per_leg


def test_four_by_hundred_relay_uses_hundred_times():
    athletes = {
        f"a{i}": _athlete(f"a{i}", _flat("100 Free", 45.00), _flat("50 Free", 20.00))
        for i in range(4)
    }
    out = compose_relay(
        "4x100 Free Relay", ["a0", "a1", "a2", "a3"], athletes, [False, True, True, True], 0.5
    )
    assert out.leg_times == (45.0, 44.5, 44.5, 44.5)
    assert out.total_seconds == 178.5


def test_athlete_on_two_legs_of_one_relay_counts_once():
    athletes = {"a": _athlete("a"), "b": _athlete("b", first="Bea", last="Ng")}
    relays = [
        RelayEntry(id="R1", team_id="T1", event_id="E1", members=("a", "a", "b", None)),
        RelayEntry(id="R2", team_id="T1", event_id="E2", members=("a", "b", None, None)),
    ]
    violations = validate_relay_counts(relays, athletes, max_relays=2)
    assert [(v.kind, v.subject, v.actual) for v in violations] == [
        ("duplicate_relay_leg", "Ana Lee", 2),
    ]

    over = validate_relay_counts(relays, athletes, max_relays=1)
    assert [(v.kind, v.actual) for v in over if v.kind == "max_relays"] == [
        ("max_relays", 2),
        ("max_relays", 2),
    ]
