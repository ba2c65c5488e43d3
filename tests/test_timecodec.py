from __future__ import annotations

import pytest

from swimmeet_core import (
    FormatError,
    format_seconds_to_time,
    normalize_event_name,
    normalize_time_format,
    parse_time_to_seconds,
)
from swimmeet_core.timecodec import parse_optional_time, same_event, stroke_name


@pytest.mark.parametrize(
    "text,expected",
    [
        ("4:15.32", 255.32),
        ("19.85", 19.85),
        ("1:00.00", 60.0),
        ("350.25", 350.25),
        (" 22.10 ", 22.10),
        (95.2, 95.2),
    ],
)
def test_parse_time_to_seconds(text, expected):
    assert parse_time_to_seconds(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "-5", "1:75.00", "1:2:3", "1:ab", None, True])
def test_parse_rejects_malformed_input(text):
    with pytest.raises(FormatError):
        parse_time_to_seconds(text)


def test_format_error_is_a_value_error_and_carries_the_text():
    with pytest.raises(ValueError) as exc:
        parse_time_to_seconds("1:75.00")
    assert exc.value.text == "1:75.00"
    assert exc.value.reason == "seconds_out_of_range"


def test_parse_optional_time_treats_blank_as_missing():
    assert parse_optional_time(None) is None
    assert parse_optional_time("  ") is None
    assert parse_optional_time("20.00") == 20.0


@pytest.mark.parametrize(
    "seconds,expected",
    [
        (19.85, "19.85"),
        (95.2, "1:35.20"),
        (255.32, "4:15.32"),
        (60.0, "1:00.00"),
        (59.999, "1:00.00"),
    ],
)
def test_format_seconds_to_time(seconds, expected):
    assert format_seconds_to_time(seconds) == expected


def test_dive_scores_format_as_plain_numbers():
    assert format_seconds_to_time(350.25, is_score_like=True) == "350.25"
    assert format_seconds_to_time(75.0, is_score_like=True) == "75.00"


def test_format_rejects_negative():
    with pytest.raises(FormatError):
        format_seconds_to_time(-1.0)


def test_normalize_time_format():
    assert normalize_time_format("04:24.1") == "4:24.10"
    assert normalize_time_format("19.85") == "19.85"


@pytest.mark.parametrize(
    "name,expected",
    [
        ("50 FR", "50 free"),
        ("50 Free", "50 free"),
        ("Men's 50 Yard Freestyle", "50 free"),
        ("50y Free", "50 free"),
        ("100 BK", "100 back"),
        ("200 Individual Medley", "200 im"),
        ("200 IM", "200 im"),
        ("200 Medley Relay", "200 medley relay"),
        ("4x50 Medley Relay", "200 medley relay"),
        ("400 Free Relay", "400 free relay"),
        ("1M Diving", "1m diving"),
        ("1 Meter Diving", "1m diving"),
        ("Team Warmup", "team warmup"),
        ("Girls 13-14 50 Free", "50 free"),
        ("Boys 10 & Under 100 Back", "100 back"),
        ("Women 15 and Over 200 IM", "200 im"),
        ("Mixed 11-12 4x50 Medley Relay", "200 medley relay"),
    ],
)
def test_normalize_event_name(name, expected):
    assert normalize_event_name(name) == expected


def test_same_event_compares_distance_and_stroke():
    assert same_event("50 FR", "Women's 50 Freestyle")
    assert not same_event("50 Free", "50 Back")
    assert not same_event("200 Free", "200 Free Relay")


def test_stroke_name():
    assert stroke_name("BK") == "Back"
    assert stroke_name("fl") == "Fly"
    assert stroke_name("XX") == "XX"
