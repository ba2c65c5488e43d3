"""Swim time / dive score codec and event-name canonicalization.

Times are stored twice: as text the coach typed ("1:35.20") and as seconds
(95.2). Every comparison in the engine goes through the seconds value.
Dive scores share the same storage but are plain decimals ("350.25").
"""
from __future__ import annotations

import math
import re
from typing import Any

from .errors import FormatError

_NUMBER_RE = re.compile(r"^\d+(?:\.\d+)?$")
# "13-14", "15 & Over", "10 and under", "11-12 yr" age-group labels
_AGE_GROUP_RE = re.compile(r"\b\d+\s*-\s*\d+\b|\b\d+\s*(?:&|and)\s*(?:under|over|up)\b")

STROKE_CODES = {
    "FR": "Free",
    "BK": "Back",
    "BR": "Breast",
    "FL": "Fly",
    "IM": "IM",
}

_STROKE_ALIASES = {
    "fr": "free",
    "free": "free",
    "freestyle": "free",
    "fs": "free",
    "bk": "back",
    "ba": "back",
    "back": "back",
    "backstroke": "back",
    "br": "breast",
    "breast": "breast",
    "breaststroke": "breast",
    "fl": "fly",
    "bf": "fly",
    "fly": "fly",
    "butterfly": "fly",
    "im": "im",
    "medley": "medley",
}

def parse_time_to_seconds(text: Any) -> float:
    """Parse "MM:SS.ss", "SS.ss" or a plain dive score into seconds/points.

    Examples:
        - "4:15.32" → 255.32
        - "19.85" → 19.85
        - "350.25" → 350.25 (dive score)

    Raises:
        FormatError: empty, non-numeric, negative or malformed input.
    """
    if isinstance(text, bool):
        raise FormatError(text, "not_a_time")
    if isinstance(text, (int, float)):
        value = float(text)
        if not math.isfinite(value) or value < 0:
            raise FormatError(text, "negative_or_not_finite")
        return value
    if not isinstance(text, str):
        raise FormatError(text, "not_a_time")

    stripped = text.strip()
    if not stripped:
        raise FormatError(text, "empty")
    if stripped.startswith("-"):
        raise FormatError(text, "negative")

    parts = stripped.split(":")
    if len(parts) == 1:
        if not _NUMBER_RE.match(stripped):
            raise FormatError(text, "not_numeric")
        return float(stripped)
    if len(parts) != 2:
        raise FormatError(text, "too_many_colons")

    minutes_text, seconds_text = parts
    if not minutes_text.isdigit() or not _NUMBER_RE.match(seconds_text):
        raise FormatError(text, "not_numeric")
    seconds = float(seconds_text)
    if seconds >= 60:
        raise FormatError(text, "seconds_out_of_range")
    return round(int(minutes_text) * 60 + seconds, 4)


def parse_optional_time(text: Any) -> float | None:
    """Like parse_time_to_seconds, but None/blank means "no time"."""
    if text is None:
        return None
    if isinstance(text, str) and not text.strip():
        return None
    return parse_time_to_seconds(text)


def format_seconds_to_time(seconds: float, is_score_like: bool = False) -> str:
    """Format seconds back to display text.

    Under a minute (and every dive score) renders as a plain 2-decimal
    number; otherwise "M:SS.ss" with no leading zero on the minutes.
    """
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        raise FormatError(seconds, "negative_or_not_finite")
    if is_score_like:
        return f"{seconds:.2f}"

    hundredths = int(round(seconds * 100))
    if hundredths < 6000:
        return f"{hundredths / 100:.2f}"
    mins, rem = divmod(hundredths, 6000)
    return f"{mins}:{rem / 100:05.2f}"


def normalize_time_format(text: str) -> str:
    """Re-render a clock time canonically ("04:24.1" → "4:24.10").

    Plain numbers (short swims, dive scores) pass through unchanged.
    """
    stripped = (text or "").strip()
    if ":" not in stripped:
        return stripped
    return format_seconds_to_time(parse_time_to_seconds(stripped))


def stroke_name(code: str) -> str:
    """Map a relay leg code ("BK") to its stroke word ("Back")."""
    return STROKE_CODES.get(code.strip().upper(), code.strip())


def _split_distance(token: str) -> tuple[str | None, str]:
    # "50y" / "100m" / "1m" glue units to the number
    match = re.match(r"^(\d+)([a-z]*)$", token)
    if not match:
        return None, token
    return match.group(1), match.group(2)


def normalize_event_name(name: str) -> str:
    """Canonical distance+stroke key for an event name.

    "50 FR", "50 Free", "Men's 50 Yard Freestyle" → "50 free"
    "Girls 13-14 50 Free", "Boys 10 & Under 50 Free" → "50 free"
    "200 Medley Relay", "4x50 Medley Relay" → "200 medley relay"
    "1M Diving", "1 Meter Diving" → "1m diving"

    Names that carry no recognizable distance/stroke fall back to their
    lower-cased, whitespace-collapsed form so they still compare sanely.
    """
    lowered = _AGE_GROUP_RE.sub(" ", (name or "").lower())
    cleaned = re.sub(r"[^a-z0-9x]+", " ", lowered.replace("'", ""))
    tokens = cleaned.split()

    distance: str | None = None
    stroke: str | None = None
    is_relay = False
    is_diving = False
    relay_legs: int | None = None

    for token in tokens:
        leg_match = re.match(r"^(\d+)x(\d+)$", token)
        if leg_match:
            relay_legs = int(leg_match.group(1))
            distance = str(relay_legs * int(leg_match.group(2)))
            is_relay = True
            continue
        number, unit = _split_distance(token)
        if number is not None:
            if unit == "m" and "diving" in tokens:
                is_diving = True
            if distance is None:
                distance = number
            continue
        if token == "relay":
            is_relay = True
        elif token in ("diving", "dive"):
            is_diving = True
        elif token in _STROKE_ALIASES and stroke is None:
            stroke = _STROKE_ALIASES[token]

    if is_diving and distance is not None:
        return f"{distance}m diving"
    if distance is None or stroke is None:
        return " ".join(cleaned.split())

    if is_relay:
        # A medley relay is "medley"; an individual medley is "im"
        if stroke == "im":
            stroke = "medley"
        return f"{distance} {stroke} relay"
    if stroke == "medley":
        stroke = "im"
    return f"{distance} {stroke}"


def same_event(a: str, b: str) -> bool:
    return normalize_event_name(a) == normalize_event_name(b)
