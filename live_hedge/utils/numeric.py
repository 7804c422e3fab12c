"""
Guarded numeric helpers shared by every analyzer.

Nothing in the core may emit NaN or infinity: divisions go through
safe_divide and bounded outputs through clamp.
"""
from __future__ import annotations

import math
import re
from enum import Enum
from typing import Iterable, Mapping, Type

import numpy as np

QUARTER_MINUTES = 12.0
GAME_MINUTES = 48.0
HALF_MINUTES = 24.0

_CLOCK_RE = re.compile(r"^\s*(\d+)(?::(\d{1,2}(?:\.\d+)?))?\s*$")


def clamp(value: float, lower: float, upper: float) -> float:
    """Clip value into [lower, upper]; non-finite input collapses to lower."""
    if value is None or not math.isfinite(value):
        return float(lower)
    return float(np.clip(value, lower, upper))


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning default for a zero or non-finite denominator."""
    if not denominator or not math.isfinite(denominator):
        return default
    result = numerator / denominator
    return result if math.isfinite(result) else default


def round1(value: float) -> float:
    return round(float(value), 1)


def parse_clock_minutes(clock: str | None) -> float:
    """
    Parse a game clock ("6:30", "0:45.2", "11") into minutes left in the period.

    Empty or unparseable clocks read as a fresh quarter (12.0).
    """
    if not clock:
        return QUARTER_MINUTES
    match = _CLOCK_RE.match(str(clock))
    if not match:
        return QUARTER_MINUTES
    minutes = float(match.group(1))
    seconds = float(match.group(2)) if match.group(2) else 0.0
    return clamp(minutes + seconds / 60.0, 0.0, QUARTER_MINUTES)


def parse_quarter(period: str | int | None) -> int:
    """
    Parse the feed's period field into a quarter number.

    Returns 0 for anything that is not a plain integer ("OT", "", None);
    callers treat 0 and values above 4 as not applicable.
    """
    if period is None:
        return 0
    if isinstance(period, int):
        return max(0, period)
    text = str(period).strip().upper()
    if text.startswith("Q"):
        text = text[1:]
    try:
        return max(0, int(text))
    except ValueError:
        return 0


def ensure_exhaustive(table: Mapping, enum_cls: Type[Enum], table_name: str) -> None:
    """
    Fail at import time if an enum-indexed lookup table is missing a member.

    Raises:
        LookupError: when any member of enum_cls has no entry in table
    """
    missing = [member.value for member in enum_cls if member not in table]
    if missing:
        raise LookupError(f"{table_name} is missing entries for: {', '.join(missing)}")


def first_matching(value: float, bands: Iterable[tuple[float, float]], default: float) -> float:
    """Return the payload of the first (minimum, payload) band with value >= minimum."""
    for minimum, payload in bands:
        if value >= minimum:
            return payload
    return default
