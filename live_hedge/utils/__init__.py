"""
Utility modules for the live hedge core.

Common utilities: logging, guarded numerics, team name handling.
"""

from live_hedge.utils.logging import get_logger
from live_hedge.utils.numeric import clamp, parse_clock_minutes, parse_quarter, safe_divide
from live_hedge.utils.team_names import TEAM_ABBREV_MAP, normalize_opponent

__all__ = [
    "get_logger",
    "clamp",
    "safe_divide",
    "parse_clock_minutes",
    "parse_quarter",
    "normalize_opponent",
    "TEAM_ABBREV_MAP",
]
