"""
Opponent name normalization for shot-zone defense lookups.

Feeds describe the opponent inconsistently:
- Live feed (e.g., "Los Angeles Lakers")
- Pick slips (e.g., "vs Lakers", "@ Sixers")
- Zone tables (e.g., "LAL")

Every variant resolves to the three-letter code the defense table is keyed on.
"""
from typing import Dict

# Full franchise name -> team code
TEAM_ABBREV_MAP: Dict[str, str] = {
    "Atlanta Hawks": "ATL",
    "Boston Celtics": "BOS",
    "Brooklyn Nets": "BKN",
    "Charlotte Hornets": "CHA",
    "Chicago Bulls": "CHI",
    "Cleveland Cavaliers": "CLE",
    "Dallas Mavericks": "DAL",
    "Denver Nuggets": "DEN",
    "Detroit Pistons": "DET",
    "Golden State Warriors": "GSW",
    "Houston Rockets": "HOU",
    "Indiana Pacers": "IND",
    "LA Clippers": "LAC",
    "Los Angeles Clippers": "LAC",
    "Los Angeles Lakers": "LAL",
    "LA Lakers": "LAL",
    "Memphis Grizzlies": "MEM",
    "Miami Heat": "MIA",
    "Milwaukee Bucks": "MIL",
    "Minnesota Timberwolves": "MIN",
    "New Orleans Pelicans": "NOP",
    "New York Knicks": "NYK",
    "Oklahoma City Thunder": "OKC",
    "Orlando Magic": "ORL",
    "Philadelphia 76ers": "PHI",
    "Phoenix Suns": "PHX",
    "Portland Trail Blazers": "POR",
    "Sacramento Kings": "SAC",
    "San Antonio Spurs": "SAS",
    "Toronto Raptors": "TOR",
    "Utah Jazz": "UTA",
    "Washington Wizards": "WAS",
}

# Nicknames (lowercase)
NICKNAME_ABBREV_MAP: Dict[str, str] = {
    "trail blazers": "POR",
    "timberwolves": "MIN",
    "hawks": "ATL",
    "celtics": "BOS",
    "nets": "BKN",
    "hornets": "CHA",
    "bulls": "CHI",
    "cavaliers": "CLE",
    "cavs": "CLE",
    "mavericks": "DAL",
    "mavs": "DAL",
    "nuggets": "DEN",
    "pistons": "DET",
    "warriors": "GSW",
    "rockets": "HOU",
    "pacers": "IND",
    "clippers": "LAC",
    "lakers": "LAL",
    "grizzlies": "MEM",
    "heat": "MIA",
    "bucks": "MIL",
    "wolves": "MIN",
    "pelicans": "NOP",
    "knicks": "NYK",
    "thunder": "OKC",
    "magic": "ORL",
    "76ers": "PHI",
    "sixers": "PHI",
    "suns": "PHX",
    "blazers": "POR",
    "kings": "SAC",
    "spurs": "SAS",
    "raptors": "TOR",
    "jazz": "UTA",
    "wizards": "WAS",
}

_FULL_NAME_LOWER = {name.lower(): code for name, code in TEAM_ABBREV_MAP.items()}

# Longest first so "hornets" is not read as "nets"
_NICKNAMES_BY_LENGTH = sorted(NICKNAME_ABBREV_MAP.items(), key=lambda item: len(item[0]), reverse=True)


def normalize_opponent(opponent_name: str) -> str:
    """
    Normalize an opponent name to its team code.

    Resolution order: code passthrough, exact full name, exact nickname,
    nickname contained in the text, then the first three characters
    uppercased.

    Examples:
        >>> normalize_opponent("Los Angeles Lakers")
        'LAL'
        >>> normalize_opponent("vs Lakers")
        'LAL'
        >>> normalize_opponent("BOS")
        'BOS'
    """
    if not opponent_name:
        return ""

    name = opponent_name.strip()

    # Already a code
    if len(name) <= 4 and name == name.upper() and name.isalpha():
        return name

    if name in TEAM_ABBREV_MAP:
        return TEAM_ABBREV_MAP[name]

    lower = name.lower()
    if lower in _FULL_NAME_LOWER:
        return _FULL_NAME_LOWER[lower]

    if lower in NICKNAME_ABBREV_MAP:
        return NICKNAME_ABBREV_MAP[lower]

    for nickname, abbrev in _NICKNAMES_BY_LENGTH:
        if nickname in lower:
            return abbrev

    return name.upper()[:3]


__all__ = [
    "TEAM_ABBREV_MAP",
    "NICKNAME_ABBREV_MAP",
    "normalize_opponent",
]
