"""Live line overlay, as delivered by the live line feed (~30s cadence)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class LiveLine(BaseModel):
    """Current market line for a tracked pick."""

    model_config = ConfigDict(frozen=True)

    pick_id: str
    line: float
    bookmaker: str
    over_price: Optional[int] = None
    under_price: Optional[int] = None
    as_of: Optional[str] = None
