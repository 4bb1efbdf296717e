"""Template sync run reporting."""

import datetime
from typing import Literal, Optional

from ._strict_base import StrictModel


class SyncRunResult(StrictModel):
    venue_id: str
    status: Literal["done", "failed"]
    refreshed_rows: int
    inserted_rows: int = 0
    deleted_rows: int = 0
    updated_rows: int = 0
    window_start: datetime.date
    window_end: datetime.date
    error: Optional[str] = None
