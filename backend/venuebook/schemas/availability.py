# backend/venuebook/schemas/availability.py
"""
Availability schemas.

ComputedSlot is the resolver's output unit: a gap in the booked schedule,
derived on every query and never persisted.
"""

import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import Field

from ._strict_base import StrictModel

DateType = datetime.date
TimeType = datetime.time


class ComputedSlot(StrictModel):
    date: DateType
    start_time: TimeType
    end_time: TimeType
    is_available: Literal[True] = True
    venue_id: str
    source: Literal["legacy", "template"]
    availability_id: Optional[str] = Field(
        default=None, description="Legacy availability row the slot was cut from"
    )
    slot_instance_id: Optional[str] = Field(
        default=None, description="Materialized template instance the slot was cut from"
    )
    action_type: Optional[str] = None
    drop_in_price: Optional[Decimal] = None
