"""Shop domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...models import WEEKDAYS
from ...shared.validators import parse_hhmm


class DaySchedule(BaseModel):
    """Opening hours for one weekday. start/end are "HH:MM" and required when open."""

    open: bool
    start: Optional[str] = None
    end: Optional[str] = None

    @field_validator("start", "end")
    @classmethod
    def validate_hhmm(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        parse_hhmm(v)
        return v

    @model_validator(mode="after")
    def validate_range(self):
        if self.open:
            if not self.start or not self.end:
                raise ValueError("start and end are required when the shop opens")
            if parse_hhmm(self.start) >= parse_hhmm(self.end):
                raise ValueError("start must be before end")
        return self


class ShopUpdate(BaseModel):
    """Schema for creating or replacing the shop profile"""

    name: str = Field(min_length=1)
    workingHours: dict[str, DaySchedule]

    @field_validator("workingHours")
    @classmethod
    def validate_weekdays(cls, v: dict[str, DaySchedule]) -> dict[str, DaySchedule]:
        normalized = {}
        for day, schedule in v.items():
            key = day.strip().lower()
            if key not in WEEKDAYS:
                raise ValueError(f"Unknown weekday '{day}'")
            normalized[key] = schedule
        return normalized


class ShopResponse(BaseModel):
    id: str
    name: str
    workingHours: dict[str, DaySchedule]
    updated_at: Optional[datetime] = None
