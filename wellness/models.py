"""Pydantic models -- single source of truth for all data types."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Mood(str, enum.Enum):
    """How the user feels right now; picks the exercises on offer."""

    CALM = "Calm"
    STRESSED = "Stressed"
    ENERGETIC = "Energetic"


class Daypart(str, enum.Enum):
    """Coarse time-of-day bucket used to condense suggestions."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class BusyInterval(BaseModel):
    """An occupied stretch of the calendar, as seen by the slot finder."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    is_owned: bool = False  # created by this app
    tag: Optional[str] = None  # slot id an owned interval was booked from
    id: Optional[str] = None
    title: Optional[str] = None


class SlotCandidate(BaseModel):
    """A proposed free window for a wellness pause."""

    model_config = ConfigDict(frozen=True)

    id: str
    start: datetime
    end: datetime
    duration_minutes: int = Field(gt=0)


class ScanConfig(BaseModel):
    """Parameters for the free-slot scan."""

    days_to_scan: int = Field(default=1, ge=1, le=31)
    min_duration_minutes: int = Field(default=15, gt=0)
    max_duration_minutes: int = Field(default=30, gt=0)
    day_start_hour: int = Field(default=7, ge=0, le=24)
    day_end_hour: int = Field(default=22, ge=0, le=24)

    @model_validator(mode="after")
    def _check_ranges(self) -> ScanConfig:
        if self.day_end_hour <= self.day_start_hour:
            raise ValueError("day_end_hour must be after day_start_hour")
        if self.max_duration_minutes < self.min_duration_minutes:
            raise ValueError("max_duration_minutes must be >= min_duration_minutes")
        return self


class EventMeta(BaseModel):
    """Wellness details attached to a calendar event, keyed by event id."""

    event_id: str
    exercise: Optional[str] = None
    exercise_mood: Optional[Mood] = None
    slot_id: Optional[str] = None
    user_mood: Optional[Mood] = None


class CalendarEventCreate(BaseModel):
    """Input model for recording an external calendar entry."""

    title: str = Field(min_length=1, max_length=200)
    start: datetime
    end: datetime
    location: Optional[str] = None
    calendar_name: Optional[str] = None

    @model_validator(mode="after")
    def _check_order(self) -> CalendarEventCreate:
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self


class CalendarEvent(BaseModel):
    """A stored calendar entry, with wellness metadata when the app made it."""

    id: str
    title: str
    start: datetime
    end: datetime
    is_owned: bool = False
    location: Optional[str] = None
    calendar_name: Optional[str] = None
    meta: Optional[EventMeta] = None

    def to_busy(self) -> BusyInterval:
        return BusyInterval(
            start=self.start,
            end=self.end,
            is_owned=self.is_owned,
            tag=self.meta.slot_id if self.meta else None,
            id=self.id,
            title=self.title,
        )


class AppConfig(BaseModel):
    """Application configuration (persisted to ~/.config/wellness/config.json)."""

    db_path: Optional[str] = None  # None = use default (~/.local/share/wellness/)
    mood: Mood = Mood.CALM
    scan: ScanConfig = Field(default_factory=ScanConfig)
    min_future_buffer_minutes: int = Field(default=15, ge=0)
    slots_per_daypart: int = Field(default=2, ge=1)
