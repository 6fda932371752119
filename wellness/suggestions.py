"""Turn raw free slots into the handful of pauses shown to the user.

Also holds the checks run before a suggested pause is booked or moved.
"""

from __future__ import annotations

import enum
import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional

from wellness.models import BusyInterval, Daypart, ScanConfig, SlotCandidate
from wellness.slots import (
    build_slot,
    choose_duration,
    find_free_slots,
    has_conflict,
    scan_window,
    start_of_day,
)

log = logging.getLogger(__name__)

MORNING_END_HOUR = 12
AFTERNOON_END_HOUR = 18


class RejectReason(str, enum.Enum):
    """Why a pause cannot be booked or moved."""

    ALREADY_ADDED = "already-added"
    NO_EXERCISE = "no-exercise"
    TOO_LATE = "too-late"
    TODAY_ONLY = "today-only"
    CONFLICT = "conflict"


_REASON_MESSAGES: dict[RejectReason, str] = {
    RejectReason.ALREADY_ADDED: "That pause is already in your calendar. Manage it from the busy list.",
    RejectReason.NO_EXERCISE: "Choose an exercise for this pause first.",
    RejectReason.TOO_LATE: "That time has already passed. Pick a time in the future.",
    RejectReason.TODAY_ONLY: "Pauses can only be scheduled for today.",
    RejectReason.CONFLICT: "That time overlaps something already in your calendar.",
}


class SlotRejected(Exception):
    """A pause failed one of the booking checks."""

    def __init__(self, reason: RejectReason, slot: Optional[SlotCandidate] = None) -> None:
        self.reason = reason
        self.slot = slot
        super().__init__(_REASON_MESSAGES[reason])


def daypart_of(moment: datetime) -> Daypart:
    if moment.hour < MORNING_END_HOUR:
        return Daypart.MORNING
    if moment.hour < AFTERNOON_END_HOUR:
        return Daypart.AFTERNOON
    return Daypart.EVENING


def _today_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Return ``[midnight, next midnight)`` for the day containing *now*."""
    midnight = start_of_day(now)
    return midnight, midnight + timedelta(days=1)


def fallback_slot(
    config: ScanConfig, now: datetime, buffer_minutes: int
) -> Optional[SlotCandidate]:
    """A single pause from ``now + buffer`` for days where nothing else fits.

    Uses the same duration rule and window end as the regular scan, so the
    fallback never proposes a pause outside active hours.
    """
    earliest = now + timedelta(minutes=buffer_minutes)
    window_start, window_end = scan_window(now, config)
    start = max(earliest, window_start)
    duration = choose_duration(window_end - start, config)
    if duration is None:
        return None
    return build_slot(start, duration)


def suggest_slots(
    busy: Iterable[BusyInterval],
    config: ScanConfig,
    now: datetime,
    buffer_minutes: int = 15,
    per_daypart: int = 2,
) -> list[SlotCandidate]:
    """Today's pauses: buffered, grouped by daypart, earliest few of each."""
    busy = list(busy)
    free = find_free_slots(busy, config, now)
    log.debug("Found %d free slot(s) before filtering", len(free))

    earliest = now + timedelta(minutes=buffer_minutes)
    today_start, today_end = _today_bounds(now)
    filtered = [
        s for s in free
        if s.start >= earliest and s.start >= today_start and s.end <= today_end
    ]

    if not filtered:
        fallback = fallback_slot(config, now, buffer_minutes)
        if fallback is not None and not has_conflict(busy, fallback.start, fallback.end):
            log.debug("No free slots today, offering fallback %s", fallback.id)
            filtered = [fallback]

    buckets: dict[Daypart, list[SlotCandidate]] = {part: [] for part in Daypart}
    for slot in filtered:
        buckets[daypart_of(slot.start)].append(slot)

    condensed: list[SlotCandidate] = []
    for part in Daypart:
        condensed.extend(buckets[part][:per_daypart])
    return condensed


def added_slot_ids(busy: Iterable[BusyInterval]) -> dict[str, str]:
    """Map slot ids to the event ids of pauses already booked from them."""
    added: dict[str, str] = {}
    for interval in busy:
        if interval.is_owned and interval.tag and interval.id:
            added[interval.tag] = interval.id
    return added


def check_bookable(
    slot: SlotCandidate,
    busy: Iterable[BusyInterval],
    now: datetime,
    exercise: Optional[str],
) -> None:
    """Raise SlotRejected unless *slot* can be added to today's calendar."""
    busy = list(busy)
    if slot.id in added_slot_ids(busy):
        raise SlotRejected(RejectReason.ALREADY_ADDED, slot)
    if not exercise:
        raise SlotRejected(RejectReason.NO_EXERCISE, slot)
    if slot.start < now:
        raise SlotRejected(RejectReason.TOO_LATE, slot)
    today_start, today_end = _today_bounds(now)
    if slot.start < today_start or slot.end > today_end:
        raise SlotRejected(RejectReason.TODAY_ONLY, slot)
    if has_conflict(busy, slot.start, slot.end):
        raise SlotRejected(RejectReason.CONFLICT, slot)


def move_slot(
    slot: SlotCandidate,
    new_start: datetime,
    busy: Iterable[BusyInterval],
    now: datetime,
) -> SlotCandidate:
    """Return *slot* shifted to *new_start*, keeping its id and duration."""
    busy = list(busy)
    new_end = new_start + timedelta(minutes=slot.duration_minutes)
    if new_start < now:
        raise SlotRejected(RejectReason.TOO_LATE, slot)
    if slot.id in added_slot_ids(busy):
        raise SlotRejected(RejectReason.ALREADY_ADDED, slot)
    if has_conflict(busy, new_start, new_end):
        raise SlotRejected(RejectReason.CONFLICT, slot)
    return slot.model_copy(update={"start": new_start, "end": new_end})
