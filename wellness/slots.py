"""Free-slot detection between busy calendar intervals.

For each scanned day the window ``[day_start_hour, day_end_hour)`` is walked
left to right. Every gap between the cursor and the next busy interval is
carved greedily into pauses of ``max_duration_minutes``, falling back to
``min_duration_minutes`` when the remainder is shorter. Anything below the
minimum is dropped. All functions here are pure: the caller passes ``now``.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from itertools import islice
from typing import Iterable, Iterator, Optional

from wellness.models import BusyInterval, ScanConfig, SlotCandidate

MAX_SLOTS = 10

_ID_FORMAT = "%Y%m%dT%H%M%S"


def slot_id(start: datetime, duration_minutes: int) -> str:
    """Stable identifier for a slot: same start and length, same id."""
    return f"{start.strftime(_ID_FORMAT)}-{duration_minutes}"


def parse_slot_id(value: str) -> Optional[SlotCandidate]:
    """Rebuild the slot an id was made from, or None if *value* is not a slot id."""
    stamp, sep, minutes = value.strip().rpartition("-")
    if not sep or not minutes.isdigit() or int(minutes) == 0:
        return None
    try:
        start = datetime.strptime(stamp, _ID_FORMAT)
    except ValueError:
        return None
    return build_slot(start, int(minutes))


def fits_window(slot: SlotCandidate, config: ScanConfig) -> bool:
    """True if *slot* has an allowed length and lies inside its day's window."""
    if slot.duration_minutes not in (config.min_duration_minutes, config.max_duration_minutes):
        return False
    window_start, window_end = scan_window(slot.start, config)
    return window_start <= slot.start and slot.end <= window_end


def build_slot(start: datetime, duration_minutes: int) -> SlotCandidate:
    return SlotCandidate(
        id=slot_id(start, duration_minutes),
        start=start,
        end=start + timedelta(minutes=duration_minutes),
        duration_minutes=duration_minutes,
    )


def choose_duration(gap: timedelta, config: ScanConfig) -> Optional[int]:
    """Pick the longest allowed pause that fits in *gap*, or None."""
    if gap >= timedelta(minutes=config.max_duration_minutes):
        return config.max_duration_minutes
    if gap >= timedelta(minutes=config.min_duration_minutes):
        return config.min_duration_minutes
    return None


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def scan_window(day: datetime, config: ScanConfig) -> tuple[datetime, datetime]:
    """Return the active-hours window for the calendar day containing *day*."""
    midnight = start_of_day(day)
    return (
        midnight + timedelta(hours=config.day_start_hour),
        midnight + timedelta(hours=config.day_end_hour),
    )


def carve_gap(
    gap_start: datetime, gap_end: datetime, config: ScanConfig
) -> Iterator[SlotCandidate]:
    """Split one free gap into consecutive pauses, longest first."""
    cursor = gap_start
    while True:
        duration = choose_duration(gap_end - cursor, config)
        if duration is None:
            return
        slot = build_slot(cursor, duration)
        yield slot
        cursor = slot.end


def iter_free_slots(
    busy: Iterable[BusyInterval], config: ScanConfig, now: datetime
) -> Iterator[SlotCandidate]:
    """Lazily yield every free slot from *now* over ``config.days_to_scan`` days."""
    intervals = sorted(busy, key=lambda b: b.start)
    today = start_of_day(now)

    for offset in range(config.days_to_scan):
        day = today + timedelta(days=offset)
        window_start, window_end = scan_window(day, config)
        cursor = max(now, window_start) if offset == 0 else window_start

        # Intervals are attributed to the day they start on.
        for interval in (b for b in intervals if b.start.date() == day.date()):
            if interval.start > cursor:
                for slot in carve_gap(cursor, min(interval.start, window_end), config):
                    if slot.start >= now:
                        yield slot
            if interval.end > cursor:
                cursor = interval.end

        if window_end > cursor:
            for slot in carve_gap(cursor, window_end, config):
                if slot.start >= now:
                    yield slot


def find_free_slots(
    busy: Iterable[BusyInterval], config: ScanConfig, now: datetime
) -> list[SlotCandidate]:
    """Return up to ``MAX_SLOTS`` free slots, earliest first."""
    return list(islice(iter_free_slots(busy, config, now), MAX_SLOTS))


def ranges_overlap(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    """Half-open overlap test; touching endpoints do not overlap."""
    return start_a < end_b and start_b < end_a


def has_conflict(busy: Iterable[BusyInterval], start: datetime, end: datetime) -> bool:
    """True if ``[start, end)`` overlaps any busy interval."""
    return any(ranges_overlap(start, end, b.start, b.end) for b in busy)
