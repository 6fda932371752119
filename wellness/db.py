"""SQLite calendar store. All public functions return Pydantic models.

Wellness details live in ``event_meta``, keyed by event id, rather than being
packed into the event's free-text notes.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterator, Optional

from wellness.config import get_db_path as _config_get_db_path
from wellness.models import (
    BusyInterval,
    CalendarEvent,
    CalendarEventCreate,
    EventMeta,
    Mood,
    SlotCandidate,
)
from wellness.slots import start_of_day

log = logging.getLogger(__name__)

WELLNESS_EVENT_TITLE = "Wellness reset"
WELLNESS_EVENT_NOTES = "Scheduled via Wellness. Adjust or move as needed for your day."

_SCHEMA = """
CREATE TABLE IF NOT EXISTS events (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    title          TEXT    NOT NULL,
    starts_at      TEXT    NOT NULL,
    ends_at        TEXT    NOT NULL,
    is_owned       INTEGER NOT NULL DEFAULT 0,
    notes          TEXT,
    location       TEXT,
    calendar_name  TEXT,
    created_at     TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_events_start ON events(starts_at);

CREATE TABLE IF NOT EXISTS event_meta (
    event_id       INTEGER PRIMARY KEY REFERENCES events(id) ON DELETE CASCADE,
    exercise       TEXT,
    exercise_mood  TEXT,
    slot_id        TEXT,
    user_mood      TEXT
);
"""


class CalendarError(Exception):
    """The calendar store could not be read or written."""


@contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        log.warning("Calendar %s failed: %s", action, exc)
        raise CalendarError(f"Could not {action} the calendar.") from exc


def _get_db_path() -> Path:
    """Return the database file path from config (or default)."""
    return _config_get_db_path()


def get_connection(db_path: Optional[Path] = None) -> sqlite3.Connection:
    """Open a connection and ensure the schema exists."""
    path = db_path or _get_db_path()
    with _translate_errors("open"):
        conn = sqlite3.connect(str(path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.executescript(_SCHEMA)
    return conn


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


def _row_to_meta(row: sqlite3.Row) -> Optional[EventMeta]:
    """Build EventMeta from a joined row, or None when the event has none."""
    if row["meta_event_id"] is None:
        return None
    return EventMeta(
        event_id=str(row["meta_event_id"]),
        exercise=row["exercise"],
        exercise_mood=Mood(row["exercise_mood"]) if row["exercise_mood"] else None,
        slot_id=row["slot_id"],
        user_mood=Mood(row["user_mood"]) if row["user_mood"] else None,
    )


def _row_to_event(row: sqlite3.Row) -> CalendarEvent:
    """Convert a joined database row to a CalendarEvent model."""
    return CalendarEvent(
        id=str(row["id"]),
        title=row["title"],
        start=datetime.fromisoformat(row["starts_at"]),
        end=datetime.fromisoformat(row["ends_at"]),
        is_owned=bool(row["is_owned"]),
        location=row["location"],
        calendar_name=row["calendar_name"],
        meta=_row_to_meta(row),
    )


_SELECT_EVENTS = """
SELECT e.*, m.event_id AS meta_event_id, m.exercise, m.exercise_mood,
       m.slot_id, m.user_mood
FROM events e LEFT JOIN event_meta m ON m.event_id = e.id
"""


def get_event(conn: sqlite3.Connection, event_id: str) -> Optional[CalendarEvent]:
    """Fetch a single event by ID."""
    if not event_id.isdigit():
        return None
    with _translate_errors("read"):
        row = conn.execute(_SELECT_EVENTS + " WHERE e.id = ?", (int(event_id),)).fetchone()
    return _row_to_event(row) if row else None


def add_event(conn: sqlite3.Connection, event_in: CalendarEventCreate) -> CalendarEvent:
    """Record an external calendar entry and return it as a model."""
    with _translate_errors("update"):
        cur = conn.execute(
            "INSERT INTO events (title, starts_at, ends_at, is_owned, location, calendar_name, created_at) "
            "VALUES (?, ?, ?, 0, ?, ?, ?)",
            (
                event_in.title,
                event_in.start.isoformat(),
                event_in.end.isoformat(),
                event_in.location,
                event_in.calendar_name,
                datetime.now().isoformat(),
            ),
        )
        conn.commit()
        row = conn.execute(_SELECT_EVENTS + " WHERE e.id = ?", (cur.lastrowid,)).fetchone()
    return _row_to_event(row)


def list_events(
    conn: sqlite3.Connection, start: datetime, end: datetime
) -> list[CalendarEvent]:
    """List events starting in ``[start, end)``, earliest first."""
    with _translate_errors("read"):
        rows = conn.execute(
            _SELECT_EVENTS + " WHERE e.starts_at >= ? AND e.starts_at < ? ORDER BY e.starts_at ASC, e.id ASC",
            (start.isoformat(), end.isoformat()),
        ).fetchall()
    return [_row_to_event(r) for r in rows]


def fetch_busy(conn: sqlite3.Connection, days: int, now: datetime) -> list[BusyInterval]:
    """Busy intervals from today's midnight for *days* days."""
    start = start_of_day(now)
    events = list_events(conn, start, start + timedelta(days=days))
    log.debug("Fetched %d busy interval(s) for %d day(s)", len(events), days)
    return [e.to_busy() for e in events]


def add_wellness_event(
    conn: sqlite3.Connection,
    slot: SlotCandidate,
    exercise: Optional[str] = None,
    exercise_mood: Optional[Mood] = None,
    user_mood: Optional[Mood] = None,
    notes: Optional[str] = None,
) -> str:
    """Book *slot* as an owned calendar event. Returns the new event id."""
    with _translate_errors("update"):
        cur = conn.execute(
            "INSERT INTO events (title, starts_at, ends_at, is_owned, notes, created_at) "
            "VALUES (?, ?, ?, 1, ?, ?)",
            (
                WELLNESS_EVENT_TITLE,
                slot.start.isoformat(),
                slot.end.isoformat(),
                notes or WELLNESS_EVENT_NOTES,
                datetime.now().isoformat(),
            ),
        )
        event_id = cur.lastrowid
        conn.execute(
            "INSERT INTO event_meta (event_id, exercise, exercise_mood, slot_id, user_mood) "
            "VALUES (?, ?, ?, ?, ?)",
            (
                event_id,
                exercise,
                exercise_mood.value if exercise_mood else None,
                slot.id,
                user_mood.value if user_mood else None,
            ),
        )
        conn.commit()
    log.info("Booked %s at %s as event %s", exercise or "pause", slot.start, event_id)
    return str(event_id)


def remove_event(conn: sqlite3.Connection, event_id: str) -> bool:
    """Delete an app-created event. External events are left alone."""
    event = get_event(conn, event_id)
    if event is None or not event.is_owned:
        return False
    with _translate_errors("update"):
        conn.execute("DELETE FROM events WHERE id = ?", (int(event_id),))
        conn.commit()
    log.info("Removed event %s", event_id)
    return True


def get_meta(conn: sqlite3.Connection, event_id: str) -> Optional[EventMeta]:
    """Wellness metadata for an event, if it has any."""
    event = get_event(conn, event_id)
    return event.meta if event else None
