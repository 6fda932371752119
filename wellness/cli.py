"""Wellness CLI -- find short pauses in your day and book them."""

from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime, timedelta
from typing import Optional

import typer
from pydantic import ValidationError
from rich.logging import RichHandler

from wellness import config as cfg
from wellness import db, display, exercises
from wellness.models import AppConfig, BusyInterval, CalendarEventCreate, Mood, ScanConfig
from wellness.slots import (
    find_free_slots,
    fits_window,
    has_conflict,
    parse_slot_id,
    start_of_day,
)
from wellness.suggestions import (
    SlotRejected,
    added_slot_ids,
    check_bookable,
    move_slot,
    suggest_slots,
)

log = logging.getLogger(__name__)

app = typer.Typer(
    name="wellness",
    help="Match your day to your mood: find short wellness pauses between meetings.",
    no_args_is_help=True,
)

_SYNC_FAILED = "Unable to sync your calendar right now. Please try again."


def _now() -> datetime:
    """Current local time, truncated to the minute."""
    return datetime.now().replace(second=0, microsecond=0)


def _conn() -> sqlite3.Connection:
    """Get a database connection, or exit with the sync-failed message."""
    try:
        return db.get_connection()
    except db.CalendarError:
        display.print_warning(_SYNC_FAILED)
        raise typer.Exit(1)


def _parse_clock(value: str, day: date) -> datetime:
    """Turn ``HH:MM`` into a datetime on *day*."""
    try:
        parsed = datetime.strptime(value.strip(), "%H:%M")
    except ValueError:
        raise typer.BadParameter(f"Expected a time like 09:30, got {value!r}.")
    return datetime.combine(day, parsed.time())


def _parse_day(value: Optional[str], default: date) -> date:
    if value is None:
        return default
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"Expected a date like 2024-05-01, got {value!r}.")


def _fetch_busy(conn: sqlite3.Connection, conf: AppConfig, now: datetime) -> list[BusyInterval]:
    try:
        return db.fetch_busy(conn, conf.scan.days_to_scan, now)
    except db.CalendarError:
        conn.close()
        display.print_warning(_SYNC_FAILED)
        raise typer.Exit(1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Match your day to your mood."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=display.console, show_path=False)],
        force=True,
    )


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------


@app.command()
def slots(
    show_all: bool = typer.Option(
        False, "--all", "-a", help="Show every free slot, not just a few per daypart"
    ),
) -> None:
    """Show today's free windows for a wellness pause."""
    conf = cfg.load_config()
    now = _now()
    conn = _conn()
    busy = _fetch_busy(conn, conf, now)
    conn.close()

    if show_all:
        found = find_free_slots(busy, conf.scan, now)
    else:
        found = suggest_slots(
            busy,
            conf.scan,
            now,
            buffer_minutes=conf.min_future_buffer_minutes,
            per_daypart=conf.slots_per_daypart,
        )
    display.print_slots(
        found, added_slot_ids(busy), conf.mood, exercises.exercises_for(conf.mood)
    )


@app.command()
def add(
    slot_id: str = typer.Argument(..., help="Slot id from `wellness slots`"),
    exercise: Optional[str] = typer.Option(
        None, "--exercise", "-e", help="Exercise to schedule in this pause"
    ),
    at: Optional[str] = typer.Option(
        None, "--at", help="Move the pause to this start time (HH:MM) first"
    ),
) -> None:
    """Book a suggested pause into your calendar."""
    conf = cfg.load_config()
    now = _now()
    conn = _conn()
    busy = _fetch_busy(conn, conf, now)

    added = added_slot_ids(busy)
    if slot_id in added:
        display.print_warning(
            f"Already added as event #{added[slot_id]}. Manage it from `wellness busy`."
        )
        conn.close()
        raise typer.Exit(1)

    slot = parse_slot_id(slot_id)
    if slot is None or not fits_window(slot, conf.scan):
        display.print_warning(f"No free slot {slot_id}. Run `wellness slots` to refresh.")
        conn.close()
        raise typer.Exit(1)

    if exercise is None:
        options = exercises.exercises_for(conf.mood)
        display.print_info(f"{conf.mood.value} exercises: {', '.join(options)}")
        exercise = typer.prompt("Exercise", default="", show_default=False).strip() or None
    if exercise is not None:
        known = exercises.find_exercise(exercise)
        if known is None:
            display.print_warning(f"Unknown exercise '{exercise}'. See `wellness exercises`.")
            conn.close()
            raise typer.Exit(1)
        exercise = known

    try:
        if at is not None:
            slot = move_slot(slot, _parse_clock(at, slot.start.date()), busy, now)
        check_bookable(slot, busy, now, exercise)
    except SlotRejected as exc:
        display.print_warning(str(exc))
        conn.close()
        raise typer.Exit(1)

    try:
        event_id = db.add_wellness_event(
            conn,
            slot,
            exercise=exercise,
            exercise_mood=exercises.mood_for_exercise(exercise, conf.mood),
            user_mood=conf.mood,
        )
    except db.CalendarError:
        display.print_warning("Could not add the pause to your calendar. Please try again.")
        conn.close()
        raise typer.Exit(1)

    display.print_success(
        f"Added {exercise} {slot.start:%H:%M}-{slot.end:%H:%M} as event #{event_id}."
    )
    display.print_nudge(exercises.get_break_message())
    conn.close()


@app.command()
def check(
    start: str = typer.Argument(..., help="Start time, HH:MM"),
    end: str = typer.Argument(..., help="End time, HH:MM"),
    on: Optional[str] = typer.Option(None, "--date", "-d", help="Day to check (YYYY-MM-DD)"),
) -> None:
    """Check whether a time range is free."""
    day = _parse_day(on, _now().date())
    start_dt = _parse_clock(start, day)
    end_dt = _parse_clock(end, day)

    conn = _conn()
    try:
        events = db.list_events(conn, start_of_day(start_dt), start_of_day(start_dt) + timedelta(days=1))
    except db.CalendarError:
        display.print_warning(_SYNC_FAILED)
        raise typer.Exit(1)
    finally:
        conn.close()

    busy = [e.to_busy() for e in events]
    if has_conflict(busy, start_dt, end_dt):
        clashes = [b for b in busy if has_conflict([b], start_dt, end_dt)]
        names = ", ".join(b.title or "Busy block" for b in clashes)
        display.print_warning(f"{start}-{end} overlaps: {names}")
        raise typer.Exit(1)
    display.print_success(f"{start}-{end} is free.")
    log.debug("Checked %s-%s against %d event(s)", start, end, len(busy))


# ---------------------------------------------------------------------------
# Calendar entries
# ---------------------------------------------------------------------------


@app.command()
def busy() -> None:
    """List today's calendar entries."""
    conf = cfg.load_config()
    now = _now()
    conn = _conn()
    try:
        events = db.list_events(conn, start_of_day(now), start_of_day(now) + timedelta(days=1))
    except db.CalendarError:
        display.print_warning(_SYNC_FAILED)
        raise typer.Exit(1)
    finally:
        conn.close()
    display.print_busy_list(events, day_label=now.strftime("%A"), mood=conf.mood)


@app.command()
def block(
    title: str = typer.Argument(..., help="What is happening"),
    start: str = typer.Option(..., "--start", "-s", help="Start time, HH:MM"),
    end: str = typer.Option(..., "--end", "-e", help="End time, HH:MM"),
    on: Optional[str] = typer.Option(None, "--date", "-d", help="Day (YYYY-MM-DD), default today"),
    location: Optional[str] = typer.Option(None, "--location", help="Where it happens"),
) -> None:
    """Record a calendar entry you are busy with."""
    day = _parse_day(on, _now().date())
    try:
        event_in = CalendarEventCreate(
            title=title,
            start=_parse_clock(start, day),
            end=_parse_clock(end, day),
            location=location,
        )
    except ValidationError as exc:
        display.print_warning(f"Invalid entry: {exc.errors()[0]['msg']}")
        raise typer.Exit(1)

    conn = _conn()
    try:
        event = db.add_event(conn, event_in)
    except db.CalendarError:
        display.print_warning("Could not save that entry. Please try again.")
        raise typer.Exit(1)
    finally:
        conn.close()
    display.print_success(
        f"Added #{event.id}: {event.title} {event.start:%H:%M}-{event.end:%H:%M}"
    )


@app.command()
def remove(
    event_id: str = typer.Argument(..., help="ID of the booked pause to remove"),
) -> None:
    """Remove a pause this app booked."""
    conn = _conn()
    try:
        removed = db.remove_event(conn, event_id)
    except db.CalendarError:
        display.print_warning("Could not update your calendar. Please try again.")
        raise typer.Exit(1)
    finally:
        conn.close()
    if not removed:
        display.print_warning(
            f"Event #{event_id} not found, or it was not booked by Wellness."
        )
        raise typer.Exit(1)
    display.print_success(f"Removed #{event_id}. Run `wellness slots` to see fresh windows.")


# ---------------------------------------------------------------------------
# Mood & exercises
# ---------------------------------------------------------------------------


@app.command()
def mood(
    name: Optional[str] = typer.Argument(None, help="Calm, Stressed or Energetic"),
) -> None:
    """Show or set how you feel right now."""
    if name is None:
        current = cfg.load_config().mood
        display.print_info(f"Current mood: {current.value}")
        return
    matches = [m for m in Mood if m.value.lower() == name.strip().lower()]
    if not matches:
        display.print_warning(
            f"Unknown mood '{name}'. Use one of: {', '.join(m.value for m in Mood)}."
        )
        raise typer.Exit(1)
    conf = cfg.set_mood(matches[0])
    display.print_success(f"Mood set to {conf.mood.value}.")
    display.print_info(f"Try: {', '.join(exercises.exercises_for(conf.mood))}")


@app.command(name="exercises")
def list_exercises() -> None:
    """List the exercises offered for each mood."""
    for m in Mood:
        display.print_info(f"{m.value}: {', '.join(exercises.exercises_for(m))}")


@app.command()
def nudge() -> None:
    """Get a short calming prompt for your next pause."""
    display.print_nudge(exercises.get_break_message())


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@app.command()
def config(
    db_path: Optional[str] = typer.Option(
        None, "--db-path", help="Set a custom database file path",
    ),
    reset: bool = typer.Option(False, "--reset", help="Reset to default local DB"),
    show: bool = typer.Option(False, "--show", help="Show current config"),
    days: Optional[int] = typer.Option(None, "--days", help="Days to scan"),
    day_start: Optional[int] = typer.Option(None, "--day-start", help="First active hour"),
    day_end: Optional[int] = typer.Option(None, "--day-end", help="Hour active time ends"),
    min_minutes: Optional[int] = typer.Option(None, "--min-minutes", help="Shortest pause"),
    max_minutes: Optional[int] = typer.Option(None, "--max-minutes", help="Longest pause"),
) -> None:
    """Configure storage and the free-slot scan."""
    updates = {
        key: value
        for key, value in (
            ("days_to_scan", days),
            ("day_start_hour", day_start),
            ("day_end_hour", day_end),
            ("min_duration_minutes", min_minutes),
            ("max_duration_minutes", max_minutes),
        )
        if value is not None
    }

    if updates:
        current = cfg.load_config()
        try:
            current.scan = ScanConfig(**{**current.scan.model_dump(), **updates})
        except ValidationError as exc:
            display.print_warning(f"Invalid scan settings: {exc.errors()[0]['msg']}")
            raise typer.Exit(1)
        cfg.save_config(current)
        scan = current.scan
        display.print_success(
            f"Scanning {scan.days_to_scan} day(s), {scan.day_start_hour}:00-{scan.day_end_hour}:00, "
            f"{scan.min_duration_minutes}-{scan.max_duration_minutes} min pauses."
        )
    elif db_path:
        result = cfg.set_db_path(db_path)
        display.print_success(f"Database path set to: {result.db_path}")
    elif reset:
        cfg.reset_db_path()
        display.print_success("Reset to default local database.")
    elif show:
        current = cfg.load_config()
        resolved = cfg.get_db_path()
        if current.db_path:
            display.print_info(f"Database: {current.db_path}")
        else:
            display.print_info(f"Database: {resolved} (default)")
        scan = current.scan
        display.print_info(
            f"Scan: {scan.days_to_scan} day(s), {scan.day_start_hour}:00-{scan.day_end_hour}:00, "
            f"{scan.min_duration_minutes}-{scan.max_duration_minutes} min"
        )
        display.print_info(f"Mood: {current.mood.value}")
    else:
        display.print_info("Use --show, --db-path, --reset, or the scan options.")
