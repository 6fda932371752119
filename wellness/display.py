"""Rich terminal formatting helpers."""

from __future__ import annotations

from datetime import datetime

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from wellness.models import CalendarEvent, Mood, SlotCandidate

console = Console()

_MOOD_STYLE: dict[Mood, str] = {
    Mood.CALM: "cyan",
    Mood.STRESSED: "magenta",
    Mood.ENERGETIC: "yellow",
}


def _clock(moment: datetime) -> str:
    return moment.strftime("%H:%M")


def print_busy_list(events: list[CalendarEvent], day_label: str, mood: Mood) -> None:
    """Print the day's calendar entries, marking the ones this app booked."""
    title = f"Busy today ({day_label})"
    if not events:
        console.print(Panel("Nothing scheduled.", title=title, border_style="dim"))
        return

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("id", width=5)
    table.add_column("time", width=13)
    table.add_column("title")
    table.add_column("details", style="dim")

    for event in events:
        details: list[str] = []
        style = ""
        if event.is_owned:
            details.append("App")
            if event.meta and event.meta.exercise:
                details.append(event.meta.exercise)
            exercise_mood = event.meta.exercise_mood if event.meta else None
            style = _MOOD_STYLE[exercise_mood or mood]
        else:
            if event.location:
                details.append(event.location)
            if event.calendar_name:
                details.append(event.calendar_name)
        table.add_row(
            f"#{event.id}",
            f"{_clock(event.start)}-{_clock(event.end)}",
            event.title or "Busy block",
            " · ".join(details),
            style=style,
        )

    console.print(Panel(table, title=title, border_style="blue"))


def print_slots(
    slots: list[SlotCandidate],
    added: dict[str, str],
    mood: Mood,
    exercises: list[str],
) -> None:
    """Print suggested pauses with their ids and booking state."""
    title = "Today's windows"
    if not slots:
        console.print(Panel("No free windows left today.", title=title, border_style="dim"))
        return

    table = Table(show_header=True, box=None, pad_edge=False)
    table.add_column("slot", style="bold")
    table.add_column("time")
    table.add_column("duration")
    table.add_column("state")

    for slot in slots:
        if slot.id in added:
            state = Text(f"Added (event #{added[slot.id]})", style="green")
        else:
            state = Text("Available", style="dim")
        table.add_row(
            slot.id,
            f"{_clock(slot.start)} → {_clock(slot.end)}",
            f"{slot.duration_minutes} min",
            state,
        )

    console.print(Panel(table, title=title, border_style=_MOOD_STYLE[mood]))
    console.print(f"[dim]{mood.value} exercises: {', '.join(exercises)}[/dim]")


def print_nudge(message: str) -> None:
    """Print a calming message in a styled panel."""
    text = Text(message, justify="center")
    console.print(Panel(text, border_style="magenta", padding=(1, 4)))


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[blue]{message}[/blue]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]{message}[/yellow]")
