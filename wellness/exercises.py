"""Mood themes, the exercises each one offers, and short break messages.

Break messages are loaded from ``BREAKS.md`` at the project root.
The user can freely add, edit, or remove messages in that file.
If the file is missing, a small built-in fallback list is used.
"""

from __future__ import annotations

import random
from pathlib import Path
from typing import Optional

from wellness.models import Mood

EXERCISES: dict[Mood, list[str]] = {
    Mood.CALM: ["Breathwork", "Light Stretch", "Calm Walk"],
    Mood.STRESSED: ["Box Breathing", "Slow Walk", "Neck Release"],
    Mood.ENERGETIC: ["HIIT Burst", "Dance Break", "Power Walk"],
}

_FALLBACK_MESSAGES: list[str] = [
    "Step away from the screen for a moment.",
    "Take a few slow breaths.",
    "Stretch your shoulders and neck.",
    "Look at something far away for twenty seconds.",
    "Get some water if you can.",
    "Close your eyes for a moment. You have earned this pause.",
]


def _load_messages() -> list[str]:
    """Parse bullet points from BREAKS.md, falling back to built-in list."""
    md_path = Path(__file__).resolve().parent.parent / "BREAKS.md"
    if not md_path.exists():
        return _FALLBACK_MESSAGES

    messages: list[str] = []
    for line in md_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if stripped.startswith("- "):
            msg = stripped[2:].strip()
            if msg:
                messages.append(msg)
    return messages if messages else _FALLBACK_MESSAGES


_MESSAGES: list[str] = _load_messages()


def exercises_for(mood: Mood) -> list[str]:
    """Exercises on offer for *mood*, in display order."""
    return list(EXERCISES[mood])


def mood_for_exercise(exercise: Optional[str], default: Mood) -> Mood:
    """Return the mood an exercise belongs to, matching names case-insensitively."""
    if not exercise:
        return default
    wanted = exercise.strip().lower()
    for mood, names in EXERCISES.items():
        if any(name.lower() == wanted for name in names):
            return mood
    return default


def find_exercise(name: str) -> Optional[str]:
    """Canonical spelling of an exercise name, or None if unknown."""
    wanted = name.strip().lower()
    for names in EXERCISES.values():
        for candidate in names:
            if candidate.lower() == wanted:
                return candidate
    return None


def get_break_message() -> str:
    """Return a calming message for break time."""
    return random.choice(_MESSAGES)
