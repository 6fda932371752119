"""Tests for CLI commands."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from wellness.cli import app

runner = CliRunner()

NOW = datetime(2026, 3, 2, 7, 0)
FIRST_SLOT = "20260302T073000-30"


@pytest.fixture(autouse=True)
def _isolate(tmp_path: Path):
    """Redirect CLI tests to a temporary database and config, at a fixed time."""
    cfg_dir = tmp_path / "config"
    with (
        patch("wellness.db._get_db_path", return_value=tmp_path / "test.db"),
        patch("wellness.config._CONFIG_DIR", cfg_dir),
        patch("wellness.config._CONFIG_FILE", cfg_dir / "config.json"),
        patch("wellness.config._DB_DIR", tmp_path / "data"),
        patch("wellness.cli._now", return_value=NOW),
    ):
        yield


class TestSlots:
    def test_empty_day(self) -> None:
        result = runner.invoke(app, ["slots"])
        assert result.exit_code == 0
        assert "Today's windows" in result.output
        assert FIRST_SLOT in result.output
        assert "07:30" in result.output

    def test_all(self) -> None:
        result = runner.invoke(app, ["slots", "--all"])
        assert result.exit_code == 0
        assert "20260302T070000-30" in result.output
        assert "20260302T113000-30" in result.output

    def test_busy_entry_respected(self) -> None:
        runner.invoke(app, ["block", "Gym", "--start", "07:00", "--end", "12:00"])
        result = runner.invoke(app, ["slots"])
        assert "20260302T120000-30" in result.output
        assert FIRST_SLOT not in result.output


class TestAdd:
    def test_add_slot(self) -> None:
        result = runner.invoke(app, ["add", FIRST_SLOT, "--exercise", "Breathwork"])
        assert result.exit_code == 0
        assert "Added Breathwork 07:30-08:00 as event #1" in result.output

        busy = runner.invoke(app, ["busy"])
        assert "Wellness reset" in busy.output
        assert "Breathwork" in busy.output

    def test_add_twice(self) -> None:
        runner.invoke(app, ["add", FIRST_SLOT, "--exercise", "Breathwork"])
        result = runner.invoke(app, ["add", FIRST_SLOT, "--exercise", "Breathwork"])
        assert result.exit_code == 1
        assert "Already added" in result.output

    def test_exercise_case_insensitive(self) -> None:
        result = runner.invoke(app, ["add", FIRST_SLOT, "-e", "power walk"])
        assert result.exit_code == 0
        assert "Added Power Walk" in result.output

    def test_unknown_slot(self) -> None:
        result = runner.invoke(app, ["add", "20260302T031500-30", "-e", "Breathwork"])
        assert result.exit_code == 1
        assert "No free slot" in result.output

    def test_listed_id_still_books_a_minute_later(self) -> None:
        with patch("wellness.cli._now", return_value=datetime(2026, 3, 2, 10, 3)):
            listed = runner.invoke(app, ["slots"])
        assert "20260302T103300-30" in listed.output

        with patch("wellness.cli._now", return_value=datetime(2026, 3, 2, 10, 4)):
            result = runner.invoke(app, ["add", "20260302T103300-30", "-e", "Breathwork"])
        assert result.exit_code == 0
        assert "Added Breathwork 10:33-11:03" in result.output

    def test_malformed_slot_id(self) -> None:
        result = runner.invoke(app, ["add", "next-tuesday", "-e", "Breathwork"])
        assert result.exit_code == 1
        assert "No free slot" in result.output

    def test_slot_now_taken(self) -> None:
        runner.invoke(app, ["block", "Call", "--start", "07:45", "--end", "08:15"])
        result = runner.invoke(app, ["add", FIRST_SLOT, "-e", "Breathwork"])
        assert result.exit_code == 1
        assert "overlaps" in result.output

    def test_unknown_exercise(self) -> None:
        result = runner.invoke(app, ["add", FIRST_SLOT, "-e", "Juggling"])
        assert result.exit_code == 1
        assert "Unknown exercise" in result.output

    def test_missing_exercise(self) -> None:
        result = runner.invoke(app, ["add", FIRST_SLOT], input="\n")
        assert result.exit_code == 1
        assert "Choose an exercise" in result.output

    def test_prompted_exercise(self) -> None:
        result = runner.invoke(app, ["add", FIRST_SLOT], input="Calm Walk\n")
        assert result.exit_code == 0
        assert "Added Calm Walk" in result.output

    def test_add_at_new_time(self) -> None:
        result = runner.invoke(app, ["add", FIRST_SLOT, "-e", "Slow Walk", "--at", "09:10"])
        assert result.exit_code == 0
        assert "09:10-09:40" in result.output

    def test_add_at_conflicting_time(self) -> None:
        runner.invoke(app, ["block", "Standup", "--start", "09:00", "--end", "09:15"])
        result = runner.invoke(app, ["add", FIRST_SLOT, "-e", "Slow Walk", "--at", "09:00"])
        assert result.exit_code == 1
        assert "overlaps" in result.output

    def test_add_at_past_time(self) -> None:
        result = runner.invoke(app, ["add", FIRST_SLOT, "-e", "Slow Walk", "--at", "06:00"])
        assert result.exit_code == 1
        assert "already passed" in result.output


class TestBlockAndBusy:
    def test_block(self) -> None:
        result = runner.invoke(app, ["block", "Standup", "--start", "09:00", "--end", "09:30"])
        assert result.exit_code == 0
        assert "Added #1: Standup 09:00-09:30" in result.output

    def test_block_backwards(self) -> None:
        result = runner.invoke(app, ["block", "Oops", "--start", "10:00", "--end", "09:00"])
        assert result.exit_code == 1
        assert "Invalid entry" in result.output

    def test_block_bad_time(self) -> None:
        result = runner.invoke(app, ["block", "Oops", "--start", "nine", "--end", "10:00"])
        assert result.exit_code != 0

    def test_busy_empty(self) -> None:
        result = runner.invoke(app, ["busy"])
        assert result.exit_code == 0
        assert "Nothing scheduled" in result.output

    def test_busy_lists_other_days_separately(self) -> None:
        runner.invoke(
            app, ["block", "Dentist", "--start", "10:00", "--end", "11:00", "--date", "2026-03-03"]
        )
        result = runner.invoke(app, ["busy"])
        assert "Dentist" not in result.output


class TestCheck:
    def test_free(self) -> None:
        result = runner.invoke(app, ["check", "10:00", "10:30"])
        assert result.exit_code == 0
        assert "is free" in result.output

    def test_conflict(self) -> None:
        runner.invoke(app, ["block", "Standup", "--start", "09:00", "--end", "09:30"])
        result = runner.invoke(app, ["check", "09:15", "09:45"])
        assert result.exit_code == 1
        assert "Standup" in result.output

    def test_touching_is_free(self) -> None:
        runner.invoke(app, ["block", "Standup", "--start", "10:00", "--end", "10:30"])
        result = runner.invoke(app, ["check", "10:30", "11:00"])
        assert result.exit_code == 0


class TestRemove:
    def test_remove_booked_pause(self) -> None:
        runner.invoke(app, ["add", FIRST_SLOT, "-e", "Breathwork"])
        result = runner.invoke(app, ["remove", "1"])
        assert result.exit_code == 0
        assert "Removed #1" in result.output

        again = runner.invoke(app, ["add", FIRST_SLOT, "-e", "Breathwork"])
        assert again.exit_code == 0

    def test_remove_external_refused(self) -> None:
        runner.invoke(app, ["block", "Standup", "--start", "09:00", "--end", "09:30"])
        result = runner.invoke(app, ["remove", "1"])
        assert result.exit_code == 1


class TestMood:
    def test_show_default(self) -> None:
        result = runner.invoke(app, ["mood"])
        assert result.exit_code == 0
        assert "Calm" in result.output

    def test_set(self) -> None:
        result = runner.invoke(app, ["mood", "stressed"])
        assert result.exit_code == 0
        assert "Mood set to Stressed" in result.output
        assert "Box Breathing" in result.output

        shown = runner.invoke(app, ["mood"])
        assert "Stressed" in shown.output

    def test_unknown(self) -> None:
        result = runner.invoke(app, ["mood", "grumpy"])
        assert result.exit_code == 1


class TestMisc:
    def test_exercises(self) -> None:
        result = runner.invoke(app, ["exercises"])
        assert result.exit_code == 0
        assert "Dance Break" in result.output

    def test_nudge(self) -> None:
        result = runner.invoke(app, ["nudge"])
        assert result.exit_code == 0
        assert len(result.output.strip()) > 0


class TestConfig:
    def test_show_default(self) -> None:
        result = runner.invoke(app, ["config", "--show"])
        assert result.exit_code == 0
        assert "Scan: 1 day(s), 7:00-22:00" in result.output

    def test_update_scan(self) -> None:
        result = runner.invoke(app, ["config", "--day-start", "8", "--max-minutes", "20"])
        assert result.exit_code == 0

        shown = runner.invoke(app, ["config", "--show"])
        assert "8:00-22:00, 15-20 min" in shown.output

    def test_invalid_scan(self) -> None:
        result = runner.invoke(app, ["config", "--day-start", "22", "--day-end", "7"])
        assert result.exit_code == 1
        assert "Invalid scan settings" in result.output


class TestStorageErrors:
    def test_unopenable_database(self, tmp_path: Path) -> None:
        with patch("wellness.db._get_db_path", return_value=tmp_path):
            result = runner.invoke(app, ["slots"])
        assert result.exit_code == 1
        assert "Please try again" in result.output

    def test_unopenable_database_on_add(self, tmp_path: Path) -> None:
        with patch("wellness.db._get_db_path", return_value=tmp_path):
            result = runner.invoke(app, ["add", FIRST_SLOT, "-e", "Breathwork"])
        assert result.exit_code == 1
        assert "Please try again" in result.output
