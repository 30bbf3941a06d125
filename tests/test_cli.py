"""Tests for the command line interface."""

import logging

import pytest
from click.testing import CliRunner, Result

from kintime.cli import main
from kintime.config import get_settings


PEOPLE_CSV = """id,name,sex,born,father_id,mother_id
F1,Founder One,male,1758,,
C1,Child One,female,1926,F1,
C2,Child Two,male,1955,,C1
"""

EVENTS_CSV = """id,type,t,who
E1,death,1955,C1
"""


def run(*args: str, expected_exit_code: int = 0) -> Result:
    runner = CliRunner()
    result = runner.invoke(main, args, catch_exceptions=False)
    if result.exit_code != expected_exit_code:
        raise AssertionError(
            f"`kintime {' '.join(args)}` exited with code {result.exit_code}, "
            f"but {expected_exit_code} was expected.\nOutput:\n{result.output}"
        )
    return result


@pytest.fixture
def tables(tmp_path):
    people = tmp_path / "people.csv"
    people.write_text(PEOPLE_CSV, encoding="utf-8")
    events = tmp_path / "events.csv"
    events.write_text(EVENTS_CSV, encoding="utf-8")
    return ["--people", str(people), "--events", str(events)]


class TestCommands:
    """Tests for each command's output."""

    def test_validate(self, tables):
        result = run("validate", *tables)
        assert "Loaded 3 persons, 1 events and 0 sources" in result.output
        assert "No validation issues found" in result.output

    def test_generations(self, tables):
        result = run("generations", "F1", *tables)
        assert result.output.splitlines() == ["F1\t0", "C1\t1", "C2\t2"]

    def test_unknown_founder(self, tables):
        result = run("generations", "X9", *tables, expected_exit_code=1)
        assert "Unknown founder 'X9'" in result.output

    def test_ages(self, tables):
        result = run("ages", *tables)
        assert result.output.splitlines()[1] == "E1\tdeath\tC1\t1955\t29"

    def test_gaps(self, tables):
        result = run("gaps", *tables)
        assert result.output.splitlines()[1:] == ["F1\tC1\t168", "C1\tC2\t29"]

    def test_forecast(self):
        result = run("forecast", "--mu", "0", "--generations", "3", "--simulations", "20", "--seed", "1")
        assert result.output.splitlines() == ["p05\t0", "p50\t0", "p95\t0"]

    def test_forecast_limits(self):
        too_many = str(get_settings().max_simulations + 1)
        result = run("forecast", "--mu", "1", "--generations", "3", "--simulations", too_many, expected_exit_code=2)
        assert "--simulations" in result.output

    def test_invalid_table(self, tmp_path):
        people = tmp_path / "people.csv"
        people.write_text("id,name,sex\nP1,A,alien\n", encoding="utf-8")
        result = run("validate", "--people", str(people), expected_exit_code=1)
        assert "index 0" in result.output

    def test_validate_reports_each_warning_once(self, tmp_path, caplog):
        """Test that the command prints the warnings and the library does not log them again."""
        people = tmp_path / "people.csv"
        people.write_text("id,name,sex,born,died\nP1,A,male,1950,1900\n", encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            result = run("validate", "--people", str(people))
        assert "Found 1 validation warnings:" in result.output
        assert result.output.count("died before being born") == 1
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

    def test_forecast_generation_limit(self):
        too_many = str(get_settings().max_generations + 1)
        result = run("forecast", "--mu", "1", "--generations", too_many, expected_exit_code=2)
        assert "--generations" in result.output

    @pytest.mark.parametrize(
        "command, options",
        [
            ("validate", ["--people", "--events", "--sources", "--normalize-dates"]),
            ("ages", ["--min-certainty", "--people"]),
            ("forecast", ["--mu", "--generations", "--simulations", "--start", "--seed"]),
        ],
    )
    def test_help_lists_options(self, command, options):
        result = run(command, "--help")
        for option in options:
            assert option in result.output
