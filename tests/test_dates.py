"""
Tests for utils/dates.py.

Relative forms are pinned to Wednesday 2024-01-10.
"""

import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from bouldy_vault.utils.dates import day_key, month_key, parse_due_date, previous_day

WEDNESDAY = date(2024, 1, 10)


class TestKeys:
    def test_day_and_month_keys(self):
        assert day_key(WEDNESDAY) == "2024-01-10"
        assert month_key(WEDNESDAY) == "2024-01"

    def test_previous_day_crosses_year(self):
        assert previous_day(date(2024, 1, 1)) == date(2023, 12, 31)


class TestParseDueDate:
    @pytest.mark.parametrize("text,expected", [
        ("2024-03-01", "2024-03-01"),
        ("today", "2024-01-10"),
        ("Tomorrow", "2024-01-11"),
        ("yesterday", "2024-01-09"),
        ("friday", "2024-01-12"),
        ("fri", "2024-01-12"),
        ("wednesday", "2024-01-17"),
        ("next friday", "2024-01-19"),
        ("in 3 days", "2024-01-13"),
        ("in 1 week", "2024-01-17"),
        ("+2w", "2024-01-24"),
        ("+5d", "2024-01-15"),
        ("next week", "2024-01-17"),
        ("by Mar 15", "2024-03-15"),
        ("due march 15", "2024-03-15"),
        ("on Feb 29, 2024", "2024-02-29"),
    ])
    def test_accepted_forms(self, text, expected):
        assert parse_due_date(text, on=WEDNESDAY) == expected

    def test_month_day_already_passed_rolls_to_next_year(self):
        assert parse_due_date("jan 5", on=WEDNESDAY) == "2025-01-05"
        assert parse_due_date("jan 10", on=WEDNESDAY) == "2024-01-10"

    @pytest.mark.parametrize("text", [
        "", "   ", "due", "someday maybe", "2024-02-30", "feb 30", "in many days", "blursday",
    ])
    def test_unrecognised(self, text):
        assert parse_due_date(text, on=WEDNESDAY) is None

    def test_none(self):
        assert parse_due_date(None) is None
