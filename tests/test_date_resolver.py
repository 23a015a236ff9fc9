from datetime import date

import pytest

from studybuddy.date_resolver import (
    canonical_day_name,
    format_time,
    next_weekday,
    parse_date,
    resolve_day,
    resolve_relative_date,
)


@pytest.mark.parametrize("phrase", ["monday", "MONDAY", "Monday", " mOnDaY ", "mon"])
def test_weekday_names_are_canonical_regardless_of_case(phrase, today):
    assert resolve_day(phrase, today) == "Monday"
    assert canonical_day_name(phrase) == "Monday"


def test_every_weekday_resolves_to_its_capitalized_name(today):
    for name in ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"):
        assert resolve_day(name, today) == name.capitalize()


def test_resolve_day_relative_phrases(today):
    assert resolve_day("tomorrow", today) == "Tuesday"
    assert resolve_day("yesterday", today) == "Sunday"
    assert resolve_day("today", today) == "Monday"
    assert resolve_day("this afternoon", today) == "Monday"
    assert resolve_day("next friday", today) == "Friday"
    assert resolve_day("2026-10-24", today) == "Saturday"


def test_tomorrow_is_today_plus_one_and_idempotent(today):
    first = resolve_relative_date("tomorrow", today)
    assert first == "2026-10-20"
    assert resolve_relative_date("tomorrow", today) == first


def test_same_day_phrases_resolve_to_today(today):
    for phrase in ("today", "tonight", "this morning", "this evening"):
        assert resolve_relative_date(phrase, today) == "2026-10-19"


def test_bare_weekday_is_next_future_occurrence(today):
    assert resolve_relative_date("friday", today) == "2026-10-23"
    assert resolve_relative_date("next Wednesday", today) == "2026-10-21"


def test_weekday_equal_to_today_rolls_forward_a_week(today):
    assert resolve_relative_date("Monday", today) == "2026-10-26"
    assert next_weekday("monday", today) == date(2026, 10, 26)


def test_day_and_week_offsets(today):
    assert resolve_relative_date("3 days", today) == "2026-10-22"
    assert resolve_relative_date("in 10 days", today) == "2026-10-29"
    assert resolve_relative_date("in 2 weeks", today) == "2026-11-02"
    assert resolve_relative_date("next week", today) == "2026-10-26"
    assert resolve_relative_date("next month", today) == "2026-11-19"
    assert resolve_relative_date("yesterday", today) == "2026-10-18"


def test_explicit_dates_pass_through_unchanged(today):
    assert resolve_relative_date("2026-12-01", today) == "2026-12-01"
    assert resolve_relative_date("12/1/2026", today) == "12/1/2026"


def test_unrecognised_phrase_returns_none(today):
    assert resolve_relative_date("someday", today) is None


def test_parse_date():
    assert parse_date("2026-11-02") == date(2026, 11, 2)
    assert parse_date("11/2/2026") == date(2026, 11, 2)
    assert parse_date("2026-02-30") is None
    assert parse_date("soon") is None


def test_format_time():
    assert format_time(2, 0, "pm") == "2:00 PM"
    assert format_time(10, 5, "AM") == "10:05 AM"
