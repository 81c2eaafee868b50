from datetime import date

from morningproof.models.day_schedule import (
    ALL_DAYS,
    WEEKDAYS,
    WEEKENDS,
    display_string,
    is_active_on,
    is_weekend,
    short_display_string,
    sunday_based_weekday,
)

SATURDAY = date(2025, 3, 8)
SUNDAY = date(2025, 3, 9)
MONDAY = date(2025, 3, 10)


def test_sunday_based_weekday():
    assert sunday_based_weekday(SUNDAY) == 0
    assert sunday_based_weekday(MONDAY) == 1
    assert sunday_based_weekday(SATURDAY) == 6


def test_is_weekend():
    assert is_weekend(SATURDAY)
    assert is_weekend(SUNDAY)
    assert not is_weekend(MONDAY)


def test_is_active_on():
    assert is_active_on(MONDAY, WEEKDAYS)
    assert not is_active_on(SUNDAY, WEEKDAYS)
    assert is_active_on(SUNDAY, [0, 6])


def test_display_strings():
    assert display_string(ALL_DAYS) == "Every day"
    assert display_string(WEEKDAYS) == "Weekdays"
    assert display_string(WEEKENDS) == "Weekends"
    assert display_string([3, 1]) == "Mon, Wed"
    assert short_display_string([1, 3]) == "2 days"
    assert short_display_string(WEEKENDS) == "Weekends"
