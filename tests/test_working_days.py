"""Tests for the pure working-day resolver."""

from datetime import date, datetime, timezone

import pytest

from app.models.calendar import CalendarEntry
from app.models.user import User
from app.services.working_days import (Obligation, effective_working_days,
                                       normalise_days, resolve_obligation,
                                       weekday_index)

MONDAY = date(2026, 10, 12)
TUESDAY = date(2026, 10, 13)
SATURDAY = date(2026, 10, 17)
SUNDAY = date(2026, 10, 18)

SHIFT_DEFAULTS = {"Morning": [1, 2, 3, 4, 5], "Evening": [0, 1, 2, 3, 4]}


def _entry(kind: str, start: date, end: date | None = None, title: str = "Entry", **extra) -> CalendarEntry:
    return CalendarEntry(title=title, type=kind, start_date=start, end_date=end or start, **extra)


def test_weekday_index_is_sunday_based():
    assert weekday_index(SUNDAY) == 0
    assert weekday_index(MONDAY) == 1
    assert weekday_index(SATURDAY) == 6


def test_holiday_beats_personal_working_day():
    user = User(working_days=[1, 2, 3, 4, 5])
    holiday = _entry("Holiday", MONDAY, title="Founders Day")

    res = resolve_obligation(MONDAY, user, holidays=[holiday], shift_defaults=SHIFT_DEFAULTS)

    assert res.obligation is Obligation.HOLIDAY
    assert "Founders Day" in res.reason


def test_holiday_beats_forced_working_day():
    user = User(working_days=[1])
    res = resolve_obligation(
        MONDAY,
        user,
        holidays=[_entry("Holiday", MONDAY)],
        forced_working_days=[_entry("Working Day", MONDAY)],
    )
    assert res.obligation is Obligation.HOLIDAY


def test_multi_day_holiday_covers_inner_dates():
    holiday = _entry("Holiday", date(2026, 10, 10), date(2026, 10, 14))
    res = resolve_obligation(MONDAY, User(), holidays=[holiday])
    assert res.obligation is Obligation.HOLIDAY


def test_forced_working_day_overrides_personal_day_off():
    user = User(working_days=[2])  # Tuesdays only
    forced = _entry("Working Day", MONDAY, title="Demo Day prep")

    res = resolve_obligation(MONDAY, user, forced_working_days=[forced])

    assert res.obligation is Obligation.WORKING
    assert "Demo Day prep" in res.reason


def test_fallback_chain_without_shift_or_override():
    user = User(shift=None, working_days=None)
    for weekday in range(12, 17):  # Mon 12th .. Fri 16th
        assert resolve_obligation(date(2026, 10, weekday), user).obligation is Obligation.WORKING
    assert resolve_obligation(SATURDAY, user).obligation is Obligation.NON_WORKING
    assert resolve_obligation(SUNDAY, user).obligation is Obligation.NON_WORKING


def test_shift_default_applies_when_no_personal_override():
    user = User(shift="Evening", working_days=[])
    assert resolve_obligation(SUNDAY, user, shift_defaults=SHIFT_DEFAULTS).obligation is Obligation.WORKING
    assert resolve_obligation(
        date(2026, 10, 16), user, shift_defaults=SHIFT_DEFAULTS
    ).obligation is Obligation.NON_WORKING


def test_personal_override_beats_shift_default():
    user = User(shift="Morning", working_days=[6])
    days, source = effective_working_days(user, SHIFT_DEFAULTS)
    assert days == [6]
    assert source == "personal schedule"
    assert resolve_obligation(SATURDAY, user, shift_defaults=SHIFT_DEFAULTS).obligation is Obligation.WORKING
    assert resolve_obligation(MONDAY, user, shift_defaults=SHIFT_DEFAULTS).obligation is Obligation.NON_WORKING


def test_unknown_shift_falls_back_to_weekdays():
    days, source = effective_working_days(User(shift="Night"), SHIFT_DEFAULTS)
    assert days == [1, 2, 3, 4, 5]
    assert source == "default Monday-Friday"


def test_empty_shift_default_means_no_working_days():
    user = User(shift="Evening", working_days=None)
    days, source = effective_working_days(user, {"Morning": [1, 2, 3, 4, 5], "Evening": []})
    assert days == []
    assert source == "Evening shift default"
    res = resolve_obligation(MONDAY, user, shift_defaults={"Evening": []})
    assert res.obligation is Obligation.NON_WORKING


def test_soft_deleted_entries_are_ignored():
    deleted = _entry("Holiday", MONDAY, deleted_at=datetime(2026, 10, 1, tzinfo=timezone.utc))
    res = resolve_obligation(MONDAY, User(), holidays=[deleted])
    assert res.obligation is Obligation.WORKING


def test_informational_entries_do_not_affect_obligation():
    meeting = _entry("Meeting", SATURDAY)
    res = resolve_obligation(SATURDAY, User(), holidays=[meeting], forced_working_days=[meeting])
    assert res.obligation is Obligation.NON_WORKING


def test_entry_outside_target_date_is_ignored():
    res = resolve_obligation(MONDAY, User(), holidays=[_entry("Holiday", TUESDAY)])
    assert res.obligation is Obligation.WORKING


@pytest.mark.parametrize("bad", [[7], [-1], ["1"], [1.5], [True]])
def test_malformed_working_days_raise(bad):
    with pytest.raises(ValueError):
        normalise_days(bad)


def test_malformed_personal_schedule_raises_from_resolver():
    with pytest.raises(ValueError):
        resolve_obligation(MONDAY, User(working_days=[1, 9]))
