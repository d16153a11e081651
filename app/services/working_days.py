"""
Working-day resolution — what a user owes on a given calendar day.

Pure functions, no I/O. Priority order:

1. a live ``Holiday`` entry covering the day makes it a holiday for everyone;
2. otherwise a live ``Working Day`` entry makes it a working day for everyone,
   even users whose personal schedule has the day off;
3. otherwise the user's own schedule decides: explicit ``working_days`` if
   non-empty, else the shift default (when the shift has one, even an empty
   one), else Monday to Friday.

Weekdays are numbered 0=Sunday .. 6=Saturday throughout.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from app.models.attendance_settings import FALLBACK_WORKING_DAYS
from app.models.calendar import HOLIDAY, WORKING_DAY

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


class Obligation(str, enum.Enum):
    HOLIDAY = "Holiday"
    WORKING = "Working"
    NON_WORKING = "Non-working"


@dataclass(frozen=True, slots=True)
class Resolution:
    obligation: Obligation
    reason: str


def weekday_index(day: date) -> int:
    """Sunday-based weekday number (0=Sun .. 6=Sat)."""
    return day.isoweekday() % 7


def normalise_days(days: Iterable[Any]) -> list[int]:
    """Validate a weekday set, raising ``ValueError`` on malformed data."""
    normalised: list[int] = []
    for value in days:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Working day {value!r} is not an integer weekday")
        if not 0 <= value <= 6:
            raise ValueError(f"Working day {value} is outside 0 (Sunday) .. 6 (Saturday)")
        if value not in normalised:
            normalised.append(value)
    return sorted(normalised)


def effective_working_days(
    user: Any,
    shift_defaults: Mapping[str, Sequence[int]] | None,
) -> tuple[list[int], str]:
    """Return the user's normal weekday set and where it came from."""
    explicit = getattr(user, "working_days", None)
    if explicit:
        return normalise_days(explicit), "personal schedule"

    shift = getattr(user, "shift", None)
    if shift and shift_defaults is not None and shift in shift_defaults:
        # An empty set is a valid default: nobody on that shift owes a day
        return normalise_days(shift_defaults[shift]), f"{shift} shift default"

    return list(FALLBACK_WORKING_DAYS), "default Monday-Friday"


def _live_covering(entries: Iterable[Any], kind: str, day: date) -> Any | None:
    for entry in entries:
        if entry.type != kind or entry.deleted_at is not None:
            continue
        if entry.covers(day):
            return entry
    return None


def resolve_obligation(
    target: date,
    user: Any,
    holidays: Iterable[Any] = (),
    forced_working_days: Iterable[Any] = (),
    shift_defaults: Mapping[str, Sequence[int]] | None = None,
) -> Resolution:
    """Decide ``user``'s obligation on ``target`` (a date already in the deployment timezone)."""
    holiday = _live_covering(holidays, HOLIDAY, target)
    if holiday is not None:
        return Resolution(Obligation.HOLIDAY, f"Holiday: {holiday.title}")

    forced = _live_covering(forced_working_days, WORKING_DAY, target)
    if forced is not None:
        return Resolution(Obligation.WORKING, f"Working Day override: {forced.title}")

    days, source = effective_working_days(user, shift_defaults)
    day_name = DAY_NAMES[weekday_index(target)]
    if weekday_index(target) in days:
        return Resolution(Obligation.WORKING, f"{day_name} is a working day ({source})")
    return Resolution(Obligation.NON_WORKING, f"{day_name} is a day off ({source})")
