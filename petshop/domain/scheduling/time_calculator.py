"""Time parsing and operating-hours calculations"""

from dataclasses import dataclass
from datetime import datetime, time
from typing import Iterable, Mapping, Optional

from ...models import WEEKDAYS
from ...shared.errors import ClosedError, EmptyServiceSetError, OutOfHoursError
from ...shared.validators import parse_hhmm


@dataclass(frozen=True)
class OperatingWindow:
    weekday: str
    open_time: time
    close_time: time


def weekday_name(moment: datetime) -> str:
    """Lowercase English weekday of a local datetime, e.g. "tuesday" """
    return WEEKDAYS[moment.weekday()]


def minutes_of_day(value) -> int:
    return value.hour * 60 + value.minute


def day_schedule(schedule: Mapping, weekday: str) -> Optional[Mapping]:
    """Return the day's entry if the shop opens that day"""
    entry = (schedule or {}).get(weekday)
    if not entry or not entry.get("open"):
        return None
    return entry


def is_within_operating_hours(
    schedule: Mapping, start_time: datetime, duration_minutes: int
) -> OperatingWindow:
    """
    Check that [start_time, start_time + duration) fits inside the day's opening hours.

    Raises:
        ClosedError: the shop does not open on that weekday
        OutOfHoursError: the window starts before opening or ends after closing
    """
    weekday = weekday_name(start_time)
    entry = day_schedule(schedule, weekday)
    if entry is None:
        raise ClosedError(weekday)

    open_time = parse_hhmm(entry["start"])
    close_time = parse_hhmm(entry["end"])

    start_minutes = minutes_of_day(start_time)
    end_minutes = start_minutes + duration_minutes

    if not (minutes_of_day(open_time) <= start_minutes and end_minutes <= minutes_of_day(close_time)):
        raise OutOfHoursError(weekday, entry["start"], entry["end"])

    return OperatingWindow(weekday=weekday, open_time=open_time, close_time=close_time)


def total_duration(services: Iterable) -> int:
    """Sum of service durations in minutes"""
    durations = [service.duration for service in services]
    if not durations:
        raise EmptyServiceSetError()
    return sum(durations)
