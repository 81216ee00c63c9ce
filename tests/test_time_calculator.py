from datetime import datetime, time
from types import SimpleNamespace

import pytest

from petshop.domain.scheduling.time_calculator import (
    is_within_operating_hours,
    total_duration,
    weekday_name,
)
from petshop.shared.errors import ClosedError, EmptyServiceSetError, OutOfHoursError

from conftest import SUNDAY, TUESDAY, WORKING_HOURS, next_weekday


def test_weekday_name_is_lowercase_english():
    assert weekday_name(datetime(2026, 10, 20, 10, 0)) == "tuesday"
    assert weekday_name(datetime(2026, 10, 25, 10, 0)) == "sunday"


def test_window_inside_opening_hours():
    window = is_within_operating_hours(WORKING_HOURS, next_weekday(TUESDAY, 10), 60)
    assert window.weekday == "tuesday"
    assert window.open_time == time(9, 0)
    assert window.close_time == time(18, 0)


def test_window_starting_exactly_at_opening_is_allowed():
    is_within_operating_hours(WORKING_HOURS, next_weekday(TUESDAY, 9), 30)


def test_window_ending_exactly_at_closing_is_allowed():
    is_within_operating_hours(WORKING_HOURS, next_weekday(TUESDAY, 17), 60)


def test_window_ending_one_minute_after_closing_is_rejected():
    with pytest.raises(OutOfHoursError) as exc_info:
        is_within_operating_hours(WORKING_HOURS, next_weekday(TUESDAY, 17, 1), 60)
    assert exc_info.value.code == "OUT_OF_HOURS"
    assert exc_info.value.extra["openTime"] == "09:00"
    assert exc_info.value.extra["closeTime"] == "18:00"


def test_window_before_opening_is_rejected():
    with pytest.raises(OutOfHoursError):
        is_within_operating_hours(WORKING_HOURS, next_weekday(TUESDAY, 8, 59), 30)


def test_window_after_closing_is_rejected():
    with pytest.raises(OutOfHoursError):
        is_within_operating_hours(WORKING_HOURS, next_weekday(TUESDAY, 20), 60)


@pytest.mark.parametrize("hour", [0, 9, 12, 23])
@pytest.mark.parametrize("duration", [1, 60, 600])
def test_closed_day_is_rejected_regardless_of_time_and_duration(hour, duration):
    with pytest.raises(ClosedError) as exc_info:
        is_within_operating_hours(WORKING_HOURS, next_weekday(SUNDAY, hour), duration)
    assert exc_info.value.code == "CLOSED"
    assert exc_info.value.extra["weekday"] == "sunday"


def test_missing_day_entry_counts_as_closed():
    schedule = {"tuesday": {"open": True, "start": "09:00", "end": "18:00"}}
    with pytest.raises(ClosedError):
        is_within_operating_hours(schedule, next_weekday(TUESDAY + 1, 10), 30)


def test_shorter_saturday_hours_are_applied():
    saturday = 5
    is_within_operating_hours(WORKING_HOURS, next_weekday(saturday, 12), 60)
    with pytest.raises(OutOfHoursError):
        is_within_operating_hours(WORKING_HOURS, next_weekday(saturday, 12, 30), 60)


def test_total_duration_sums_services():
    services = [SimpleNamespace(duration=60), SimpleNamespace(duration=30), SimpleNamespace(duration=15)]
    assert total_duration(services) == 105


def test_total_duration_rejects_empty_service_set():
    with pytest.raises(EmptyServiceSetError):
        total_duration([])
