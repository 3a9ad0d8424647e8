from datetime import datetime, timezone

import pytest

from fake_backend import make_appointment
from homeserve.appointment_utils import (
    DEFAULT_STATUS_COLORS,
    calculate_duration,
    can_book_again,
    can_cancel_appointment,
    can_leave_review,
    can_reschedule_appointment,
    format_date,
    format_price,
    format_time,
    format_time_range,
    get_status_colors,
    get_status_display_name,
    group_appointments_by_date,
)
from homeserve.models import Appointment

ALL_STATUSES = ["pending", "confirmed", "in_progress", "completed", "cancelled"]


def test_status_colors():
    assert get_status_colors("confirmed").bg == "bg-green-100"
    assert get_status_colors("pending").text == "text-yellow-800"
    assert get_status_colors("cancelled").bg == "bg-red-100"
    assert get_status_colors("in_progress") == get_status_colors("completed")
    assert get_status_colors("no_show") == DEFAULT_STATUS_COLORS


def test_status_display_name():
    assert get_status_display_name("pending") == "Pending"
    assert get_status_display_name("in_progress") == "In progress"
    assert get_status_display_name("no_show") == "No show"


@pytest.mark.parametrize("status", ALL_STATUSES + ["no_show"])
def test_action_predicates_never_allow_cancel_and_review_together(status):
    assert not (can_cancel_appointment(status) and can_leave_review(status))


def test_action_predicates():
    assert [s for s in ALL_STATUSES if can_cancel_appointment(s)] == ["pending", "confirmed"]
    assert [s for s in ALL_STATUSES if can_reschedule_appointment(s)] == ["pending", "confirmed"]
    assert [s for s in ALL_STATUSES if can_leave_review(s)] == ["completed"]
    assert [s for s in ALL_STATUSES if can_book_again(s)] == ["completed", "cancelled"]
    assert not any(check("no_show") for check in (
        can_cancel_appointment, can_reschedule_appointment, can_leave_review, can_book_again))


def test_completed_last_week_can_be_booked_again():
    appointment = Appointment.model_validate(
        make_appointment("a1", status="completed", start=datetime(2026, 10, 11, 9, tzinfo=timezone.utc))
    )
    assert can_book_again(appointment) is True
    assert can_cancel_appointment(appointment) is False


def test_format_date_and_time():
    assert format_date("2025-02-26T09:00:00") == "February 26, 2025"
    assert format_time("2025-02-26T09:00:00") == "9:00 AM"
    assert format_time("2025-02-26T13:05:00Z") == "1:05 PM"
    assert format_time("2025-02-26T00:30:00") == "12:30 AM"
    assert format_time_range("2025-02-26T09:00:00", "2025-02-26T11:00:00") == "9:00 AM - 11:00 AM"
    assert format_date("not a date") == "not a date"
    assert format_date(None) == "None"
    assert format_time(12345) == "12345"


def test_calculate_duration():
    assert calculate_duration("2025-02-26T09:00:00", "2025-02-26T09:45:00") == "45 minutes"
    assert calculate_duration("2025-02-26T09:00:00", "2025-02-26T10:00:00") == "1 hour"
    assert calculate_duration("2025-02-26T09:00:00", "2025-02-26T11:00:00") == "2 hours"
    assert calculate_duration("2025-02-26T09:00:00", "2025-02-26T11:01:00") == "2 hours 1 minute"
    assert calculate_duration("garbage", "2025-02-26T11:00:00") == "Duration not available"
    assert calculate_duration(None, "2025-02-26T11:00:00") == "Duration not available"


def test_format_price():
    assert format_price(50) == "R50"
    assert format_price(50.0) == "R50"
    assert format_price(27.5) == "R27.5"


def test_group_by_date():
    first = Appointment.model_validate(make_appointment("a1", date="2030-01-01"))
    second = Appointment.model_validate(make_appointment("a2", date="2030-01-02"))
    third = Appointment.model_validate(make_appointment("a3", date="2030-01-01"))
    groups = group_appointments_by_date([first, second, third])
    assert list(groups) == ["2030-01-01", "2030-01-02"]
    assert [item.id for item in groups["2030-01-01"]] == ["a1", "a3"]
