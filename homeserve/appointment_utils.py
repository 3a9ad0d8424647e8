import logging
from datetime import datetime
from typing import Dict, Iterable, List, Union

from homeserve.models import Appointment, StatusColors

logger = logging.getLogger(__name__)

STATUS_COLORS: Dict[str, StatusColors] = {
    "confirmed": StatusColors(bg="bg-green-100", text="text-green-800"),
    "pending": StatusColors(bg="bg-yellow-100", text="text-yellow-800"),
    "in_progress": StatusColors(bg="bg-blue-100", text="text-blue-800"),
    "completed": StatusColors(bg="bg-blue-100", text="text-blue-800"),
    "cancelled": StatusColors(bg="bg-red-100", text="text-red-800"),
}
DEFAULT_STATUS_COLORS = StatusColors(bg="bg-gray-100", text="text-gray-800")

CANCELLABLE_STATUSES = {"pending", "confirmed"}
RESCHEDULABLE_STATUSES = {"pending", "confirmed"}
REVIEWABLE_STATUSES = {"completed"}
REBOOKABLE_STATUSES = {"completed", "cancelled"}

StatusSource = Union[Appointment, str]


def _status(value: StatusSource) -> str:
    return value.status if isinstance(value, Appointment) else str(value)


def _parse(value: Union[str, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise TypeError(f"Expected an ISO timestamp, got {type(value).__name__}")
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def get_status_colors(status: StatusSource) -> StatusColors:
    return STATUS_COLORS.get(_status(status), DEFAULT_STATUS_COLORS)


def get_status_display_name(status: StatusSource) -> str:
    """``in_progress`` -> ``In progress``."""
    label = _status(status).replace("_", " ")
    return label[:1].upper() + label[1:]


def can_cancel_appointment(appointment: StatusSource) -> bool:
    return _status(appointment) in CANCELLABLE_STATUSES


def can_reschedule_appointment(appointment: StatusSource) -> bool:
    return _status(appointment) in RESCHEDULABLE_STATUSES


def can_leave_review(appointment: StatusSource) -> bool:
    return _status(appointment) in REVIEWABLE_STATUSES


def can_book_again(appointment: StatusSource) -> bool:
    return _status(appointment) in REBOOKABLE_STATUSES


def format_date(value: Union[str, datetime]) -> str:
    """``2025-02-26T09:00:00`` -> ``February 26, 2025``; unparseable input is returned as-is."""
    try:
        parsed = _parse(value)
    except (TypeError, ValueError):
        logger.warning("Error formatting date: %r", value)
        return str(value)
    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"


def format_time(value: Union[str, datetime]) -> str:
    """``2025-02-26T09:00:00`` -> ``9:00 AM``."""
    try:
        parsed = _parse(value)
    except (TypeError, ValueError):
        logger.warning("Error formatting time: %r", value)
        return str(value)
    hour = parsed.hour % 12 or 12
    return f"{hour}:{parsed.minute:02d} {'AM' if parsed.hour < 12 else 'PM'}"


def format_time_range(start: Union[str, datetime], end: Union[str, datetime]) -> str:
    return f"{format_time(start)} - {format_time(end)}"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def calculate_duration(start: Union[str, datetime], end: Union[str, datetime]) -> str:
    try:
        seconds = int((_parse(end) - _parse(start)).total_seconds())
    except (TypeError, ValueError):
        logger.warning("Error calculating duration: %r - %r", start, end)
        return "Duration not available"
    hours, minutes = divmod(seconds // 60, 60)
    if hours == 0:
        return f"{minutes} minutes"
    if minutes == 0:
        return _plural(hours, "hour")
    return f"{_plural(hours, 'hour')} {_plural(minutes, 'minute')}"


def format_price(price: float) -> str:
    amount = int(price) if float(price).is_integer() else price
    return f"R{amount}"


def group_appointments_by_date(appointments: Iterable[Appointment]) -> Dict[str, List[Appointment]]:
    groups: Dict[str, List[Appointment]] = {}
    for appointment in appointments:
        groups.setdefault(appointment.date, []).append(appointment)
    return groups
