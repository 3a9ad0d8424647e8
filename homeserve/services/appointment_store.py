import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from homeserve.errors import ApiError
from homeserve.models import Appointment, BookingData, BookingUpdate, ReviewData
from homeserve.services.appointment_service import AppointmentService

logger = logging.getLogger(__name__)

UPCOMING_STATUSES = {"confirmed", "pending"}
CLOSED_STATUSES = {"completed", "cancelled"}

APPOINTMENTS_PATH = "/appointments"


class SyncStrategy(str, Enum):
    """How the cache is brought in line with the server after a write."""

    LOCAL_PATCH = "local_patch"
    REFETCH = "refetch"


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_upcoming(appointment: Appointment, now: datetime) -> bool:
    return appointment.status in UPCOMING_STATUSES and as_utc(appointment.start_time) >= now


def is_past(appointment: Appointment, now: datetime) -> bool:
    if appointment.status in CLOSED_STATUSES:
        return True
    return as_utc(appointment.start_time) < now and appointment.status not in UPCOMING_STATUSES


class AppointmentStore:
    """Session cache of the current user's appointments.

    Mutations go through ``service`` and then bring the cache in line
    according to ``strategy``. ``is_loading`` is a single flag shared by all
    operations, and the cache list is always replaced, never edited in place.
    """

    def __init__(
        self,
        service: AppointmentService,
        strategy: SyncStrategy = SyncStrategy.LOCAL_PATCH,
        navigate: Optional[Callable[[str], None]] = None,
    ):
        self.service = service
        self.strategy = strategy
        self.navigate = navigate
        self.appointments: List[Appointment] = []
        self.is_loading = False
        self.error: Optional[str] = None

    async def refresh(self) -> None:
        self.is_loading = True
        self.error = None
        try:
            self.appointments = await self.service.list_appointments()
        except ApiError:
            logger.exception("Failed to fetch appointments")
            self.error = "Failed to load appointments. Please try again."
        finally:
            self.is_loading = False

    def get_by_id(self, appointment_id: str) -> Optional[Appointment]:
        return next((item for item in self.appointments if item.id == appointment_id), None)

    async def cancel(self, appointment_id: str) -> None:
        await self._set_status(appointment_id, "cancelled", self.service.cancel_appointment, "cancel")

    async def complete(self, appointment_id: str) -> None:
        await self._set_status(appointment_id, "completed", self.service.complete_appointment, "complete")

    async def _set_status(
        self,
        appointment_id: str,
        status: str,
        call: Callable[[str], Any],
        verb: str,
    ) -> None:
        self.is_loading = True
        self.error = None
        try:
            await call(appointment_id)
            await self._sync(lambda: self.patch_status(appointment_id, status))
        except ApiError:
            logger.exception("Failed to %s appointment %s", verb, appointment_id)
            self.error = f"Failed to {verb} appointment. Please try again."
            raise
        finally:
            self.is_loading = False

    async def book_appointment(self, booking: Union[BookingData, Dict[str, Any]]) -> Appointment:
        self.is_loading = True
        self.error = None
        try:
            created = await self.service.create_appointment(booking)
            await self._sync(lambda: self.append(created))
            return created
        except ApiError:
            logger.exception("Failed to book appointment")
            self.error = "Failed to book appointment. Please try again."
            raise
        finally:
            self.is_loading = False

    async def reschedule(
        self,
        appointment_id: str,
        changes: Union[BookingUpdate, Dict[str, Any]],
    ) -> Appointment:
        self.is_loading = True
        self.error = None
        try:
            updated = await self.service.reschedule_appointment(appointment_id, changes)
            await self._sync(lambda: self.replace(updated))
            return updated
        except ApiError:
            logger.exception("Failed to reschedule appointment %s", appointment_id)
            self.error = "Failed to reschedule appointment. Please try again."
            raise
        finally:
            self.is_loading = False

    async def submit_review(self, review: Union[ReviewData, Dict[str, Any]]) -> None:
        self.is_loading = True
        self.error = None
        try:
            await self.service.submit_review(review)
        except ApiError:
            logger.exception("Failed to submit review")
            self.error = "Failed to submit review. Please try again."
            raise
        finally:
            self.is_loading = False
        if self.navigate is not None:
            self.navigate(APPOINTMENTS_PATH)

    async def _sync(self, local_patch: Callable[[], None]) -> None:
        if self.strategy is SyncStrategy.REFETCH:
            # The write already landed; a failed reload only leaves the cache stale.
            await self.refresh()
        else:
            local_patch()

    def patch_status(self, appointment_id: str, status: str) -> None:
        self.appointments = [
            item.model_copy(update={"status": status}) if item.id == appointment_id else item
            for item in self.appointments
        ]

    def append(self, appointment: Appointment) -> None:
        self.appointments = [*self.appointments, appointment]

    def replace(self, appointment: Appointment) -> None:
        self.appointments = [appointment if item.id == appointment.id else item for item in self.appointments]

    def clear(self) -> None:
        self.appointments = []
        self.error = None
        self.is_loading = False

    def upcoming(self, now: Optional[datetime] = None) -> List[Appointment]:
        current = as_utc(now) if now else datetime.now(timezone.utc)
        rows = [item for item in self.appointments if is_upcoming(item, current)]
        return sorted(rows, key=lambda item: as_utc(item.start_time))

    def past(self, now: Optional[datetime] = None) -> List[Appointment]:
        current = as_utc(now) if now else datetime.now(timezone.utc)
        rows = [item for item in self.appointments if is_past(item, current)]
        return sorted(rows, key=lambda item: as_utc(item.start_time), reverse=True)

    def overdue(self, now: Optional[datetime] = None) -> List[Appointment]:
        """Still pending/confirmed but already started; in neither partition above."""
        current = as_utc(now) if now else datetime.now(timezone.utc)
        rows = [
            item
            for item in self.appointments
            if item.status in UPCOMING_STATUSES and as_utc(item.start_time) < current
        ]
        return sorted(rows, key=lambda item: as_utc(item.start_time))

    @property
    def upcoming_appointments(self) -> List[Appointment]:
        return self.upcoming()

    @property
    def past_appointments(self) -> List[Appointment]:
        return self.past()
