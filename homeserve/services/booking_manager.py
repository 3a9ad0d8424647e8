import logging
from typing import Any, Dict, Optional, Union

from homeserve.errors import ApiError
from homeserve.models import Appointment, BookingData, BookingUpdate
from homeserve.services.appointment_store import AppointmentStore

logger = logging.getLogger(__name__)


class BookingManager:
    """Booking actions for pages that want a flag back instead of an exception.

    The appointment cache is brought in line through ``store`` so it follows
    the store's sync strategy.
    """

    def __init__(self, store: AppointmentStore):
        self.store = store
        self.is_loading = False
        self.error: Optional[str] = None
        self.success = False

    def _start(self) -> None:
        self.is_loading = True
        self.error = None
        self.success = False

    async def create_booking(self, booking: Union[BookingData, Dict[str, Any]]) -> Optional[Appointment]:
        self._start()
        try:
            created = await self.store.book_appointment(booking)
            self.success = True
            return created
        except ApiError as exc:
            logger.error("Failed to create booking: %s", exc.message)
            self.error = exc.message or "Failed to create booking. Please try again."
            return None
        finally:
            self.is_loading = False

    async def cancel_booking(self, booking_id: str) -> bool:
        self._start()
        try:
            await self.store.cancel(booking_id)
            self.success = True
            return True
        except ApiError as exc:
            logger.error("Failed to cancel booking %s: %s", booking_id, exc.message)
            self.error = exc.message or "Failed to cancel booking. Please try again."
            return False
        finally:
            self.is_loading = False

    async def reschedule_booking(self, booking_id: str, changes: Union[BookingUpdate, Dict[str, Any]]) -> bool:
        self._start()
        try:
            await self.store.reschedule(booking_id, changes)
            self.success = True
            return True
        except ApiError as exc:
            logger.error("Failed to reschedule booking %s: %s", booking_id, exc.message)
            self.error = exc.message or "Failed to reschedule booking. Please try again."
            return False
        finally:
            self.is_loading = False
