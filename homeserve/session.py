import asyncio
import logging
from typing import Callable, Optional

import httpx

from homeserve.http_client import ApiClient
from homeserve.models import ProviderLoadResult
from homeserve.services.appointment_service import AppointmentService
from homeserve.services.appointment_store import AppointmentStore, SyncStrategy
from homeserve.services.auth_service import AuthService
from homeserve.services.booking_manager import BookingManager
from homeserve.services.catalog_store import ServiceCatalog
from homeserve.services.provider_store import ProviderStore
from homeserve.session_store import SessionStore

logger = logging.getLogger(__name__)


class MarketplaceSession:
    """Wires the client layers for one signed-in user.

    Build it when the session starts and ``close()`` it on logout; nothing
    here is shared between sessions.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        strategy: SyncStrategy = SyncStrategy.LOCAL_PATCH,
        navigate: Optional[Callable[[str], None]] = None,
        service_id: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.navigate = navigate
        self.session_store = SessionStore(token=token)
        self.api = ApiClient(
            self.session_store,
            base_url=base_url,
            on_unauthorized=navigate,
            transport=transport,
        )
        self.appointment_service = AppointmentService(self.api)
        self.appointments = AppointmentStore(self.appointment_service, strategy=strategy, navigate=navigate)
        self.bookings = BookingManager(self.appointments)
        self.providers = ProviderStore(self.api, service_id=service_id)
        self.catalog = ServiceCatalog(self.appointment_service)
        self.auth = AuthService(self.api)

    async def __aenter__(self) -> "MarketplaceSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def open(self) -> ProviderLoadResult:
        """Initial load of appointments and the provider catalog."""
        _, providers = await asyncio.gather(self.appointments.refresh(), self.providers.refresh())
        return providers

    async def close(self, logout: bool = False) -> None:
        if self.api.is_closed:
            return
        if logout:
            path = await self.auth.logout()
            if self.navigate is not None:
                self.navigate(path)
        self.appointments.clear()
        self.providers.clear()
        self.catalog.clear()
        self.session_store.clear()
        await self.api.aclose()
        logger.info("Marketplace session closed")
