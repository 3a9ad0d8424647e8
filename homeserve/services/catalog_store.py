import logging
from typing import List, Optional

from homeserve.errors import ApiError
from homeserve.models import Service, ServiceLoadResult
from homeserve.services.appointment_service import AppointmentService

logger = logging.getLogger(__name__)


def _mock_service(service_id: int, category: str, base_rate: float, description: str, experience: str,
                  equipment: list[str], certification: list[str], minimum: int, maximum: int,
                  holidays: bool = False) -> Service:
    return Service(
        id=service_id,
        category=category,
        base_rate=base_rate,
        description=description,
        requirements={"experience": experience, "equipment": equipment, "certification": certification},
        availability={"weekdays": True, "weekends": True, "holidays": holidays},
        duration={"minimum": minimum, "maximum": maximum},
        status="active",
    )


MOCK_SERVICES: tuple[Service, ...] = (
    _mock_service(1, "Domestic Worker", 25.00, "Professional cleaning services for homes and apartments.",
                  "1+ years of experience", ["cleaning supplies", "vacuum cleaner"], [], 2, 8),
    _mock_service(2, "Gardener", 30.00, "Professional gardening services for homes and businesses.",
                  "1+ years of experience", ["gardening tools", "lawn mower"], [], 2, 8),
    _mock_service(3, "Chef", 45.00, "Professional cooking services for special events and meal preparation.",
                  "2+ years of experience", ["cooking utensils"], ["food safety"], 3, 8, holidays=True),
    _mock_service(4, "Tutor", 35.00, "Professional tutoring services for students of all ages.",
                  "1+ years of experience", ["teaching materials"], ["teaching qualification"], 1, 4),
    _mock_service(5, "Handyman", 40.00, "Professional handyman services for home repairs and maintenance.",
                  "2+ years of experience", ["tools"], [], 1, 8),
)


class ServiceCatalog:
    def __init__(self, service: AppointmentService):
        self.service = service
        self.services: List[Service] = []
        self.is_loading = False
        self.error: Optional[str] = None

    async def fetch_services(self, category: Optional[str] = None) -> ServiceLoadResult:
        self.is_loading = True
        self.error = None
        try:
            self.services = await self.service.list_services(category=category)
            return ServiceLoadResult(ok=True, data=list(self.services))
        except ApiError:
            logger.exception("Failed to fetch services")
            self.error = "Failed to load services. Please try again."
            self.services = [service.model_copy(deep=True) for service in MOCK_SERVICES]
            return ServiceLoadResult(ok=False, using_fallback=True, data=list(self.services), error=self.error)
        finally:
            self.is_loading = False

    def get_by_id(self, service_id: int) -> Optional[Service]:
        return next((item for item in self.services if item.id == service_id), None)

    def clear(self) -> None:
        self.services = []
        self.error = None
