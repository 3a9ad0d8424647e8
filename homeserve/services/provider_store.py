import logging
from typing import Iterable, List, Optional

from homeserve import config
from homeserve.errors import ApiError
from homeserve.http_client import ApiClient
from homeserve.models import ProviderLoadResult, ServiceProvider
from homeserve.services.appointment_service import parse_many

logger = logging.getLogger(__name__)

SEED_PROVIDERS: tuple[ServiceProvider, ...] = (
    ServiceProvider(
        id=1,
        name="Maria Johnson",
        category="Domestic Worker",
        description="Experienced housekeeper with 5+ years of experience in cleaning, laundry, and organizing.",
        hourly_rate=25.00,
        rating=4.8,
        availability=["Mon", "Tue", "Wed", "Thu", "Fri"],
        image="maria-johnson.jpg",
    ),
    ServiceProvider(
        id=2,
        name="John Smith",
        category="Gardener",
        description="Professional gardener specializing in landscape design, plant care, and garden maintenance.",
        hourly_rate=30.00,
        rating=4.7,
        availability=["Mon", "Wed", "Fri", "Sat"],
        image="john-smith.jpg",
    ),
    ServiceProvider(
        id=3,
        name="Chef Antonio",
        category="Chef",
        description="Culinary expert with experience in various cuisines. Available for meal prep and special events.",
        hourly_rate=45.00,
        rating=4.9,
        availability=["Tue", "Thu", "Sat", "Sun"],
        image="chef-antonio.jpg",
    ),
    ServiceProvider(
        id=4,
        name="Sarah Williams",
        category="Tutor",
        description="Certified teacher offering tutoring in mathematics, science, and English for all grade levels.",
        hourly_rate=35.00,
        rating=4.6,
        availability=["Mon", "Tue", "Wed", "Thu", "Fri"],
        image="sarah-williams.jpg",
    ),
    ServiceProvider(
        id=5,
        name="David Chen",
        category="Domestic Worker",
        description="Reliable house cleaner with attention to detail and excellent references.",
        hourly_rate=28.00,
        rating=4.5,
        availability=["Wed", "Thu", "Fri", "Sat"],
        image="david-chen.jpg",
    ),
    ServiceProvider(
        id=6,
        name="Michael Brown",
        category="Gardener",
        description="Experienced gardener specializing in organic gardening and sustainable practices.",
        hourly_rate=32.00,
        rating=4.7,
        availability=["Mon", "Tue", "Sat", "Sun"],
        image="michael-brown.jpg",
    ),
)


def _matches(value: Optional[str], query: str) -> bool:
    return bool(value) and query in value.lower()


class ProviderStore:
    """Catalog of bookable providers, never empty once refreshed."""

    def __init__(self, api: ApiClient, service_id: Optional[int] = None):
        self.api = api
        self.service_id = service_id if service_id is not None else config.DEFAULT_SERVICE_ID
        self.providers: List[ServiceProvider] = []
        self.is_loading = True
        self.error: Optional[str] = None
        self.using_fallback = False

    async def refresh(self) -> ProviderLoadResult:
        self.is_loading = True
        self.error = None
        try:
            body = await self.api.get(f"/services/{self.service_id}/providers")
            providers = parse_many(ServiceProvider, body)
        except ApiError as exc:
            if exc.kind == "validation":
                logger.error("Invalid provider response format: %s", exc.message)
                message = "Failed to load service providers. Invalid data format."
            else:
                logger.error("Failed to fetch service providers: %s", exc.message)
                message = "Failed to load service providers. Please check your connection and try again."
            return self._use_fallback(message)
        finally:
            self.is_loading = False

        logger.info("Service providers loaded: %d", len(providers))
        self.providers = providers
        self.using_fallback = False
        return ProviderLoadResult(ok=True, using_fallback=False, data=list(providers))

    def _use_fallback(self, message: str) -> ProviderLoadResult:
        self.error = message
        self.providers = [provider.model_copy(deep=True) for provider in SEED_PROVIDERS]
        self.using_fallback = True
        return ProviderLoadResult(ok=False, using_fallback=True, data=list(self.providers), error=message)

    def get_by_id(self, provider_id: int) -> Optional[ServiceProvider]:
        return next((provider for provider in self.providers if provider.id == provider_id), None)

    def filter_by_category(
        self,
        category: Optional[str],
        providers: Optional[Iterable[ServiceProvider]] = None,
    ) -> List[ServiceProvider]:
        rows = list(self.providers if providers is None else providers)
        if not category or category == "all":
            return rows
        wanted = category.lower()
        return [provider for provider in rows if provider.category and provider.category.lower() == wanted]

    def filter_by_search(
        self,
        query: str,
        providers: Optional[Iterable[ServiceProvider]] = None,
    ) -> List[ServiceProvider]:
        rows = list(self.providers if providers is None else providers)
        if not query:
            return rows
        needle = query.lower()
        return [
            provider
            for provider in rows
            if _matches(provider.name, needle)
            or _matches(provider.category, needle)
            or _matches(provider.description, needle)
        ]

    def clear(self) -> None:
        self.providers = []
        self.error = None
        self.using_fallback = False
