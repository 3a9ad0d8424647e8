import logging
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from homeserve.errors import ApiError, ResponseValidationError
from homeserve.http_client import ApiClient
from homeserve.models import (
    Appointment,
    BookingData,
    BookingUpdate,
    ReviewData,
    ReviewResult,
    Service,
    ServiceProvider,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def unwrap_data(body: Any, expect_list: bool) -> Any:
    """Return ``body["data"]`` after checking it has the expected shape."""
    if not isinstance(body, dict) or "data" not in body:
        raise ResponseValidationError("Invalid data format: response has no data field.")
    data = body["data"]
    if expect_list and not isinstance(data, list):
        raise ResponseValidationError("Invalid data format: expected a list.")
    if not expect_list and not isinstance(data, dict):
        raise ResponseValidationError("Invalid data format: expected an object.")
    return data


def parse_one(model: Type[ModelT], body: Any) -> ModelT:
    try:
        return model.model_validate(unwrap_data(body, expect_list=False))
    except ValidationError as exc:
        raise ResponseValidationError(f"Invalid {model.__name__} payload: {exc.error_count()} error(s).") from exc


def parse_many(model: Type[ModelT], body: Any) -> List[ModelT]:
    try:
        return [model.model_validate(item) for item in unwrap_data(body, expect_list=True)]
    except ValidationError as exc:
        raise ResponseValidationError(f"Invalid {model.__name__} payload: {exc.error_count()} error(s).") from exc


def validate_input(model: Type[ModelT], data: Union[ModelT, Dict[str, Any]]) -> ModelT:
    """Validate caller input, reporting field errors as an :class:`ApiError`."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        errors: Dict[str, List[str]] = {}
        for item in exc.errors():
            field = ".".join(str(part) for part in item["loc"]) or "__root__"
            errors.setdefault(field, []).append(item["msg"])
        raise ResponseValidationError(f"Invalid {model.__name__}.", errors=errors) from exc


def _payload(data: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True, exclude_none=True, mode="json")
    return dict(data)


class AppointmentService:
    """Translates appointment operations into calls on the ``/bookings`` resource."""

    def __init__(self, api: ApiClient):
        self.api = api

    async def list_appointments(self) -> List[Appointment]:
        try:
            return parse_many(Appointment, await self.api.get("/bookings"))
        except ApiError:
            logger.exception("Failed to fetch appointments")
            raise

    async def get_appointment(self, appointment_id: str) -> Appointment:
        try:
            return parse_one(Appointment, await self.api.get(f"/bookings/{appointment_id}"))
        except ApiError:
            logger.exception("Failed to fetch appointment %s", appointment_id)
            raise

    async def create_appointment(self, booking: Union[BookingData, Dict[str, Any]]) -> Appointment:
        try:
            return parse_one(Appointment, await self.api.post("/bookings", json=_payload(booking)))
        except ApiError:
            logger.exception("Failed to create appointment")
            raise

    async def cancel_appointment(self, appointment_id: str) -> Appointment:
        try:
            return parse_one(Appointment, await self.api.post(f"/bookings/{appointment_id}/cancel"))
        except ApiError:
            logger.exception("Failed to cancel appointment %s", appointment_id)
            raise

    async def complete_appointment(self, appointment_id: str) -> Appointment:
        try:
            return parse_one(Appointment, await self.api.post(f"/bookings/{appointment_id}/complete"))
        except ApiError:
            logger.exception("Failed to complete appointment %s", appointment_id)
            raise

    async def reschedule_appointment(
        self,
        appointment_id: str,
        changes: Union[BookingUpdate, Dict[str, Any]],
    ) -> Appointment:
        try:
            body = await self.api.patch(f"/bookings/{appointment_id}", json=_payload(changes))
            return parse_one(Appointment, body)
        except ApiError:
            logger.exception("Failed to reschedule appointment %s", appointment_id)
            raise

    async def submit_review(self, review: Union[ReviewData, Dict[str, Any]]) -> ReviewResult:
        try:
            review = validate_input(ReviewData, review)
        except ApiError as exc:
            logger.error("Rejected review input: %s", exc.errors)
            raise
        try:
            body = await self.api.post(f"/bookings/{review.appointment_id}/rate", json=review.to_payload())
            return parse_one(ReviewResult, body)
        except ApiError:
            logger.exception("Failed to submit review for appointment %s", review.appointment_id)
            raise

    async def list_services(self, category: Optional[str] = None) -> List[Service]:
        params = {"category": category} if category else None
        try:
            return parse_many(Service, await self.api.get("/services", params=params))
        except ApiError:
            logger.exception("Failed to fetch services")
            raise

    async def list_service_providers(self, service_id: Optional[int] = None) -> List[ServiceProvider]:
        try:
            if service_id is None:
                services = await self.list_services()
                if not services:
                    return []
                service_id = services[0].id
            return parse_many(ServiceProvider, await self.api.get(f"/services/{service_id}/providers"))
        except ApiError:
            logger.exception("Failed to fetch service providers")
            raise

    async def get_service_provider(self, provider_id: int) -> Optional[ServiceProvider]:
        providers = await self.list_service_providers()
        return next((provider for provider in providers if provider.id == provider_id), None)
