from datetime import datetime
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

AppointmentStatus = Literal["pending", "confirmed", "in_progress", "completed", "cancelled"]
PaymentStatus = Literal["pending", "paid", "refunded"]
ServiceCategory = Literal["Domestic Worker", "Gardener", "Chef", "Tutor", "Handyman"]
UserType = Literal["client", "provider", "admin"]

SERVICE_CATEGORIES: tuple[str, ...] = ("Domestic Worker", "Gardener", "Chef", "Tutor", "Handyman")


class ApiModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class Coordinates(ApiModel):
    latitude: float
    longitude: float


class AppointmentLocation(ApiModel):
    address: str
    coordinates: Optional[Coordinates] = None
    access_instructions: Optional[str] = None


class AppointmentPrice(ApiModel):
    base_amount: float
    premium: Optional[float] = None
    discount: Optional[float] = None
    final_amount: float
    commission: Optional[float] = None


class AppointmentRequirements(ApiModel):
    special_instructions: Optional[str] = None
    equipment_needed: list[str] = Field(default_factory=list)
    pets_present: Optional[bool] = None


class Appointment(ApiModel):
    id: str
    client_id: str
    provider_id: int
    service_id: int
    service_name: str
    service_category: str
    provider_name: str
    status: AppointmentStatus
    start_time: datetime
    end_time: datetime
    date: str = ""
    time: str = ""
    location: AppointmentLocation
    requirements: Optional[AppointmentRequirements] = None
    price: AppointmentPrice
    payment_status: PaymentStatus = "pending"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    duration: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _check_time_window(self) -> "Appointment":
        if self.start_time >= self.end_time:
            raise ValueError("startTime must be before endTime")
        return self


class ServiceProvider(ApiModel):
    id: int
    name: Optional[str] = None
    # Unknown categories are kept as-is so one odd record does not drop the catalog.
    category: Optional[str] = None
    description: Optional[str] = None
    rating: float = Field(default=0.0, ge=0, le=5)
    hourly_rate: float = 0.0
    availability: list[str] = Field(default_factory=list)
    image: Optional[str] = None


class ServiceRequirements(ApiModel):
    experience: str = ""
    equipment: list[str] = Field(default_factory=list)
    certification: list[str] = Field(default_factory=list)


class ServiceDuration(ApiModel):
    minimum: int
    maximum: int


class Service(ApiModel):
    id: int
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    base_rate: Optional[float] = None
    requirements: Optional[ServiceRequirements] = None
    availability: Dict[str, bool] = Field(default_factory=dict)
    duration: Optional[ServiceDuration] = None
    status: str = "active"


class BookingData(ApiModel):
    provider_id: int
    service_id: int
    date: str
    start_time: str
    end_time: str
    location: str
    access_instructions: Optional[str] = None
    special_instructions: Optional[str] = None


class BookingUpdate(ApiModel):
    provider_id: Optional[int] = None
    service_id: Optional[int] = None
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None
    access_instructions: Optional[str] = None
    special_instructions: Optional[str] = None


class ReviewCategories(ApiModel):
    punctuality: int = Field(ge=1, le=5)
    quality: int = Field(ge=1, le=5)
    communication: int = Field(ge=1, le=5)
    professionalism: int = Field(ge=1, le=5)


class ReviewData(ApiModel):
    appointment_id: str
    rating: int = Field(ge=1, le=5)
    review: str = ""
    categories: ReviewCategories

    @model_validator(mode="before")
    @classmethod
    def _default_category_scores(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        rating = values.get("rating")
        categories = dict(values.get("categories") or {})
        for name in ("punctuality", "quality", "communication", "professionalism"):
            if categories.get(name) is None:
                categories[name] = rating
        return {**values, "categories": categories}


class ReviewResult(ApiModel):
    success: bool


class StatusColors(ApiModel):
    bg: str
    text: str


class ProviderLoadResult(ApiModel):
    ok: bool
    using_fallback: bool = False
    data: list[ServiceProvider]
    error: Optional[str] = None


class ServiceLoadResult(ApiModel):
    ok: bool
    using_fallback: bool = False
    data: list[Service]
    error: Optional[str] = None


class User(ApiModel):
    id: Union[int, str]
    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    user_type: Optional[str] = None
    status: Optional[str] = None
    email_verified: Optional[bool] = None
    email_verified_at: Optional[str] = None


class AuthResponse(ApiModel):
    token: str
    user: User


class LoginCredentials(ApiModel):
    email: str
    password: str
    remember: Optional[bool] = None


class RegisterData(ApiModel):
    name: str
    email: str
    phone: str
    user_type: Literal["client", "provider"]
    password: str
    password_confirmation: str = Field(alias="password_confirmation")

    @model_validator(mode="after")
    def _passwords_match(self) -> "RegisterData":
        if self.password != self.password_confirmation:
            raise ValueError("password confirmation does not match")
        return self


class ForgotPasswordData(ApiModel):
    email: str


class ResetPasswordData(ApiModel):
    token: str
    email: str
    password: str
    password_confirmation: str = Field(alias="password_confirmation")
