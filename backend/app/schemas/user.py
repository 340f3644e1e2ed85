"""Pydantic schemas for onboarding and user location."""
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for request/response envelopes exchanged as camelCase JSON."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(BaseModel):
    message: str


# --- Auth Schemas ---
class OnboardRequest(CamelModel):
    """Nickname plus initial location."""
    nickname: str = Field(min_length=1, max_length=50)
    lat: float = Field(allow_inf_nan=False)
    lon: float = Field(allow_inf_nan=False)


class OnboardResponse(CamelModel):
    message: str = "User onboarded successfully!"
    user_id: UUID
    nickname: str
    lat: float
    lon: float
    admin_dong: str


class UpdateLocationRequest(CamelModel):
    user_id: UUID
    lat: float = Field(allow_inf_nan=False)
    lon: float = Field(allow_inf_nan=False)


class UpdateLocationResponse(CamelModel):
    message: str = "User location updated successfully."
    admin_dong: str


class NicknameAvailabilityResponse(CamelModel):
    nickname: str
    is_available: bool
