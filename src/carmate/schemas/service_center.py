import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Coordinates(BaseModel):
    lat: float
    lng: float


class ResultSource(str, Enum):
    GOOGLE = "google"
    INTERNAL = "internal"


class RegisteredCenterRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    service_center_name: str
    service_center_address: str | None = None
    service_center_lat: float | None = None
    service_center_lng: float | None = None
    google_place_id: str | None = None
    average_rating: float | None = None

    @property
    def location(self) -> Coordinates | None:
        if self.service_center_lat is None or self.service_center_lng is None:
            return None
        return Coordinates(lat=self.service_center_lat, lng=self.service_center_lng)


class LocationRecord(BaseModel):
    """A place returned by the external place search."""

    place_id: str
    name: str
    address: str | None = None
    location: Coordinates | None = None
    rating: float | None = None
    user_ratings_total: int | None = None


class ReconciledResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    address: str | None = None
    location: Coordinates | None = None
    distance: float | None = None
    is_registered: bool = Field(alias="isRegistered")
    registered_data: RegisteredCenterRead | None = Field(default=None, alias="registeredData")
    rating: float | None = None
    user_ratings_total: int | None = None
    google_maps_url: str | None = Field(default=None, alias="googleMapsUrl")
    source: ResultSource
