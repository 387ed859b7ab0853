from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _to_float(v: object) -> float | None:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        f = float(v)
    else:
        s = str(v).strip()
        if s == "":
            return None
        try:
            f = float(s)
        except ValueError:
            return None
    if math.isnan(f) or math.isinf(f):
        return None
    return f


class ParkingSpace(BaseModel):
    """A parking-space record as read from the inventory store.

    Records come from loosely-typed sources, so every field except ``id`` is
    optional and coordinates are kept as supplied (number or numeric string).
    """

    id: str
    title: str | None = None
    description: str | None = None
    location: str | None = None
    address: str | None = None
    postcode: str | None = None
    latitude: float | str | None = None
    longitude: float | str | None = None
    what3words: str | None = None
    features: str | list[str] | None = None
    price_per_day: float | None = None
    price_per_month: float | None = None
    total_spaces: int | None = None
    booked_spaces: int | None = None
    is_available: bool | None = None
    available_from: str | None = None
    available_to: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> Any:
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @field_validator("available_from", "available_to", mode="before")
    @classmethod
    def _date_as_iso(cls, v: Any) -> Any:
        if isinstance(v, (date, datetime)):
            return v.isoformat()
        return v

    @property
    def feature_tags(self) -> list[str]:
        if self.features is None:
            return []
        if isinstance(self.features, str):
            raw = self.features.split(",")
        else:
            raw = self.features
        return [t.strip() for t in raw if isinstance(t, str) and t.strip()]

    @property
    def capacity(self) -> int:
        # Missing counts fall back to one free slot so incomplete records
        # stay searchable.
        total = self.total_spaces if self.total_spaces is not None else 1
        booked = self.booked_spaces if self.booked_spaces is not None else 0
        return total - booked

    @property
    def coordinates(self) -> tuple[float, float] | None:
        lat = _to_float(self.latitude)
        lon = _to_float(self.longitude)
        if lat is None or lon is None:
            return None
        return (lat, lon)


class SearchConstraints(BaseModel):
    location: str | None = None
    postcode: str | None = None
    what3words: str | None = None
    features: list[str] = Field(default_factory=list)
    start_date: str | None = None
    end_date: str | None = None
    max_price: int | None = None

    def is_empty(self) -> bool:
        return not any(
            (
                self.location,
                self.postcode,
                self.what3words,
                self.features,
                self.start_date,
                self.end_date,
                self.max_price is not None,
            )
        )


class UserLocation(BaseModel):
    latitude: float
    longitude: float


class RankedCandidate(BaseModel):
    space: ParkingSpace
    distance: float | None = None
    keyword_score: int = 0

    def to_payload(self) -> dict[str, Any]:
        return {**self.space.model_dump(), "distance": self.distance}


class SearchRequest(BaseModel):
    message: str = ""
    location: UserLocation | None = None


class SearchResponse(BaseModel):
    constraints: SearchConstraints
    total_found: int
    spaces: list[dict[str, Any]]


class ChatMessage(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    message: str
    conversation: list[ChatMessage] = Field(default_factory=list)
    location: UserLocation | None = None


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    timestamp: str
    parking_spaces: list[dict[str, Any]] = Field(alias="parkingSpaces")
    total_found: int = Field(alias="totalFound")
