from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypedDict


class User(TypedDict, total=False):
    id: int
    name: str
    email: str


class LoginResponse(TypedDict, total=False):
    token: str
    user: User


class Location(TypedDict, total=False):
    id: str
    name: str
    latitude: float
    longitude: float


class Layer(TypedDict, total=False):
    id: str
    name: str
    type: str
    data: list[Any]


@dataclass(frozen=True)
class MapBounds:
    north: float
    south: float
    east: float
    west: float

    def __post_init__(self) -> None:
        if self.south > self.north:
            raise ValueError("south must not be greater than north")

    def as_params(self) -> dict[str, float]:
        return {"north": self.north, "south": self.south, "east": self.east, "west": self.west}


@dataclass
class MultipartForm:
    """A pre-built multipart payload, forwarded to the upload channel as is.

    ``files`` follows the httpx ``files=`` format, ``data`` holds plain form fields.
    """

    files: dict[str, Any] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UploadProgress:
    loaded: int
    total: int | None = None

    @property
    def percent(self) -> int | None:
        if not self.total:
            return None
        return round(self.loaded * 100 / self.total)
