"""
GeoCache Record Schema

Fixed, versioned shape of the persisted record. Every model allows extra
fields so that a record written by a newer schema version survives a
read-modify-write by an older one; new fields must be added with defaults.
"""

from typing import List, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .serialization import canonicalize, decode


SCHEMA_VERSION = 1

CoordRange = Tuple[int, int]


class User(BaseModel):
    """A caller identity as supplied by the platform."""
    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""


class Owner(BaseModel):
    """Persisted owner: commitment and salt only, never the raw id."""
    model_config = ConfigDict(extra="allow")

    commitment: str
    salt: str
    name: str = ""


class Trackable(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    value: str = ""


class Report(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    message: str
    notifier: User


class GeoCache(BaseModel):
    """
    A geolocated cache record.

    The store key identifies the record and is not part of it.
    `visitors` and `reports` are append-only, in arrival order.
    """
    model_config = ConfigDict(extra="allow")

    schema_version: int = SCHEMA_VERSION
    name: str
    description: str = ""
    x_coord_range: CoordRange
    y_coord_range: CoordRange
    owner: Owner
    trackable: Trackable
    visitors: List[User] = Field(default_factory=list)
    reports: List[Report] = Field(default_factory=list)

    def contains(self, x: int, y: int) -> bool:
        """Strict geofence: both coordinates must lie strictly inside the ranges."""
        x_in = self.x_coord_range[0] < x < self.x_coord_range[1]
        y_in = self.y_coord_range[0] < y < self.y_coord_range[1]
        return x_in and y_in

    def to_bytes(self) -> bytes:
        """Canonical JSON bytes for the store."""
        return canonicalize(self.model_dump(mode="json"))

    @classmethod
    def from_bytes(cls, data: Union[bytes, str]) -> "GeoCache":
        """
        Parse stored bytes.

        Raises:
            ValueError: bytes are not JSON or do not match the record shape
                (pydantic's ValidationError is a ValueError)
        """
        return cls.model_validate(decode(data))
