"""
Request bodies for the HTTP surface.

These models are closed: unknown request fields are dropped, so callers
cannot plant keys in a stored record. Records themselves live in models.py.
"""

from pydantic import BaseModel

from .models import CoordRange, Trackable


class CreateCacheRequest(BaseModel):
    name: str
    description: str = ""
    x_coord_range: CoordRange
    y_coord_range: CoordRange
    trackable_value: str


class UpdateCacheRequest(BaseModel):
    name: str
    description: str = ""


class UpdateCoordinatesRequest(BaseModel):
    x_coord_range: CoordRange
    y_coord_range: CoordRange


class PositionRequest(BaseModel):
    x: int
    y: int


class TrackableRequest(BaseModel):
    id: str
    value: str = ""

    def to_trackable(self) -> Trackable:
        return Trackable(id=self.id, value=self.value)


class VisitRequest(BaseModel):
    x: int
    y: int
    trackable: TrackableRequest


class ReportRequest(BaseModel):
    message: str
