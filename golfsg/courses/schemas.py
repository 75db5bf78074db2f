from __future__ import annotations

from math import atan2, cos, radians, sin, sqrt
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

METERS_TO_YARDS = 1.09361


class GeoPoint(BaseModel):
    lat: float
    lon: float


def haversine_m(p1: GeoPoint, p2: GeoPoint) -> float:
    """Compute haversine distance between two geographic points in meters."""

    r = 6_371_000.0  # mean Earth radius in meters
    lat1 = radians(p1.lat)
    lon1 = radians(p1.lon)
    lat2 = radians(p2.lat)
    lon2 = radians(p2.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return r * c


def distance_yards(p1: GeoPoint, p2: GeoPoint) -> float:
    return haversine_m(p1, p2) * METERS_TO_YARDS


class HoleLocation(BaseModel):
    """Tee, green and pin for one hole. Green radius is in yards."""

    number: int = Field(validation_alias=AliasChoices("number", "holeNumber"))
    par: int = 4
    tee: GeoPoint = Field(validation_alias=AliasChoices("tee", "teeLocation"))
    green_center: GeoPoint = Field(
        validation_alias=AliasChoices("green_center", "greenCenter"),
        serialization_alias="greenCenter",
    )
    pin: Optional[GeoPoint] = Field(
        default=None, validation_alias=AliasChoices("pin", "pinLocation")
    )
    yardage: Optional[float] = None
    green_radius: float = Field(
        default=15.0,
        validation_alias=AliasChoices("green_radius", "greenRadius"),
        serialization_alias="greenRadius",
    )

    model_config = ConfigDict(populate_by_name=True)

    def distance_to_pin(self, lat: float, lon: float) -> float:
        """Yards from a position to the pin (green center when no pin is set)."""

        return distance_yards(GeoPoint(lat=lat, lon=lon), self.pin or self.green_center)

    def is_on_green(self, lat: float, lon: float) -> bool:
        return (
            distance_yards(GeoPoint(lat=lat, lon=lon), self.green_center)
            <= self.green_radius
        )


class CourseLayout(BaseModel):
    course_id: str = Field(
        validation_alias=AliasChoices("course_id", "courseId", "id"),
        serialization_alias="courseId",
    )
    course_name: str = Field(
        default="",
        validation_alias=AliasChoices("course_name", "courseName", "name"),
        serialization_alias="courseName",
    )
    holes: List[HoleLocation] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    def hole(self, number: int) -> Optional[HoleLocation]:
        return next((hole for hole in self.holes if hole.number == number), None)


__all__ = [
    "CourseLayout",
    "GeoPoint",
    "HoleLocation",
    "METERS_TO_YARDS",
    "distance_yards",
    "haversine_m",
]
