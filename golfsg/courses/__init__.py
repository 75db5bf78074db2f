"""Course geometry, hole resolution and lie inference."""

from .hole_detect import HoleResolution, HoleResolver
from .lie import LieClassifier, LieInference
from .schemas import CourseLayout, GeoPoint, HoleLocation
from .store import get_course_layout, list_course_ids

__all__ = [
    "CourseLayout",
    "GeoPoint",
    "HoleLocation",
    "HoleResolution",
    "HoleResolver",
    "LieClassifier",
    "LieInference",
    "get_course_layout",
    "list_course_ids",
]
