from __future__ import annotations

from typing import Dict, Optional

from .schemas import CourseLayout, GeoPoint, HoleLocation

_COURSES: Dict[str, CourseLayout] = {}


def _seed_demo_courses() -> Dict[str, CourseLayout]:
    courses: Dict[str, CourseLayout] = {}

    demo_links = CourseLayout(
        course_id="demo-links",
        course_name="Demo Links",
        holes=[
            HoleLocation(
                number=1,
                par=4,
                tee=GeoPoint(lat=37.4318, lon=-122.1610),
                green_center=GeoPoint(lat=37.4332, lon=-122.1583),
                yardage=310,
                green_radius=15,
            ),
            HoleLocation(
                number=2,
                par=3,
                tee=GeoPoint(lat=37.4326, lon=-122.1600),
                green_center=GeoPoint(lat=37.4337, lon=-122.1576),
                yardage=265,
                green_radius=14,
            ),
            HoleLocation(
                number=3,
                par=5,
                tee=GeoPoint(lat=37.4312, lon=-122.1598),
                green_center=GeoPoint(lat=37.4344, lon=-122.1555),
                yardage=560,
                green_radius=16,
            ),
        ],
    )
    courses[demo_links.course_id] = demo_links

    pebble = CourseLayout(
        course_id="pebble-beach",
        course_name="Pebble Beach Golf Links",
        holes=[
            HoleLocation(
                number=1,
                par=4,
                tee=GeoPoint(lat=36.5689, lon=-121.9497),
                green_center=GeoPoint(lat=36.5673, lon=-121.9485),
                yardage=380,
                green_radius=15,
            ),
        ],
    )
    courses[pebble.course_id] = pebble

    return courses


_COURSES = _seed_demo_courses()


def list_course_ids() -> list[str]:
    return sorted(_COURSES.keys())


def get_course_layout(course_id: str) -> Optional[CourseLayout]:
    return _COURSES.get(course_id)


__all__ = ["get_course_layout", "list_course_ids"]
