"""
TitleComposer: a readable default title for a new photo.

Rules, first match wins:

1. Long place name (>= 40 chars) and city:  "<Place> / <year>"
2. Short place name and city:              "<Place> / <City> / <year>"
3. City and country:                       "<City> / <Country> / <year>"
4. County and country:                     "<County> / <Country> / <year>"
5. First tag:                              "<Tag> / <year>"
6. Known camera:                           "<Camera> / <Month Year>"
7. Time of day:                            "<Daytime> / <Month Year>"
"""

from datetime import datetime
from typing import Optional, Sequence

from photo_index.db.models import UNKNOWN, Camera, Location, Tag
from photo_index.utils import title_case

LONG_PLACE_NAME = 40

DAYTIME_LABELS = (
    (8, "Early Bird"),
    (12, "Morning Mood"),
    (17, "Carpe Diem"),
    (20, "Sunset"),
)
LATE_NIGHT = "Late Night"


def daytime_label(hour: int) -> str:
    for limit, label in DAYTIME_LABELS:
        if hour < limit:
            return label
    return LATE_NIGHT


def location_title(location: Optional[Location], taken_at: datetime) -> str:
    """Title from rules 1-4, or "" when the location has too little detail."""
    if location is None:
        return ""

    year = taken_at.strftime("%Y")
    name = location.loc_name or ""
    city = location.loc_city or ""
    county = location.loc_county or ""
    country = location.loc_country or ""

    if name and city:
        if len(name) >= LONG_PLACE_NAME:
            return f"{title_case(name)} / {year}"
        return f"{title_case(name)} / {city} / {year}"

    if city and country:
        return f"{city} / {country} / {year}"

    if county and country:
        return f"{county} / {country} / {year}"

    return ""


def fallback_title(tags: Sequence[Tag], camera: Optional[Camera], taken_at: datetime) -> str:
    """Title from rules 5-7; always returns a title."""
    if tags:
        return f"{title_case(tags[0].tag_label)} / {taken_at.strftime('%Y')}"

    month_year = taken_at.strftime("%B %Y")

    if camera is not None and str(camera) not in ("", UNKNOWN):
        return f"{camera} / {month_year}"

    return f"{daytime_label(taken_at.hour)} / {month_year}"


def compose_title(
    location: Optional[Location],
    tags: Sequence[Tag],
    camera: Optional[Camera],
    taken_at: datetime,
) -> str:
    """Pure function of (location, tags, camera, capture time)."""
    return location_title(location, taken_at) or fallback_title(tags, camera, taken_at)
