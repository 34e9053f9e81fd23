"""
Reverse geocoding of GPS coordinates.

OpenStreetMapGeocoder queries a Nominatim ``reverse`` endpoint. Coordinates
are rounded to four decimals (~11 m) before the lookup, so shots taken a
few steps apart resolve to the same Location row.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Protocol, Tuple

import requests

from photo_index.errors import GeocodeError

logger = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org/reverse"
COORDINATE_PRECISION = 4


@dataclass
class LocationInfo:
    """A resolved place, keyed by its rounded coordinates."""
    latitude: float
    longitude: float
    name: str = ""
    city: str = ""
    county: str = ""
    country: str = ""
    country_code: str = ""
    category: str = ""
    type: str = ""
    source_id: str = ""


class Geocoder(Protocol):
    def reverse(self, latitude: float, longitude: float) -> LocationInfo:
        """Resolve coordinates to a place, or raise GeocodeError."""
        ...


class NullGeocoder:
    """Geocoder used when reverse geocoding is disabled."""

    def reverse(self, latitude: float, longitude: float) -> LocationInfo:
        raise GeocodeError("reverse geocoding is disabled")


class OpenStreetMapGeocoder:
    """Nominatim client with an in-process cache."""

    def __init__(
        self,
        url: str = NOMINATIM_URL,
        user_agent: str = "photo-index",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.user_agent = user_agent
        self.timeout = timeout
        self.session = session or requests.Session()
        self._cache: Dict[Tuple[float, float], LocationInfo] = {}

    def reverse(self, latitude: float, longitude: float) -> LocationInfo:
        key = (round(latitude, COORDINATE_PRECISION), round(longitude, COORDINATE_PRECISION))

        if key in self._cache:
            return self._cache[key]

        try:
            response = self.session.get(
                self.url,
                params={
                    "format": "jsonv2",
                    "lat": key[0],
                    "lon": key[1],
                    "zoom": 18,
                    "addressdetails": 1,
                },
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            raise GeocodeError(f"reverse lookup of {key} failed: {e}") from e

        if not isinstance(payload, dict) or "error" in payload:
            error = payload.get("error") if isinstance(payload, dict) else payload
            raise GeocodeError(f"no place found at {key}: {error}")

        location = self._to_location(key, payload)
        self._cache[key] = location

        return location

    @staticmethod
    def _to_location(key: Tuple[float, float], payload: Dict) -> LocationInfo:
        address = payload.get("address") or {}

        return LocationInfo(
            latitude=key[0],
            longitude=key[1],
            name=payload.get("name") or "",
            city=address.get("city") or address.get("town") or address.get("village") or "",
            county=address.get("county") or address.get("state") or "",
            country=address.get("country") or "",
            country_code=(address.get("country_code") or "").lower(),
            category=payload.get("category") or "",
            type=payload.get("type") or "",
            source_id=str(payload.get("place_id") or ""),
        )
