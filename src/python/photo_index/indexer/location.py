"""
LocationResolver: where a photo was taken.

Precise: the file's GPS coordinates are reverse geocoded into a Location
and Country, and the place names become tags.

Approximate: without coordinates, the photo adopts the Country of the
catalog photo captured closest in time. This is a best-effort guess with
no confidence attached; no prior photo means no country, which is fine.
"""

import logging
from datetime import datetime
from typing import List, Optional

from photo_index.db.models import Country, Location, Photo, Tag
from photo_index.db.store import CatalogStore
from photo_index.geo import Geocoder
from photo_index.indexer.outcome import Outcome, attempt
from photo_index.indexer.tags import TagResolver
from photo_index.media.media_file import MediaFile

logger = logging.getLogger(__name__)

# Order in which place names are appended as tags
LOCATION_TAG_FIELDS = ("loc_city", "loc_county", "loc_country", "loc_category", "loc_name", "loc_type")


class LocationResolver:
    def __init__(self, store: CatalogStore, geocoder: Geocoder, tag_resolver: TagResolver):
        self.store = store
        self.geocoder = geocoder
        self.tag_resolver = tag_resolver

    def resolve(self, photo: Photo, media_file: MediaFile, tags: List[Tag]) -> Outcome[Location]:
        """
        Set photo.location / photo.country and append place tags to tags.

        Falls back to approximate() when there is no precise location.
        """
        outcome = attempt("geolocate", media_file.location, self.geocoder)

        if not outcome.ok:
            logger.debug("location cannot be determined precisely: %s", outcome.error)
            self.approximate(photo, media_file.date_created())
            return outcome

        info = outcome.value
        country = self.store.first_or_create_country(info.country_code, info.country)
        location = self.store.first_or_create_location(info, country)

        photo.location = location
        photo.country = country

        for field in LOCATION_TAG_FIELDS:
            self.tag_resolver.append_tag(tags, getattr(location, field))

        return Outcome.success("geolocate", location)

    def approximate(self, photo: Photo, taken_at: datetime) -> Optional[Country]:
        """Adopt the Country of the photo captured nearest to taken_at, if any."""
        recent = self.store.nearest_photo(taken_at, exclude_id=photo.id)

        if recent is None or recent.country is None:
            return None

        photo.country = recent.country
        logger.debug("approximate location: %s", recent.country.country_name)

        return recent.country
