"""
City/country geocoding through Nominatim with a persistent JSON cache.

The cache maps a normalized ``"city|country"`` key to ``[lat, lon]`` or to
``null`` when the service found nothing, so a known miss is never asked
again. Only real network lookups go through the rate limiter; cache hits
return immediately.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

import pandas as pd
from geopy.exc import GeopyError
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from company_map.config import CITY, COUNTRY, LAT_COL, LON_COL, get_settings
from company_map.errors import GeocodeError
from company_map.text import normalize

logger = logging.getLogger(__name__)

Coords = Tuple[float, float]


def make_geocode_key(city, country) -> str:
    return f"{normalize(city).lower()}|{normalize(country).lower()}"


class GeocodeCache:
    def __init__(self, path):
        self.path = Path(path)
        self._entries: Dict[str, Optional[Coords]] = self._load()

    def _load(self):
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Could not read geocode cache %s: %s", self.path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring geocode cache %s: unexpected format", self.path)
            return {}

        entries = {}
        for key, value in raw.items():
            if value is None:
                entries[key] = None
            elif isinstance(value, (list, tuple)) and len(value) == 2:
                entries[key] = (float(value[0]), float(value[1]))
        logger.debug("Loaded %d geocode cache entries from %s", len(entries), self.path)
        return entries

    def save(self):
        payload = {k: (list(v) if v is not None else None) for k, v in self._entries.items()}
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp, self.path)
        except OSError as exc:
            logger.warning("Could not save geocode cache %s: %s", self.path, exc)

    def __contains__(self, key):
        return key in self._entries

    def __len__(self):
        return len(self._entries)

    def get(self, key):
        return self._entries.get(key)

    def set(self, key, coords):
        self._entries[key] = coords
        self.save()

    def clear(self):
        self._entries = {}
        self.save()


class Geocoder:
    """Cache-first geocoder. ``geocode_fn`` replaces the Nominatim call in tests."""

    def __init__(self, cache, settings=None, geocode_fn=None):
        self.cache = cache
        self.settings = settings or get_settings()
        if geocode_fn is None:
            geolocator = Nominatim(user_agent=self.settings.user_agent, domain=self.settings.nominatim_domain)
            geocode_fn = RateLimiter(
                geolocator.geocode,
                min_delay_seconds=self.settings.geocode_min_delay_seconds,
                max_retries=self.settings.geocode_max_retries,
                swallow_exceptions=False,
            )
        self._geocode_fn = geocode_fn

    def geocode(self, city, country, refresh=False) -> Optional[Coords]:
        key = make_geocode_key(city, country)
        if key in self.cache and not refresh:
            return self.cache.get(key)

        query = f"{normalize(city)}, {normalize(country)}"
        logger.debug("Geocoding %r", query)
        try:
            location = self._geocode_fn(query, exactly_one=True, timeout=self.settings.geocode_timeout)
        except GeopyError as exc:
            raise GeocodeError(query, exc) from exc

        if location is None:
            logger.info("No geocoding result for %r", query)
            self.cache.set(key, None)
            return None

        coords = (float(location.latitude), float(location.longitude))
        self.cache.set(key, coords)
        return coords


@dataclass
class GeocodeSummary:
    added: int = 0
    missing: int = 0
    failed: int = 0

    def message(self):
        if self.missing > 0:
            return (
                f"Added {self.added} marker(s). {self.missing} row(s) missing a location "
                "or couldn't be geocoded."
            )
        return f"Added {self.added} marker(s)."


def geocode_frame(df, geocoder, retry_failed=False):
    """Attach ``_lat``/``_lon`` to every row that can be placed.

    Rows with a blank city or country are never looked up. A service failure
    only affects the rows sharing that location and is not cached, so the
    next load asks again.
    """
    summary = GeocodeSummary()
    resolved: Dict[str, Optional[Coords]] = {}
    lats, lons = [], []

    for _, row in df.iterrows():
        city = normalize(row.get(CITY))
        country = normalize(row.get(COUNTRY))
        coords = None

        if city and country:
            key = make_geocode_key(city, country)
            if key not in resolved:
                refresh = retry_failed and key in geocoder.cache and geocoder.cache.get(key) is None
                try:
                    resolved[key] = geocoder.geocode(city, country, refresh=refresh)
                except GeocodeError as exc:
                    logger.warning("%s", exc)
                    resolved[key] = None
                    summary.failed += 1
            coords = resolved[key]

        if coords is None:
            summary.missing += 1
            lats.append(None)
            lons.append(None)
        else:
            summary.added += 1
            lats.append(coords[0])
            lons.append(coords[1])

    out = df.copy()
    out[LAT_COL] = pd.Series(lats, index=df.index, dtype=object)
    out[LON_COL] = pd.Series(lons, index=df.index, dtype=object)
    logger.info(summary.message())
    return out, summary
