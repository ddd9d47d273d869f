from types import SimpleNamespace
from unittest.mock import MagicMock

import pandas as pd
import pytest

from company_map.config import Settings
from company_map.geocoding import GeocodeCache, Geocoder

COORDS = {
    "Melbourne, Australia": (-37.81, 144.96),
    "Bergen, Norway": (60.39, 5.32),
    "Rosario, Argentina": (-32.95, -60.65),
}


def fake_location(lat, lon):
    return SimpleNamespace(latitude=lat, longitude=lon)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        excel_url=str(tmp_path / "companies.csv"),
        cache_path=str(tmp_path / "geocode_cache_v1.json"),
        geocode_min_delay_seconds=0,
    )


@pytest.fixture
def companies_df():
    return pd.DataFrame(
        {
            "Company Name": ["Acme Extrusion", "Nordic Feeds", "Pampas Grain", "Bergen Mills", "Lone Row"],
            "Company Type": ["Manufacturer", "Supplier", "Supplier", "Manufacturer", ""],
            "Country": ["Australia", "Norway", "Argentina", "Norway", ""],
            "City": ["Melbourne", "Bergen", "Rosario", "Bergen", ""],
            "Sector": ["Food", "Feed", "Food", "Feed", "Feed"],
        },
        dtype=object,
    )


@pytest.fixture
def geocode_fn():
    def _lookup(query, exactly_one=True, timeout=None):
        coords = COORDS.get(query)
        return fake_location(*coords) if coords else None

    return MagicMock(side_effect=_lookup)


@pytest.fixture
def geocoder(settings, geocode_fn):
    return Geocoder(GeocodeCache(settings.cache_path), settings, geocode_fn=geocode_fn)
