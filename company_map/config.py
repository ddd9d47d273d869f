from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

COMPANY_NAME = "Company Name"
COMPANY_TYPE = "Company Type"
COUNTRY = "Country"
CITY = "City"

# Coordinates added by geocoding; never shown as data columns
LAT_COL = "_lat"
LON_COL = "_lon"
INTERNAL_COLUMNS = (LAT_COL, LON_COL)


class Settings(BaseSettings):
    """Runtime configuration, overridable through ``COMPANY_MAP_*`` env vars."""

    model_config = SettingsConfigDict(env_prefix="COMPANY_MAP_")

    excel_url: str = Field(default="data/companies.csv")
    sheet_name: Optional[str] = Field(default=None)
    required_columns: List[str] = Field(default=[COMPANY_NAME, COMPANY_TYPE, COUNTRY, CITY])

    nominatim_domain: str = Field(default="nominatim.openstreetmap.org")
    user_agent: str = Field(default="company-map (dash)")
    geocode_min_delay_seconds: float = Field(default=1.0)
    geocode_max_retries: int = Field(default=2)
    geocode_timeout: float = Field(default=10)
    cache_path: str = Field(default="geocode_cache_v1.json")

    max_uniques_for_dropdown: int = Field(default=200)
    log_level: str = Field(default="INFO")


@lru_cache
def get_settings() -> Settings:
    return Settings()
