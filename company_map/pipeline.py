import logging

import pandas as pd

from company_map.config import INTERNAL_COLUMNS
from company_map.filters import data_columns
from company_map.geocoding import geocode_frame
from company_map.loader import load_rows, require_columns

logger = logging.getLogger(__name__)


def load_and_geocode(settings, geocoder, retry_failed=False):
    """Load the configured spreadsheet, check its columns and place every row."""
    df = load_rows(settings.excel_url, settings.sheet_name)
    require_columns(df, settings.required_columns)
    return geocode_frame(df, geocoder, retry_failed=retry_failed)


def frame_to_store(df):
    # Column order kept explicitly: browsers may reorder numeric-looking keys
    return {"columns": data_columns(df), "records": df.to_dict("records")}


def frame_from_store(data):
    if not data:
        return pd.DataFrame(columns=list(INTERNAL_COLUMNS))
    columns = list(data["columns"]) + list(INTERNAL_COLUMNS)
    df = pd.DataFrame.from_records(data["records"], columns=columns)
    return df.astype(object).where(df.notna(), None)
