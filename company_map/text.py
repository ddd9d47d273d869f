import pandas as pd

from company_map.config import CITY, COMPANY_NAME, COUNTRY


def normalize(value) -> str:
    """Cell value as trimmed text; missing values (None, NaN, NaT) become ``""``."""
    if value is None:
        return ""
    if not isinstance(value, str) and pd.api.types.is_scalar(value) and pd.isna(value):
        return ""
    return str(value).strip()


def record_id(row, index) -> str:
    # Stable enough to key a marker
    return "|".join(
        [
            normalize(row.get(COMPANY_NAME)),
            normalize(row.get(CITY)),
            normalize(row.get(COUNTRY)),
            str(index),
        ]
    )
