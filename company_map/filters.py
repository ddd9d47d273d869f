import logging
from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd

from company_map.config import INTERNAL_COLUMNS, get_settings
from company_map.text import normalize

logger = logging.getLogger(__name__)

SEARCH_JOINER = " | "


@dataclass
class FilterOption:
    column: str
    values: List[str] = field(default_factory=list)

    @property
    def count(self):
        return len(self.values)


def data_columns(df) -> List[str]:
    return [c for c in df.columns if c not in INTERNAL_COLUMNS]


def _sort_key(value):
    return (value.casefold(), value)


def build_filter_options(df, max_uniques=None) -> List[FilterOption]:
    """One dropdown per column with between 1 and ``max_uniques`` distinct values."""
    if max_uniques is None:
        max_uniques = get_settings().max_uniques_for_dropdown
    options = []
    for col in data_columns(df):
        uniques = set()
        for value in df[col]:
            v = normalize(value)
            if v:
                uniques.add(v)
            if len(uniques) > max_uniques:
                break
        if not uniques or len(uniques) > max_uniques:
            continue
        options.append(FilterOption(col, sorted(uniques, key=_sort_key)))
    return options


def clean_filters(columns, values) -> Dict[str, str]:
    """Pair dropdown columns with their selections, dropping the "All" choices."""
    filters = {}
    for col, value in zip(columns or [], values or []):
        v = normalize(value)
        if v:
            filters[col] = v
    return filters


def row_matches(row, filters, search_term, columns):
    for col, value in filters.items():
        if normalize(row.get(col)) != value:
            return False

    if search_term:
        hay = SEARCH_JOINER.join(normalize(row.get(c)).lower() for c in columns)
        if search_term not in hay:
            return False

    return True


def apply_filters(df, filters=None, search=None) -> pd.DataFrame:
    filters = {c: normalize(v) for c, v in (filters or {}).items() if normalize(v)}
    term = normalize(search).lower()
    if not filters and not term:
        return df

    columns = data_columns(df)
    mask = [row_matches(row, filters, term, columns) for row in df.to_dict("records")]
    out = df[pd.Series(mask, index=df.index, dtype=bool)]
    logger.debug("Filters %s / search %r matched %d of %d row(s)", filters, term, len(out), len(df))
    return out
