"""
Spreadsheet loading and column validation.

A source is either a local path or an http(s) URL. Every cell comes back as
trimmed text so that filters, search and popups all see the same values.
"""

import io
import logging
import struct
import zipfile
from pathlib import Path
from urllib.parse import urlparse

import pandas as pd
import requests
import xlrd
from xlrd.compdoc import CompDocError

from company_map.errors import MissingColumnsError, SpreadsheetLoadError
from company_map.text import normalize

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = 30


def _is_url(source):
    return urlparse(str(source)).scheme in ("http", "https")


def fetch_spreadsheet(source, timeout=FETCH_TIMEOUT) -> bytes:
    if _is_url(source):
        try:
            res = requests.get(source, timeout=timeout, headers={"Cache-Control": "no-store"})
        except requests.RequestException as exc:
            raise SpreadsheetLoadError(f"Failed to fetch spreadsheet: {exc}", source=source) from exc
        if not res.ok:
            raise SpreadsheetLoadError(
                f"Failed to fetch spreadsheet: {res.status_code} {res.reason}",
                source=source,
                status=res.status_code,
            )
        return res.content

    path = Path(source)
    try:
        return path.read_bytes()
    except OSError as exc:
        raise SpreadsheetLoadError(f"Failed to read spreadsheet {path}: {exc.strerror}", source=source) from exc


def _read_csv(content):
    # utf-8 first; exports from Excel on Windows are usually latin-1
    try:
        return pd.read_csv(io.BytesIO(content), dtype=object, keep_default_na=False)
    except UnicodeDecodeError:
        return pd.read_csv(io.BytesIO(content), dtype=object, keep_default_na=False, encoding="latin-1")


def parse_spreadsheet(content, sheet_name=None, filename="companies.xlsx") -> pd.DataFrame:
    """Parse spreadsheet bytes into a frame of normalized text cells.

    ``sheet_name=None`` reads the first sheet. Empty cells are kept as ``""``
    and column order follows the header row.
    """
    suffix = Path(filename).suffix.lower()
    try:
        if suffix == ".csv":
            df = _read_csv(content)
        else:
            df = pd.read_excel(
                io.BytesIO(content),
                sheet_name=0 if sheet_name is None else sheet_name,
                dtype=object,
                keep_default_na=False,
            )
    except (
        ValueError,
        KeyError,
        ImportError,
        struct.error,
        zipfile.BadZipFile,
        pd.errors.ParserError,
        xlrd.XLRDError,
        CompDocError,
    ) as exc:
        raise SpreadsheetLoadError(f"Could not parse {filename}: {exc}", source=filename) from exc

    df.columns = [str(c).strip() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].map(normalize).astype(object)

    logger.debug("Parsed %d row(s) x %d column(s) from %s", len(df), len(df.columns), filename)
    return df.reset_index(drop=True)


def load_rows(source, sheet_name=None) -> pd.DataFrame:
    content = fetch_spreadsheet(source)
    filename = urlparse(str(source)).path if _is_url(source) else str(source)
    df = parse_spreadsheet(content, sheet_name=sheet_name, filename=filename)
    logger.info("Loaded %d row(s) from %s", len(df), source)
    return df


def validate_columns(df, required):
    """Required columns absent from ``df``, in required order."""
    present = set(df.columns)
    return [c for c in required if c not in present]


def require_columns(df, required):
    missing = validate_columns(df, required)
    if missing:
        raise MissingColumnsError(missing)
