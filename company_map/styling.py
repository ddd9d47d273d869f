from company_map.config import COMPANY_TYPE
from company_map.text import normalize

UNKNOWN_TYPE = "Unknown"


def company_type(row):
    return normalize(row.get(COMPANY_TYPE)) or UNKNOWN_TYPE


def _utf16_units(s):
    data = s.encode("utf-16-le")
    return [int.from_bytes(data[i : i + 2], "little") for i in range(0, len(data), 2)]


def color_for_type(type_name):
    """Deterministic HSL colour for a company type, same hue in every view."""
    s = normalize(type_name) or UNKNOWN_TYPE
    h = 0
    for unit in _utf16_units(s):
        h = (h * 31 + unit) % 2**32
    return f"hsl({h % 360}, 85%, 60%)"


def legend_entries(df):
    if COMPANY_TYPE in df.columns:
        types = {normalize(t) or UNKNOWN_TYPE for t in df[COMPANY_TYPE]}
    else:
        types = {UNKNOWN_TYPE} if len(df) else set()
    return [(t, color_for_type(t)) for t in sorted(types, key=lambda v: (v.casefold(), v))]


def padded_bounds(points, ratio=0.2):
    """``[[south, west], [north, east]]`` around ``points``, grown like Leaflet's ``pad``."""
    points = list(points)
    if not points:
        return None
    lats = [p[0] for p in points]
    lons = [p[1] for p in points]
    south, north = min(lats), max(lats)
    west, east = min(lons), max(lons)
    dlat = (north - south) * ratio
    dlon = (east - west) * ratio
    return [[south - dlat, west - dlon], [north + dlat, east + dlon]]
