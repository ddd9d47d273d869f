"""Leaflet markers and popups for the 2D map."""

import dash_leaflet as dl
from dash import html

from company_map.config import CITY, COMPANY_NAME, COMPANY_TYPE, COUNTRY, LAT_COL, LON_COL
from company_map.styling import color_for_type, company_type
from company_map.text import normalize, record_id

LIGHT_BASEMAP = "https://{s}.basemaps.cartocdn.com/light_all/{z}/{x}/{y}{r}.png"
ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> '
    "contributors &copy; CARTO"
)

MAX_GROUP_RADIUS_STEPS = 10


def location_text(row):
    return f"{normalize(row.get(CITY))}, {normalize(row.get(COUNTRY))}"


def tooltip_text(row):
    return normalize(row.get(COMPANY_NAME)) or location_text(row)


def popup_content(row, columns):
    title = normalize(row.get(COMPANY_NAME)) or "Company"
    type_label = normalize(row.get(COMPANY_TYPE)) or "—"

    items = [
        html.Div(
            [
                html.Div(col, className="popup-key", style={"minWidth": "110px", "fontSize": "11px", "opacity": 0.7}),
                html.Div(normalize(row.get(col)), className="popup-value", style={"fontSize": "12px"}),
            ],
            style={"display": "flex", "gap": "10px", "alignItems": "flex-start"},
        )
        for col in columns
        if normalize(row.get(col)) != ""
    ]

    return html.Div(
        [
            html.Div(title, style={"fontWeight": 800, "fontSize": "14px", "marginBottom": "6px"}),
            html.Div(
                [html.Span(type_label, style={"fontWeight": 700}), f" · {location_text(row)}"],
                style={"fontSize": "12px", "opacity": 0.85, "marginBottom": "10px"},
            ),
            html.Div(items, style={"display": "flex", "flexDirection": "column", "gap": "6px"}),
        ],
        style={"minWidth": "260px", "maxWidth": "340px"},
    )


def group_popup_content(rows):
    return html.Div(
        [
            html.H5(f"{len(rows)} here", style={"marginBottom": ".5rem"}),
            html.Ul(
                [html.Li(f"{tooltip_text(r)} ({company_type(r)})") for r in rows],
                style={"paddingLeft": "1rem", "margin": 0},
            ),
        ],
        style={"maxHeight": "200px", "overflowY": "auto"},
    )


def located_groups(df):
    """Rows that have coordinates, grouped by identical location in first-seen order."""
    groups = {}
    if LAT_COL not in df.columns:
        return groups
    for index, row in zip(df.index, df.to_dict("records")):
        lat, lon = row.get(LAT_COL), row.get(LON_COL)
        if lat is None or lon is None:
            continue
        groups.setdefault((lat, lon), []).append((index, row))
    return groups


def build_markers(df, columns):
    markers = []
    for (lat, lon), members in located_groups(df).items():
        index0, row0 = members[0]
        rows = [r for _, r in members]
        colour = color_for_type(company_type(row0))
        radius = 6 + 2 * min(len(rows) - 1, MAX_GROUP_RADIUS_STEPS)

        if len(rows) == 1:
            tip = tooltip_text(row0)
            popup = dl.Popup(popup_content(row0, columns))
        else:
            tip = f"{len(rows)} companies"
            popup = dl.Popup(group_popup_content(rows))

        markers.append(
            dl.CircleMarker(
                id=f"marker-{record_id(row0, index0)}",
                center=[lat, lon],
                radius=radius,
                color="rgba(255,255,255,0.85)",
                fillColor=colour,
                fillOpacity=0.9,
                weight=2,
                children=[dl.Tooltip(tip), popup],
            )
        )
    return markers


def map_children(df, columns):
    tile = dl.TileLayer(url=LIGHT_BASEMAP, attribution=ATTRIBUTION)
    return [tile] + build_markers(df, columns)
