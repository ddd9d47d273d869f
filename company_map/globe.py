from html import escape

import plotly.graph_objects as go

from company_map.config import LAT_COL, LON_COL
from company_map.markers import location_text, tooltip_text
from company_map.styling import color_for_type, company_type


def build_globe_figure(df, rotation=None):
    """Orthographic globe with one trace (and legend entry) per company type."""
    by_type = {}
    if LAT_COL in df.columns:
        for row in df.to_dict("records"):
            if row.get(LAT_COL) is None or row.get(LON_COL) is None:
                continue
            by_type.setdefault(company_type(row), []).append(row)

    fig = go.Figure()
    for type_name in sorted(by_type, key=lambda v: (v.casefold(), v)):
        rows = by_type[type_name]
        fig.add_trace(
            go.Scattergeo(
                lat=[r[LAT_COL] for r in rows],
                lon=[r[LON_COL] for r in rows],
                mode="markers",
                name=type_name,
                marker={
                    "size": 8,
                    "color": color_for_type(type_name),
                    "line": {"width": 1, "color": "rgba(255,255,255,0.85)"},
                },
                text=[
                    f"<b>{escape(tooltip_text(r))}</b><br>{escape(type_name)} · {escape(location_text(r))}"
                    for r in rows
                ],
                hoverinfo="text",
            )
        )

    fig.update_geos(
        projection_type="orthographic",
        projection_rotation=rotation or {"lon": 0, "lat": 20},
        showland=True,
        landcolor="#e5e8ec",
        showocean=True,
        oceancolor="#c9dcef",
        showcountries=True,
        countrycolor="#9aa4b1",
        showcoastlines=True,
        coastlinecolor="#7f8a98",
    )
    fig.update_layout(
        margin={"l": 0, "r": 0, "t": 0, "b": 0},
        height=560,
        legend={"orientation": "h", "y": -0.02},
        uirevision="globe",
    )
    return fig
