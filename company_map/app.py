import logging

import dash
import dash_bootstrap_components as dbc
import dash_leaflet as dl
from dash import ALL, dash_table, dcc, html
from dash.dependencies import Input, Output, State

from company_map.config import LAT_COL, LON_COL, get_settings
from company_map.errors import CompanyMapError, MissingColumnsError
from company_map.filters import apply_filters, build_filter_options, clean_filters, data_columns
from company_map.geocoding import GeocodeCache, Geocoder
from company_map.globe import build_globe_figure
from company_map.logging_config import setup_logging
from company_map.markers import map_children
from company_map.pipeline import frame_from_store, frame_to_store, load_and_geocode
from company_map.styling import legend_entries, padded_bounds

logger = logging.getLogger(__name__)

DEFAULT_CENTER = [20, 0]
DEFAULT_ZOOM = 2
FILTER_TYPE = "column-filter"
SEARCH_DEBOUNCE_SECONDS = 0.2


# ──────────────────────────────────────────────────────────────────────────────
# 1. VIEW HELPERS
# ──────────────────────────────────────────────────────────────────────────────
def toast(message, header="Company map", icon="primary", duration=3500):
    return message, header, icon, duration, True


def filter_controls(options):
    controls = []
    for opt in options:
        controls.append(
            html.Div(
                [
                    dbc.Label(
                        [opt.column, dbc.Badge(opt.count, pill=True, color="secondary", className="ms-2")],
                        className="fw-bold",
                    ),
                    dcc.Dropdown(
                        id={"type": FILTER_TYPE, "column": opt.column},
                        options=[{"label": v, "value": v} for v in opt.values],
                        value=None,
                        placeholder="All",
                        clearable=True,
                    ),
                ],
                className="mb-3",
            )
        )
    return controls


def legend_items(entries):
    return [
        html.Div(
            [
                html.Span(
                    style={
                        "display": "inline-block",
                        "width": "14px",
                        "height": "14px",
                        "borderRadius": "999px",
                        "backgroundColor": colour,
                        "marginRight": "8px",
                        "border": "1px solid #555",
                    }
                ),
                html.Span(type_name),
            ],
            className="me-3 mb-1 d-flex align-items-center",
        )
        for type_name, colour in entries
    ]


def render_view(store_data, filter_ids, filter_values, search):
    """Everything that depends on the loaded rows plus the current filters."""
    df = frame_from_store(store_data)
    columns = data_columns(df)
    filters = clean_filters([i["column"] for i in filter_ids or []], filter_values)
    shown = apply_filters(df, filters, search)

    placed = shown[shown[LAT_COL].notna()] if len(shown) else shown
    points = list(zip(placed[LAT_COL], placed[LON_COL])) if len(placed) else []

    return {
        "children": map_children(shown, columns),
        "bounds": padded_bounds(points),
        "legend": legend_items(legend_entries(shown)),
        "loaded": len(df),
        "shown": len(shown),
        "unplaced": len(shown) - len(points),
        "figure": build_globe_figure(shown),
        "shown_data": frame_to_store(shown) if store_data else None,
    }


def visible_rows(shown_data, bounds):
    df = frame_from_store(shown_data)
    columns = data_columns(df)
    if bounds and len(df):
        (south, west), (north, east) = bounds
        placed = df[df[LAT_COL].notna()]
        lat = placed[LAT_COL].astype(float)
        lon = placed[LON_COL].astype(float)
        df = placed[lat.between(south, north) & lon.between(west, east)]
    return df[columns].to_dict("records"), [{"name": c, "id": c} for c in columns]


def load_outputs(settings, geocoder, n_clicks):
    """Store data, dropdowns and toast for a page load (``n_clicks`` None) or a Reload."""
    try:
        df, summary = load_and_geocode(settings, geocoder)
    except MissingColumnsError as exc:
        logger.error("%s", exc)
        msg = f"Excel missing required columns: {', '.join(exc.missing)}"
        return (dash.no_update, dash.no_update) + toast(msg, header="Error", icon="danger", duration=7000)
    except CompanyMapError as exc:
        logger.error("Load failed: %s", exc)
        prefix = "Reload failed" if n_clicks else "Startup error"
        return (dash.no_update, dash.no_update) + toast(
            f"{prefix}: {exc}", header="Error", icon="danger", duration=6000 if n_clicks else 8000
        )

    options = build_filter_options(df, settings.max_uniques_for_dropdown)
    return (frame_to_store(df), filter_controls(options)) + toast(summary.message())


def reset_outputs(filter_ids):
    return [None] * len(filter_ids or []), ""


def clear_cache_outputs(geocoder):
    geocoder.cache.clear()
    logger.info("Geocode cache cleared")
    return toast("Geocode cache cleared.")


# ──────────────────────────────────────────────────────────────────────────────
# 2. LAYOUT
# ──────────────────────────────────────────────────────────────────────────────
def build_layout():
    toolbar = dbc.Row(
        [
            dbc.Col(
                dcc.Input(
                    id="global-search",
                    placeholder="Search all columns…",
                    type="text",
                    debounce=SEARCH_DEBOUNCE_SECONDS,
                    className="form-control",
                ),
                xs=12,
                md=5,
            ),
            dbc.Col(
                [
                    dbc.Button("Reload", id="btn-reload", color="primary", className="me-2"),
                    dbc.Button("Reset filters", id="btn-reset-filters", color="secondary", outline=True, className="me-2"),
                    dbc.Button("Clear geocode cache", id="btn-clear-cache", color="danger", outline=True),
                ],
                xs=12,
                md=7,
                className="text-md-end mt-2 mt-md-0",
            ),
        ],
        className="mb-3",
    )

    stats = html.Div(
        [
            html.Span(["Rows loaded: ", html.Strong("0", id="rows-loaded")], className="me-4"),
            html.Span(["Rows shown: ", html.Strong("0", id="rows-shown")], className="me-4"),
            html.Span(["Not placed: ", html.Strong("0", id="rows-unplaced")]),
        ],
        className="mb-3 text-muted",
    )

    views = dcc.Tabs(
        id="view-tabs",
        value="map",
        children=[
            dcc.Tab(
                label="2D map",
                value="map",
                children=[
                    dl.Map(
                        id="map",
                        center=DEFAULT_CENTER,
                        zoom=DEFAULT_ZOOM,
                        children=[],
                        style={
                            "width": "100%",
                            "height": "60vh",
                            "borderRadius": "4px",
                            "boxShadow": "2px 2px 5px rgba(0,0,0,0.1)",
                        },
                    )
                ],
            ),
            dcc.Tab(
                label="3D globe",
                value="globe",
                children=[dcc.Graph(id="globe", config={"displaylogo": False})],
            ),
        ],
    )

    return dbc.Container(
        fluid=True,
        children=[
            dcc.Store(id="rows-store"),
            dcc.Store(id="shown-store"),
            dbc.Row(
                [dbc.Col(html.H1("Company Map", className="text-center", style={"fontSize": "2.5rem", "fontWeight": "300"}), width=12)],
                className="my-4",
            ),
            toolbar,
            stats,
            dbc.Row(
                [
                    dbc.Col(html.Div(id="filters"), xs=12, md=3, className="pe-4"),
                    dbc.Col(
                        [
                            html.Div(id="legend", className="d-flex flex-wrap mb-2"),
                            views,
                            html.H5("Visible companies", className="mt-3"),
                            dash_table.DataTable(
                                id="visible-table",
                                page_size=10,
                                style_table={"overflowX": "auto"},
                                style_header={"backgroundColor": "#f8f9fa", "fontWeight": "bold"},
                            ),
                        ],
                        xs=12,
                        md=9,
                    ),
                ],
                className="g-0",
            ),
            dbc.Toast(
                id="toast",
                header="Company map",
                is_open=False,
                dismissable=True,
                duration=3500,
                icon="primary",
                style={"position": "fixed", "bottom": 20, "right": 20, "minWidth": 320, "zIndex": 2000},
            ),
        ],
        style={"font-family": "Arial, sans-serif"},
    )


# ──────────────────────────────────────────────────────────────────────────────
# 3. APP FACTORY & CALLBACKS
# ──────────────────────────────────────────────────────────────────────────────
def create_app(settings=None, geocoder=None):
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    if geocoder is None:
        geocoder = Geocoder(GeocodeCache(settings.cache_path), settings)

    app = dash.Dash(__name__, external_stylesheets=[dbc.themes.FLATLY])
    app.title = "Company Map"
    app.layout = build_layout()

    toast_outputs = [
        Output("toast", "children"),
        Output("toast", "header"),
        Output("toast", "icon"),
        Output("toast", "duration"),
        Output("toast", "is_open"),
    ]

    # Load, validate and geocode (page load and Reload)
    @app.callback(
        Output("rows-store", "data"),
        Output("filters", "children"),
        *toast_outputs,
        Input("btn-reload", "n_clicks"),
    )
    def load_data(n_clicks):
        return load_outputs(settings, geocoder, n_clicks)

    # Filters, search and rendering
    @app.callback(
        Output("map", "children"),
        Output("map", "bounds"),
        Output("legend", "children"),
        Output("rows-loaded", "children"),
        Output("rows-shown", "children"),
        Output("rows-unplaced", "children"),
        Output("globe", "figure"),
        Output("shown-store", "data"),
        Input("rows-store", "data"),
        Input({"type": FILTER_TYPE, "column": ALL}, "value"),
        Input("global-search", "value"),
        State({"type": FILTER_TYPE, "column": ALL}, "id"),
    )
    def update_view(store_data, filter_values, search, filter_ids):
        view = render_view(store_data, filter_ids, filter_values, search)
        return (
            view["children"],
            view["bounds"] if view["bounds"] else dash.no_update,
            view["legend"],
            view["loaded"],
            view["shown"],
            view["unplaced"],
            view["figure"],
            view["shown_data"],
        )

    @app.callback(
        Output({"type": FILTER_TYPE, "column": ALL}, "value"),
        Output("global-search", "value"),
        Input("btn-reset-filters", "n_clicks"),
        State({"type": FILTER_TYPE, "column": ALL}, "id"),
        prevent_initial_call=True,
    )
    def reset_filters(_, filter_ids):
        return reset_outputs(filter_ids)

    @app.callback(
        *[Output(o.component_id, o.component_property, allow_duplicate=True) for o in toast_outputs],
        Input("btn-clear-cache", "n_clicks"),
        prevent_initial_call=True,
    )
    def clear_cache(_):
        return clear_cache_outputs(geocoder)

    @app.callback(
        Output("visible-table", "data"),
        Output("visible-table", "columns"),
        Input("shown-store", "data"),
        Input("map", "bounds"),
    )
    def update_visible_table(shown_data, bounds):
        return visible_rows(shown_data, bounds)

    return app
