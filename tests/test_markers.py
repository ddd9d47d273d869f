import dash_leaflet as dl
import pandas as pd
import pytest

from company_map.geocoding import geocode_frame
from company_map.globe import build_globe_figure
from company_map.markers import build_markers, map_children, popup_content, tooltip_text
from company_map.styling import color_for_type

COLUMNS = ["Company Name", "Company Type", "Country", "City", "Sector"]


@pytest.fixture
def placed_df(companies_df, geocoder):
    df, _ = geocode_frame(companies_df, geocoder)
    return df


def _texts(component):
    """All string children below a Dash component."""
    found = []
    children = getattr(component, "children", None)
    if isinstance(children, str):
        found.append(children)
    elif isinstance(children, (list, tuple)):
        for child in children:
            if isinstance(child, str):
                found.append(child)
            else:
                found.extend(_texts(child))
    elif children is not None:
        found.extend(_texts(children))
    return found


class TestPopups:
    def test_detail_popup_lists_non_empty_columns(self):
        row = {"Company Name": "Acme", "Company Type": "", "City": "Melbourne", "Country": "Australia", "Sector": ""}

        texts = _texts(popup_content(row, COLUMNS))

        assert texts[0] == "Acme"
        assert "—" in texts
        assert " · Melbourne, Australia" in texts
        assert "Sector" not in texts
        assert "City" in texts

    def test_untitled_company(self):
        assert _texts(popup_content({}, []))[0] == "Company"

    def test_tooltip_falls_back_to_location(self):
        assert tooltip_text({"Company Name": "", "City": "Bergen", "Country": "Norway"}) == "Bergen, Norway"


class TestBuildMarkers:
    def test_one_marker_per_location(self, placed_df):
        markers = build_markers(placed_df, COLUMNS)

        assert len(markers) == 3
        assert all(isinstance(m, dl.CircleMarker) for m in markers)

    def test_colocated_rows_share_a_marker(self, placed_df):
        bergen = [m for m in build_markers(placed_df, COLUMNS) if m.center == [60.39, 5.32]][0]

        tooltip, popup = bergen.children
        assert tooltip.children == "2 companies"
        assert "Nordic Feeds (Supplier)" in _texts(popup)
        assert bergen.fillColor == color_for_type("Supplier")

    def test_unplaced_rows_are_skipped(self, companies_df):
        assert build_markers(companies_df, COLUMNS) == []

    def test_map_children_starts_with_tiles(self, placed_df):
        children = map_children(placed_df, COLUMNS)

        assert isinstance(children[0], dl.TileLayer)
        assert len(children) == 4


class TestGlobe:
    def test_one_trace_per_type(self, placed_df):
        fig = build_globe_figure(placed_df)

        assert [t.name for t in fig.data] == ["Manufacturer", "Supplier"]
        assert fig.layout.geo.projection.type == "orthographic"
        assert fig.data[1].marker.color == color_for_type("Supplier")
        assert len(fig.data[1].lat) == 2

    def test_hover_text_is_escaped(self, geocoder):
        df = pd.DataFrame(
            {"Company Name": ["<b>X</b>"], "Company Type": ["Lab"], "Country": ["Norway"], "City": ["Bergen"]},
            dtype=object,
        )
        placed, _ = geocode_frame(df, geocoder)

        assert "&lt;b&gt;X&lt;/b&gt;" in build_globe_figure(placed).data[0].text[0]

    def test_empty_globe(self):
        assert len(build_globe_figure(pd.DataFrame()).data) == 0
