import pandas as pd

from company_map.filters import apply_filters, build_filter_options, clean_filters, data_columns, row_matches


class TestBuildFilterOptions:
    def test_one_option_per_column_with_sorted_values(self, companies_df):
        options = {o.column: o for o in build_filter_options(companies_df)}

        assert list(options) == ["Company Name", "Company Type", "Country", "City", "Sector"]
        assert options["Company Type"].values == ["Manufacturer", "Supplier"]
        assert options["Country"].count == 3

    def test_skips_empty_and_high_cardinality_columns(self):
        df = pd.DataFrame({"Blank": ["", ""], "Id": ["1", "2"], "Kind": ["a", "a"]})

        options = build_filter_options(df, max_uniques=1)

        assert [o.column for o in options] == ["Kind"]

    def test_case_insensitive_ordering(self):
        df = pd.DataFrame({"Name": ["beta", "alpha", "Alpha"]})

        assert build_filter_options(df)[0].values == ["Alpha", "alpha", "beta"]

    def test_internal_columns_are_not_filterable(self, companies_df):
        df = companies_df.assign(_lat=[1.0] * 5, _lon=[2.0] * 5)

        assert "_lat" not in [o.column for o in build_filter_options(df)]
        assert data_columns(df) == list(companies_df.columns)


def test_clean_filters_drops_all_choices():
    assert clean_filters(["Country", "City", "Sector"], ["Norway", None, ""]) == {"Country": "Norway"}
    assert clean_filters(None, None) == {}


class TestApplyFilters:
    def test_no_filters_returns_everything(self, companies_df):
        assert len(apply_filters(companies_df)) == 5

    def test_column_filters_are_conjunctive(self, companies_df):
        out = apply_filters(companies_df, {"Company Type": "Manufacturer", "Country": "Norway"})

        assert out["Company Name"].tolist() == ["Bergen Mills"]

    def test_equality_is_exact(self, companies_df):
        assert apply_filters(companies_df, {"Country": "norway"}).empty

    def test_search_is_case_insensitive_substring(self, companies_df):
        out = apply_filters(companies_df, search="  FEEDS ")

        assert out["Company Name"].tolist() == ["Nordic Feeds"]

    def test_search_and_filters_combine(self, companies_df):
        out = apply_filters(companies_df, {"Sector": "Feed"}, search="norway")

        assert out["Company Name"].tolist() == ["Nordic Feeds", "Bergen Mills"]

    def test_search_ignores_coordinates(self, companies_df):
        df = companies_df.assign(_lat=[37.8] * 5, _lon=[1.0] * 5)

        assert apply_filters(df, search="37.8").empty

    def test_row_index_is_kept(self, companies_df):
        out = apply_filters(companies_df, {"Country": "Norway"})

        assert out.index.tolist() == [1, 3]


def test_row_matches_searches_joined_columns():
    row = {"City": "Melbourne", "Sector": "Food"}

    assert row_matches(row, {}, "melbourne | food", ["City", "Sector"])
    assert not row_matches(row, {"City": "Bergen"}, "", ["City", "Sector"])


def test_dropdown_limit_comes_from_settings(monkeypatch):
    from company_map.config import Settings

    monkeypatch.setattr("company_map.filters.get_settings", lambda: Settings(max_uniques_for_dropdown=2))
    df = pd.DataFrame({"Three": ["a", "b", "c"], "Two": ["a", "b", "a"]})

    assert [o.column for o in build_filter_options(df)] == ["Two"]
