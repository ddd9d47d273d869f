from pathlib import Path

from company_map.config import Settings
from company_map.loader import load_rows, validate_columns

REPO_ROOT = Path(__file__).resolve().parents[1]


def test_default_source_is_the_shipped_sample():
    default = Settings.model_fields["excel_url"].default

    df = load_rows(REPO_ROOT / default)

    assert len(df) > 0
    assert validate_columns(df, Settings.model_fields["required_columns"].default) == []


def test_default_dropdown_limit():
    assert Settings.model_fields["max_uniques_for_dropdown"].default == 200
