import math

import pandas as pd

from company_map.text import normalize, record_id


class TestNormalize:
    def test_missing_values_become_empty(self):
        assert normalize(None) == ""
        assert normalize(math.nan) == ""
        assert normalize(pd.NaT) == ""

    def test_strips_and_stringifies(self):
        assert normalize("  Acme  ") == "Acme"
        assert normalize(42) == "42"
        assert normalize(3.5) == "3.5"


def test_record_id_uses_name_city_country_and_index():
    row = {"Company Name": " Acme ", "City": "Melbourne", "Country": "Australia"}
    assert record_id(row, 3) == "Acme|Melbourne|Australia|3"
