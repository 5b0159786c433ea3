import numpy as np
import pandas as pd
import pytest

from cigdemand import VariableError, derive_variables, subset_year


def make_table():
    return pd.DataFrame({
        "state": ["AL", "AR", "AL", "AR"],
        "year": [1985, 1985, 1995, 1995],
        "cpi": [1.076, 1.076, 1.524, 1.524],
        "price": [102.18, 101.47, 158.37, 175.54],
        "tax": [32.5, 37.0, 40.5, 55.5],
        "taxs": [33.35, 37.0, 41.9, 63.75],
    })


class TestDeriveVariables:
    def test_real_price_is_price_over_cpi(self):
        df = derive_variables(make_table())
        np.testing.assert_allclose(df["rprice"], df["price"] / df["cpi"])

    def test_salestax_is_deflated_tax_difference(self):
        df = derive_variables(make_table())
        np.testing.assert_allclose(df["salestax"], (df["taxs"] - df["tax"]) / df["cpi"])

    def test_columns_added_in_place(self):
        df = make_table()
        out = derive_variables(df)
        assert out is df
        assert {"rprice", "salestax"} <= set(df.columns)
        assert len(df) == 4

    def test_zero_sales_tax_when_tax_measures_agree(self):
        df = derive_variables(make_table())
        assert df.loc[1, "salestax"] == 0.0

    def test_missing_column_raises(self):
        df = make_table().drop(columns=["taxs"])
        with pytest.raises(VariableError, match="taxs"):
            derive_variables(df)

    def test_non_numeric_column_raises(self):
        df = make_table()
        df["cpi"] = ["a", "b", "c", "d"]
        with pytest.raises(VariableError, match="numeric"):
            derive_variables(df)


class TestSubsetYear:
    def test_keeps_only_requested_year(self):
        sub = subset_year(make_table(), 1995)
        assert list(sub["year"]) == [1995, 1995]
        assert list(sub.index) == [0, 1]

    def test_returns_copy(self):
        df = make_table()
        sub = subset_year(df, 1985)
        sub["price"] = 0.0
        assert (df["price"] > 0).all()

    def test_string_years_are_matched(self):
        df = make_table()
        df["year"] = df["year"].astype(str)
        assert len(subset_year(df, 1995)) == 2

    def test_unknown_year_raises(self):
        with pytest.raises(VariableError, match="No rows for year 2000"):
            subset_year(make_table(), 2000)
