from __future__ import annotations

from collections.abc import Iterable

import pandas as pd
from pandas.api.types import is_numeric_dtype

from ._exceptions import VariableError

REAL_PRICE = "rprice"
SALES_TAX = "salestax"


def require_numeric(data: pd.DataFrame, columns: Iterable[str]) -> None:
    """Raise ``VariableError`` unless every column is present and numeric."""
    missing = [c for c in columns if c not in data.columns]
    if missing:
        raise VariableError(
            f"Column(s) {missing} not found in dataframe. "
            f"Available columns: {sorted(data.columns)}"
        )
    non_numeric = [c for c in columns if not is_numeric_dtype(data[c])]
    if non_numeric:
        raise VariableError(f"Column(s) {non_numeric} must be numeric.")


def derive_variables(data: pd.DataFrame) -> pd.DataFrame:
    """
    Add the real price and the real sales-tax instrument to ``data``.

    ``rprice   = price / cpi``
    ``salestax = (taxs - tax) / cpi``

    ``taxs`` includes the general sales tax and ``tax`` does not, so their
    difference is the sales-tax component of the price, deflated by the
    same price index as the price itself. The columns are added to the
    passed dataframe, which is also returned.

    Raises
    ------
    ``VariableError``
        If ``price``, ``cpi``, ``taxs`` or ``tax`` is missing or non-numeric.
    """
    require_numeric(data, ["price", "cpi", "taxs", "tax"])
    data[REAL_PRICE] = data["price"] / data["cpi"]
    data[SALES_TAX] = (data["taxs"] - data["tax"]) / data["cpi"]
    return data


def subset_year(data: pd.DataFrame, year: int) -> pd.DataFrame:
    """Rows observed in ``year``, as a new dataframe with a fresh index."""
    if "year" not in data.columns:
        raise VariableError("Column 'year' not found in dataframe.")
    subset = data.loc[data["year"].astype(int) == int(year)].reset_index(drop=True)
    if subset.empty:
        years = sorted(data["year"].astype(int).unique())
        raise VariableError(f"No rows for year {year}. Years present: {years}")
    return subset
