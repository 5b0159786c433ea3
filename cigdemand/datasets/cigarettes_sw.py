from __future__ import annotations

import os

import pandas as pd
from statsmodels.datasets import get_rdataset

from .._exceptions import DatasetNotFoundError

DESCR = """
J. H. Stock and M. W. Watson (2007), "Introduction to Econometrics",
2nd ed., Boston: Addison Wesley. Panel data on cigarette consumption
for the 48 continental US states, 1985 and 1995.

state                    factor indicating state
year                     factor indicating year (1985 or 1995)
cpi                      consumer price index
population               state population
packs                    number of packs per capita
income                   state personal income (total, nominal)
tax                      average state, federal and average local excise taxes for fiscal year
price                    average price during fiscal year, including sales tax
taxs                     average excise taxes for fiscal year, including sales tax
"""

NAME = "CigarettesSW"
PACKAGE = "AER"

COLUMNS = ["state", "year", "cpi", "population", "packs", "income", "tax", "price", "taxs"]

BUNDLED = os.path.join(os.path.dirname(__file__), "cigarettes_sw.csv")

# Row-name columns written by R's write.csv and by pandas' to_csv.
_INDEX_COLUMNS = ("rownames", "Unnamed: 0", "")


def load(path: str | os.PathLike | None = None) -> pd.DataFrame:
    """
    Load the cigarette-demand panel, one row per (state, year).

    The panel ships with the package, so no network access is needed.

    Parameters
    ----------
    path : str or PathLike, optional
        A CSV copy of the panel to read instead of the bundled file, e.g.
        one written by ``fetch()``.

    Raises
    ------
    ``DatasetNotFoundError``
        If the file does not exist or is not the cigarette panel.
    """
    path = BUNDLED if path is None else path
    if not os.path.exists(path):
        raise DatasetNotFoundError(f"Dataset file '{path}' does not exist.")
    return _normalise(pd.read_csv(path))


def fetch(dest: str | os.PathLike, data_home: str | None = None) -> pd.DataFrame:
    """
    Download a fresh copy of the panel from the R ``AER`` package and write
    it to ``dest`` as CSV.

    ``data_home`` is the statsmodels cache directory (``~/statsmodels_data``
    by default). Load the copy back with ``load(path=dest)``.
    """
    try:
        data = get_rdataset(NAME, PACKAGE, cache=data_home or True).data
    except OSError as exc:
        raise DatasetNotFoundError(
            f"Dataset '{NAME}' from R package '{PACKAGE}' could not be fetched: {exc}"
        ) from exc
    data = _normalise(data)
    data.to_csv(dest, index=False)
    return data


def _normalise(data: pd.DataFrame) -> pd.DataFrame:
    first = data.columns[0]
    if first in _INDEX_COLUMNS:
        data = data.drop(columns=[first])

    missing = [c for c in COLUMNS if c not in data.columns]
    if missing:
        raise DatasetNotFoundError(
            f"Loaded table is not the {NAME} panel: missing columns {missing}."
        )

    data = data[COLUMNS].reset_index(drop=True)
    data["year"] = data["year"].astype(int)
    return data


def describe(data: pd.DataFrame) -> pd.DataFrame:
    """Summary statistics (N, mean, std, min, max) of the numeric columns, one row per variable."""
    # year identifies the period; it is not a measurement
    numeric = data.drop(columns=["year"], errors="ignore").select_dtypes("number")
    stats = numeric.agg(["count", "mean", "std", "min", "max"]).T
    stats.columns = ["N", "Mean", "St. Dev.", "Min", "Max"]
    stats["N"] = stats["N"].astype(int)
    return stats
