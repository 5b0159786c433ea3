from __future__ import annotations

import numpy as np
import pandas as pd
import statsmodels.api as sm

from .._exceptions import VariableError
from ..variables import require_numeric

_DEFAULT_COV_TYPE = "HC1"
_SUPPORTED_COV_TYPES = ("HC0", "HC1")


def logged(var: str, log: bool) -> str:
    """Name of the regression column for ``var``: ``log_<var>`` when log-transformed."""
    return f"log_{var}" if log else var


def with_const(frame: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Design matrix ``[const, columns...]`` aligned with ``frame``'s index."""
    const = pd.Series(1.0, index=frame.index, name="const")
    return pd.concat([const, frame[columns]], axis=1)


def fit_ols(y: pd.Series, X: pd.DataFrame, cov_type: str):
    """
    OLS with robust covariance. Inference uses the t distribution on the
    residual degrees of freedom, as linearmodels does for the HC1 IV fit.
    """
    return sm.OLS(y, X).fit(cov_type=cov_type, use_t=True)


def check_cov_type(cov_type: str) -> str:
    if cov_type not in _SUPPORTED_COV_TYPES:
        raise ValueError(
            f"Unsupported covariance type '{cov_type}'. "
            f"Choose one of {list(_SUPPORTED_COV_TYPES)}."
        )
    return cov_type


def check_roles(outcome: str, treatment: str, instrument: str | None, controls: list[str]) -> None:
    if outcome == treatment:
        raise ValueError("Treatment and outcome must be different variables.")
    if instrument is not None:
        if instrument == treatment:
            raise ValueError("Instrument and treatment must be different variables.")
        if instrument == outcome:
            raise ValueError("Instrument and outcome must be different variables.")
    overlap = {outcome, treatment, instrument} & set(controls)
    if overlap:
        raise ValueError(f"Controls must not repeat the model's variables: {sorted(overlap)}")


def build_frame(
    data: pd.DataFrame,
    logs: dict[str, bool],
) -> pd.DataFrame:
    """
    Working frame holding one regression column per variable in ``logs``,
    log-transformed where the flag is set. The input is left untouched and
    the index is preserved so fitted values and residuals line up with it.
    """
    require_numeric(data, list(logs))
    columns = {}
    for var, log in logs.items():
        values = data[var].astype(float)
        if log:
            if (values <= 0).any():
                raise VariableError(f"Column '{var}' must be strictly positive to take logs.")
            values = np.log(values)
        columns[logged(var, log)] = values
    frame = pd.DataFrame(columns, index=data.index)
    if frame.isna().any().any():
        bad = sorted(frame.columns[frame.isna().any()])
        raise VariableError(f"Missing values in regression column(s) {bad}.")
    return frame
