from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from ._design import (
    _DEFAULT_COV_TYPE,
    build_frame,
    check_cov_type,
    check_roles,
    fit_ols,
    logged,
    with_const,
)
from ._result import CoefficientResult, coef_table_statsmodels, format_coef_table


class TwoStageResult(CoefficientResult):
    """
    The result of a two-stage least squares fit computed by hand: two
    separate OLS regressions.

    The price coefficient equals the one from ``IVRegression``, but its
    standard error does not: the second stage treats the fitted price as
    if it were data, so its residuals are computed from the fitted rather
    than the actual price. Read the standard errors from ``IVRegression``.
    """

    def __init__(self, first_stage, second_stage, fitted: pd.Series, **kwargs) -> None:
        super().__init__(second_stage, **kwargs)
        self._first = first_stage
        self._fitted = fitted

    def coef_table(self) -> pd.DataFrame:
        return coef_table_statsmodels(self._result)

    def first_stage_table(self) -> pd.DataFrame:
        """Coefficient table of the first-stage regression of price on the instrument."""
        return coef_table_statsmodels(self._first)

    @property
    def first_stage_slope(self) -> float:
        """First-stage coefficient on the instrument."""
        return float(self._first.params[self._instrument])

    @property
    def fitted_values(self) -> pd.Series:
        """First-stage fitted (log) price, indexed like the input dataframe."""
        return self._fitted.copy()

    @property
    def first_stage(self):
        """The underlying statsmodels first-stage result."""
        return self._first

    @property
    def second_stage(self):
        """The underlying statsmodels second-stage result."""
        return self._result

    def _header_lines(self) -> list[str]:
        return [
            f"Manual 2SLS: {self._treatment} → {self._outcome}",
            f"  Instrument: {self._instrument}",
            f"  First-stage slope: {self.first_stage_slope:.4f}  "
            f"(second-stage standard errors are not valid IV standard errors)",
        ]

    def summary(self) -> str:
        first = [
            "",
            f"First stage: {self._treatment} ~ {' + '.join([self._instrument] + self._controls)}",
            "─" * 50,
            *format_coef_table(self.first_stage_table()),
        ]
        return "\n".join(first) + "\n" + super().summary()


class ManualTwoStage:
    """
    Two-stage least squares spelled out as two OLS regressions.

    1. **First stage**: regress (log) price on the instrument and any
       controls; keep the fitted values.
    2. **Second stage**: regress (log) quantity on the fitted values and
       the same controls.

    Both stages report heteroskedasticity-robust (HC1) standard errors.

    Example::

        c1995 = subset_year(derive_variables(cigarettes_sw.load()), 1995)
        result = ManualTwoStage(
            outcome="packs", treatment="rprice", instrument="salestax"
        ).fit(c1995)
        print(result.summary())
    """

    def __init__(
        self,
        outcome: str = "packs",
        treatment: str = "rprice",
        instrument: str = "salestax",
        controls: Sequence[str] = (),
        log_outcome: bool = True,
        log_treatment: bool = True,
        cov_type: str = _DEFAULT_COV_TYPE,
    ) -> None:
        self._outcome = outcome
        self._treatment = treatment
        self._instrument = instrument
        self._controls = list(controls)
        self._log_outcome = log_outcome
        self._log_treatment = log_treatment
        self._cov_type = check_cov_type(cov_type)
        check_roles(outcome, treatment, instrument, self._controls)

    def fit(self, data: pd.DataFrame) -> TwoStageResult:
        """
        Estimate both stages on ``data``.

        Raises
        ------
        ``VariableError``
            If a model column is missing, non-numeric, contains missing
            values, or is non-positive where it is logged.
        """
        logs = {
            self._outcome: self._log_outcome,
            self._treatment: self._log_treatment,
            self._instrument: False,
            **{c: False for c in self._controls},
        }
        frame = build_frame(data, logs)
        Y = logged(self._outcome, self._log_outcome)
        T = logged(self._treatment, self._log_treatment)
        Z, controls = self._instrument, self._controls

        first = fit_ols(frame[T], with_const(frame, [Z] + controls), self._cov_type)
        fitted = first.fittedvalues.rename(f"{T}_hat")

        X2 = with_const(frame.assign(**{fitted.name: fitted}), [fitted.name] + controls)
        second = fit_ols(frame[Y], X2, self._cov_type)

        return TwoStageResult(
            first,
            second,
            fitted,
            term=fitted.name,
            outcome=Y,
            treatment=T,
            instrument=Z,
            controls=controls,
            cov_type=self._cov_type,
        )
