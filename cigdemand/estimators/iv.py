from __future__ import annotations

from collections.abc import Sequence

import pandas as pd
from linearmodels.iv import IV2SLS as _IV2SLS

from ._design import (
    _DEFAULT_COV_TYPE,
    build_frame,
    check_cov_type,
    check_roles,
    fit_ols,
    logged,
    with_const,
)
from ._result import CoefficientResult, coef_table_linearmodels, coef_table_statsmodels
from ..refutations._check import IV_ASSUMPTIONS, Assumption


class IVResult(CoefficientResult):
    """
    The result of a direct instrumental-variables (2SLS) fit.

    Holds the IV estimate together with the uninstrumented OLS estimate of
    the same equation, so the bias from treating price as exogenous is
    visible side by side.
    """

    def __init__(self, result, ols_result, model_args: dict, **kwargs) -> None:
        super().__init__(result, **kwargs)
        self._ols = ols_result
        self._model_args = model_args

    def coef_table(self) -> pd.DataFrame:
        return coef_table_linearmodels(self._result, debiased=self._cov_type == "HC1")

    @property
    def unadjusted_effect(self) -> float:
        """OLS price coefficient of the same equation, without the instrument."""
        return float(self._ols.params[self._term])

    @property
    def first_stage_f(self) -> float:
        """Robust partial F-statistic of the instrument in the first stage."""
        diagnostics = self._result.first_stage.diagnostics
        return float(diagnostics.loc[self._treatment, "f.stat"])

    @property
    def linearmodels_result(self):
        """The underlying linearmodels IV2SLS result, for full diagnostics."""
        return self._result

    @property
    def statsmodels_ols_result(self):
        """The underlying uninstrumented OLS result."""
        return self._ols

    def ols_table(self) -> pd.DataFrame:
        return coef_table_statsmodels(self._ols)

    @property
    def assumptions(self) -> list[Assumption]:
        """Modelling assumptions required for a causal reading of the estimate."""
        return list(IV_ASSUMPTIONS)

    def refute(self, data: pd.DataFrame):
        """
        Test the endogeneity of price and the strength of the instrument on
        the same data and specification. Returns an ``EndogeneityReport``.
        """
        from ..refutations.endogeneity import EndogeneityTest

        return EndogeneityTest(**self._model_args).run(data)

    def _header_lines(self) -> list[str]:
        bias = self.unadjusted_effect - self.effect
        return [
            f"IV (2SLS) estimate: {self._treatment} → {self._outcome}",
            f"  Instrument: {self._instrument}",
            f"  OLS estimate (no instrument): {self.unadjusted_effect:.4f}  "
            f"(difference {bias:+.4f})",
            f"  First-stage F: {self.first_stage_f:.2f}",
        ]


class IVRegression:
    """
    Instrumental-variables estimator using Two-Stage Least Squares (2SLS).

    Estimates ``log(outcome) = b0 + b1 * log(treatment) + controls`` with
    ``treatment`` instrumented by ``instrument``. Controls are exogenous:
    they appear unchanged in both stages. Unlike ``ManualTwoStage`` the
    standard errors use the actual treatment in the residuals, so they are
    valid; they are heteroskedasticity-robust (HC1 by default).

    Example::

        result = IVRegression(
            outcome="packs", treatment="rprice", instrument="salestax",
            controls=["population", "income"],
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

    def fit(self, data: pd.DataFrame) -> IVResult:
        """
        Estimate the IV regression on ``data``.

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

        # linearmodels' "robust" covariance is HC0; debiased adds the n / (n - k)
        # small-sample factor, which makes it HC1.
        model = _IV2SLS(
            dependent=frame[Y],
            exog=with_const(frame, controls),
            endog=frame[[T]],
            instruments=frame[[Z]],
        )
        result = model.fit(cov_type="robust", debiased=self._cov_type == "HC1")
        ols_result = fit_ols(frame[Y], with_const(frame, [T] + controls), self._cov_type)

        return IVResult(
            result,
            ols_result,
            model_args=dict(
                outcome=self._outcome,
                treatment=self._treatment,
                instrument=self._instrument,
                controls=self._controls,
                log_outcome=self._log_outcome,
                log_treatment=self._log_treatment,
                cov_type=self._cov_type,
            ),
            term=T,
            outcome=Y,
            treatment=T,
            instrument=Z,
            controls=controls,
            cov_type=self._cov_type,
        )


def instrument_correlation(
    data: pd.DataFrame, instrument: str = "salestax", treatment: str = "price"
) -> float:
    """
    Pearson correlation between the instrument and the (untransformed)
    treatment. A clearly non-zero value is the first sign of a relevant
    instrument; for a tax it should be positive, since taxes are passed
    through to prices.
    """
    frame = build_frame(data, {instrument: False, treatment: False})
    return float(frame[instrument].corr(frame[treatment]))
