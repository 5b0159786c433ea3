from __future__ import annotations

from collections.abc import Sequence

import pandas as pd
import statsmodels.api as sm

from ..estimators._design import (
    _DEFAULT_COV_TYPE,
    build_frame,
    check_cov_type,
    check_roles,
    fit_ols,
    logged,
    with_const,
)
from ._check import (
    CONTROL_FUNCTION_TEST,
    FIRST_STAGE_TEST,
    RESIDUAL_TEST,
    RefutationCheck,
    RefutationReport,
)

_ALPHA = 0.05
_FIRST_STAGE_F_THRESHOLD = 10.0
RESIDUAL_COL = "vhat"


def _fmt_p(p: float) -> str:
    return "p < 0.001" if p < 0.001 else f"p = {p:.3f}"


def _check_residual_regression(
    frame: pd.DataFrame,
    outcome: str,
    treatment: str,
    controls: list[str],
    cov_type: str,
    alpha: float = _ALPHA,
) -> tuple[RefutationCheck, pd.Series]:
    """
    Regress the outcome on the treatment and controls by OLS, keep the
    residuals, then regress the outcome on those residuals alone.

    A residual coefficient significantly different from zero is read as
    evidence that price is correlated with the error term. Returns the
    check and the residuals.
    """
    ols = fit_ols(frame[outcome], with_const(frame, [treatment] + controls), cov_type)
    vhat = ols.resid.rename(RESIDUAL_COL)

    on_resid = fit_ols(frame[outcome], with_const(vhat.to_frame(), [RESIDUAL_COL]), cov_type)
    coef = float(on_resid.params[RESIDUAL_COL])
    pvalue = float(on_resid.pvalues[RESIDUAL_COL])

    passed = pvalue < alpha
    detail = f"coefficient = {coef:.4f}, {_fmt_p(pvalue)}"
    if passed:
        detail += f"  Residuals are significant at {alpha:g}: {treatment} looks endogenous."
    else:
        detail += (
            f"  Residuals are not significant at {alpha:g}; no evidence that "
            f"{treatment} is endogenous, OLS may be adequate."
        )
    check = RefutationCheck(RESIDUAL_TEST, passed=passed, detail=detail, statistic=coef, pvalue=pvalue)
    return check, vhat


def _check_control_function(
    frame: pd.DataFrame,
    outcome: str,
    treatment: str,
    instrument: str,
    controls: list[str],
    cov_type: str,
    alpha: float = _ALPHA,
) -> RefutationCheck:
    """
    Regression-based Durbin-Wu-Hausman test: add the first-stage residuals
    to the structural OLS regression and test their coefficient
    (``H0: treatment is exogenous``).
    """
    first = sm.OLS(frame[treatment], with_const(frame, [instrument] + controls)).fit()
    col = "_first_stage_resid"
    while col in frame.columns:
        col = "_" + col
    augmented = frame.assign(**{col: first.resid})

    structural = fit_ols(
        augmented[outcome], with_const(augmented, [treatment] + controls + [col]), cov_type
    )
    tstat = float(structural.tvalues[col])
    pvalue = float(structural.pvalues[col])

    passed = pvalue < alpha
    if passed:
        detail = f"t = {tstat:.2f}, {_fmt_p(pvalue)}  Exogeneity of {treatment} rejected."
    else:
        detail = (
            f"t = {tstat:.2f}, {_fmt_p(pvalue)}  Exogeneity of {treatment} not rejected; "
            f"IV and OLS estimates are statistically indistinguishable."
        )
    return RefutationCheck(CONTROL_FUNCTION_TEST, passed=passed, detail=detail, statistic=tstat, pvalue=pvalue)


def _check_first_stage_f(
    frame: pd.DataFrame,
    treatment: str,
    instrument: str,
    controls: list[str],
    cov_type: str,
    threshold: float = _FIRST_STAGE_F_THRESHOLD,
) -> RefutationCheck:
    """
    Partial F-statistic of the instrument in the first stage
    (``H0: instrument coefficient = 0``), computed with the robust
    covariance. F < 10 indicates a weak instrument (Stock & Yogo, 2005).
    """
    first = fit_ols(frame[treatment], with_const(frame, [instrument] + controls), cov_type)
    f_test = first.f_test(f"{instrument} = 0")
    f_stat = float(f_test.fvalue)

    passed = f_stat >= threshold
    if passed:
        detail = f"F = {f_stat:.2f}  (threshold: F ≥ {threshold:.0f})"
    else:
        detail = (
            f"F = {f_stat:.2f}  (threshold: F ≥ {threshold:.0f})  "
            f"Weak instrument detected: {instrument} explains little variation "
            f"in {treatment}. IV estimates may be badly biased."
        )
    return RefutationCheck(FIRST_STAGE_TEST, passed=passed, detail=detail, statistic=f_stat,
                           pvalue=float(f_test.pvalue))


def _model_frame(
    data: pd.DataFrame,
    outcome: str | None,
    treatment: str,
    instrument: str | None,
    controls: list[str],
    log_outcome: bool,
    log_treatment: bool,
) -> pd.DataFrame:
    logs = {treatment: log_treatment, **{c: False for c in controls}}
    if outcome is not None:
        logs[outcome] = log_outcome
    if instrument is not None:
        logs[instrument] = False
    return build_frame(data, logs)


def residual_test(
    data: pd.DataFrame,
    outcome: str = "packs",
    treatment: str = "rprice",
    controls: Sequence[str] = (),
    log_outcome: bool = True,
    log_treatment: bool = True,
    cov_type: str = _DEFAULT_COV_TYPE,
    alpha: float = _ALPHA,
) -> RefutationCheck:
    """
    Residual regression on ``data``: OLS of the outcome on the treatment and
    controls, then OLS of the outcome on those residuals alone.

    ``passed`` means the residual coefficient is significant at ``alpha``,
    i.e. evidence that the treatment is endogenous. Use
    ``EndogeneityTest(...).run(data).residuals`` to keep the residuals.
    """
    controls = list(controls)
    check_roles(outcome, treatment, None, controls)
    frame = _model_frame(data, outcome, treatment, None, controls, log_outcome, log_treatment)
    check, _ = _check_residual_regression(
        frame,
        logged(outcome, log_outcome),
        logged(treatment, log_treatment),
        controls,
        check_cov_type(cov_type),
        alpha,
    )
    return check


def control_function_test(
    data: pd.DataFrame,
    outcome: str = "packs",
    treatment: str = "rprice",
    instrument: str = "salestax",
    controls: Sequence[str] = (),
    log_outcome: bool = True,
    log_treatment: bool = True,
    cov_type: str = _DEFAULT_COV_TYPE,
    alpha: float = _ALPHA,
) -> RefutationCheck:
    """Durbin-Wu-Hausman test in its control-function form, run on ``data``."""
    controls = list(controls)
    check_roles(outcome, treatment, instrument, controls)
    frame = _model_frame(data, outcome, treatment, instrument, controls, log_outcome, log_treatment)
    return _check_control_function(
        frame,
        logged(outcome, log_outcome),
        logged(treatment, log_treatment),
        instrument,
        controls,
        check_cov_type(cov_type),
        alpha,
    )


def first_stage_strength(
    data: pd.DataFrame,
    treatment: str = "rprice",
    instrument: str = "salestax",
    controls: Sequence[str] = (),
    log_treatment: bool = True,
    cov_type: str = _DEFAULT_COV_TYPE,
    threshold: float = _FIRST_STAGE_F_THRESHOLD,
) -> RefutationCheck:
    """Robust partial F of the instrument in the first stage; ``passed`` when F >= ``threshold``."""
    controls = list(controls)
    if instrument == treatment:
        raise ValueError("Instrument and treatment must be different variables.")
    overlap = {treatment, instrument} & set(controls)
    if overlap:
        raise ValueError(f"Controls must not repeat the model's variables: {sorted(overlap)}")
    frame = _model_frame(data, None, treatment, instrument, controls, True, log_treatment)
    return _check_first_stage_f(
        frame, logged(treatment, log_treatment), instrument, controls, check_cov_type(cov_type), threshold
    )


class EndogeneityReport(RefutationReport):
    """
    Checks whether price is endogenous, and so whether the IV estimate is
    warranted, together with the strength of the instrument.

    Obtain via ``EndogeneityTest(...).run(data)``. The headline verdict is
    ``.endogenous``, taken from the residual regression.
    """

    def __init__(
        self,
        checks: list[RefutationCheck],
        residuals: pd.Series,
        treatment: str,
        outcome: str,
        instrument: str,
    ) -> None:
        super().__init__(checks, treatment, outcome)
        self._residuals = residuals
        self._instrument = instrument

    @property
    def endogenous(self) -> bool:
        """``True`` if the residual regression finds a significant coefficient."""
        return self.check(RESIDUAL_TEST).passed

    @property
    def residual_coefficient(self) -> float:
        return float(self.check(RESIDUAL_TEST).statistic)

    @property
    def residual_pvalue(self) -> float:
        return float(self.check(RESIDUAL_TEST).pvalue)

    @property
    def residuals(self) -> pd.Series:
        """Residuals of the uninstrumented OLS regression, indexed like the input dataframe."""
        return self._residuals.copy()

    def executive_summary(self) -> str:
        """Plain-language reading of the endogeneity verdict."""
        from .._explain import explain_endogeneity

        return explain_endogeneity(self)

    def _header_lines(self) -> list[str]:
        return [
            f"Endogeneity Report: {self._treatment} → {self._outcome}",
            f"  Instrument: {self._instrument}",
        ]


class EndogeneityTest:
    """
    Tests whether the treatment is endogenous.

    Runs, in order:

    - **Residual regression**: OLS of the outcome on the treatment and
      controls without instrumentation; the outcome is then regressed on
      the residuals alone. A significant residual coefficient is taken as
      evidence of endogeneity.
    - **Control function**: the regression form of the Durbin-Wu-Hausman
      test, using first-stage residuals.
    - **First-stage F-statistic**: instrument relevance.

    Example::

        report = EndogeneityTest(controls=["population", "income"]).run(c1995)
        print(report.summary())
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
        alpha: float = _ALPHA,
    ) -> None:
        if not 0 < alpha < 1:
            raise ValueError(f"alpha must be between 0 and 1, got {alpha}.")
        self._outcome = outcome
        self._treatment = treatment
        self._instrument = instrument
        self._controls = list(controls)
        self._log_outcome = log_outcome
        self._log_treatment = log_treatment
        self._cov_type = check_cov_type(cov_type)
        self._alpha = alpha
        check_roles(outcome, treatment, instrument, self._controls)

    def run(self, data: pd.DataFrame) -> EndogeneityReport:
        frame = _model_frame(
            data, self._outcome, self._treatment, self._instrument, self._controls,
            self._log_outcome, self._log_treatment,
        )
        Y = logged(self._outcome, self._log_outcome)
        T = logged(self._treatment, self._log_treatment)
        Z, controls, cov = self._instrument, self._controls, self._cov_type

        residual_check, vhat = _check_residual_regression(frame, Y, T, controls, cov, self._alpha)
        checks = [
            residual_check,
            _check_control_function(frame, Y, T, Z, controls, cov, self._alpha),
            _check_first_stage_f(frame, T, Z, controls, cov),
        ]
        return EndogeneityReport(checks, vhat, treatment=T, outcome=Y, instrument=Z)
