from __future__ import annotations

import pandas as pd


def stat_columns(use_t: bool) -> tuple[str, str]:
    """Statistic and p-value column names for t- or normal-based inference."""
    return ("t value", "Pr(>|t|)") if use_t else ("z value", "Pr(>|z|)")


def _coef_table(params, std_errors, stats, pvalues, lower, upper, use_t: bool) -> pd.DataFrame:
    stat, p = stat_columns(use_t)
    return pd.DataFrame(
        {
            "Estimate": params,
            "Std. Error": std_errors,
            stat: stats,
            p: pvalues,
            "CI lower": lower,
            "CI upper": upper,
        }
    )


def coef_table_statsmodels(result) -> pd.DataFrame:
    """Coefficient table of a statsmodels regression result, in its own covariance."""
    ci = result.conf_int()
    return _coef_table(
        result.params, result.bse, result.tvalues, result.pvalues, ci[0], ci[1], result.use_t
    )


def coef_table_linearmodels(result, debiased: bool) -> pd.DataFrame:
    """
    Coefficient table of a linearmodels IV result, in its own covariance.
    A debiased fit reports t inference, otherwise z.
    """
    ci = result.conf_int()
    return _coef_table(
        result.params, result.std_errors, result.tstats, result.pvalues,
        ci["lower"], ci["upper"], debiased,
    )


def format_coef_table(table: pd.DataFrame, indent: str = "  ") -> list[str]:
    stat, p = table.columns[2], table.columns[3]
    width = max(len(str(name)) for name in table.index)
    lines = [
        f"{indent}{'':<{width}}  {'Estimate':>10}  {'Std. Error':>10}  {stat:>8}  {p:>9}"
    ]
    for name, row in table.iterrows():
        lines.append(
            f"{indent}{name:<{width}}  {row['Estimate']:>10.4f}  {row['Std. Error']:>10.4f}"
            f"  {row[stat]:>8.3f}  {_fmt_pvalue(row[p]):>9}"
        )
    return lines


def _fmt_pvalue(p: float) -> str:
    return "< 0.0001" if p < 1e-4 else f"{p:.4f}"


class CoefficientResult:
    """
    Base class for a fitted price-elasticity regression.

    Subclasses supply the coefficient table of the underlying library
    result and ``_header_lines()`` for ``summary()``. The coefficient of
    interest is the one named by ``term``.
    """

    def __init__(
        self,
        result,
        term: str,
        outcome: str,
        treatment: str,
        instrument: str,
        controls: list[str],
        cov_type: str,
    ) -> None:
        self._result = result
        self._term = term
        self._outcome = outcome
        self._treatment = treatment
        self._instrument = instrument
        self._controls = list(controls)
        self._cov_type = cov_type

    def coef_table(self) -> pd.DataFrame:
        """All coefficients with robust standard errors, test statistics, p-values and 95% CIs."""
        raise NotImplementedError

    def _header_lines(self) -> list[str]:
        raise NotImplementedError

    @property
    def term(self) -> str:
        """Name of the coefficient holding the price effect."""
        return self._term

    @property
    def effect(self) -> float:
        """Point estimate of the price coefficient (an elasticity when both sides are logged)."""
        return float(self.coef_table().loc[self._term, "Estimate"])

    @property
    def std_err(self) -> float:
        """Robust standard error of the price coefficient."""
        return float(self.coef_table().loc[self._term, "Std. Error"])

    @property
    def pvalue(self) -> float:
        """p-value for the price coefficient (``H0: effect = 0``)."""
        table = self.coef_table()
        return float(table.loc[self._term, table.columns[3]])

    @property
    def conf_int(self) -> tuple[float, float]:
        """95% confidence interval for the price coefficient."""
        row = self.coef_table().loc[self._term]
        return (float(row["CI lower"]), float(row["CI upper"]))

    @property
    def controls(self) -> list[str]:
        """Exogenous controls included in every stage."""
        return list(self._controls)

    @property
    def cov_type(self) -> str:
        return self._cov_type

    @property
    def nobs(self) -> int:
        return int(self._result.nobs)

    def summary(self) -> str:
        lo, hi = self.conf_int
        controls_note = f"  (controlling for: {', '.join(self._controls)})" if self._controls else ""
        lines = [
            "",
            *self._header_lines(),
            "─" * 50,
            f"  Price coefficient    : {self.effect:>10.4f}{controls_note}",
            f"  Std. error ({self._cov_type:<4})    : {self.std_err:>10.4f}",
            f"  95% CI               : [{lo:.4f}, {hi:.4f}]",
            f"  p-value              : {self.pvalue:>10.4f}",
            f"  Observations         : {self.nobs:>10d}",
            "",
            *format_coef_table(self.coef_table()),
            "",
        ]
        return "\n".join(lines)

    def executive_summary(self) -> str:
        """Plain-language interpretation of the price coefficient as an elasticity."""
        from .._explain import explain_elasticity

        return explain_elasticity(self)

    def __repr__(self) -> str:
        return self.summary()
