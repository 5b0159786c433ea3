"""
The instrumental-variables tutorial on cigarette demand, as one runnable
pipeline.

We want the effect of prices on the demand for cigarettes, but cannot
simply regress demand on price: prices are set with demand in mind, so
price is endogenous. The sales tax serves as the instrument. It moves the
price, and affects demand only through the price.

Steps:

1. Get the data.
2. Calculate the real price and the real sales tax.
3. Estimate the price elasticity with IV: by hand, directly, with controls.
4. Test whether price is endogenous.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import pandas as pd

from .datasets import cigarettes_sw
from .estimators import IVRegression, IVResult, ManualTwoStage, TwoStageResult, instrument_correlation
from .refutations.endogeneity import RESIDUAL_COL, EndogeneityReport, EndogeneityTest
from .variables import derive_variables, subset_year

CONTROLS = ["population", "income"]
YEAR = 1995


@dataclass
class TutorialResults:
    """Everything the tutorial computes, in the order it is computed."""

    data: pd.DataFrame
    subset: pd.DataFrame
    correlation: float
    manual: TwoStageResult
    iv: IVResult
    iv_controls: IVResult
    endogeneity: EndogeneityReport


def _section(title: str) -> str:
    return f"{title} " + "-" * max(0, 66 - len(title) - 1)


def run(
    data: pd.DataFrame | None = None,
    year: int = YEAR,
    out: Callable[[str], object] = print,
) -> TutorialResults:
    """
    Run the whole tutorial, writing each step to ``out``.

    Parameters
    ----------
    data : pd.DataFrame, optional
        The cigarette panel. Loaded with ``cigarettes_sw.load()`` if omitted.
        The derived columns are added to it in place.
    year : int
        Period the estimation is restricted to.
    out : callable
        Receives each block of text; ``print`` by default.
    """
    out(_section("1. Get data"))
    if data is None:
        data = cigarettes_sw.load()
    out(cigarettes_sw.describe(data).to_string(float_format=lambda v: f"{v:,.3f}"))
    out(data.head(10).to_string())

    out(_section("2. Calculate variables"))
    derive_variables(data)
    out("Added rprice = price / cpi and salestax = (taxs - tax) / cpi.")

    out(_section("3. Analysis using the IV model"))
    correlation = instrument_correlation(data, instrument="salestax", treatment="price")
    out(
        f"Correlation between salestax and price: {correlation:.3f}. "
        f"The tax moves the price, so it can serve as an instrument."
    )

    subset = subset_year(data, year)
    out(
        "First we compute 2SLS by hand: regress log price on the sales tax, then "
        "log packs on the fitted values. The point estimate is right but the "
        "standard errors are not, which is why the IV estimator follows."
    )
    manual = ManualTwoStage().fit(subset)
    subset[manual.term] = manual.fitted_values
    out(manual.summary())

    out("The IV estimator gives the same estimate with correct standard errors.")
    iv = IVRegression().fit(subset)
    out(iv.summary())
    out(iv.executive_summary())

    out(f"Adding {' and '.join(CONTROLS)} as controls in both stages:")
    iv_controls = IVRegression(controls=CONTROLS).fit(subset)
    out(iv_controls.summary())

    out(_section("4. Test if the treatment is endogenous"))
    endogeneity = EndogeneityTest(controls=CONTROLS).run(subset)
    subset[RESIDUAL_COL] = endogeneity.residuals
    out(endogeneity.summary())
    out(endogeneity.executive_summary())

    return TutorialResults(
        data=data,
        subset=subset,
        correlation=correlation,
        manual=manual,
        iv=iv,
        iv_controls=iv_controls,
        endogeneity=endogeneity,
    )
