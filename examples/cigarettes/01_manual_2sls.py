"""
Two-stage least squares by hand on the 1995 cigarette panel.

    salestax → rprice → packs
                 ↑         ↑
    demand shocks ─────────┘

Prices are set with demand in mind, so regressing packs on price mixes the
demand curve with the supply response. The sales tax moves the price but
has no direct effect on demand, so it serves as an instrument:

  1. regress log(rprice) on salestax and keep the fitted values;
  2. regress log(packs) on the fitted values.

The slope of the second stage is the price elasticity of demand. Its
standard error is not the IV standard error; see 02_iv_regression.py.
"""

from cigdemand import ManualTwoStage, derive_variables, instrument_correlation, subset_year
from cigdemand.datasets import cigarettes_sw

data = derive_variables(cigarettes_sw.load())
print(f"corr(salestax, price) = {instrument_correlation(data):.3f}")

c1995 = subset_year(data, 1995)
result = ManualTwoStage(outcome="packs", treatment="rprice", instrument="salestax").fit(c1995)
print(result.summary())
