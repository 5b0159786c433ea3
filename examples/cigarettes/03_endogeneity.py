"""
Is price endogenous?

Regress log(packs) on log(rprice), population and income by OLS and keep
the residuals; then regress log(packs) on the residuals alone. A
significant residual coefficient says price is correlated with the error
term, which is what justifies the IV estimate. The report also runs the
control-function form of the Durbin-Wu-Hausman test and checks the
strength of the instrument.
"""

from cigdemand import EndogeneityTest, derive_variables, subset_year
from cigdemand.datasets import cigarettes_sw

c1995 = subset_year(derive_variables(cigarettes_sw.load()), 1995)

report = EndogeneityTest(controls=["population", "income"]).run(c1995)
c1995["vhat"] = report.residuals
print(report.summary())
print(report.executive_summary())
