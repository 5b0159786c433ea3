"""
IV vs OLS on simulated demand data with a known elasticity.

An unobserved demand shock raises both the price and the quantity sold,
so OLS understates how strongly demand responds to price. IV recovers
the true elasticity by using only the price variation caused by the tax.

    salestax → log(rprice) → log(packs)
                   ↑              ↑
    shock ─────────┘──────────────┘

True price elasticity: -1.1
"""

import numpy as np
import pandas as pd

from cigdemand import EndogeneityTest, IVRegression

RNG = np.random.default_rng(0)
N = 2_000

salestax   = RNG.uniform(0, 12, size=N)
shock      = RNG.normal(scale=0.1, size=N)
log_rprice = 4.5 + 0.03 * salestax + 0.5 * shock + RNG.normal(scale=0.05, size=N)
log_packs  = 9.7 - 1.1 * log_rprice + 0.8 * shock + RNG.normal(scale=0.05, size=N)

# shock is not collected: unobserved confounder
df = pd.DataFrame({
    "salestax": salestax,
    "rprice": np.exp(log_rprice),
    "packs": np.exp(log_packs),
})

result = IVRegression(outcome="packs", treatment="rprice", instrument="salestax").fit(df)
print(result.summary())
print(result.executive_summary())
print(EndogeneityTest().run(df).summary())
