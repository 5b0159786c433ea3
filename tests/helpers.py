import numpy as np
import pandas as pd

from cigdemand import derive_variables


N = 2_000  # rows; IV needs more data for precision
TRUE_ELASTICITY = -1.1


def make_panel(elasticity=TRUE_ELASTICITY, confounding=0.5, relevance=0.03, seed=42):
    """
    Ground truth DGP, built to look like the cigarette panel:
      salestax     ~ U(0, 12)                                 [instrument]
      u            ~ N(0, 0.1)                                [unobserved demand shifter]
      log(rprice)  = 4.5 + relevance*salestax + confounding*u + noise
      log(packs)   = 9.7 + elasticity*log(rprice) + 0.8*u + noise
    population (millions) and income (billions) are unrelated to price and demand.
    """
    rng = np.random.default_rng(seed)
    year = np.where(np.arange(N) % 2 == 0, 1985, 1995)
    cpi = np.where(year == 1985, 1.076, 1.524)
    salestax = rng.uniform(0, 12, size=N)
    u = rng.normal(scale=0.1, size=N)
    log_rprice = 4.5 + relevance * salestax + confounding * u + rng.normal(scale=0.05, size=N)
    log_packs = 9.7 + elasticity * log_rprice + 0.8 * u + rng.normal(scale=0.05, size=N)
    tax = rng.uniform(20, 60, size=N)
    population = rng.uniform(0.5, 30, size=N)
    df = pd.DataFrame({
        "state": [f"S{i % 48:02d}" for i in range(N)],
        "year": year,
        "cpi": cpi,
        "population": population,
        "packs": np.exp(log_packs),
        "income": population * rng.uniform(15, 30, size=N),
        "tax": tax,
        "price": np.exp(log_rprice) * cpi,
        "taxs": tax + salestax * cpi,
    })
    return derive_variables(df)
