"""
The full tutorial: data, derived variables, IV estimation, endogeneity.
Equivalent to ``python -m cigdemand``.
"""

from cigdemand import tutorial

tutorial.run()
