from .endogeneity import (
    EndogeneityReport,
    EndogeneityTest,
    control_function_test,
    first_stage_strength,
    residual_test,
)
from ._check import Assumption, RefutationCheck, IV_ASSUMPTIONS

__all__ = [
    "EndogeneityReport", "EndogeneityTest",
    "residual_test", "control_function_test", "first_stage_strength",
    "Assumption", "RefutationCheck", "IV_ASSUMPTIONS",
]
