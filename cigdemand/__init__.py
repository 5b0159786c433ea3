from .datasets import cigarettes_sw
from .variables import derive_variables, subset_year
from .estimators.two_stage import ManualTwoStage, TwoStageResult
from .estimators.iv import IVRegression, IVResult, instrument_correlation
from .refutations import (
    EndogeneityTest,
    EndogeneityReport,
    RefutationCheck,
    Assumption,
    residual_test,
    control_function_test,
    first_stage_strength,
)
from ._exceptions import DatasetNotFoundError, VariableError

__all__ = [
    "cigarettes_sw",
    "derive_variables", "subset_year",
    "ManualTwoStage", "TwoStageResult",
    "IVRegression", "IVResult", "instrument_correlation",
    "EndogeneityTest", "EndogeneityReport", "RefutationCheck", "Assumption",
    "residual_test", "control_function_test", "first_stage_strength",
    "DatasetNotFoundError", "VariableError",
]
