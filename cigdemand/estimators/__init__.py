from .two_stage import ManualTwoStage, TwoStageResult
from .iv import IVRegression, IVResult, instrument_correlation

__all__ = ["ManualTwoStage", "TwoStageResult", "IVRegression", "IVResult", "instrument_correlation"]
