"""Numerical core of the GZT method.

Modules:
- design_matrix: sliding-window matrix construction
- calibration: least-squares estimation of the response vector
- reconstruction: applying the response vector to a new recording
- smoothing: boundary-shrinking moving average
- denoise: threshold-selective secondary smoothing
- pipeline: calibration / recovery entry points
"""

from .types import (
    TimeSeries,
    DesignMatrix,
    ParameterVector,
    RecoveredSignal,
    CalibrationResult,
)
from .design_matrix import build_design_matrix
from .calibration import estimate_parameters
from .reconstruction import reconstruct_signal
from .smoothing import moving_average
from .denoise import threshold_denoise
from .pipeline import RunMode, run, run_calibration, run_recovery
