"""
GZT Recovery Package
-------------------
Recovers instantaneous gas-exchange signals from flow-through respirometry
recordings with the Generalized Z-Transform method.
"""

__version__ = "1.0.0"

from .core.pipeline import RunMode, run, run_calibration, run_recovery
from .core.types import TimeSeries, ParameterVector, RecoveredSignal
from .exceptions import (
    GZTError,
    ParseError,
    InvalidWindowError,
    SingularMatrixError,
    DimensionMismatchError,
)

__all__ = [
    'RunMode',
    'run',
    'run_calibration',
    'run_recovery',
    'TimeSeries',
    'ParameterVector',
    'RecoveredSignal',
    'GZTError',
    'ParseError',
    'InvalidWindowError',
    'SingularMatrixError',
    'DimensionMismatchError',
]
