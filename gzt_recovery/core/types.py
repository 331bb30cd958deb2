"""Typed values passed between the calibration and recovery stages."""
from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np

from ..exceptions import ParseError


def _frozen(values, name: str) -> np.ndarray:
    arr = np.array(values, dtype=float)
    if arr.ndim != 1:
        raise ParseError(f"{name} must be one-dimensional, got shape {arr.shape}")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class TimeSeries:
    """Ordered samples with an optional, non-decreasing time axis."""
    values: np.ndarray
    time: Optional[np.ndarray] = None

    def __post_init__(self):
        values = _frozen(self.values, 'values')
        object.__setattr__(self, 'values', values)
        if self.time is None:
            return
        time = _frozen(self.time, 'time')
        if time.size != values.size:
            raise ParseError(
                f"time has {time.size} samples but values has {values.size}"
            )
        if time.size > 1 and np.any(np.diff(time) < 0):
            raise ParseError("time axis must be monotonically non-decreasing")
        object.__setattr__(self, 'time', time)

    def __len__(self) -> int:
        return int(self.values.size)


@dataclass(frozen=True)
class DesignMatrix:
    """Sliding-window matrix with entry (r, i) = source[r + i]."""
    matrix: np.ndarray
    window_length: int
    source_length: int

    @property
    def rows(self) -> int:
        return self.source_length - self.window_length + 1


@dataclass(frozen=True)
class ParameterVector:
    """Linear-response coefficients estimated during calibration."""
    coefficients: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, 'coefficients',
                           _frozen(self.coefficients, 'coefficients'))

    @property
    def window_length(self) -> int:
        return int(self.coefficients.size)

    def __len__(self) -> int:
        return self.window_length


@dataclass(frozen=True)
class RecoveredSignal:
    """Reconstructed input; time is truncated to the recovered length."""
    values: np.ndarray
    time: Optional[np.ndarray] = None

    def __post_init__(self):
        object.__setattr__(self, 'values', _frozen(self.values, 'values'))
        if self.time is not None:
            object.__setattr__(self, 'time', _frozen(self.time, 'time'))

    def __len__(self) -> int:
        return int(self.values.size)


@dataclass(frozen=True)
class CalibrationResult:
    parameters: ParameterVector
    estimated_input: np.ndarray
    diagnostics: Dict[str, float] = field(default_factory=dict)
