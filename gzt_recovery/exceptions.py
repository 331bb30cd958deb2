"""Error taxonomy for calibration and recovery runs.

Every error is fatal to the current run and carries enough context (lengths,
window size, condition estimate) for an operator to adjust the configuration
and rerun.
"""
from typing import Optional


class GZTError(Exception):
    """Base class for all errors raised by the recovery toolkit."""


class ParseError(GZTError, ValueError):
    """Malformed or wrong-shape input data."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


class InvalidWindowError(GZTError, ValueError):
    """Window length does not satisfy 1 <= N < n for the sequence in use."""

    def __init__(self, window_length: int, sequence_length: int,
                 max_cells: Optional[int] = None):
        self.window_length = window_length
        self.sequence_length = sequence_length
        self.max_cells = max_cells
        if max_cells is not None:
            cells = (sequence_length - window_length + 1) * window_length
            message = (
                f"Design matrix for window_length={window_length} over "
                f"{sequence_length} samples needs {cells} cells, "
                f"above the limit of {max_cells}"
            )
        else:
            message = (
                f"Invalid window_length={window_length} for a sequence of "
                f"{sequence_length} samples (need 1 <= N < n)"
            )
        super().__init__(message)


class SingularMatrixError(GZTError, ArithmeticError):
    """Normal-equations matrix is singular or too ill-conditioned to trust."""

    def __init__(self, condition: float, rank: int, window_length: int,
                 max_condition: float):
        self.condition = condition
        self.rank = rank
        self.window_length = window_length
        self.max_condition = max_condition
        super().__init__(
            f"Least-squares solve is unreliable: cond(C^T C)={condition:.3e} "
            f"(limit {max_condition:.3e}), rank {rank} of {window_length}. "
            f"Try a shorter window_length or a richer calibration signal."
        )


class DimensionMismatchError(GZTError, ValueError):
    """Vector length does not match the window length it is used with."""

    def __init__(self, expected: int, actual: int, what: str = "parameter vector"):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{what} has length {actual}, expected {expected}"
        )
