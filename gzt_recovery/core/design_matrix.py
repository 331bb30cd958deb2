"""Sliding-window (design) matrix construction."""
import logging
from typing import Optional

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from ..exceptions import InvalidWindowError
from .types import DesignMatrix

logger = logging.getLogger(__name__)


def build_design_matrix(sequence: np.ndarray, window_length: int,
                        max_cells: Optional[int] = None) -> DesignMatrix:
    """Stack successive windows of ``sequence`` as matrix rows.

    Args:
        sequence: 1-D sequence of length n
        window_length: Window length N, 1 <= N < n
        max_cells: Optional upper bound on (n - N + 1) * N

    Returns:
        DesignMatrix of shape (n - N + 1, N) with C[r, i] = sequence[r + i]
    """
    s = np.asarray(sequence, dtype=float)
    if s.ndim != 1:
        raise InvalidWindowError(int(window_length), int(s.size))
    n = int(s.size)
    N = int(window_length)
    if N < 1 or N >= n:
        raise InvalidWindowError(N, n)
    if max_cells is not None and (n - N + 1) * N > int(max_cells):
        raise InvalidWindowError(N, n, max_cells=int(max_cells))

    # Copy out of the strided view so rows do not alias the source buffer
    C = np.array(sliding_window_view(s, N), dtype=float)
    logger.debug(f"Built design matrix {C.shape} from {n} samples (N={N})")
    return DesignMatrix(matrix=C, window_length=N, source_length=n)
