"""Least-squares estimation of the apparatus response vector."""
import logging
from typing import Dict, Tuple

import numpy as np
from scipy import linalg

from ..exceptions import DimensionMismatchError, SingularMatrixError
from .types import DesignMatrix, ParameterVector

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONDITION = 1e16


def normal_condition(singular_values: np.ndarray) -> float:
    """Condition number of C^T C from the singular values of C."""
    s = np.asarray(singular_values, dtype=float)
    if s.size == 0 or s[-1] <= 0:
        return float('inf')
    return float((s[0] / s[-1]) ** 2)


def estimate_parameters(design: DesignMatrix, reference: np.ndarray,
                        max_condition: float = DEFAULT_MAX_CONDITION
                        ) -> Tuple[ParameterVector, Dict[str, float]]:
    """Solve min ||C a - u||^2 for the parameter vector ``a``.

    ``C`` is built from the measured output and ``u`` is the first
    ``design.rows`` samples of the injected reference. The solve goes through
    an SVD (LAPACK gelsd) rather than forming and inverting C^T C.

    Args:
        design: Design matrix over the measured sequence
        reference: Injected reference sequence, at least ``design.rows`` long
        max_condition: Largest acceptable condition estimate of C^T C

    Returns:
        (parameters, diagnostics) where diagnostics holds 'condition', 'rank'
        and 'residual_rms'
    """
    C = design.matrix
    m, N = C.shape
    u_full = np.asarray(reference, dtype=float).ravel()
    if u_full.size < m:
        raise DimensionMismatchError(m, int(u_full.size), what="reference sequence")
    u = u_full[:m]

    a, _, rank, sv = linalg.lstsq(C, u, lapack_driver='gelsd')
    condition = normal_condition(sv)
    rank = int(rank)

    if rank < N or not np.isfinite(condition) or condition > max_condition:
        logger.error(
            f"Calibration solve rejected: cond={condition:.3e}, rank={rank}/{N}, "
            f"rows={m}"
        )
        raise SingularMatrixError(condition, rank, N, max_condition)

    residual = C @ a - u
    diagnostics = {
        'condition': condition,
        'rank': rank,
        'residual_rms': float(np.sqrt(np.mean(residual ** 2))),
    }
    logger.info(
        f"Estimated {N} parameters from {m} rows "
        f"(cond={condition:.3e}, residual RMS={diagnostics['residual_rms']:.4g})"
    )
    return ParameterVector(a), diagnostics


def estimate_parameters_inverse(design: DesignMatrix, reference: np.ndarray) -> ParameterVector:
    """Reference solve via the explicit inverse of the normal equations.

    Numerically fragile for window lengths in the hundreds; kept for
    cross-checking ``estimate_parameters`` on small, well-conditioned cases.
    """
    C = design.matrix
    u = np.asarray(reference, dtype=float).ravel()[:C.shape[0]]
    try:
        a = np.linalg.inv(C.T @ C) @ C.T @ u
    except np.linalg.LinAlgError as e:
        raise SingularMatrixError(float('inf'), int(np.linalg.matrix_rank(C)),
                                  C.shape[1], DEFAULT_MAX_CONDITION) from e
    return ParameterVector(a)
