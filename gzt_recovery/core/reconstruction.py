import logging

import numpy as np

from ..exceptions import DimensionMismatchError
from .types import DesignMatrix, ParameterVector

logger = logging.getLogger(__name__)


def reconstruct_signal(design: DesignMatrix, parameters: ParameterVector) -> np.ndarray:
    """Apply the response vector to a design matrix: r = C' a."""
    if parameters.window_length != design.window_length:
        raise DimensionMismatchError(design.window_length, parameters.window_length)
    recovered = design.matrix @ parameters.coefficients
    logger.debug(f"Reconstructed {recovered.size} samples with N={design.window_length}")
    return recovered
