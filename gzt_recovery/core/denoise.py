"""Second-stage smoothing of the recovered signal below the noise floor."""
import logging

import numpy as np

from .smoothing import moving_average

logger = logging.getLogger(__name__)

DENOISE_MODES = ('pooled', 'runs')


def _contiguous_runs(mask: np.ndarray):
    """Yield (start, stop) slices of consecutive True entries."""
    padded = np.concatenate(([False], mask, [False])).astype(int)
    edges = np.flatnonzero(np.diff(padded))
    return zip(edges[::2], edges[1::2])


def threshold_denoise(values: np.ndarray, threshold: float = 0.95,
                      window: int = 20, mode: str = 'pooled') -> np.ndarray:
    """Re-smooth the samples that fall below ``threshold``.

    In ``'pooled'`` mode the sub-threshold samples are taken in ascending
    index order and smoothed as one series, even where they are not adjacent
    in time, then written back to their original positions. ``'runs'``
    smooths each contiguous sub-threshold stretch on its own and must be
    requested explicitly.

    Args:
        values: Recovered signal, already smoothed once
        threshold: Noise-floor level found from a pure-noise recording
        window: Span of the secondary moving average
        mode: 'pooled' or 'runs'

    Returns:
        New array with the same length as ``values``
    """
    if mode not in DENOISE_MODES:
        raise ValueError(f"Unknown denoise mode: {mode}. Must be one of {list(DENOISE_MODES)}")

    out = np.array(values, dtype=float).ravel()
    mask = out < threshold
    n_below = int(np.count_nonzero(mask))
    if n_below == 0:
        if np.isfinite(threshold):
            logger.warning(f"No samples below threshold {threshold}; secondary smoothing skipped")
        return out

    if mode == 'pooled':
        out[mask] = moving_average(out[mask], window)
    else:
        for start, stop in _contiguous_runs(mask):
            out[start:stop] = moving_average(out[start:stop], window)

    logger.info(f"Re-smoothed {n_below}/{out.size} samples below {threshold} (window={window}, mode={mode})")
    return out
