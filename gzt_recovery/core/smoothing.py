"""Moving-average smoothing with a symmetric, boundary-shrinking window."""

import numpy as np


def _ensure_window(window: int, length: int) -> int:
    """Cap the span at the sequence length and force it odd (even spans drop by one)."""
    window = int(window)
    if window < 1:
        raise ValueError(f"Smoothing window must be >= 1, got {window}")
    window = min(window, length)
    if window % 2 == 0:
        window -= 1
    return window


def moving_average(values: np.ndarray, window: int = 5) -> np.ndarray:
    """Smooth ``values`` with an unweighted, centered moving average.

    The span at 1-based position i is min(w, 2i - 1, 2(L - i) + 1): the window
    stays centered and narrows in odd steps (1, 3, 5, ...) toward both ends
    instead of padding or reflecting the data.

    Args:
        values: 1-D sequence of length L
        window: Span w; an even span acts as w - 1, spans above L act as L

    Returns:
        Smoothed array of length L
    """
    x = np.asarray(values, dtype=float).ravel()
    L = x.size
    if L == 0:
        return x.copy()

    w = _ensure_window(window, L)
    if w == 1:
        return x.copy()

    # Per-window sums keep a non-finite sample confined to the windows that hold it
    hw = (w - 1) // 2
    out = np.empty(L)
    out[hw:L - hw] = np.convolve(x, np.ones(w) / w, mode='valid')
    for j in range(hw):
        out[j] = x[:2 * j + 1].mean()
        out[L - 1 - j] = x[L - 1 - 2 * j:].mean()
    return out
