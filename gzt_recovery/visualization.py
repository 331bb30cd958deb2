"""Diagnostic plots for calibration and recovery runs."""
import logging
from pathlib import Path
from typing import Dict, Optional

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from .core.types import CalibrationResult, RecoveredSignal, TimeSeries

logger = logging.getLogger(__name__)


def save_calibration_plots(result: CalibrationResult, reference: TimeSeries,
                           out_root: str, dpi: int = 150) -> Dict[str, str]:
    """Plot the parameter vector and the actual vs. estimated injected signal."""
    plots_dir = Path(out_root) / 'plots'
    plots_dir.mkdir(parents=True, exist_ok=True)
    paths: Dict[str, str] = {}

    a = result.parameters.coefficients
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.plot(np.arange(1, a.size + 1), a)
    ax.set_xlabel('Index')
    ax.set_ylabel('a')
    ax.set_title('Response parameters (vector a)')
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    paths['parameters_plot'] = str(plots_dir / 'parameters.png')
    fig.savefig(paths['parameters_plot'], dpi=dpi)
    plt.close(fig)

    t = reference.time if reference.time is not None else np.arange(len(reference), dtype=float)
    est = result.estimated_input
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.plot(t, reference.values, label='Actual input')
    ax.plot(t[:est.size], est, 'r', label='Estimated input')
    ax.set_xlabel('Time')
    ax.set_ylabel('Gas concentration')
    rmse = result.diagnostics.get('rmse', float('nan'))
    ax.set_title(f'Calibration fit (RMSE={rmse:.4g})')
    ax.legend()
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    paths['calibration_fit_plot'] = str(plots_dir / 'calibration_fit.png')
    fig.savefig(paths['calibration_fit_plot'], dpi=dpi)
    plt.close(fig)

    logger.info(f"Saved calibration plots under {plots_dir}")
    return paths


def save_recovery_plot(raw: TimeSeries, recovered: RecoveredSignal, out_root: str,
                       dpi: int = 150, threshold: Optional[float] = None) -> str:
    """Plot the raw recording against the recovered instantaneous signal."""
    plots_dir = Path(out_root) / 'plots'
    plots_dir.mkdir(parents=True, exist_ok=True)

    t_raw = raw.time if raw.time is not None else np.arange(len(raw), dtype=float)
    t_rec = recovered.time if recovered.time is not None else t_raw[:len(recovered)]

    fig, ax = plt.subplots(figsize=(9, 4))
    ax.plot(t_raw, raw.values, linewidth=2, label='Raw recorded signal')
    ax.plot(t_rec, recovered.values, 'r', linewidth=2, label='Recovered signal')
    if threshold is not None and np.isfinite(threshold):
        ax.axhline(threshold, color='gray', linestyle='--', linewidth=1, label='Threshold')
    ax.set_xlabel('Time')
    ax.set_ylabel('Gas concentration')
    ax.set_title('Instantaneous signal recovery')
    ax.legend()
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    path = str(plots_dir / 'recovery.png')
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    logger.info(f"Saved recovery plot to {path}")
    return path
