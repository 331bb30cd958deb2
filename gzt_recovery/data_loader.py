"""Reading and writing the plain-text tables exchanged with the analyzer software."""
import logging
from pathlib import Path
from typing import Tuple, Union

import numpy as np
import pandas as pd

from .core.types import ParameterVector, RecoveredSignal, TimeSeries
from .exceptions import ParseError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _read_numeric_table(file_path: PathLike, n_columns: int) -> np.ndarray:
    """Read a headerless (or single-header-row) delimited table of numbers.

    Whitespace and commas are both accepted as separators.
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"Data file not found: {path}")

    try:
        df = pd.read_csv(path, sep=r'[\s,]+', header=None, engine='python',
                         dtype=str, skip_blank_lines=True)
    except pd.errors.EmptyDataError:
        raise ParseError("file is empty", path=str(path))
    except pd.errors.ParserError as e:
        raise ParseError(f"could not split into columns: {e}", path=str(path))

    # Leading/trailing separators show up as all-empty columns
    df = df.dropna(axis=1, how='all')
    if df.shape[1] != n_columns:
        raise ParseError(f"expected {n_columns} columns, found {df.shape[1]}", path=str(path))

    numeric = df.apply(pd.to_numeric, errors='coerce')
    if len(numeric) > 1 and numeric.iloc[0].isna().all() and not numeric.iloc[1:].isna().any().any():
        logger.info(f"Skipping header row in {path}: {list(df.iloc[0])}")
        numeric = numeric.iloc[1:]

    bad_rows = numeric.index[numeric.isna().any(axis=1)]
    if len(bad_rows):
        raise ParseError(
            f"non-numeric value on line {int(bad_rows[0]) + 1} "
            f"({len(bad_rows)} bad rows in total)",
            path=str(path),
        )
    if numeric.empty:
        raise ParseError("no data rows", path=str(path))

    data = numeric.to_numpy(dtype=float)
    logger.info(f"Loaded {data.shape[0]} rows x {n_columns} columns from {path}")
    return data


def load_calibration_data(file_path: PathLike) -> Tuple[TimeSeries, TimeSeries]:
    """
    Load a calibration recording.

    Args:
        file_path: Table with columns time, injected reference, measured output

    Returns:
        (reference, measured) series sharing the same time axis
    """
    data = _read_numeric_table(file_path, 3)
    time = data[:, 0]
    return TimeSeries(data[:, 1], time), TimeSeries(data[:, 2], time)


def load_raw_data(file_path: PathLike) -> TimeSeries:
    """Load a raw gas-exchange recording with columns time, measured signal."""
    data = _read_numeric_table(file_path, 2)
    return TimeSeries(data[:, 1], data[:, 0])


def load_parameters(file_path: PathLike) -> ParameterVector:
    """Load a parameter vector stored one value per line or whitespace-separated."""
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"Parameter file not found: {path}")
    tokens = path.read_text(encoding='utf-8').split()
    if not tokens:
        raise ParseError("parameter file is empty", path=str(path))
    try:
        coefficients = np.array([float(t) for t in tokens], dtype=float)
    except ValueError as e:
        raise ParseError(f"non-numeric parameter value: {e}", path=str(path))
    logger.info(f"Loaded {coefficients.size} parameters from {path}")
    return ParameterVector(coefficients)


def save_parameters(parameters: ParameterVector, file_path: PathLike) -> str:
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    np.savetxt(path, parameters.coefficients, fmt='%.8e')
    logger.info(f"Saved {parameters.window_length} parameters to {path}")
    return str(path)


def save_recovered_signal(recovered: RecoveredSignal, file_path: PathLike) -> str:
    """Write time and recovered value columns; the row index stands in for a missing time axis."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    values = recovered.values
    time = recovered.time if recovered.time is not None else np.arange(values.size, dtype=float)
    m = min(time.size, values.size)
    np.savetxt(path, np.column_stack([time[:m], values[:m]]), fmt='%.8e')
    logger.info(f"Saved {m} recovered samples to {path}")
    return str(path)
