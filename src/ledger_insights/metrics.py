"""Forecast accuracy metrics used by the rolling backtest."""

from typing import Sequence, Tuple

import numpy as np


def _abs_errors(actual: Sequence[float], predicted: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    """Actuals as floats, with the absolute error of each prediction."""
    actual_arr = np.asarray(actual, dtype=float)
    predicted_arr = np.asarray(predicted, dtype=float)
    if actual_arr.shape != predicted_arr.shape:
        raise ValueError(
            f"actual and predicted differ in shape: {actual_arr.shape} vs {predicted_arr.shape}"
        )
    return actual_arr, np.abs(actual_arr - predicted_arr)


def mae(actual: Sequence[float], predicted: Sequence[float]) -> float:
    _, errors = _abs_errors(actual, predicted)
    return float(errors.mean()) if errors.size else np.nan


def wmape(actual: Sequence[float], predicted: Sequence[float]) -> float:
    """Absolute errors summed and weighted by total actual volume."""
    actual_arr, errors = _abs_errors(actual, predicted)
    volume = np.abs(actual_arr).sum()
    return float(errors.sum() / volume) if volume else np.nan


def mase(
    actual: Sequence[float],
    predicted: Sequence[float],
    insample: Sequence[float],
    season_length: int = 1,
) -> float:
    """MAE scaled by the in-sample seasonal-naive MAE; NaN when undefined."""
    lag = max(season_length, 1)
    history = np.asarray(insample, dtype=float)
    if history.size <= lag:
        return np.nan
    _, naive_errors = _abs_errors(history[lag:], history[:-lag])
    scale = naive_errors.mean()
    return mae(actual, predicted) / float(scale) if scale else np.nan
