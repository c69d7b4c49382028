from __future__ import annotations

from typing import Callable, Dict, List, Sequence

import numpy as np

from .totals import round_cents

ForecastModel = Callable[[Sequence[float], int], List[float]]


def mean_forecast(values: Sequence[float], periods: int = 3) -> List[float]:
    arr = np.asarray(values, dtype=float)
    avg = float(arr.mean()) if arr.size > 0 else 0.0
    return [round_cents(avg)] * periods


def naive_forecast(values: Sequence[float], periods: int = 3) -> List[float]:
    arr = np.asarray(values, dtype=float)
    last = float(arr[-1]) if arr.size > 0 else 0.0
    return [round_cents(max(0.0, last))] * periods


def linear_forecast(values: Sequence[float], periods: int = 3) -> List[float]:
    """Extrapolate a least-squares trend line ``periods`` steps past ``values``.

    Index 0 of ``values`` is the oldest period. Fewer than two points, or an
    all-zero history, fall back to the historical mean. Predictions are
    clamped at zero and rounded to cents.
    """
    y = np.asarray(values, dtype=float)
    n = y.size
    if n < 2 or not np.any(y != 0):
        return mean_forecast(y, periods)

    x = np.arange(n, dtype=float)
    x_mean = (n - 1) / 2
    y_mean = float(y.mean())
    num = float(np.sum((x - x_mean) * (y - y_mean)))
    den = float(np.sum((x - x_mean) ** 2))
    slope = num / den if den != 0 else 0.0
    intercept = y_mean - slope * x_mean

    return [
        round_cents(max(0.0, slope * (n + j) + intercept))
        for j in range(periods)
    ]


forecast = linear_forecast

FORECAST_MODELS: Dict[str, ForecastModel] = {
    "linear": linear_forecast,
    "mean": mean_forecast,
    "naive": naive_forecast,
}


def get_model(name: str) -> ForecastModel:
    try:
        return FORECAST_MODELS[name]
    except KeyError:
        raise ValueError(
            f"Unknown forecast model {name!r}; expected one of {sorted(FORECAST_MODELS)}"
        ) from None
