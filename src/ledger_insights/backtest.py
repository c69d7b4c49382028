from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd

from .log import get_logger
from .metrics import mae, mase, wmape
from .models import get_model

logger = get_logger(__name__)

SERIES_COLUMNS: Tuple[str, ...] = ("revenue", "expenses")
METRIC_COLUMNS = ["series", "model", "cutoff", "wmape", "mase", "mae", "error"]


@dataclass
class BacktestConfig:
    horizon: int = 3
    min_train: int = 3
    season_length: int = 1
    models: Tuple[str, ...] = ("linear", "mean", "naive")


@dataclass
class BacktestResult:
    metrics: pd.DataFrame
    model_selection: Dict[str, str] = field(default_factory=dict)


def rolling_backtest(monthly: pd.DataFrame, config: BacktestConfig) -> BacktestResult:
    """Rolling-origin evaluation of each model on the monthly revenue and expense series."""
    records: List[dict] = []
    ordered = monthly.sort_values("month").reset_index(drop=True)

    for series in SERIES_COLUMNS:
        values = ordered[series].fillna(0.0).to_numpy(dtype=float)
        if len(values) < config.min_train + config.horizon:
            logger.info("backtest_skipped", series=series, points=len(values))
            continue

        for cutoff in range(config.min_train, len(values) - config.horizon + 1):
            train = values[:cutoff]
            actual = values[cutoff : cutoff + config.horizon]
            cutoff_month = ordered["month"].iloc[cutoff - 1]

            for name in config.models:
                try:
                    predicted = get_model(name)(train.tolist(), config.horizon)
                    records.append(
                        {
                            "series": series,
                            "model": name,
                            "cutoff": cutoff_month,
                            "wmape": wmape(actual, predicted),
                            "mase": mase(actual, predicted, train, config.season_length),
                            "mae": mae(actual, predicted),
                            "error": "",
                        }
                    )
                except ValueError as exc:
                    records.append(
                        {
                            "series": series,
                            "model": name,
                            "cutoff": cutoff_month,
                            "wmape": np.nan,
                            "mase": np.nan,
                            "mae": np.nan,
                            "error": str(exc),
                        }
                    )

    metrics = pd.DataFrame.from_records(records, columns=METRIC_COLUMNS)
    model_selection: Dict[str, str] = {}
    valid = metrics[metrics["wmape"].notna()]
    if valid.empty:
        return BacktestResult(metrics=metrics, model_selection=model_selection)

    scores = valid.groupby(["series", "model"])["wmape"].mean().reset_index()
    for series, group in scores.groupby("series"):
        best_row = group.sort_values(["wmape", "model"]).iloc[0]
        model_selection[str(series)] = str(best_row["model"])

    return BacktestResult(metrics=metrics, model_selection=model_selection)
