"""Metrics for projected weekly incidence.

Includes MAE/RMSE/MAPE of predicted vs actual new cases over forecast
weeks, and a summary of the per-week rate samples."""


from typing import Dict
import numpy as np
import pandas as pd


def mae(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    return float(np.mean(np.abs(y_true - y_pred)))


def rmse(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    return float(np.sqrt(np.mean((y_true - y_pred) ** 2)))


def mape(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    # Weeks with zero actual cases have no defined percentage error.
    nonzero = y_true != 0
    if not nonzero.any():
        return float("nan")
    return float(np.mean(np.abs((y_true[nonzero] - y_pred[nonzero]) / y_true[nonzero])) * 100.0)


def forecast_metrics(table: pd.DataFrame) -> Dict[str, float]:
    """Compare predicted vs actual new cases on projected weeks with actuals."""
    mask = table["has_projection"].to_numpy(dtype=bool) & table["actual_new_cases"].notna().to_numpy()
    y_true = table.loc[mask, "actual_new_cases"].to_numpy(dtype=float)
    y_pred = table.loc[mask, "pred_new_cases"].to_numpy(dtype=float)
    if y_true.size == 0:
        # Keep the metrics schema when the forecast lies beyond the data.
        return {"mae": float("nan"), "rmse": float("nan"), "mape": float("nan"), "n_weeks": 0}
    return {
        "mae": mae(y_true, y_pred),
        "rmse": rmse(y_true, y_pred),
        "mape": mape(y_true, y_pred),
        "n_weeks": int(y_true.size),
    }


def rate_summary(rates: pd.DataFrame) -> Dict[str, float]:
    """Median and p10/p90 of the valid per-week beta and gamma samples."""
    summary = {}
    for name in ("beta", "gamma"):
        values = rates[name].to_numpy(dtype=float)
        values = values[np.isfinite(values)]
        summary[f"n_{name}"] = int(values.size)
        if values.size == 0:
            summary[f"{name}_p10"] = summary[f"{name}_p50"] = summary[f"{name}_p90"] = float("nan")
            continue
        summary[f"{name}_p10"] = float(np.percentile(values, 10))
        summary[f"{name}_p50"] = float(np.percentile(values, 50))
        summary[f"{name}_p90"] = float(np.percentile(values, 90))
    return summary
