"""Plotting utilities for the weekly SIR projection.

This module provides Matplotlib helpers to visualize:
- actual vs projected S/I/R compartments
- actual vs predicted weekly new cases
- per-week beta/gamma samples against their medians

It can also be used as a script to rebuild figures from a saved run folder
(projection.csv and optionally weekly_rates.csv / rates.json), e.g.:
  python -m src.visualization.visualize --run-dir runs/us_20240101_120000
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Dict, Optional

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from src.covid_sir.io import ensure_dir


COMPARTMENTS = (
    ("susceptible", "pred_susceptible", "S"),
    ("infected", "pred_infected", "I"),
    ("removed", "pred_removed", "R"),
)


def save_figure(fig: plt.Figure, path: Path | str, dpi: int = 150) -> Path:
    """Save a Matplotlib figure, creating the parent directory, and close it."""
    path = Path(path)
    ensure_dir(path.parent)
    fig.tight_layout()
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return path


def _mark_window_end(ax: plt.Axes, window_end: Optional[pd.Timestamp]) -> None:
    if window_end is None:
        return
    ax.axvline(pd.Timestamp(window_end), color="grey", ls="--", lw=1, label="training end")


def plot_compartments(
    table: pd.DataFrame,
    window_end: Optional[pd.Timestamp] = None,
    title: Optional[str] = None,
    figsize: tuple = (13, 3.8),
) -> plt.Figure:
    """One panel per compartment: actual series vs projected series."""
    fig, axes = plt.subplots(1, 3, figsize=figsize, sharex=True)
    weeks = pd.to_datetime(table["week"])
    for ax, (actual, pred, label) in zip(axes, COMPARTMENTS):
        ax.plot(weeks, table[actual], label=f"{label} actual")
        if pred in table.columns:
            ax.plot(weeks, table[pred], ls="--", label=f"{label} projected")
        _mark_window_end(ax, window_end)
        ax.set_title(label)
        ax.set_xlabel("week")
        ax.tick_params(axis="x", labelrotation=45)
    axes[0].legend(fontsize=8)
    if title:
        fig.suptitle(title)
    return fig


def plot_new_cases(
    table: pd.DataFrame,
    window_end: Optional[pd.Timestamp] = None,
    title: Optional[str] = None,
    figsize: tuple = (9, 4.5),
) -> plt.Figure:
    """Actual weekly new cases against the projection-derived prediction."""
    fig, ax = plt.subplots(figsize=figsize)
    weeks = pd.to_datetime(table["week"])
    ax.plot(weeks, table["actual_new_cases"], marker="o", ms=3, label="actual")
    projected = table["has_projection"].to_numpy(dtype=bool)
    ax.plot(
        weeks[projected],
        table.loc[projected, "pred_new_cases"],
        marker="x",
        ms=4,
        ls="--",
        label="predicted (SIR)",
    )
    _mark_window_end(ax, window_end)
    ax.set_xlabel("week")
    ax.set_ylabel("new cases per week")
    ax.tick_params(axis="x", labelrotation=45)
    ax.legend(fontsize=8)
    if title:
        ax.set_title(title)
    return fig


def plot_weekly_rates(
    weekly_rates: pd.DataFrame,
    rates: Optional[Dict[str, float]] = None,
    title: Optional[str] = None,
    figsize: tuple = (10, 4),
) -> plt.Figure:
    """Per-week beta and gamma samples with the median estimate overlaid."""
    fig, axes = plt.subplots(1, 2, figsize=figsize, sharex=True)
    weeks = pd.to_datetime(weekly_rates["week"])
    for ax, name in zip(axes, ("beta", "gamma")):
        values = weekly_rates[name].to_numpy(dtype=float)
        finite = np.isfinite(values)
        ax.scatter(weeks[finite], values[finite], s=14, alpha=0.7, label=f"weekly {name}")
        if rates and rates.get(name) is not None:
            ax.axhline(rates[name], color="k", lw=1, label="median")
        ax.set_title(name)
        ax.tick_params(axis="x", labelrotation=45)
        ax.legend(fontsize=8)
    if title:
        fig.suptitle(title)
    return fig


def save_run_figures(
    plot_dir: Path | str,
    table: pd.DataFrame,
    weekly_rates: Optional[pd.DataFrame] = None,
    rates: Optional[Dict[str, float]] = None,
    window_end: Optional[pd.Timestamp] = None,
    title_prefix: str = "SIR projection",
    dpi: int = 150,
) -> Dict[str, Path]:
    """Save the standard set of figures for a run."""
    plot_dir = ensure_dir(plot_dir)
    paths: Dict[str, Path] = {}

    fig = plot_compartments(table, window_end=window_end, title=f"{title_prefix}: compartments")
    paths["compartments"] = save_figure(fig, plot_dir / "compartments.png", dpi=dpi)

    fig = plot_new_cases(table, window_end=window_end, title=f"{title_prefix}: weekly new cases")
    paths["new_cases"] = save_figure(fig, plot_dir / "new_cases.png", dpi=dpi)

    if weekly_rates is not None and not weekly_rates.empty:
        fig = plot_weekly_rates(weekly_rates, rates=rates, title=f"{title_prefix}: weekly rates")
        paths["weekly_rates"] = save_figure(fig, plot_dir / "weekly_rates.png", dpi=dpi)

    return paths


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rebuild figures from a saved projection run.")
    parser.add_argument("--run-dir", type=str, required=True)
    parser.add_argument("--out-dir", type=str, default=None)
    parser.add_argument("--title", type=str, default=None)
    parser.add_argument("--dpi", type=int, default=150)
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    run_dir = Path(args.run_dir)
    table_path = run_dir / "projection.csv"
    if not table_path.exists():
        raise FileNotFoundError(f"missing {table_path}")

    table = pd.read_csv(table_path, parse_dates=["week"])
    rates_path = run_dir / "weekly_rates.csv"
    weekly_rates = pd.read_csv(rates_path, parse_dates=["week"]) if rates_path.exists() else None

    rates = None
    window_end = None
    rates_json = run_dir / "rates.json"
    if rates_json.exists():
        rates = json.loads(rates_json.read_text(encoding="utf-8"))
        if rates.get("window_end"):
            window_end = pd.Timestamp(rates["window_end"])

    out_dir = Path(args.out_dir) if args.out_dir else run_dir / "figures"
    save_run_figures(
        out_dir,
        table,
        weekly_rates=weekly_rates,
        rates=rates,
        window_end=window_end,
        title_prefix=args.title or run_dir.name,
        dpi=args.dpi,
    )


if __name__ == "__main__":
    main()
