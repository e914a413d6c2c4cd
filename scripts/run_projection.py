"""Fit the weekly SIR model to national COVID-19 data and project forward.

Loads the JHU CSSE cumulative confirmed/deaths/recovered series for one
country, buckets them into weeks, estimates beta/gamma over the training
window, simulates the forecast horizon and compares predicted against
actual weekly new cases.
Writes a run folder with config.json, rates.json, projection.csv,
weekly_rates.csv and metrics.json under runs/.
Typical usage:
  python scripts/run_projection.py --train-end 2020-06-29 --horizon 12 --save-plots
"""


from __future__ import annotations

import argparse
from datetime import datetime
import logging
from pathlib import Path

from src.covid_sir.config import DEFAULTS, FILL_POLICIES, ProjectionConfig
from src.covid_sir.datasets import load_weekly_observations
from src.covid_sir.errors import InsufficientDataError
from src.covid_sir.io import ensure_dir, save_json, save_table
from src.covid_sir.logging_utils import setup_logging
from src.covid_sir.metrics import forecast_metrics, rate_summary
from src.covid_sir.pipeline import run_pipeline


def _parse_args() -> argparse.Namespace:
    # CLI options control data sources, population, window and horizon.
    parser = argparse.ArgumentParser(description="Run the weekly SIR fit and projection.")
    parser.add_argument("--country", type=str, default=DEFAULTS.country)
    parser.add_argument("--confirmed", type=str, default=DEFAULTS.confirmed_url)
    parser.add_argument("--deaths", type=str, default=DEFAULTS.deaths_url)
    parser.add_argument("--recovered", type=str, default=DEFAULTS.recovered_url)
    parser.add_argument("--data-start", type=str, default=None)
    parser.add_argument("--data-end", type=str, default=None)
    parser.add_argument("--population", type=float, default=DEFAULTS.population)
    parser.add_argument("--train-start", type=str, default=DEFAULTS.training_window_start)
    parser.add_argument("--train-end", type=str, default=DEFAULTS.training_window_end)
    parser.add_argument("--horizon", type=int, default=DEFAULTS.forecast_horizon)
    parser.add_argument("--fill-policy", type=str, default=DEFAULTS.fill_policy, choices=FILL_POLICIES)
    parser.add_argument("--save-plots", action="store_true")
    parser.add_argument("--out-dir", type=str, default=None)
    parser.add_argument("--log-level", type=str, default="INFO")
    parser.add_argument("--log-file", type=str, default=None)
    parser.add_argument("--no-log-file", action="store_true")
    parser.add_argument("--no-console-log", action="store_true")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_name = f"{args.country.lower().replace(' ', '_')}_{timestamp}"
    out_dir = Path(args.out_dir) if args.out_dir else DEFAULTS.runs_dir / run_name
    ensure_dir(out_dir)

    log_file = None
    if not args.no_log_file:
        log_file = Path(args.log_file) if args.log_file else out_dir / "run.log"
    setup_logging(level=args.log_level, log_file=log_file, console=not args.no_console_log)
    logger = logging.getLogger(__name__)

    logger.info("Projection start")
    logger.info("Output dir: %s", out_dir)

    config = ProjectionConfig(
        population=args.population,
        training_window_start=args.train_start,
        training_window_end=args.train_end,
        forecast_horizon=args.horizon,
        fill_policy=args.fill_policy,
    )
    logger.info("Config: %s", config.to_dict())

    observations = load_weekly_observations(
        args.confirmed,
        args.deaths,
        args.recovered,
        country=args.country,
        fill_policy=config.fill_policy,
        start=args.data_start,
        end=args.data_end,
    )

    try:
        result = run_pipeline(observations, config)
    except InsufficientDataError as exc:
        logger.error("Estimation failed: %s", exc)
        return 1

    metrics = forecast_metrics(result.table)
    metrics.update(rate_summary(result.weekly_rates))
    logger.info(
        "Forecast error over %d week(s): MAE=%.4g RMSE=%.4g MAPE=%.4g%%",
        metrics["n_weeks"],
        metrics["mae"],
        metrics["rmse"],
        metrics["mape"],
    )
    for note in result.warnings:
        logger.warning("Advisory: %s", note)

    save_json(out_dir / "config.json", {
        "country": args.country,
        "sources": {
            "confirmed": args.confirmed,
            "deaths": args.deaths,
            "recovered": args.recovered,
        },
        **config.to_dict(),
    })
    save_json(out_dir / "rates.json", result.rates.to_dict())
    save_table(out_dir / "projection.csv", result.table)
    save_table(out_dir / "weekly_rates.csv", result.weekly_rates)
    save_table(out_dir / "observations.csv", observations)
    save_json(out_dir / "metrics.json", {**metrics, "warnings": result.warnings})

    if args.save_plots:
        from src.visualization.visualize import save_run_figures

        paths = save_run_figures(
            out_dir / "figures",
            result.table,
            weekly_rates=result.weekly_rates,
            rates=result.rates.to_dict(),
            window_end=result.rates.window_end,
            title_prefix=args.country,
        )
        logger.info("Saved figures: %s", ", ".join(str(p) for p in paths.values()))

    logger.info("Projection done")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
