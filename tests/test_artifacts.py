import json

import pandas as pd

from src.covid_sir.config import ProjectionConfig
from src.covid_sir.io import save_json, save_table
from src.covid_sir.pipeline import run_pipeline
from src.visualization.visualize import save_run_figures

from tests.conftest import POPULATION


def test_run_artifacts_roundtrip(tmp_path, observations, weeks):
    config = ProjectionConfig(population=POPULATION, training_window_end=weeks[5], forecast_horizon=3)
    result = run_pipeline(observations, config)

    save_json(tmp_path / "rates.json", result.rates.to_dict())
    save_table(tmp_path / "projection.csv", result.table)

    rates = json.loads((tmp_path / "rates.json").read_text(encoding="utf-8"))
    assert rates["window_end"] == weeks[5].date().isoformat()
    table = pd.read_csv(tmp_path / "projection.csv")
    assert table["week"].iloc[0] == weeks[0].strftime("%Y-%m-%d")
    assert "pred_new_cases" in table.columns


def test_nan_written_as_null(tmp_path):
    save_json(tmp_path / "m.json", {"mae": float("nan"), "n_weeks": 0})
    assert json.loads((tmp_path / "m.json").read_text(encoding="utf-8"))["mae"] is None


def test_figures_are_written(tmp_path, observations, weeks):
    config = ProjectionConfig(population=POPULATION, training_window_end=weeks[5], forecast_horizon=3)
    result = run_pipeline(observations, config)
    paths = save_run_figures(
        tmp_path / "figures",
        result.table,
        weekly_rates=result.weekly_rates,
        rates=result.rates.to_dict(),
        window_end=result.rates.window_end,
    )
    assert set(paths) == {"compartments", "new_cases", "weekly_rates"}
    assert all(p.exists() for p in paths.values())


def test_setup_logging_writes_file(tmp_path):
    import logging

    from src.covid_sir.logging_utils import setup_logging

    log_file = tmp_path / "logs" / "run.log"
    logger = setup_logging(level="debug", log_file=log_file, console=False)
    logging.getLogger("src.covid_sir.test").info("hello")
    for handler in logger.handlers:
        handler.flush()
    assert logger.level == logging.DEBUG
    assert "| INFO | src.covid_sir.test | hello" in log_file.read_text(encoding="utf-8")
    # Reconfiguring replaces handlers instead of stacking them.
    setup_logging(level="INFO", console=False)
    assert logger.handlers == []
