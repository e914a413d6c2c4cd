"""End-to-end weekly SIR projection.

Runs the four stages in order on one observation table:
derive compartments -> estimate rates -> simulate forward -> new cases.
Every setting comes from the ProjectionConfig passed in.
"""


from dataclasses import dataclass, field
import logging
from typing import List

import pandas as pd

from .compartments import derive_compartments, training_window
from .config import ProjectionConfig
from .estimate import RateEstimate, estimate_rates, per_week_rates
from .incidence import join_projection, new_case_table
from .simulate import ProjectedState, Projection, seed_state


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    config: ProjectionConfig
    states: pd.DataFrame
    weekly_rates: pd.DataFrame
    rates: RateEstimate
    seed: ProjectedState
    projection: pd.DataFrame
    table: pd.DataFrame
    warnings: List[str] = field(default_factory=list)


def _prepare_observations(observations: pd.DataFrame, fill_policy: str) -> pd.DataFrame:
    counts = ["cumulative_cases", "cumulative_deaths", "cumulative_recovered"]
    obs = observations.sort_values("week").reset_index(drop=True)
    if fill_policy == "drop":
        before = len(obs)
        obs = obs.dropna(subset=[c for c in counts if c in obs.columns]).reset_index(drop=True)
        if len(obs) < before:
            logger.info("Dropped %d week(s) with missing figures", before - len(obs))
    return obs


def run_pipeline(observations: pd.DataFrame, config: ProjectionConfig) -> PipelineResult:
    """Run the full projection for ``observations`` under ``config``."""
    obs = _prepare_observations(observations, config.fill_policy)
    states = derive_compartments(obs, config.population)
    warnings = list(states.attrs.get("warnings", []))

    rates = estimate_rates(
        states,
        end=config.training_window_end,
        start=config.training_window_start,
    )
    window = training_window(
        states, end=config.training_window_end, start=config.training_window_start
    )
    weekly_rates = per_week_rates(window)

    # Seed from the last week of the training window.
    seed = seed_state(window)
    projection = Projection(seed, rates, config.forecast_horizon).to_frame()
    logger.info(
        "Projected %d week(s) from %s (S=%.0f I=%.0f R=%.0f)",
        len(projection),
        seed.week.date(),
        seed.pred_susceptible,
        seed.pred_infected,
        seed.pred_removed,
    )

    table = new_case_table(join_projection(states, projection, seed=seed))
    table.attrs["warnings"] = warnings

    return PipelineResult(
        config=config,
        states=states,
        weekly_rates=weekly_rates,
        rates=rates,
        seed=seed,
        projection=projection,
        table=table,
        warnings=warnings,
    )
