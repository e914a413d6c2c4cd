"""Convert susceptible trajectories into weekly new-case counts.

New cases in week t are the drop in S from week t-1. Predicted new cases
come from the projected S series and fall back to the actual value in weeks
where the projection (for t or t-1) does not exist, e.g. inside the
training window. The first joined week has no predecessor and stays NaN.
"""


from typing import Optional

import numpy as np
import pandas as pd

from .compartments import STATE_COLUMNS, check_columns
from .simulate import PROJECTION_COLUMNS, ProjectedState


def join_projection(
    states: pd.DataFrame,
    projection: pd.DataFrame,
    seed: Optional[ProjectedState] = None,
) -> pd.DataFrame:
    """Outer-join actual states and projected states on ``week``.

    When ``seed`` is given, its week carries the seed values in the pred_*
    columns so the first projected week has a predecessor.
    """
    check_columns(states, STATE_COLUMNS, "states")
    check_columns(projection, PROJECTION_COLUMNS, "projection")

    pred = projection[list(PROJECTION_COLUMNS)]
    if seed is not None:
        seed_row = pd.DataFrame(
            [(seed.week, seed.pred_susceptible, seed.pred_infected, seed.pred_removed)],
            columns=list(PROJECTION_COLUMNS),
        )
        pred = pd.concat([seed_row, pred[pred["week"] != seed.week]], ignore_index=True)

    actual = states[list(STATE_COLUMNS)].copy()
    actual["week"] = pd.to_datetime(actual["week"])
    pred = pred.assign(week=pd.to_datetime(pred["week"]))

    joined = actual.merge(pred, on="week", how="outer", sort=True)
    return joined.reset_index(drop=True)


def new_case_table(joined: pd.DataFrame) -> pd.DataFrame:
    """Add ``actual_new_cases`` and ``pred_new_cases`` to a joined table."""
    check_columns(joined, ("week", "susceptible", "pred_susceptible"), "joined")
    out = joined.sort_values("week").reset_index(drop=True).copy()

    s_actual = out["susceptible"].to_numpy(dtype=float)
    s_pred = out["pred_susceptible"].to_numpy(dtype=float)

    actual_new = np.full(len(out), np.nan)
    pred_new = np.full(len(out), np.nan)
    if len(out) > 1:
        actual_new[1:] = s_actual[:-1] - s_actual[1:]
        pred_new[1:] = s_pred[:-1] - s_pred[1:]

    # NaN means no projection at t or t-1.
    fallback = np.isnan(pred_new)
    pred_new[fallback] = actual_new[fallback]

    out["actual_new_cases"] = actual_new
    out["pred_new_cases"] = pred_new
    out["has_projection"] = ~fallback
    return out
