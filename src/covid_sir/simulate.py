"""Forward simulation of the discretised SIR recurrence.

One step per week, explicit update:
  S' = S - beta*S*I
  I' = I + beta*S*I - gamma*I
  R' = R + gamma*I
No clamping is applied; values may go negative or diverge when the rates
are poorly estimated, and that overshoot is what the projection shows.
"""


from dataclasses import dataclass
from typing import Iterator

import pandas as pd

from .estimate import RateEstimate


WEEK = pd.Timedelta(weeks=1)
PROJECTION_COLUMNS = ("week", "pred_susceptible", "pred_infected", "pred_removed")


@dataclass(frozen=True)
class ProjectedState:
    week: pd.Timestamp
    pred_susceptible: float
    pred_infected: float
    pred_removed: float


def step(state: ProjectedState, beta: float, gamma: float) -> ProjectedState:
    """Advance one week; a pure function of the previous state."""
    s, i, r = state.pred_susceptible, state.pred_infected, state.pred_removed
    infections = beta * s * i
    removals = gamma * i
    return ProjectedState(
        week=state.week + WEEK,
        pred_susceptible=s - infections,
        pred_infected=i + infections - removals,
        pred_removed=r + removals,
    )


def seed_state(states: pd.DataFrame, week: pd.Timestamp = None) -> ProjectedState:
    """Pick the seed from a state table: the given week, or the last row."""
    if week is None:
        row = states.sort_values("week").iloc[-1]
    else:
        matches = states.loc[pd.to_datetime(states["week"]) == pd.Timestamp(week)]
        if matches.empty:
            raise ValueError(f"no state for seed week {pd.Timestamp(week).date()}")
        row = matches.iloc[-1]
    return ProjectedState(
        week=pd.Timestamp(row["week"]),
        pred_susceptible=float(row["susceptible"]),
        pred_infected=float(row["infected"]),
        pred_removed=float(row["removed"]),
    )


class Projection:
    """Lazy, finite, restartable sequence of projected weekly states.

    Iterating yields ``horizon`` states starting one week after the seed;
    the seed itself is not included. Each ``iter()`` starts over from the
    seed, so repeated iteration gives identical sequences.
    """

    def __init__(self, seed: ProjectedState, rates: RateEstimate, horizon: int) -> None:
        if int(horizon) != horizon or horizon <= 0:
            raise ValueError("horizon must be a positive integer")
        self.seed = seed
        self.rates = rates
        self.horizon = int(horizon)

    def __iter__(self) -> Iterator[ProjectedState]:
        state = self.seed
        for _ in range(self.horizon):
            state = step(state, self.rates.beta, self.rates.gamma)
            yield state

    def __len__(self) -> int:
        return self.horizon

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                (p.week, p.pred_susceptible, p.pred_infected, p.pred_removed)
                for p in self
            ],
            columns=list(PROJECTION_COLUMNS),
        )


def simulate_projection(
    seed: ProjectedState,
    rates: RateEstimate,
    horizon: int,
) -> pd.DataFrame:
    """Simulate ``horizon`` weeks forward from ``seed`` and return a table."""
    return Projection(seed, rates, horizon).to_frame()
