"""Derive SIR compartments from weekly cumulative counts.

Each week is mapped independently:
  S = N - cases, I = cases - deaths - recovered, R = deaths + recovered
so S + I + R == N holds row by row. Negative I (recoveries plus deaths
exceeding cases) and negative S (N below reported cases) are kept as-is.
"""


import logging
from typing import List

import pandas as pd

from .errors import POPULATION_ASSUMPTION_VIOLATED


logger = logging.getLogger(__name__)

OBSERVATION_COLUMNS = (
    "week",
    "cumulative_cases",
    "cumulative_deaths",
    "cumulative_recovered",
)
STATE_COLUMNS = ("week", "susceptible", "infected", "removed")


def check_columns(df: pd.DataFrame, columns, name: str = "table") -> None:
    """Raise ValueError if any required column is absent."""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"{name} is missing columns: {missing}")


def derive_compartments(observations: pd.DataFrame, population: float) -> pd.DataFrame:
    """Convert a WeeklyObservation table into a CompartmentState table.

    Rows keep their input order. Missing counts are treated as zero. When any
    susceptible value is negative, a PopulationAssumptionViolated note is
    logged and appended to ``attrs["warnings"]`` of the returned table; the
    values themselves are not altered.
    """
    if population <= 0:
        raise ValueError("population must be positive")
    check_columns(observations, OBSERVATION_COLUMNS, "observations")

    counts = observations[list(OBSERVATION_COLUMNS[1:])].fillna(0).astype(float)
    cases = counts["cumulative_cases"]
    deaths = counts["cumulative_deaths"]
    recovered = counts["cumulative_recovered"]

    states = pd.DataFrame({
        "week": pd.to_datetime(observations["week"]).to_numpy(),
        "susceptible": (float(population) - cases).to_numpy(),
        "infected": (cases - deaths - recovered).to_numpy(),
        "removed": (deaths + recovered).to_numpy(),
    })

    notes: List[str] = []
    negative_s = states["susceptible"] < 0
    if negative_s.any():
        first = states.loc[negative_s, "week"].iloc[0]
        note = (
            f"{POPULATION_ASSUMPTION_VIOLATED}: susceptible < 0 in {int(negative_s.sum())} "
            f"week(s) from {first.date()}; population {population:.0f} is below "
            f"max cumulative cases {cases.max():.0f}"
        )
        logger.warning(note)
        notes.append(note)

    negative_i = states["infected"] < 0
    if negative_i.any():
        # Reporting artifact; surfaced but left in place.
        logger.info("Infected count is negative in %d week(s)", int(negative_i.sum()))

    states.attrs["warnings"] = notes
    return states


def training_window(
    states: pd.DataFrame,
    end: pd.Timestamp,
    start: pd.Timestamp = None,
) -> pd.DataFrame:
    """Return the chronologically sorted rows with start <= week <= end."""
    check_columns(states, STATE_COLUMNS, "states")
    weeks = pd.to_datetime(states["week"])
    mask = weeks <= pd.Timestamp(end)
    if start is not None:
        mask &= weeks >= pd.Timestamp(start)
    return states.loc[mask].sort_values("week").reset_index(drop=True)
