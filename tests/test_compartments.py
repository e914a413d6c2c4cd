import numpy as np
import pandas as pd
import pytest

from src.covid_sir.compartments import derive_compartments, training_window
from src.covid_sir.errors import POPULATION_ASSUMPTION_VIOLATED

from tests.conftest import POPULATION


def test_compartments_sum_to_population(observations):
    states = derive_compartments(observations, POPULATION)
    total = states["susceptible"] + states["infected"] + states["removed"]
    assert (total == POPULATION).all()
    assert list(states["week"]) == list(observations["week"])
    assert states.attrs["warnings"] == []


def test_formulas_per_row():
    obs = pd.DataFrame({
        "week": pd.to_datetime(["2020-04-06"]),
        "cumulative_cases": [500.0],
        "cumulative_deaths": [20.0],
        "cumulative_recovered": [80.0],
    })
    row = derive_compartments(obs, 10_000).iloc[0]
    assert row["susceptible"] == 9_500
    assert row["infected"] == 400
    assert row["removed"] == 100


def test_missing_values_are_zero_filled():
    obs = pd.DataFrame({
        "week": pd.to_datetime(["2020-04-06", "2020-04-13"]),
        "cumulative_cases": [10.0, 20.0],
        "cumulative_deaths": [np.nan, 1.0],
        "cumulative_recovered": [2.0, np.nan],
    })
    states = derive_compartments(obs, 100)
    assert states["removed"].tolist() == [2.0, 1.0]
    assert states["infected"].tolist() == [8.0, 19.0]


def test_negative_infected_is_kept():
    obs = pd.DataFrame({
        "week": pd.to_datetime(["2020-04-06"]),
        "cumulative_cases": [10.0],
        "cumulative_deaths": [5.0],
        "cumulative_recovered": [8.0],
    })
    states = derive_compartments(obs, 100)
    assert states["infected"].iloc[0] == -3.0


def test_small_population_is_advisory(observations, caplog):
    with caplog.at_level("WARNING"):
        states = derive_compartments(observations, 5_000)
    assert (states["susceptible"] < 0).any()
    assert len(states.attrs["warnings"]) == 1
    assert states.attrs["warnings"][0].startswith(POPULATION_ASSUMPTION_VIOLATED)
    assert POPULATION_ASSUMPTION_VIOLATED in caplog.text
    # Values are not clamped.
    assert states["susceptible"].iloc[-1] == 5_000 - 9_100


def test_rejects_bad_inputs(observations):
    with pytest.raises(ValueError):
        derive_compartments(observations, 0)
    with pytest.raises(ValueError, match="missing columns"):
        derive_compartments(observations.drop(columns=["cumulative_deaths"]), POPULATION)


def test_training_window_is_inclusive_and_sorted(observations, weeks):
    states = derive_compartments(observations.iloc[::-1], POPULATION)
    window = training_window(states, end=weeks[4], start=weeks[1])
    assert list(window["week"]) == list(weeks[1:5])
