"""Shared fixtures for the projection tests."""

import numpy as np
import pandas as pd
import pytest


POPULATION = 1_000_000.0


@pytest.fixture
def weeks():
    return pd.date_range("2020-03-02", periods=10, freq="7D")


@pytest.fixture
def observations(weeks):
    # Smoothly growing cumulative counts, weekly cadence.
    cases = np.array([100, 250, 600, 1200, 2100, 3300, 4700, 6200, 7700, 9100], dtype=float)
    deaths = np.round(cases * 0.02)
    recovered = np.round(cases * 0.3)
    return pd.DataFrame({
        "week": weeks,
        "cumulative_cases": cases,
        "cumulative_deaths": deaths,
        "cumulative_recovered": recovered,
    })
