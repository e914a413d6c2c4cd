import pandas as pd
import pytest

from src.covid_sir.estimate import RateEstimate
from src.covid_sir.simulate import (
    ProjectedState,
    Projection,
    seed_state,
    simulate_projection,
    step,
)


SEED_WEEK = pd.Timestamp("2020-06-29")


def _seed(s=330_000_000 - 100, i=100, r=0):
    return ProjectedState(SEED_WEEK, float(s), float(i), float(r))


def test_one_step_matches_hand_computation():
    seed = _seed()
    rates = RateEstimate(beta=0.00000002, gamma=0.1)
    out = simulate_projection(seed, rates, horizon=1)
    assert len(out) == 1

    s0, i0 = 330_000_000 - 100, 100
    infections = 0.00000002 * s0 * i0
    row = out.iloc[0]
    assert row["week"] == SEED_WEEK + pd.Timedelta(weeks=1)
    assert row["pred_susceptible"] == pytest.approx(s0 - infections)
    assert row["pred_infected"] == pytest.approx(i0 + infections - 0.1 * i0)
    assert row["pred_removed"] == pytest.approx(0.1 * i0)
    # 659.9998 new infections from the seed.
    assert row["pred_infected"] == pytest.approx(749.9998)
    assert row["pred_removed"] == pytest.approx(10.0)


def test_zero_rates_repeat_seed():
    seed = _seed(900, 80, 20)
    states = list(Projection(seed, RateEstimate(beta=0.0, gamma=0.0), horizon=5))
    assert len(states) == 5
    for k, state in enumerate(states, start=1):
        assert state.week == SEED_WEEK + pd.Timedelta(weeks=k)
        assert (state.pred_susceptible, state.pred_infected, state.pred_removed) == (900, 80, 20)


def test_projection_is_restartable_and_deterministic():
    seed = _seed(10_000, 50, 0)
    rates = RateEstimate(beta=0.00003, gamma=0.2)
    projection = Projection(seed, rates, horizon=20)
    first = list(projection)
    second = list(projection)
    assert first == second
    assert first == list(Projection(seed, rates, horizon=20))
    assert len(projection) == 20


def test_population_conserved_stepwise():
    seed = _seed(10_000, 50, 0)
    rates = RateEstimate(beta=0.00003, gamma=0.2)
    prev = seed
    for state in Projection(seed, rates, horizon=30):
        total = state.pred_susceptible + state.pred_infected + state.pred_removed
        prev_total = prev.pred_susceptible + prev.pred_infected + prev.pred_removed
        assert total == pytest.approx(prev_total)
        prev = state


def test_no_clamping_on_overshoot():
    # Large beta drives S below zero within a step.
    seed = _seed(1_000, 500, 0)
    nxt = step(seed, beta=0.01, gamma=0.1)
    assert nxt.pred_susceptible == 1_000 - 0.01 * 1_000 * 500
    assert nxt.pred_susceptible < 0


@pytest.mark.parametrize("horizon", [0, -3, 1.5])
def test_rejects_bad_horizon(horizon):
    with pytest.raises(ValueError):
        Projection(_seed(), RateEstimate(beta=0.1, gamma=0.1), horizon=horizon)


def test_seed_state_picks_last_or_given_week():
    states = pd.DataFrame({
        "week": pd.date_range("2020-03-02", periods=3, freq="7D"),
        "susceptible": [90.0, 80.0, 70.0],
        "infected": [10.0, 15.0, 20.0],
        "removed": [0.0, 5.0, 10.0],
    })
    assert seed_state(states).pred_susceptible == 70.0
    assert seed_state(states, week="2020-03-09").pred_infected == 15.0
    with pytest.raises(ValueError):
        seed_state(states, week="2021-01-04")
