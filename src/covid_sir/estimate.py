"""Median finite-difference estimates of the SIR rates.

For each consecutive pair of weeks (t-1, t) in the training window:

    beta_t  = -(S[t] - S[t-1]) / (S[t-1] * I[t-1])
    gamma_t =  (R[t] - R[t-1]) / I[t-1]

The first week has no predecessor and yields nothing. Weeks whose
denominator is zero give NaN and are left out of the median, which is used
instead of the mean so single backfill weeks do not drag the estimate.
"""


from dataclasses import dataclass
import logging
from typing import Optional

import numpy as np
import pandas as pd

from .compartments import STATE_COLUMNS, check_columns, training_window
from .errors import InsufficientDataError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateEstimate:
    beta: float
    gamma: float
    n_beta: int = 0
    n_gamma: int = 0
    window_start: Optional[pd.Timestamp] = None
    window_end: Optional[pd.Timestamp] = None

    def to_dict(self) -> dict:
        return {
            "beta": self.beta,
            "gamma": self.gamma,
            "n_beta": self.n_beta,
            "n_gamma": self.n_gamma,
            "window_start": None if self.window_start is None else self.window_start.date().isoformat(),
            "window_end": None if self.window_end is None else self.window_end.date().isoformat(),
        }


def _safe_ratio(num: np.ndarray, den: np.ndarray) -> np.ndarray:
    """Elementwise num/den with NaN wherever den is zero or undefined."""
    out = np.full(num.shape, np.nan, dtype=float)
    valid = np.isfinite(den) & (den != 0)
    np.divide(num, den, out=out, where=valid)
    return out


def per_week_rates(states: pd.DataFrame) -> pd.DataFrame:
    """Per-week beta/gamma ratios for a chronologically ordered state table.

    Returns one row per week after the first, with NaN where the
    denominator is degenerate.
    """
    check_columns(states, STATE_COLUMNS, "states")
    s = states["susceptible"].to_numpy(dtype=float)
    i = states["infected"].to_numpy(dtype=float)
    r = states["removed"].to_numpy(dtype=float)

    s_prev, i_prev = s[:-1], i[:-1]
    beta = _safe_ratio(-(s[1:] - s_prev), s_prev * i_prev)
    gamma = _safe_ratio(r[1:] - r[:-1], i_prev)

    return pd.DataFrame({
        "week": pd.to_datetime(states["week"]).to_numpy()[1:],
        "beta": beta,
        "gamma": gamma,
    })


def estimate_rates(
    states: pd.DataFrame,
    end: pd.Timestamp,
    start: Optional[pd.Timestamp] = None,
) -> RateEstimate:
    """Estimate (beta, gamma) as medians over the training window [start, end].

    Raises InsufficientDataError when the window holds fewer than two weeks
    or when every ratio for either rate is undefined.
    """
    window = training_window(states, end=end, start=start)
    if len(window) < 2:
        raise InsufficientDataError(
            f"training window holds {len(window)} week(s); at least 2 are required"
        )

    rates = per_week_rates(window)
    betas = rates["beta"].to_numpy()
    gammas = rates["gamma"].to_numpy()
    valid_beta = np.isfinite(betas)
    valid_gamma = np.isfinite(gammas)

    dropped = int((~valid_beta).sum() + (~valid_gamma).sum())
    if dropped:
        logger.debug("Dropped %d degenerate per-week ratio(s)", dropped)

    if not valid_beta.any() or not valid_gamma.any():
        raise InsufficientDataError(
            "no valid week-to-week transition in the training window "
            f"(beta samples={int(valid_beta.sum())}, gamma samples={int(valid_gamma.sum())})"
        )

    estimate = RateEstimate(
        beta=float(np.median(betas[valid_beta])),
        gamma=float(np.median(gammas[valid_gamma])),
        n_beta=int(valid_beta.sum()),
        n_gamma=int(valid_gamma.sum()),
        window_start=pd.Timestamp(window["week"].iloc[0]),
        window_end=pd.Timestamp(window["week"].iloc[-1]),
    )
    logger.info(
        "Estimated beta=%.4g (n=%d) gamma=%.4g (n=%d) over %s..%s",
        estimate.beta,
        estimate.n_beta,
        estimate.gamma,
        estimate.n_gamma,
        estimate.window_start.date(),
        estimate.window_end.date(),
    )
    return estimate
