"""Central defaults for the weekly SIR projection.

Defines the Defaults dataclass with the shared analysis settings (population,
training window, forecast horizon, data sources, output paths) and the
ProjectionConfig that is passed explicitly into every pipeline stage. Scripts
read DEFAULTS for CLI defaults; library code never reads it implicitly.
"""


from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Optional

import pandas as pd


JHU_BASE_URL = (
    "https://raw.githubusercontent.com/CSSEGISandData/COVID-19/master/"
    "csse_covid_19_data/csse_covid_19_time_series/"
)

FILL_POLICIES = ("zero", "drop")


# Shared analysis defaults.
@dataclass(frozen=True)
class Defaults:
    country: str = "US"
    population: float = 330_000_000.0
    training_window_start: Optional[str] = None
    training_window_end: str = "2020-06-29"
    forecast_horizon: int = 12
    fill_policy: str = "zero"
    confirmed_url: str = JHU_BASE_URL + "time_series_covid19_confirmed_global.csv"
    deaths_url: str = JHU_BASE_URL + "time_series_covid19_deaths_global.csv"
    recovered_url: str = JHU_BASE_URL + "time_series_covid19_recovered_global.csv"
    runs_dir: Path = Path("runs")


# Shared defaults instance used by scripts.
DEFAULTS = Defaults()


@dataclass(frozen=True)
class ProjectionConfig:
    """Explicit configuration for one pipeline run.

    population:
        Fixed population N; drives the susceptible baseline.
    training_window_end:
        Last week included in parameter estimation; also the seed week.
    forecast_horizon:
        Number of weeks to simulate past the seed week.
    training_window_start:
        First week included in estimation (None means the first week).
    fill_policy:
        How missing weekly figures are handled: "zero" or "drop".
    """

    population: float
    training_window_end: pd.Timestamp
    forecast_horizon: int
    training_window_start: Optional[pd.Timestamp] = None
    fill_policy: str = "zero"

    def __post_init__(self) -> None:
        if self.population <= 0:
            raise ValueError("population must be positive")
        if int(self.forecast_horizon) != self.forecast_horizon or self.forecast_horizon <= 0:
            raise ValueError("forecast_horizon must be a positive integer")
        if self.fill_policy not in FILL_POLICIES:
            raise ValueError(f"fill_policy must be one of {FILL_POLICIES}")
        # Normalise dates so callers may pass strings.
        object.__setattr__(self, "training_window_end", pd.Timestamp(self.training_window_end))
        if self.training_window_start is not None:
            start = pd.Timestamp(self.training_window_start)
            if start > self.training_window_end:
                raise ValueError("training_window_start must not be after training_window_end")
            object.__setattr__(self, "training_window_start", start)

    @classmethod
    def from_defaults(cls, defaults: Defaults = DEFAULTS, **overrides) -> "ProjectionConfig":
        """Build a config from a Defaults instance, applying keyword overrides."""
        values = {
            "population": defaults.population,
            "training_window_start": defaults.training_window_start,
            "training_window_end": defaults.training_window_end,
            "forecast_horizon": defaults.forecast_horizon,
            "fill_policy": defaults.fill_policy,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def to_dict(self) -> Dict[str, object]:
        """JSON-friendly view of the config for run artifacts."""
        payload = asdict(self)
        for key in ("training_window_start", "training_window_end"):
            if payload[key] is not None:
                payload[key] = payload[key].date().isoformat()
        return payload
