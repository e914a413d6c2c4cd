"""Weekly SIR fitting and projection for national COVID-19 series.

Re-exports the pipeline stages so notebooks and scripts can import from
src.covid_sir without deep module paths.
"""


# Re-export core helpers for convenience (keep matplotlib out of this import).
from .config import DEFAULTS, ProjectionConfig  # noqa: F401
from .errors import InsufficientDataError  # noqa: F401
from .compartments import derive_compartments  # noqa: F401
from .estimate import RateEstimate, estimate_rates, per_week_rates  # noqa: F401
from .simulate import ProjectedState, Projection, simulate_projection, seed_state  # noqa: F401
from .incidence import join_projection, new_case_table  # noqa: F401
from .pipeline import PipelineResult, run_pipeline  # noqa: F401
from .datasets import build_weekly_observations, load_weekly_observations  # noqa: F401
from .metrics import forecast_metrics, rate_summary  # noqa: F401
