"""Top-level package for covid-sir-projection.

Project code lives under `src/`. The projection pipeline lives under
`src.covid_sir` (weekly ingestion, compartments, rate estimation, forward
simulation, incidence); figures live under `src.visualization`.
"""

# Package marker; keep this module lightweight.
