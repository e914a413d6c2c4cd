"""Load and bucket national COVID-19 time series into weekly observations.

Reads the Johns Hopkins CSSE wide time-series CSVs (one row per
province/country, one column per day of cumulative counts), sums a
country's rows into a daily series, keeps the last cumulative value per
Monday-start week, and joins cases, deaths and recoveries into a
WeeklyObservation table.
"""


import logging
from typing import Optional, Union
from pathlib import Path

import pandas as pd

from .compartments import OBSERVATION_COLUMNS
from .config import FILL_POLICIES


logger = logging.getLogger(__name__)

ID_COLUMNS = ("Province/State", "Country/Region", "Lat", "Long")


def load_jhu_series(
    source: Union[str, Path],
    country: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> pd.Series:
    """Load one JHU CSSE wide CSV and return a country's daily cumulative series.

    Rows for all provinces of the country are summed. The returned series is
    indexed by date and sorted.
    """
    logger.info("Loading %s for %s", source, country)
    df = pd.read_csv(source)
    return country_series(df, country, start=start, end=end)


def country_series(
    df: pd.DataFrame,
    country: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> pd.Series:
    """Collapse a wide JHU frame to one daily cumulative series for ``country``."""
    if "Country/Region" not in df.columns:
        raise ValueError("time series is missing the 'Country/Region' column")
    rows = df.loc[df["Country/Region"] == country]
    if rows.empty:
        raise ValueError(f"country {country!r} not found in time series")

    date_cols = [c for c in df.columns if c not in ID_COLUMNS]
    daily = rows[date_cols].sum(axis=0, min_count=1)
    # JHU headers are m/d/yy.
    daily.index = pd.to_datetime(daily.index, format="%m/%d/%y")
    daily = daily.sort_index().astype(float)

    if start:
        daily = daily[daily.index >= pd.Timestamp(start)]
    if end:
        daily = daily[daily.index <= pd.Timestamp(end)]
    return daily


def to_weekly(daily: pd.Series) -> pd.Series:
    """Bucket a daily cumulative series into Monday-start weeks.

    The value for a week is the last reported cumulative count within it.
    """
    daily = daily.dropna()
    week_start = daily.index.to_period("W-SUN").start_time
    weekly = daily.groupby(week_start).last()
    weekly.index.name = "week"
    return weekly


def build_weekly_observations(
    cases: pd.Series,
    deaths: pd.Series,
    recovered: pd.Series,
    fill_policy: str = "zero",
) -> pd.DataFrame:
    """Join daily cumulative cases/deaths/recoveries into weekly observations.

    fill_policy "zero" coalesces missing weekly figures to zero; "drop"
    excludes any week where one of the three is missing.
    """
    if fill_policy not in FILL_POLICIES:
        raise ValueError(f"fill_policy must be one of {FILL_POLICIES}")

    weekly = pd.concat(
        {
            "cumulative_cases": to_weekly(cases),
            "cumulative_deaths": to_weekly(deaths),
            "cumulative_recovered": to_weekly(recovered),
        },
        axis=1,
        join="outer",
    ).sort_index()

    n_missing = int(weekly.isna().any(axis=1).sum())
    if n_missing:
        logger.info("%d week(s) have missing figures (fill_policy=%s)", n_missing, fill_policy)
    if fill_policy == "zero":
        weekly = weekly.fillna(0.0)
    else:
        weekly = weekly.dropna()

    weekly = weekly.reset_index().rename(columns={"index": "week"})
    return weekly[list(OBSERVATION_COLUMNS)]


def load_weekly_observations(
    confirmed: Union[str, Path],
    deaths: Union[str, Path],
    recovered: Union[str, Path],
    country: str,
    fill_policy: str = "zero",
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> pd.DataFrame:
    """Load the three JHU series for ``country`` and build weekly observations."""
    series = [
        load_jhu_series(src, country, start=start, end=end)
        for src in (confirmed, deaths, recovered)
    ]
    weekly = build_weekly_observations(*series, fill_policy=fill_policy)
    logger.info(
        "Built %d weekly observations (%s..%s)",
        len(weekly),
        weekly["week"].min().date() if len(weekly) else None,
        weekly["week"].max().date() if len(weekly) else None,
    )
    return weekly
