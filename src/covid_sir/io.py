"""Run I/O helpers.

Create output folders and persist configs, rate estimates and result
tables as JSON and CSV. Used by scripts to standardise artifacts in runs/.
"""


from pathlib import Path
import json
import math
from typing import Dict, Union

import pandas as pd


def ensure_dir(path: Union[Path, str]) -> Path:
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _json_default(value):
    if isinstance(value, pd.Timestamp):
        return value.date().isoformat()
    return str(value)


def _clean_nan(payload):
    # JSON has no NaN; write null instead.
    if isinstance(payload, dict):
        return {k: _clean_nan(v) for k, v in payload.items()}
    if isinstance(payload, float) and math.isnan(payload):
        return None
    return payload


def save_json(path: Union[Path, str], payload: Dict) -> None:
    path = Path(path)
    with path.open("w", encoding="utf-8") as f:
        # Stable formatting helps diffs between runs.
        json.dump(_clean_nan(payload), f, indent=2, sort_keys=True, default=_json_default)


def save_table(path: Union[Path, str], table: pd.DataFrame) -> None:
    """Write a result table as CSV with ISO week dates."""
    path = Path(path)
    if table.empty:
        return
    out = table.copy()
    if "week" in out.columns:
        out["week"] = pd.to_datetime(out["week"]).dt.strftime("%Y-%m-%d")
    out.to_csv(path, index=False)
