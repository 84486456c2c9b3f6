from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

TABLE_WRITERS = {
    "csv": lambda df, path: df.to_csv(path, index=False),
    "parquet": lambda df, path: df.to_parquet(path, index=False),
}


def write_table(df: pd.DataFrame, path: Path, fmt: str = "csv") -> Path:
    writer = TABLE_WRITERS.get(fmt)
    if writer is None:
        raise ValueError(f"Unsupported table format: {fmt}")
    path.parent.mkdir(parents=True, exist_ok=True)
    writer(df, path)
    return path


def _json_default(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    return str(value)


def write_summary(data: dict[str, Any], path: Path) -> Path:
    """Write a post summary as sorted JSON; numpy scalars become plain numbers."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(data, indent=2, sort_keys=True, default=_json_default), encoding="utf-8"
    )
    return path
