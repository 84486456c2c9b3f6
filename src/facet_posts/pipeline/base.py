from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from facet_posts.config import OutputsConfig
from facet_posts.io.write import write_table


@dataclass(frozen=True)
class PostResult:
    name: str
    summary: dict[str, Any]
    tables: dict[str, pd.DataFrame]
    figures: dict[str, Path] = field(default_factory=dict)


def table_extension(outputs: OutputsConfig) -> str:
    return "parquet" if outputs.tables_format == "parquet" else "csv"


def write_post_tables(
    tables: dict[str, pd.DataFrame],
    tables_dir: Path,
    outputs: OutputsConfig,
) -> dict[str, Path]:
    extension = table_extension(outputs)
    return {
        name: write_table(table, tables_dir / f"{name}.{extension}", fmt=outputs.tables_format)
        for name, table in tables.items()
    }
