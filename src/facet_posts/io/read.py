from __future__ import annotations

from pathlib import Path

import pandas as pd


def load_table(path: Path) -> pd.DataFrame:
    if path.suffix == ".parquet":
        return pd.read_parquet(path)
    if path.suffix == ".csv":
        # utf-8-sig strips BOM-prefixed headers commonly found in exported CSV files.
        return pd.read_csv(path, encoding="utf-8-sig")
    raise ValueError(f"Unsupported table file type: {path.suffix}")


def load_corpus(path: Path, text_col: str = "text", id_col: str = "book") -> pd.DataFrame:
    """Load documents from a table with a text column or from a plain .txt file."""
    if path.suffix == ".txt":
        text = path.read_text(encoding="utf-8")
        return pd.DataFrame({id_col: [path.stem], text_col: [text]})

    frame = load_table(path)
    if text_col not in frame.columns:
        raise ValueError(f"Corpus table missing text column: {text_col}")
    frame[text_col] = frame[text_col].fillna("").astype(str)
    return frame
