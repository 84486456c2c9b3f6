from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from facet_posts.io.read import load_corpus, load_table
from facet_posts.io.write import write_summary, write_table
from facet_posts.paths import build_output_paths


def test_write_and_load_csv_table(tmp_path: Path) -> None:
    frame = pd.DataFrame({"group": ["A", "B"], "category": ["x", "y"], "value": [1.5, -2.0]})

    path = write_table(frame, tmp_path / "nested" / "rows.csv", fmt="csv")

    pd.testing.assert_frame_equal(load_table(path), frame)


def test_table_io_rejects_unknown_formats(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Unsupported table format"):
        write_table(pd.DataFrame({"a": [1]}), tmp_path / "rows.xlsx", fmt="xlsx")
    with pytest.raises(ValueError, match="Unsupported table file type"):
        load_table(tmp_path / "rows.xlsx")


def test_load_corpus_from_text_file_and_table(tmp_path: Path) -> None:
    text_path = tmp_path / "emma.txt"
    text_path.write_text("I was not sorry.", encoding="utf-8")
    corpus = load_corpus(text_path)
    assert corpus.to_dict("records") == [{"book": "emma", "text": "I was not sorry."}]

    table_path = tmp_path / "corpus.csv"
    table_path.write_text('book,text\nA,"no doubt"\nB,\n', encoding="utf-8")
    corpus = load_corpus(table_path)
    assert corpus["text"].tolist() == ["no doubt", ""]

    with pytest.raises(ValueError, match="text column"):
        load_corpus(table_path, text_col="body")


def test_write_summary_and_output_paths(tmp_path: Path) -> None:
    paths = build_output_paths(tmp_path / "out")
    for directory in (paths.tables, paths.figures, paths.summary):
        assert directory.is_dir()

    summary_path = write_summary({"rows": 3, "groups": ["A"]}, paths.summary / "run.json")

    assert json.loads(summary_path.read_text(encoding="utf-8")) == {"groups": ["A"], "rows": 3}


def test_write_summary_converts_numpy_scalars(tmp_path: Path) -> None:
    summary_path = write_summary(
        {"best_lambda": np.float64(0.5), "groups": np.int64(4), "path": tmp_path},
        tmp_path / "summary.json",
    )

    loaded = json.loads(summary_path.read_text(encoding="utf-8"))
    assert loaded == {"best_lambda": 0.5, "groups": 4, "path": str(tmp_path)}
