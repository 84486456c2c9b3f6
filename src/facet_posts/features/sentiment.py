from __future__ import annotations

import csv
from collections.abc import Iterable
from pathlib import Path

import pandas as pd

from facet_posts.config import DEFAULT_NEGATION_WORDS

CONTRIBUTION_COLUMNS = ["word1", "word2", "n", "value", "contribution"]


def load_lexicon(path: Path) -> pd.DataFrame:
    """Load a word/score lexicon.

    ``.csv`` files need a header with ``word`` and ``value`` (or ``score``)
    columns. Anything else is read as AFINN-style ``word<TAB>score`` lines.
    Scores must be whole numbers.
    """
    if path.suffix == ".csv":
        frame = pd.read_csv(path, encoding="utf-8-sig")
        if "value" not in frame.columns and "score" in frame.columns:
            frame = frame.rename(columns={"score": "value"})
        missing = {"word", "value"} - set(frame.columns)
        if missing:
            raise ValueError(f"Lexicon missing column(s): {', '.join(sorted(missing))}")
    else:
        frame = pd.read_csv(
            path,
            sep="\t",
            header=None,
            names=["word", "value"],
            quoting=csv.QUOTE_NONE,
            encoding="utf-8",
        )

    frame = frame.loc[:, ["word", "value"]].copy()
    frame["word"] = frame["word"].astype(str).str.strip().str.lower()
    frame["value"] = pd.to_numeric(frame["value"], errors="coerce")
    if frame["value"].isna().any():
        bad_word = frame.loc[frame["value"].isna(), "word"].iloc[0]
        raise ValueError(f"Lexicon has a non-numeric score for word: {bad_word}")
    fractional = frame["value"] % 1 != 0
    if fractional.any():
        bad_word = frame.loc[fractional, "word"].iloc[0]
        raise ValueError(f"Lexicon has a non-integer score for word: {bad_word}")
    frame["value"] = frame["value"].astype(int)
    return frame.drop_duplicates(subset="word", keep="first").reset_index(drop=True)


def negation_contributions(
    bigram_counts: pd.DataFrame,
    lexicon: pd.DataFrame,
    negation_words: Iterable[str] = DEFAULT_NEGATION_WORDS,
) -> pd.DataFrame:
    """Score words that follow a negation word by count times lexicon value."""
    required = {"word1", "word2", "n"}
    if not required.issubset(set(bigram_counts.columns)):
        raise ValueError("Bigram counts need word1, word2 and n columns")

    negations = {str(word).lower() for word in negation_words}
    negated = bigram_counts[bigram_counts["word1"].isin(negations)]
    if negated.empty:
        return pd.DataFrame(columns=CONTRIBUTION_COLUMNS)

    joined = negated.merge(lexicon, left_on="word2", right_on="word", how="inner")
    joined["contribution"] = joined["n"].astype(int) * joined["value"].astype(int)
    joined = joined.loc[:, CONTRIBUTION_COLUMNS]
    order = joined["contribution"].abs().sort_values(ascending=False, kind="stable").index
    return joined.loc[order].reset_index(drop=True)
