from __future__ import annotations

from collections.abc import Callable, Sequence

import pandas as pd
from sklearn.feature_extraction.text import CountVectorizer

# Words keep inner apostrophes ("don't") and single letters ("i", "a").
TOKEN_PATTERN = r"(?u)\b\w[\w']*\b"


def _bigram_analyzer() -> Callable[[str], list[str]]:
    vectorizer = CountVectorizer(ngram_range=(2, 2), lowercase=True, token_pattern=TOKEN_PATTERN)
    return vectorizer.build_analyzer()


def tokenize_bigrams(
    corpus: pd.DataFrame,
    *,
    text_col: str = "text",
    id_cols: Sequence[str] = ("book",),
) -> pd.DataFrame:
    """Return one row per bigram occurrence with word1/word2 split out."""
    if text_col not in corpus.columns:
        raise ValueError(f"Corpus missing text column: {text_col}")

    kept_ids = [column for column in id_cols if column in corpus.columns]
    output_columns = kept_ids + ["word1", "word2"]
    if corpus.empty:
        return pd.DataFrame(columns=output_columns)

    analyzer = _bigram_analyzer()
    working = corpus.loc[:, kept_ids].copy()
    working["bigram"] = corpus[text_col].fillna("").astype(str).map(analyzer)
    exploded = working.explode("bigram").dropna(subset=["bigram"]).reset_index(drop=True)
    if exploded.empty:
        return pd.DataFrame(columns=output_columns)

    words = exploded["bigram"].str.split(" ", n=1, expand=True)
    exploded["word1"] = words[0]
    exploded["word2"] = words[1]
    return exploded.loc[:, output_columns].reset_index(drop=True)


def count_bigrams(bigrams: pd.DataFrame) -> pd.DataFrame:
    if bigrams.empty:
        return pd.DataFrame(columns=["word1", "word2", "n"])
    counts = bigrams.groupby(["word1", "word2"], dropna=True).size().reset_index(name="n")
    return counts.sort_values(
        ["n", "word1", "word2"], ascending=[False, True, True]
    ).reset_index(drop=True)
