from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from facet_posts.config import AppConfig
from facet_posts.features.ngrams import count_bigrams, tokenize_bigrams
from facet_posts.features.sentiment import load_lexicon, negation_contributions
from facet_posts.io.read import load_corpus
from facet_posts.io.write import write_summary
from facet_posts.paths import build_output_paths
from facet_posts.pipeline.base import PostResult, write_post_tables
from facet_posts.reorder import reorder_for_facets, select_top_k, shared_category_positions
from facet_posts.viz.facets import plot_faceted_bars

LOGGER = logging.getLogger(__name__)

NEGATION_COLUMNS = {"group_col": "word1", "category_col": "word2", "value_col": "contribution"}


def build_negation_tables(
    corpus: pd.DataFrame,
    lexicon: pd.DataFrame,
    config: AppConfig,
) -> dict[str, pd.DataFrame]:
    bigrams = tokenize_bigrams(corpus, text_col=config.text.text_col, id_cols=config.text.id_cols)
    counts = count_bigrams(bigrams)
    contributions = negation_contributions(counts, lexicon, config.text.negation_words)

    top_k = config.reorder.top_k
    capped = (
        select_top_k(contributions, top_k, group_col="word1", value_col="contribution")
        if top_k is not None
        else contributions
    )
    naive = shared_category_positions(
        capped, start=config.reorder.position_start, **NEGATION_COLUMNS
    )
    ordered = reorder_for_facets(
        contributions,
        top_k=top_k,
        group_order=config.reorder.group_order,
        start=config.reorder.position_start,
        **NEGATION_COLUMNS,
    )
    return {
        "bigram_counts": counts,
        "negation_contributions": contributions,
        "negation_naive": naive,
        "negation_ordered": ordered,
    }


def _render_negation_figures(
    tables: dict[str, pd.DataFrame],
    figures_dir: Path,
    config: AppConfig,
) -> dict[str, Path]:
    figure_suffix = config.outputs.figures_format
    rendered: dict[str, Path] = {}
    try:
        for name, title in (
            ("negation_naive", "Words after negations, ordered by overall contribution"),
            ("negation_ordered", "Words after negations, ordered within each panel"),
        ):
            path = plot_faceted_bars(
                tables[name],
                figures_dir / f"{name}.{figure_suffix}",
                title=title,
                xlabel="Sentiment score x number of occurrences",
                **NEGATION_COLUMNS,
            )
            if path is not None:
                rendered[name] = path
    except Exception:  # pragma: no cover
        LOGGER.exception("Failed rendering one or more negation figures")
    return rendered


def run_negation_post(corpus_path: Path, out_dir: Path, config: AppConfig) -> PostResult:
    paths = build_output_paths(out_dir)
    corpus = load_corpus(corpus_path, text_col=config.text.text_col)
    lexicon = load_lexicon(Path(config.text.lexicon_path))
    LOGGER.info("Loaded %d documents and %d lexicon entries", len(corpus), len(lexicon))

    tables = build_negation_tables(corpus, lexicon, config)
    write_post_tables(tables, paths.tables, config.outputs)
    figures = _render_negation_figures(tables, paths.figures, config)

    ordered = tables["negation_ordered"]
    summary = {
        "documents": int(len(corpus)),
        "distinct_bigrams": int(len(tables["bigram_counts"])),
        "scored_negated_words": int(len(tables["negation_contributions"])),
        "plotted_rows": int(len(ordered)),
        "groups": sorted(str(value) for value in ordered["word1"].unique()),
        "top_k": config.reorder.top_k,
        "group_order": config.reorder.group_order,
    }
    write_summary(summary, paths.summary / "negation_post.json")
    return PostResult(name="negation_post", summary=summary, tables=tables, figures=figures)
