from __future__ import annotations

import logging
from pathlib import Path

from facet_posts.config import AppConfig
from facet_posts.io.read import load_table
from facet_posts.io.write import write_summary
from facet_posts.paths import build_output_paths
from facet_posts.pipeline.base import PostResult, write_post_tables
from facet_posts.reorder import reorder_for_facets
from facet_posts.viz.facets import plot_faceted_bars

LOGGER = logging.getLogger(__name__)


def run_reorder(rows_path: Path, out_dir: Path, config: AppConfig) -> PostResult:
    """Reorder a (group, category, value) table and draw it as faceted bars."""
    paths = build_output_paths(out_dir)
    settings = config.reorder
    columns = {
        "group_col": settings.group_col,
        "category_col": settings.category_col,
        "value_col": settings.value_col,
    }
    rows = load_table(rows_path)
    ordered = reorder_for_facets(
        rows,
        top_k=settings.top_k,
        group_order=settings.group_order,
        start=settings.position_start,
        **columns,
    )
    LOGGER.info("Reordered %d of %d rows", len(ordered), len(rows))

    tables = {"ordered": ordered}
    write_post_tables(tables, paths.tables, config.outputs)

    figures: dict[str, Path] = {}
    try:
        figure = plot_faceted_bars(
            ordered, paths.figures / f"ordered.{config.outputs.figures_format}", **columns
        )
        if figure is not None:
            figures["ordered"] = figure
    except Exception:  # pragma: no cover
        LOGGER.exception("Failed rendering reordered facet figure")

    summary = {
        "input_rows": int(len(rows)),
        "output_rows": int(len(ordered)),
        "groups": int(ordered[settings.group_col].nunique()) if not ordered.empty else 0,
        "top_k": settings.top_k,
        "group_order": settings.group_order,
    }
    write_summary(summary, paths.summary / "reorder.json")
    return PostResult(name="reorder", summary=summary, tables=tables, figures=figures)
