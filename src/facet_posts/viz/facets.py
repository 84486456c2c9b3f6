from __future__ import annotations

import math
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from facet_posts.reorder import POSITION_COLUMN, position_labels
from facet_posts.viz.common import NEGATIVE_COLOR, POSITIVE_COLOR, save_figure


def plot_faceted_bars(
    ordered: pd.DataFrame,
    output_path: Path,
    *,
    group_col: str = "group",
    category_col: str = "category",
    value_col: str = "value",
    ncols: int = 2,
    title: str | None = None,
    xlabel: str | None = None,
) -> Path | None:
    """Draw one horizontal bar panel per group on a shared position axis.

    Each panel is limited to its own positions (free scale) and the numeric
    ticks are replaced by the category labels.
    """
    required = {group_col, category_col, value_col, POSITION_COLUMN}
    if ordered.empty or not required.issubset(set(ordered.columns)):
        return None

    by_position = ordered.sort_values(POSITION_COLUMN, kind="stable")
    groups = list(dict.fromkeys(by_position[group_col].tolist()))
    labels = position_labels(by_position, category_col=category_col)

    ncols = max(1, min(int(ncols), len(groups)))
    nrows = math.ceil(len(groups) / ncols)
    largest_panel = int(by_position.groupby(group_col, sort=False).size().max())
    panel_height = max(2.5, 0.32 * largest_panel)
    fig, axes = plt.subplots(
        nrows, ncols, figsize=(5.5 * ncols, panel_height * nrows), squeeze=False
    )

    for axis, group in zip(axes.flat, groups):
        subset = by_position[by_position[group_col] == group]
        positions = subset[POSITION_COLUMN].to_numpy(dtype=int)
        values = subset[value_col].to_numpy(dtype=float)
        colors = np.where(values >= 0.0, POSITIVE_COLOR, NEGATIVE_COLOR)
        axis.barh(positions, values, color=colors, alpha=0.85)
        axis.axvline(0.0, color="#334155", linewidth=0.8)
        axis.set_yticks(positions)
        axis.set_yticklabels([labels[int(position)] for position in positions])
        axis.set_ylim(positions.min() - 0.6, positions.max() + 0.6)
        axis.set_title(str(group))
        if xlabel:
            axis.set_xlabel(xlabel)

    for axis in axes.flat[len(groups) :]:
        axis.set_visible(False)
    if title:
        fig.suptitle(title)
    return save_figure(output_path)
