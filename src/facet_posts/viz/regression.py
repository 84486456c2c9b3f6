from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from facet_posts.models.ridge import INTERCEPT_LABEL
from facet_posts.viz.common import save_figure

MODEL_COLORS = {"ols": "#7c3aed", "ridge": "#0f766e"}


def plot_cv_curve(cv_table: pd.DataFrame, best_lambda: float, output_path: Path) -> Path | None:
    required = {"log_lambda", "mean_mse", "std_mse"}
    if cv_table.empty or not required.issubset(set(cv_table.columns)):
        return None
    ordered = cv_table.sort_values("log_lambda")
    plt.figure(figsize=(10, 4))
    plt.errorbar(
        ordered["log_lambda"],
        ordered["mean_mse"],
        yerr=ordered["std_mse"],
        fmt="o",
        markersize=3,
        color=MODEL_COLORS["ridge"],
        ecolor="#94a3b8",
        elinewidth=0.8,
    )
    plt.axvline(
        float(np.log10(best_lambda)),
        color="#dc2626",
        linewidth=1.1,
        linestyle="--",
        label=f"Best lambda = {best_lambda:.3g}",
    )
    plt.title("Ridge cross-validation error")
    plt.xlabel("log10(lambda)")
    plt.ylabel("Mean squared error")
    plt.legend(loc="upper left")
    return save_figure(output_path)


def plot_coefficients(coefficients: pd.DataFrame, output_path: Path) -> Path | None:
    required = {"term", "ols", "ridge"}
    if coefficients.empty or not required.issubset(set(coefficients.columns)):
        return None
    slopes = coefficients[coefficients["term"] != INTERCEPT_LABEL]
    if slopes.empty:
        return None

    y = np.arange(len(slopes), dtype=float)
    height = 0.38
    plt.figure(figsize=(9, max(3.0, 0.45 * len(slopes))))
    plt.barh(y - height / 2, slopes["ols"], height=height, color=MODEL_COLORS["ols"], label="OLS")
    plt.barh(
        y + height / 2, slopes["ridge"], height=height, color=MODEL_COLORS["ridge"], label="Ridge"
    )
    plt.axvline(0.0, color="#334155", linewidth=0.8)
    plt.yticks(y, slopes["term"].astype(str).tolist())
    plt.title("Coefficient estimates")
    plt.xlabel("Coefficient")
    plt.legend(loc="lower right")
    return save_figure(output_path)


def plot_simulation_mse(summary: pd.DataFrame, output_path: Path) -> Path | None:
    required = {"n_predictors", "model", "split", "mean_mse", "se_mse"}
    if summary.empty or not required.issubset(set(summary.columns)):
        return None

    splits = [split for split in ("train", "test") if split in set(summary["split"])]
    if not splits:
        return None
    fig, axes = plt.subplots(1, len(splits), figsize=(5.5 * len(splits), 4), squeeze=False)
    for axis, split in zip(axes.flat, splits):
        subset = summary[summary["split"] == split]
        for model, rows in subset.groupby("model", sort=True):
            rows = rows.sort_values("n_predictors")
            axis.errorbar(
                rows["n_predictors"],
                rows["mean_mse"],
                yerr=rows["se_mse"],
                marker="o",
                capsize=3,
                color=MODEL_COLORS.get(str(model), "#334155"),
                label=str(model).upper() if model == "ols" else str(model).title(),
            )
        axis.set_title(f"{split.title()} error")
        axis.set_xlabel("Number of predictors")
        axis.set_ylabel("Mean squared error")
        axis.legend(loc="upper left")
    fig.suptitle("OLS vs ridge over simulated datasets")
    return save_figure(output_path)
