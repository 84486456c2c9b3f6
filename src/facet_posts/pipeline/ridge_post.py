from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from facet_posts.config import AppConfig, RidgeConfig
from facet_posts.io.read import load_table
from facet_posts.io.write import write_summary
from facet_posts.models.ridge import (
    coefficient_table,
    compare_fits,
    cross_validate_ridge,
    fit_ols,
    lambda_grid,
    run_simulation,
    summarise_simulation,
)
from facet_posts.paths import build_output_paths
from facet_posts.pipeline.base import PostResult, write_post_tables
from facet_posts.viz.regression import plot_coefficients, plot_cv_curve, plot_simulation_mse

LOGGER = logging.getLogger(__name__)


def select_model_frame(
    frame: pd.DataFrame, settings: RidgeConfig
) -> tuple[pd.DataFrame, list[str]]:
    """Return complete-case rows for the target and the predictor columns used."""
    if settings.target not in frame.columns:
        raise ValueError(f"Dataset missing target column: {settings.target}")

    if settings.features:
        missing = [column for column in settings.features if column not in frame.columns]
        if missing:
            raise ValueError(f"Dataset missing feature column(s): {', '.join(missing)}")
        features = list(settings.features)
    else:
        numeric = frame.select_dtypes(include="number").columns
        features = [column for column in numeric if column != settings.target]
    if not features:
        raise ValueError("No numeric predictor columns available")

    used = frame.loc[:, features + [settings.target]].apply(pd.to_numeric, errors="coerce")
    complete = used.dropna()
    dropped = len(used) - len(complete)
    if dropped:
        LOGGER.info("Dropped %d rows with missing model values", dropped)
    return complete.reset_index(drop=True), features


def _render_ridge_figures(
    tables: dict[str, pd.DataFrame],
    best_lambda: float,
    figures_dir: Path,
    config: AppConfig,
) -> dict[str, Path]:
    figure_suffix = config.outputs.figures_format
    rendered: dict[str, Path] = {}
    try:
        candidates = {
            "ridge_cv": plot_cv_curve(
                tables["ridge_cv"], best_lambda, figures_dir / f"ridge_cv.{figure_suffix}"
            ),
            "coefficients": plot_coefficients(
                tables["coefficients"], figures_dir / f"coefficients.{figure_suffix}"
            ),
        }
        if "simulation_summary" in tables:
            candidates["simulation_mse"] = plot_simulation_mse(
                tables["simulation_summary"], figures_dir / f"simulation_mse.{figure_suffix}"
            )
        rendered = {name: path for name, path in candidates.items() if path is not None}
    except Exception:  # pragma: no cover
        LOGGER.exception("Failed rendering one or more ridge figures")
    return rendered


def run_ridge_post(data_path: Path, out_dir: Path, config: AppConfig) -> PostResult:
    paths = build_output_paths(out_dir)
    settings = config.ridge
    frame, features = select_model_frame(load_table(data_path), settings)
    X = frame.loc[:, features].astype(float)
    y = frame[settings.target].astype(float)

    lambdas = lambda_grid(settings.lambda_upper, settings.lambda_lower, settings.lambda_step)
    folds = min(settings.folds, len(frame))
    ols = fit_ols(X, y)
    ridge = cross_validate_ridge(X, y, lambdas, folds=folds, random_seed=settings.random_seed)

    tables: dict[str, pd.DataFrame] = {
        "ridge_cv": ridge.cv_table,
        "model_fit": compare_fits(X, y, ols, ridge),
        "coefficients": coefficient_table(features, ols, ridge),
    }
    if config.simulation.enabled:
        simulation = run_simulation(config.simulation, lambdas)
        tables["simulation"] = simulation
        tables["simulation_summary"] = summarise_simulation(simulation)

    write_post_tables(tables, paths.tables, config.outputs)
    (paths.summary / "ols_summary.txt").write_text(ols.summary().as_text(), encoding="utf-8")
    figures = _render_ridge_figures(tables, ridge.best_lambda, paths.figures, config)

    fit = tables["model_fit"].set_index("model")
    summary = {
        "rows": int(len(frame)),
        "target": settings.target,
        "features": features,
        "folds": int(folds),
        "best_lambda": ridge.best_lambda,
        "r_squared": {model: float(fit.loc[model, "r_squared"]) for model in fit.index},
        "mse": {model: float(fit.loc[model, "mse"]) for model in fit.index},
    }
    if "simulation_summary" in tables:
        test_error = tables["simulation_summary"]
        test_error = test_error[test_error["split"] == "test"]
        summary["simulation_test_mse"] = {
            f"{row.model}_p{int(row.n_predictors)}": float(row.mean_mse)
            for row in test_error.itertuples(index=False)
        }
    write_summary(summary, paths.summary / "ridge_post.json")
    return PostResult(name="ridge_post", summary=summary, tables=tables, figures=figures)
