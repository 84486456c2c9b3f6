from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from facet_posts.config import SimulationConfig
from facet_posts.models.ridge import (
    INTERCEPT_LABEL,
    coefficient_table,
    compare_fits,
    cross_validate_ridge,
    fit_ols,
    lambda_grid,
    run_simulation,
    simulate_dataset,
    summarise_simulation,
)

WORKSPACE = Path(__file__).resolve().parents[1]


def _mtcars() -> tuple[pd.DataFrame, pd.Series]:
    frame = pd.read_csv(WORKSPACE / "data" / "mtcars.csv")
    features = [column for column in frame.columns if column not in {"model", "mpg"}]
    return frame[features].astype(float), frame["mpg"].astype(float)


def _linear_data(seed: int = 0) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    rng = np.random.default_rng(seed)
    X = rng.normal(size=(120, 3))
    beta = np.array([1.5, -2.0, 0.5])
    y = 4.0 + X @ beta + rng.normal(scale=0.05, size=120)
    return X, y, beta


def test_lambda_grid_matches_log_spaced_sequence() -> None:
    grid = lambda_grid()

    assert len(grid) == 51
    assert grid[0] == pytest.approx(1000.0)
    assert grid[-1] == pytest.approx(0.01)
    assert np.all(np.diff(grid) < 0)

    assert len(lambda_grid(1.0, 0.0, 0.3)) == 4
    with pytest.raises(ValueError):
        lambda_grid(step=0.0)
    with pytest.raises(ValueError):
        lambda_grid(upper=-3.0, lower=2.0)


def test_fit_ols_recovers_linear_coefficients() -> None:
    X, y, beta = _linear_data()

    result = fit_ols(X, y)

    params = np.asarray(result.params)
    assert params[0] == pytest.approx(4.0, abs=0.05)
    assert np.allclose(params[1:], beta, atol=0.05)
    assert result.rsquared > 0.99

    with pytest.raises(ValueError):
        fit_ols(X, y[:-1])


def test_cross_validate_ridge_reports_curve_and_best_lambda() -> None:
    X, y = _mtcars()
    lambdas = lambda_grid()

    result = cross_validate_ridge(X, y, lambdas, folds=5, random_seed=1)

    assert list(result.cv_table.columns) == ["lambda", "log_lambda", "mean_mse", "std_mse"]
    assert len(result.cv_table) == len(lambdas)
    best_row = result.cv_table.loc[result.cv_table["mean_mse"].idxmin()]
    assert result.best_lambda == pytest.approx(float(best_row["lambda"]))
    assert result.model.predict(X).shape == (len(y),)

    repeat = cross_validate_ridge(X, y, lambdas, folds=5, random_seed=1)
    pd.testing.assert_frame_equal(result.cv_table, repeat.cv_table)


def test_cross_validate_ridge_rejects_bad_arguments() -> None:
    X, y = _mtcars()

    with pytest.raises(ValueError, match="lambdas"):
        cross_validate_ridge(X, y, [])
    with pytest.raises(ValueError, match="folds"):
        cross_validate_ridge(X, y, [1.0], folds=1)
    with pytest.raises(ValueError, match="exceeds"):
        cross_validate_ridge(X, y, [1.0], folds=50)


def test_small_penalty_ridge_matches_ols_coefficients() -> None:
    X, y, _ = _linear_data(seed=3)
    ols = fit_ols(X, y)
    ridge = cross_validate_ridge(X, y, [1e-8], folds=5)

    table = coefficient_table(["x1", "x2", "x3"], ols, ridge)

    assert table["term"].tolist() == [INTERCEPT_LABEL, "x1", "x2", "x3"]
    assert np.allclose(table["ridge"], table["ols"], atol=1e-4)


def test_large_penalty_shrinks_slopes_towards_zero() -> None:
    X, y = _mtcars()
    ols = fit_ols(X, y)
    ridge = cross_validate_ridge(X, y, [1e7], folds=4)

    table = coefficient_table(list(X.columns), ols, ridge)
    slopes = table[table["term"] != INTERCEPT_LABEL]

    assert np.all(np.abs(slopes["ridge"]) < np.abs(slopes["ols"]))
    intercept = float(table.loc[table["term"] == INTERCEPT_LABEL, "ridge"].iloc[0])
    assert intercept == pytest.approx(float(y.mean()), abs=0.1)


def test_compare_fits_ols_has_highest_in_sample_r_squared() -> None:
    X, y = _mtcars()
    ols = fit_ols(X, y)
    ridge = cross_validate_ridge(X, y, lambda_grid(), folds=5)

    fits = compare_fits(X, y, ols, ridge).set_index("model")

    assert list(fits.index) == ["ols", "ridge"]
    assert fits.loc["ols", "r_squared"] >= fits.loc["ridge", "r_squared"] - 1e-12
    assert fits.loc["ols", "mse"] <= fits.loc["ridge", "mse"] + 1e-12
    assert np.isnan(fits.loc["ols", "lambda"])
    assert fits.loc["ridge", "lambda"] == pytest.approx(ridge.best_lambda)


def test_simulate_dataset_shapes_and_validation() -> None:
    rng = np.random.default_rng(0)

    X, y, beta = simulate_dataset(40, 6, rng, noise_sd=0.5, coef_sd=2.0)

    assert X.shape == (40, 6)
    assert y.shape == (40,)
    assert beta.shape == (6,)
    with pytest.raises(ValueError):
        simulate_dataset(0, 3, rng)
    with pytest.raises(ValueError):
        simulate_dataset(10, 0, rng)


def test_run_simulation_records_each_model_and_split() -> None:
    settings = SimulationConfig(n_obs=30, predictor_counts=[2, 20], n_simulations=3)
    lambdas = lambda_grid(2.0, -2.0, 0.5)

    results = run_simulation(settings, lambdas)

    assert len(results) == 2 * 3 * 4
    assert set(results["model"]) == {"ols", "ridge"}
    assert set(results["split"]) == {"train", "test"}
    assert results.loc[results["model"] == "ols", "lambda"].isna().all()
    assert results.loc[results["model"] == "ridge", "lambda"].isin(lambdas).all()

    # 20 predictors plus an intercept interpolate 15 training rows exactly.
    wide_ols_train = results[
        (results["model"] == "ols")
        & (results["split"] == "train")
        & (results["n_predictors"] == 20)
    ]
    assert (wide_ols_train["mse"] < 1e-8).all()

    pd.testing.assert_frame_equal(results, run_simulation(settings, lambdas))


def test_summarise_simulation_aggregates_draws() -> None:
    settings = SimulationConfig(n_obs=24, predictor_counts=[3], n_simulations=4)
    results = run_simulation(settings, lambda_grid(1.0, -1.0, 0.5))

    summary = summarise_simulation(results)

    assert list(summary.columns) == [
        "n_predictors",
        "model",
        "split",
        "mean_mse",
        "se_mse",
        "n_simulations",
    ]
    assert len(summary) == 4
    assert (summary["n_simulations"] == 4).all()
    assert (summary["se_mse"] >= 0).all()
    assert summarise_simulation(results.iloc[0:0]).empty
