from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import pandas as pd
import statsmodels.api as sm
from sklearn.linear_model import Ridge, RidgeCV
from sklearn.metrics import mean_squared_error, r2_score
from sklearn.model_selection import GridSearchCV, KFold
from sklearn.pipeline import Pipeline, make_pipeline
from sklearn.preprocessing import StandardScaler

from facet_posts.config import SimulationConfig

LOGGER = logging.getLogger(__name__)

INTERCEPT_LABEL = "(Intercept)"


@dataclass(frozen=True)
class RidgeCVResult:
    cv_table: pd.DataFrame
    best_lambda: float
    model: Pipeline


def lambda_grid(upper: float = 3.0, lower: float = -2.0, step: float = 0.1) -> np.ndarray:
    """Descending penalties 10**upper, 10**(upper - step), ... down to 10**lower."""
    if step <= 0:
        raise ValueError("step must be > 0")
    if lower > upper:
        raise ValueError("lower must be <= upper")
    n_values = int(np.floor((upper - lower) / step + 1e-9)) + 1
    exponents = upper - step * np.arange(n_values, dtype=float)
    return np.power(10.0, exponents)


def _check_design(X: pd.DataFrame | np.ndarray, y: pd.Series | np.ndarray) -> None:
    n_rows = len(X)
    if n_rows == 0:
        raise ValueError("Design matrix has no rows")
    if np.ndim(X) != 2 or np.shape(X)[1] == 0:
        raise ValueError("Design matrix needs at least one predictor column")
    if len(y) != n_rows:
        raise ValueError(f"X has {n_rows} rows but y has {len(y)}")


def make_ridge(penalty: float) -> Pipeline:
    return make_pipeline(StandardScaler(), Ridge(alpha=float(penalty)))


def fit_ols(X: pd.DataFrame | np.ndarray, y: pd.Series | np.ndarray):
    _check_design(X, y)
    design = sm.add_constant(X, has_constant="add")
    return sm.OLS(y, design).fit()


def cross_validate_ridge(
    X: pd.DataFrame | np.ndarray,
    y: pd.Series | np.ndarray,
    lambdas: Sequence[float],
    *,
    folds: int = 10,
    random_seed: int = 42,
) -> RidgeCVResult:
    """Pick the ridge penalty with the lowest k-fold mean squared error.

    Predictors are standardised inside each fold. The returned model is refit
    on all rows with the chosen penalty.
    """
    _check_design(X, y)
    penalties = [float(value) for value in lambdas]
    if not penalties:
        raise ValueError("lambdas must not be empty")
    if folds < 2:
        raise ValueError("folds must be >= 2")
    if folds > len(X):
        raise ValueError(f"folds ({folds}) exceeds number of rows ({len(X)})")

    search = GridSearchCV(
        make_ridge(1.0),
        param_grid={"ridge__alpha": penalties},
        cv=KFold(n_splits=folds, shuffle=True, random_state=random_seed),
        scoring="neg_mean_squared_error",
        refit=True,
    )
    search.fit(X, y)

    cv_table = pd.DataFrame(
        {
            "lambda": penalties,
            "log_lambda": np.log10(penalties),
            "mean_mse": -np.asarray(search.cv_results_["mean_test_score"], dtype=float),
            "std_mse": np.asarray(search.cv_results_["std_test_score"], dtype=float),
        }
    )
    best_lambda = float(search.best_params_["ridge__alpha"])
    LOGGER.info("Cross-validated ridge penalty: %.4g over %d folds", best_lambda, folds)
    return RidgeCVResult(cv_table=cv_table, best_lambda=best_lambda, model=search.best_estimator_)


def compare_fits(
    X: pd.DataFrame | np.ndarray,
    y: pd.Series | np.ndarray,
    ols_result,
    ridge_result: RidgeCVResult,
) -> pd.DataFrame:
    observed = np.asarray(y, dtype=float)
    ols_fitted = np.asarray(ols_result.fittedvalues, dtype=float)
    ridge_fitted = np.asarray(ridge_result.model.predict(X), dtype=float)
    return pd.DataFrame(
        {
            "model": ["ols", "ridge"],
            "lambda": [np.nan, ridge_result.best_lambda],
            "r_squared": [float(ols_result.rsquared), float(r2_score(observed, ridge_fitted))],
            "mse": [
                float(mean_squared_error(observed, ols_fitted)),
                float(mean_squared_error(observed, ridge_fitted)),
            ],
        }
    )


def ridge_coefficients(model: Pipeline) -> tuple[float, np.ndarray]:
    """Intercept and slopes of a scaled ridge pipeline on the original predictor scale."""
    scaler: StandardScaler = model.named_steps["standardscaler"]
    ridge: Ridge = model.named_steps["ridge"]
    slopes = np.asarray(ridge.coef_, dtype=float) / scaler.scale_
    intercept = float(ridge.intercept_) - float(np.sum(slopes * scaler.mean_))
    return intercept, slopes


def coefficient_table(
    feature_names: Sequence[str],
    ols_result,
    ridge_result: RidgeCVResult,
) -> pd.DataFrame:
    ridge_intercept, ridge_slopes = ridge_coefficients(ridge_result.model)
    ols_params = np.asarray(ols_result.params, dtype=float)
    return pd.DataFrame(
        {
            "term": [INTERCEPT_LABEL, *feature_names],
            "ols": ols_params,
            "ridge": np.concatenate([[ridge_intercept], ridge_slopes]),
        }
    )


def simulate_dataset(
    n_obs: int,
    n_predictors: int,
    rng: np.random.Generator,
    *,
    noise_sd: float = 1.0,
    coef_sd: float = 1.0,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Draw X ~ N(0, 1), beta ~ N(0, coef_sd) and y = X beta + N(0, noise_sd)."""
    if n_obs <= 0:
        raise ValueError("n_obs must be > 0")
    if n_predictors <= 0:
        raise ValueError("n_predictors must be > 0")
    X = rng.normal(size=(n_obs, n_predictors))
    beta = rng.normal(scale=coef_sd, size=n_predictors)
    y = X @ beta + rng.normal(scale=noise_sd, size=n_obs)
    return X, y, beta


def _train_size(n_obs: int, train_fraction: float) -> int:
    return int(min(max(round(n_obs * train_fraction), 2), n_obs - 1))


def run_simulation(settings: SimulationConfig, lambdas: Sequence[float]) -> pd.DataFrame:
    """Compare OLS and ridge train/test error over repeated synthetic draws.

    Ridge penalties are chosen per draw by efficient leave-one-out
    cross-validation on the training rows.
    """
    penalties = [float(value) for value in lambdas]
    if not penalties:
        raise ValueError("lambdas must not be empty")

    rng = np.random.default_rng(settings.random_seed)
    n_train = _train_size(settings.n_obs, settings.train_fraction)
    records: list[dict[str, object]] = []
    for n_predictors in settings.predictor_counts:
        LOGGER.info(
            "Simulating %d draws with %d predictors (%d train rows)",
            settings.n_simulations,
            n_predictors,
            n_train,
        )
        for simulation in range(settings.n_simulations):
            X, y, _ = simulate_dataset(
                settings.n_obs,
                int(n_predictors),
                rng,
                noise_sd=settings.noise_sd,
                coef_sd=settings.coef_sd,
            )
            order = rng.permutation(settings.n_obs)
            train, test = order[:n_train], order[n_train:]

            ols = fit_ols(X[train], y[train])
            ridge = make_pipeline(StandardScaler(), RidgeCV(alphas=penalties))
            ridge.fit(X[train], y[train])
            chosen = float(ridge.named_steps["ridgecv"].alpha_)

            predictions = {
                ("ols", "train"): ols.predict(sm.add_constant(X[train], has_constant="add")),
                ("ols", "test"): ols.predict(sm.add_constant(X[test], has_constant="add")),
                ("ridge", "train"): ridge.predict(X[train]),
                ("ridge", "test"): ridge.predict(X[test]),
            }
            for (model, split), predicted in predictions.items():
                observed = y[train] if split == "train" else y[test]
                records.append(
                    {
                        "simulation": simulation,
                        "n_predictors": int(n_predictors),
                        "model": model,
                        "split": split,
                        "mse": float(mean_squared_error(observed, predicted)),
                        "lambda": chosen if model == "ridge" else np.nan,
                    }
                )

    return pd.DataFrame(
        records,
        columns=["simulation", "n_predictors", "model", "split", "mse", "lambda"],
    )


def summarise_simulation(results: pd.DataFrame) -> pd.DataFrame:
    columns = ["n_predictors", "model", "split", "mean_mse", "se_mse", "n_simulations"]
    if results.empty:
        return pd.DataFrame(columns=columns)
    summary = (
        results.groupby(["n_predictors", "model", "split"], dropna=True)["mse"]
        .agg(mean_mse="mean", std_mse="std", n_simulations="count")
        .reset_index()
    )
    summary["se_mse"] = (summary["std_mse"] / np.sqrt(summary["n_simulations"])).fillna(0.0)
    return summary.loc[:, columns]
