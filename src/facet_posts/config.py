from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator

DEFAULT_NEGATION_WORDS = ["not", "no", "never", "without"]


class ReorderConfig(BaseModel):
    group_col: str = "group"
    category_col: str = "category"
    value_col: str = "value"
    top_k: int | None = Field(default=10, ge=1)
    group_order: Literal["lexical", "first_appearance"] = "lexical"
    position_start: int = Field(default=1, ge=0, le=1)


class TextConfig(BaseModel):
    text_col: str = "text"
    id_cols: list[str] = Field(default_factory=lambda: ["book"])
    negation_words: list[str] = Field(default_factory=lambda: list(DEFAULT_NEGATION_WORDS))
    lexicon_path: str = "../data/afinn_sample.tsv"


class RidgeConfig(BaseModel):
    dataset_path: str = "../data/mtcars.csv"
    target: str = "mpg"
    features: list[str] | None = None
    lambda_upper: float = 3.0
    lambda_lower: float = -2.0
    lambda_step: float = Field(default=0.1, gt=0.0)
    folds: int = Field(default=10, ge=2)
    random_seed: int = Field(default=42, ge=0)

    @model_validator(mode="after")
    def _check_lambda_range(self) -> "RidgeConfig":
        if self.lambda_lower > self.lambda_upper:
            raise ValueError("lambda_lower must be <= lambda_upper")
        return self


class SimulationConfig(BaseModel):
    enabled: bool = True
    n_obs: int = Field(default=50, ge=4)
    predictor_counts: list[PositiveInt] = Field(default_factory=lambda: [5, 10, 20, 30])
    n_simulations: int = Field(default=20, ge=1)
    train_fraction: float = Field(default=0.5, gt=0.0, lt=1.0)
    noise_sd: float = Field(default=1.0, gt=0.0)
    coef_sd: float = Field(default=1.0, gt=0.0)
    random_seed: int = Field(default=42, ge=0)


class OutputsConfig(BaseModel):
    tables_format: Literal["csv", "parquet"] = "csv"
    figures_format: str = "png"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reorder: ReorderConfig = Field(default_factory=ReorderConfig)
    text: TextConfig = Field(default_factory=TextConfig)
    ridge: RidgeConfig = Field(default_factory=RidgeConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def _resolve_optional_path(path_value: str | None, base_dir: Path) -> str | None:
    if not path_value:
        return None
    candidate = Path(path_value)
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    base_dir = path.resolve().parent

    config.text.lexicon_path = _resolve_optional_path(config.text.lexicon_path, base_dir) or ""
    config.ridge.dataset_path = _resolve_optional_path(config.ridge.dataset_path, base_dir) or ""
    return config
