from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from facet_posts.config import AppConfig, load_config

WORKSPACE = Path(__file__).resolve().parents[1]


def test_default_config_resolves_bundled_data_paths() -> None:
    cfg = load_config(WORKSPACE / "configs" / "default.yaml")

    assert Path(cfg.text.lexicon_path).is_absolute()
    assert Path(cfg.text.lexicon_path).exists()
    assert Path(cfg.ridge.dataset_path).exists()
    assert cfg.reorder.top_k == 10
    assert cfg.reorder.group_order == "lexical"
    assert cfg.text.negation_words == ["not", "no", "never", "without"]


def test_load_config_resolves_relative_paths(tmp_path: Path) -> None:
    (tmp_path / "lexicon.tsv").write_text("good\t3\n", encoding="utf-8")
    config_data = {
        "text": {"lexicon_path": "lexicon.tsv"},
        "ridge": {"dataset_path": "cars.csv", "target": "hp"},
        "reorder": {"top_k": None, "group_order": "first_appearance", "position_start": 0},
    }
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump(config_data), encoding="utf-8")

    cfg = load_config(config_path)

    assert cfg.text.lexicon_path == str((tmp_path / "lexicon.tsv").resolve())
    assert cfg.ridge.dataset_path == str((tmp_path / "cars.csv").resolve())
    assert cfg.ridge.target == "hp"
    assert cfg.reorder.top_k is None
    assert cfg.reorder.position_start == 0


def test_empty_config_uses_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "empty.yaml"
    config_path.write_text("", encoding="utf-8")

    cfg = load_config(config_path)

    assert cfg.simulation.predictor_counts == [5, 10, 20, 30]
    assert cfg.outputs.tables_format == "csv"
    assert cfg.ridge.folds == 10


def test_config_rejects_unknown_sections_and_bad_values() -> None:
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"report": {}})
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"reorder": {"top_k": 0}})
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"reorder": {"position_start": 2}})
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"ridge": {"lambda_upper": -3.0, "lambda_lower": 2.0}})
    with pytest.raises(ValidationError):
        AppConfig.model_validate({"simulation": {"predictor_counts": [0, 5]}})
