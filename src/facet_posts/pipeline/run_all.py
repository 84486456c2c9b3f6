from __future__ import annotations

from pathlib import Path

from facet_posts.config import AppConfig
from facet_posts.pipeline.base import PostResult
from facet_posts.pipeline.negation_post import run_negation_post
from facet_posts.pipeline.ridge_post import run_ridge_post


def run_all(
    corpus_path: Path,
    out_dir: Path,
    config: AppConfig,
    *,
    data_path: Path | None = None,
) -> list[PostResult]:
    dataset = data_path or Path(config.ridge.dataset_path)
    return [
        run_negation_post(corpus_path=corpus_path, out_dir=out_dir, config=config),
        run_ridge_post(data_path=dataset, out_dir=out_dir, config=config),
    ]
