from __future__ import annotations

from enum import Enum
from pathlib import Path

import typer

from facet_posts.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from facet_posts.logging import configure_logging
from facet_posts.pipeline.negation_post import run_negation_post
from facet_posts.pipeline.reorder_table import run_reorder
from facet_posts.pipeline.ridge_post import run_ridge_post
from facet_posts.pipeline.run_all import run_all

app = typer.Typer(no_args_is_help=True, add_completion=False)

OUT_DIR_ENVVAR = "FACET_POSTS_OUT_DIR"


class GroupOrderOption(str, Enum):
    lexical = "lexical"
    first_appearance = "first_appearance"


def _load_app_config(config_path: Path) -> AppConfig:
    return load_config(config_path)


def _echo_outputs(label: str, summary: dict[str, object], figures: dict[str, Path]) -> None:
    typer.echo(f"{label} complete")
    for key in sorted(summary):
        typer.echo(f"- {key}: {summary[key]}")
    for name in sorted(figures):
        typer.echo(f"- figure {name}: {figures[name]}")


@app.command()
def reorder(
    rows: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), envvar=OUT_DIR_ENVVAR, resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    top_k: int | None = typer.Option(
        None, min=1, help="Keep only the top-K rows by absolute value per group."
    ),
    group_order: GroupOrderOption | None = typer.Option(
        None, help="Order of facet groups along the shared position axis."
    ),
    log_level: str = typer.Option("INFO"),
) -> None:
    """Assign facet-ordered positions to a group/category/value table."""
    configure_logging(log_level)
    cfg = _load_app_config(config)
    if top_k is not None:
        cfg.reorder.top_k = top_k
    if group_order is not None:
        cfg.reorder.group_order = group_order.value
    try:
        result = run_reorder(rows_path=rows, out_dir=out, config=cfg)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--rows") from exc
    _echo_outputs("Reorder", result.summary, result.figures)


@app.command("negation-post")
def negation_post(
    corpus: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), envvar=OUT_DIR_ENVVAR, resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    log_level: str = typer.Option("INFO"),
) -> None:
    """Score words after negations and plot them ordered within facets."""
    configure_logging(log_level)
    cfg = _load_app_config(config)
    try:
        result = run_negation_post(corpus_path=corpus, out_dir=out, config=cfg)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--corpus") from exc
    _echo_outputs("Negation post", result.summary, result.figures)


@app.command("ridge-post")
def ridge_post(
    data: Path | None = typer.Option(
        None,
        exists=True,
        readable=True,
        resolve_path=True,
        help="Dataset table. Falls back to ridge.dataset_path in config.",
    ),
    out: Path = typer.Option(Path("out"), envvar=OUT_DIR_ENVVAR, resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    simulate: bool = typer.Option(True, help="Run the OLS vs ridge simulation."),
    log_level: str = typer.Option("INFO"),
) -> None:
    """Compare ridge regression with ordinary least squares."""
    configure_logging(log_level)
    cfg = _load_app_config(config)
    cfg.simulation.enabled = cfg.simulation.enabled and simulate
    data_path = data or Path(cfg.ridge.dataset_path)
    try:
        result = run_ridge_post(data_path=data_path, out_dir=out, config=cfg)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--data") from exc
    _echo_outputs("Ridge post", result.summary, result.figures)


@app.command("run-all")
def run_all_command(
    corpus: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
    data: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), envvar=OUT_DIR_ENVVAR, resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    log_level: str = typer.Option("INFO"),
) -> None:
    """Build both write-ups in one command."""
    configure_logging(log_level)
    cfg = _load_app_config(config)
    try:
        results = run_all(corpus_path=corpus, out_dir=out, config=cfg, data_path=data)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"Run complete. Posts: {', '.join(result.name for result in results)}")
    typer.echo(f"Outputs: {out}")


if __name__ == "__main__":
    app()
