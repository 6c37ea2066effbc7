"""Typer CLI: list models, manage downloaded artifacts, score text/image pairs."""

from pathlib import Path
from typing import NoReturn

import typer
import yaml
from rich.console import Console
from rich.table import Table

from siglip2.ai.fetcher import LOCAL_FILES, download_models, missing_artifacts, model_path
from siglip2.ai.model import Siglip2Model
from siglip2.ai.registry import AVAILABLE_MODELS, default_resolution, list_quantizations
from siglip2.core.config import get_config, set_models_dir
from siglip2.core.logging import setup_logging
from siglip2.errors import Siglip2Error

app = typer.Typer(no_args_is_help=True)

MODEL_HELP = "Model identifier (see 'models'). Defaults to the configured default_model."
QUANT_HELP = "Quantization variant (see 'quantizations'). Defaults to the configured default_quantization."


def _fail(e: Exception) -> NoReturn:
    typer.secho(str(e), fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


def _model_args(model: str | None, quantization: str | None) -> tuple[str, str]:
    cfg = get_config()
    return model or cfg.default_model, quantization or cfg.default_quantization


@app.callback()
def main_callback(
    models_dir: Path | None = typer.Option(None, "--models-dir", help="Override the models root directory."),
    config: Path | None = typer.Option(None, "--config", help="Load settings from this YAML file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable DEBUG logging to stdout"),
) -> None:
    """SigLIP2 ONNX embeddings."""
    try:
        if config is not None:
            get_config(config)
        setup_logging("DEBUG" if verbose else None)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        _fail(e)
    if models_dir is not None:
        set_models_dir(models_dir)


@app.command("models")
def models_list() -> None:
    """List available model identifiers with their hub repository and image size."""
    table = Table(title=None)
    table.add_column("Model")
    table.add_column("Repository", style="dim")
    table.add_column("Image size", justify="right")
    for name, repo in AVAILABLE_MODELS.items():
        table.add_row(name, repo, str(default_resolution(name)))
    console = Console()
    console.print(table)


@app.command("quantizations")
def quantizations_list() -> None:
    """List available quantization variants."""
    for q in list_quantizations():
        typer.echo(q)


@app.command("path")
def path_cmd(
    model: str | None = typer.Argument(None, help=MODEL_HELP),
    quantization: str | None = typer.Option(None, "--quantization", "-q", help=QUANT_HELP),
) -> None:
    """Print the local artifact directory for a model."""
    name, quant = _model_args(model, quantization)
    try:
        typer.echo(str(model_path(name, quant)))
    except Siglip2Error as e:
        _fail(e)


@app.command("status")
def status_cmd(
    model: str | None = typer.Argument(None, help=MODEL_HELP),
    quantization: str | None = typer.Option(None, "--quantization", "-q", help=QUANT_HELP),
) -> None:
    """Show which artifact files are present on disk."""
    name, quant = _model_args(model, quantization)
    try:
        missing = set(missing_artifacts(name, quant))
    except Siglip2Error as e:
        _fail(e)
    table = Table(title=f"{name} ({quant})")
    table.add_column("File")
    table.add_column("Status")
    for file_name in LOCAL_FILES:
        status = "[red]missing[/red]" if file_name in missing else "[green]present[/green]"
        table.add_row(file_name, status)
    console = Console()
    console.print(table)


@app.command("download")
def download_cmd(
    model: str | None = typer.Argument(None, help=MODEL_HELP),
    quantization: str | None = typer.Option(None, "--quantization", "-q", help=QUANT_HELP),
) -> None:
    """Download missing artifacts for a model. Files already on disk are skipped."""
    name, quant = _model_args(model, quantization)
    try:
        downloaded = download_models(name, quant)
    except (Siglip2Error, OSError) as e:
        _fail(e)
    if not downloaded:
        typer.echo(f"All artifacts already present in {model_path(name, quant)}.")
        return
    for path in downloaded:
        typer.secho(f"Downloaded {path}", fg=typer.colors.GREEN)


@app.command("similarity")
def similarity_cmd(
    text: str = typer.Argument(..., help="Text to score"),
    image: Path = typer.Argument(..., help="Path to an image file"),
    model: str | None = typer.Option(None, "--model", "-m", help=MODEL_HELP),
    quantization: str | None = typer.Option(None, "--quantization", "-q", help=QUANT_HELP),
) -> None:
    """Print the cosine similarity between TEXT and IMAGE."""
    name, quant = _model_args(model, quantization)
    try:
        score = Siglip2Model(name, quant).similarity(text, image)
    except (Siglip2Error, OSError) as e:
        _fail(e)
    typer.echo(f"{score:.6f}")


@app.command("batch")
def batch_cmd(
    texts: list[str] = typer.Option(..., "--text", "-t", help="Text to score (repeatable)"),
    images: list[Path] = typer.Option(..., "--image", "-i", help="Image path (repeatable)"),
    model: str | None = typer.Option(None, "--model", "-m", help=MODEL_HELP),
    quantization: str | None = typer.Option(None, "--quantization", "-q", help=QUANT_HELP),
) -> None:
    """Print the text x image similarity matrix."""
    name, quant = _model_args(model, quantization)
    try:
        scores = Siglip2Model(name, quant).batch_similarity(texts, images)
    except (Siglip2Error, OSError) as e:
        _fail(e)
    table = Table(title=None)
    table.add_column("Text")
    for image in images:
        table.add_column(image.name, justify="right")
    for text, row in zip(texts, scores):
        table.add_row(text, *(f"{s:.4f}" for s in row))
    console = Console()
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
