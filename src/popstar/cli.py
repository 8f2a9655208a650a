"""popstar: Calculate polygenic models and permuted nulls."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, TextIO

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from . import __version__
from .config import (
    DEFAULT_BINS,
    DEFAULT_FORMAT,
    DEFAULT_ITERATIONS,
    DEFAULT_REFERENCE,
    DEFAULT_SEED,
    FileSettings,
    RunConfig,
    load_config,
)
from .errors import PopstarError
from .output import OutputFormat
from .prs import SamplingReference
from .runner import RunSummary, run
from .utils.io import open_text

app = typer.Typer(
    name="popstar",
    help="Calculate polygenic models and permuted nulls.",
    add_completion=False,
)
console = Console(stderr=True)


def version_callback(value: bool) -> None:
    if value:
        print(__version__)
        raise typer.Exit()


def setup_logging(verbose: bool, quiet: bool, default_level: str | None = None) -> None:
    """Configure logging based on verbosity flags."""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    elif default_level:
        level = getattr(logging, default_level.upper())
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("popstar").setLevel(level)


@contextmanager
def _open_destination(out: Path | None) -> Iterator[TextIO]:
    if out is None:
        yield sys.stdout
        sys.stdout.flush()
        return
    f = open_text(out, "w")
    try:
        with f:
            yield f
    except Exception:
        out.unlink(missing_ok=True)
        raise


def _merge_settings(
    settings: FileSettings,
    dosages: Path,
    models: Path,
    output_format: OutputFormat | None,
    reference: SamplingReference | None,
    iterations: int | None,
    bins: int | None,
    seed: int | None,
) -> RunConfig:
    """Combine command-line values with file settings; given options win."""
    return RunConfig(
        dosages_path=dosages,
        models_path=models,
        output_format=output_format if output_format is not None else settings.output_format,
        reference=reference if reference is not None else settings.reference,
        iterations=iterations if iterations is not None else settings.iterations,
        n_bins=bins if bins is not None else settings.n_bins,
        seed=seed if seed is not None else settings.seed,
    )


@app.command()
def main(
    dosages: Annotated[
        Path, typer.Option("--dosages", "-d", help="Path to the input allele dosages file")
    ],
    models: Annotated[
        Path, typer.Option("--models", "-m", help="Path to the input model coefficient file")
    ],
    out: Annotated[
        Path | None, typer.Option("--out", "-o", help="Path to the output file [default: stdout]")
    ] = None,
    output_format: Annotated[
        OutputFormat | None,
        typer.Option(
            "--format",
            "-f",
            case_sensitive=False,
            show_default=DEFAULT_FORMAT.value,
            help="Output format",
        ),
    ] = None,
    iterations: Annotated[
        int | None,
        typer.Option(
            "--iter",
            "-i",
            min=0,
            show_default=str(DEFAULT_ITERATIONS),
            help="Number of resampled null iterations to calculate",
        ),
    ] = None,
    reference: Annotated[
        SamplingReference | None,
        typer.Option(
            "--ref",
            "-r",
            case_sensitive=False,
            show_default=DEFAULT_REFERENCE.value,
            help="Source of resampling target allele frequency",
        ),
    ] = None,
    bins: Annotated[
        int | None,
        typer.Option(
            "--bins",
            "-b",
            min=1,
            show_default=str(DEFAULT_BINS),
            help="Number of allele frequency bins for null allele matching",
        ),
    ] = None,
    seed: Annotated[
        int | None,
        typer.Option("--seed", "-s", min=0, show_default=str(DEFAULT_SEED), help="PRNG seed"),
    ] = None,
    config_file: Annotated[
        Path | None, typer.Option("--config", "-c", help="TOML configuration file")
    ] = None,
    log_file: Annotated[Path | None, typer.Option("--log", help="Write log to file")] = None,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-error output"),
    progress: bool = typer.Option(True, "--progress/--no-progress", help="Show progress bar"),
    version: Annotated[
        bool | None,
        typer.Option(
            "--version", callback=version_callback, is_eager=True, help="Show version and exit"
        ),
    ] = None,
) -> None:
    """Calculate polygenic scores and frequency-matched permuted null scores.

    Every model is scored as given (iter 0) and then once per null iteration,
    each time with its variants replaced by random variants of matching allele
    frequency.
    """
    try:
        settings = load_config(config_file) if config_file else FileSettings()
    except (FileNotFoundError, PopstarError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from None

    setup_logging(verbose, quiet, settings.log_level)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        logging.getLogger("popstar").addHandler(file_handler)

    for path, label in ((dosages, "Dosage"), (models, "Model")):
        if not path.exists():
            console.print(f"[red]Error: {label} file not found: {escape(str(path))}[/red]")
            raise typer.Exit(1)

    config = _merge_settings(
        settings, dosages, models, output_format, reference, iterations, bins, seed
    )

    try:
        with _open_destination(out) as destination:
            if progress and not quiet:
                summary = _run_with_progress(config, destination)
            else:
                summary = run(config, destination)
    except PopstarError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from None
    except OSError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from None

    if not quiet:
        console.print(
            f"[green]✓[/green] Scored {summary.n_models:,} models x "
            f"{summary.iterations:,} null iterations "
            f"({summary.n_samples:,} samples, {summary.n_variants:,} variants)"
        )
        if out is not None:
            console.print(f"  Output: {escape(str(out))}")


def _run_with_progress(config: RunConfig, destination: TextIO) -> RunSummary:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as progress_bar:
        task = progress_bar.add_task("Loading inputs...", total=None)

        def update_progress(index: int, total: int, model_id: str) -> None:
            progress_bar.update(
                task,
                total=total,
                completed=index - 1,
                description=f"Model {escape(model_id)}",
            )

        summary = run(config, destination, on_model=update_progress)
        progress_bar.update(task, completed=summary.n_models)
    return summary


if __name__ == "__main__":
    app()
