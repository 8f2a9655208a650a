"""Run loop: load inputs, score native models, then score seeded null models.

Null-model seeds are drawn from the run seed once, before any model is
scored, so iteration ``i`` of every model uses the same subseed regardless of
how many models there are or in what order they are processed.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TextIO

import numpy as np

from .config import RunConfig
from .dosages import DosageStore
from .null_models import generate_null_model
from .output import ScoreWriter
from .prs import ModelStore, SamplingReference
from .scoring import score_model

logger = logging.getLogger(__name__)

MAX_SUBSEED = 2**63 - 1

ModelCallback = Callable[[int, int, str], None]


@dataclass
class RunSummary:
    """Counts describing a finished run."""

    n_models: int
    n_samples: int
    n_variants: int
    iterations: int
    rows_written: int


def generate_subseeds(seed: int, iterations: int) -> list[int]:
    """Draw one null-model seed per iteration from a master generator.

    Args:
        seed: Run seed (non-negative).
        iterations: Number of null iterations.

    Returns:
        List of ``iterations`` non-negative seeds.
    """
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative, got {iterations}")
    rng = np.random.default_rng(seed)
    return [int(s) for s in rng.integers(0, MAX_SUBSEED, size=iterations, dtype=np.int64)]


def score_models(
    dosages: DosageStore,
    models: ModelStore,
    writer: ScoreWriter,
    reference: SamplingReference,
    subseeds: list[int],
    on_model: ModelCallback | None = None,
) -> int:
    """Score every model natively and once per subseed, writing each result.

    Args:
        dosages: Loaded dosage store.
        models: Loaded models, scored in insertion order.
        writer: Destination for score rows.
        reference: Allele frequency source for imputation and bin selection.
        subseeds: One seed per null iteration.
        on_model: Called with (index, total, model_id) before each model.

    Returns:
        Number of rows written.
    """
    rows = 0
    total = len(models)

    for index, model in enumerate(models, start=1):
        if on_model is not None:
            on_model(index, total, model.model_id)
        logger.debug("Model %d / %d: %s", index, total, model.model_id)

        native_values = score_model(model, dosages, reference)
        rows += writer.write(model.model_id, 0, native_values)

        for iteration, subseed in enumerate(subseeds, start=1):
            null_model = generate_null_model(model, dosages, reference, subseed)
            null_values = score_model(null_model, dosages, reference)
            rows += writer.write(model.model_id, iteration, null_values)

    return rows


def run(
    config: RunConfig,
    destination: TextIO,
    on_model: ModelCallback | None = None,
) -> RunSummary:
    """Execute a full run and write results to destination.

    Raises:
        PopstarError: On any fatal input or resampling error.
    """
    dosages = DosageStore.load(config.dosages_path, config.n_bins)
    models = ModelStore.load(config.models_path, config.n_bins, dosages)

    logger.info("Preparing %d null model seeds", config.iterations)
    subseeds = generate_subseeds(config.seed, config.iterations)

    writer = ScoreWriter(
        destination,
        config.output_format,
        dosages.samples,
        seed=config.seed,
        n_bins=config.n_bins,
        reference=config.reference,
    )

    logger.info("Writing output")
    writer.write_header()
    rows = score_models(dosages, models, writer, config.reference, subseeds, on_model)
    logger.info("Done")

    return RunSummary(
        n_models=len(models),
        n_samples=dosages.n_samples,
        n_variants=dosages.n_variants,
        iterations=config.iterations,
        rows_written=rows,
    )
