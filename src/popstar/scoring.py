"""Per-sample polygenic score evaluation."""

import numpy as np

from .dosages import MISSING_DOSAGE, DosageStore
from .prs import Model, SamplingReference


def score_model(
    model: Model,
    dosages: DosageStore,
    reference: SamplingReference = SamplingReference.EXTERNAL,
) -> np.ndarray:
    """Compute one score per sample for a linear model.

    Each sample starts at the model offset. For every term whose variant is
    genotyped, a called sample adds ``dosage * coef`` and a missing sample
    adds the expected dosage ``2 * af * coef``, where af comes from the dosage
    store (INTERNAL) or from the term itself (EXTERNAL). A term whose variant
    was not genotyped adds ``2 * af * coef`` with the term's own af to every
    sample, shifting all scores equally.

    Args:
        model: Model to evaluate.
        dosages: Dosage store the samples come from.
        reference: Allele frequency source for missing genotypes.

    Returns:
        float64 array of length ``dosages.n_samples``.
    """
    values = np.full(dosages.n_samples, model.offset, dtype=np.float64)

    for term in model.terms:
        row = dosages.row_of(term.variant_id)
        if row is None:
            values += 2.0 * term.af * term.coef
            continue

        genotypes = dosages.dosages[row]
        if reference == SamplingReference.INTERNAL:
            af = float(dosages.afs[row])
        else:
            af = term.af

        values += np.where(
            genotypes == MISSING_DOSAGE,
            2.0 * af * term.coef,
            genotypes * term.coef,
        )

    return values
