"""Frequency-matched permuted null models.

Each genotyped term of a model is replaced by a variant drawn uniformly, with
replacement, from the same allele frequency bin; the coefficient is kept.
Terms whose variant was not genotyped have no frequency-matched candidates in
the dosage data and are dropped from the null model. No linkage
disequilibrium or distance constraint is applied between drawn variants.
"""

import numpy as np

from .dosages import DosageStore
from .errors import EmptyAFBinError
from .prs import Model, SamplingReference, VariantCoefficient


def generate_null_model(
    model: Model,
    dosages: DosageStore,
    reference: SamplingReference,
    seed: int,
) -> Model:
    """Build a permuted null model from a source model.

    Args:
        model: Source model.
        dosages: Dosage store supplying candidate variants.
        reference: INTERNAL selects each term's bin from the dosage store,
            EXTERNAL from the term's own allele frequency bin.
        seed: Seed for this null model's private generator.

    Returns:
        Null model with the same id and offset.

    Raises:
        EmptyAFBinError: If a required bin has no variants.
    """
    rng = np.random.default_rng(seed)
    terms = []

    for term in model.terms:
        row = dosages.row_of(term.variant_id)
        if row is None:
            continue

        if reference == SamplingReference.INTERNAL:
            afbin = int(dosages.afbins[row])
        else:
            afbin = term.afbin

        members = dosages.bin_members[afbin]
        if members.size == 0:
            raise EmptyAFBinError(afbin, dosages.n_bins, term.variant_id)

        sampled = int(members[rng.integers(members.size)])
        terms.append(
            VariantCoefficient(
                variant_id=dosages.variant_ids[sampled],
                af=float(dosages.afs[sampled]),
                afbin=int(dosages.afbins[sampled]),
                coef=term.coef,
            )
        )

    return Model(model_id=model.model_id, offset=model.offset, terms=tuple(terms))
