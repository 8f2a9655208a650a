"""Data models for linear polygenic score models."""

from dataclasses import dataclass
from enum import Enum


class SamplingReference(str, Enum):
    """Which allele frequency drives imputation and null-model bin selection.

    INTERNAL uses the frequency estimated from the dosage file; EXTERNAL uses
    the frequency recorded alongside each model coefficient.
    """

    INTERNAL = "internal"
    EXTERNAL = "external"


@dataclass(frozen=True)
class VariantCoefficient:
    """A single weighted variant term of a model."""

    variant_id: str
    af: float
    afbin: int
    coef: float


@dataclass(frozen=True)
class Model:
    """A linear model: intercept plus ordered variant terms.

    Terms are kept as a sequence so a null model that draws the same variant
    for two terms keeps both.
    """

    model_id: str
    offset: float = 0.0
    terms: tuple[VariantCoefficient, ...] = ()

    @property
    def n_terms(self) -> int:
        return len(self.terms)

    @property
    def variant_ids(self) -> list[str]:
        return [term.variant_id for term in self.terms]
