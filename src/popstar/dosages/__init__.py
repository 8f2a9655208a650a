"""Genotype dosage matrix storage and allele frequency binning."""

from .binning import (
    DOSAGE_CODES,
    MISSING_DOSAGE,
    assign_af_bin,
    compute_allele_frequency,
    parse_dosage_codes,
)
from .store import DosageStore

__all__ = [
    "DOSAGE_CODES",
    "MISSING_DOSAGE",
    "DosageStore",
    "assign_af_bin",
    "compute_allele_frequency",
    "parse_dosage_codes",
]
