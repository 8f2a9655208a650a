"""Linear polygenic score models and their coefficient files."""

from .model_file import (
    OFFSET_VARIANT_ID,
    CoefficientRow,
    OffsetRow,
    iter_model_rows,
    parse_coefficient,
    parse_model_row,
)
from .models import Model, SamplingReference, VariantCoefficient
from .store import AF_MISMATCH_TOLERANCE, ModelStore, is_af_mismatch

__all__ = [
    "AF_MISMATCH_TOLERANCE",
    "OFFSET_VARIANT_ID",
    "CoefficientRow",
    "Model",
    "ModelStore",
    "OffsetRow",
    "SamplingReference",
    "VariantCoefficient",
    "is_af_mismatch",
    "iter_model_rows",
    "parse_coefficient",
    "parse_model_row",
]
