"""Allele frequency computation and frequency binning.

A variant's allele frequency is estimated from its called genotypes only:

    af = (sum of alt-allele copies) / (2 * number of called samples)

Frequencies are discretized into ``n_bins`` equal-width bins over [0, 1]:

    afbin = clamp(floor(af * n_bins), 0, n_bins - 1)

so that af = 1.0 falls in the last bin rather than one past it.
"""

import math
from collections.abc import Sequence

import numpy as np

MISSING_DOSAGE = -1

DOSAGE_CODES = {
    "0": 0,
    "1": 1,
    "2": 2,
    "-": MISSING_DOSAGE,
}

_INVALID_CODE = 127

_CODE_LOOKUP = np.full(256, _INVALID_CODE, dtype=np.int8)
for _code, _value in DOSAGE_CODES.items():
    _CODE_LOOKUP[ord(_code)] = _value


def assign_af_bin(af: float, n_bins: int) -> int:
    """Return the frequency bin for an allele frequency.

    Args:
        af: Allele frequency, nominally in [0, 1]. Out-of-range values are clamped.
        n_bins: Number of bins (>= 1).

    Returns:
        Bin index in [0, n_bins).

    Raises:
        ValueError: If n_bins < 1 or af is NaN.
    """
    if n_bins < 1:
        raise ValueError(f"n_bins must be positive, got {n_bins}")
    return min(n_bins - 1, max(0, math.floor(af * n_bins)))


def parse_dosage_codes(codes: Sequence[str]) -> np.ndarray:
    """Convert one-character dosage codes to an int8 row.

    Args:
        codes: One code per sample: '0', '1', '2', or '-' for missing.

    Returns:
        int8 array with missing genotypes encoded as -1.

    Raises:
        ValueError: If any code is not a recognized single character.
    """
    packed = "".join(codes)
    if all(len(code) == 1 for code in codes) and packed.isascii():
        row = _CODE_LOOKUP[np.frombuffer(packed.encode("ascii"), dtype=np.uint8)]
        bad = np.flatnonzero(row == _INVALID_CODE)
        if bad.size == 0:
            return row
        index = int(bad[0])
    else:
        index = next(
            i for i, code in enumerate(codes) if len(code) != 1 or not code.isascii()
        )
    raise ValueError(f"Invalid dosage code {codes[index]!r} in sample column {index + 1}")


def compute_allele_frequency(row: np.ndarray) -> float:
    """Compute the alternate allele frequency over called samples.

    Raises:
        ValueError: If every sample is missing.
    """
    called = row[row != MISSING_DOSAGE]
    if called.size == 0:
        raise ValueError("All samples are missing; allele frequency is undefined")
    return float(called.sum(dtype=np.int64)) / (2 * called.size)
