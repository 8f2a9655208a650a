"""Moment summaries of per-sample score vectors."""

from typing import NamedTuple

import numpy as np


class SummaryStatistics(NamedTuple):
    """Mean, population variance, standardized skewness and kurtosis."""

    m1: float
    m2: float
    m3: float
    m4: float


def summarize(values) -> SummaryStatistics:
    """Reduce scores to their first four moments.

    ``m2`` divides by n. ``m3`` and ``m4`` are the means of the cubed and
    fourth-powered z-scores. When every value is equal the variance is zero
    and z-scores are undefined; ``m3`` and ``m4`` are then reported as NaN.

    Raises:
        ValueError: If values is empty.
    """
    x = np.asarray(values, dtype=np.float64)
    if x.size == 0:
        raise ValueError("Cannot summarize an empty score vector")

    m1 = float(x.mean())
    deviations = x - m1
    m2 = float(np.mean(deviations**2))

    if m2 == 0.0:
        return SummaryStatistics(m1, m2, float("nan"), float("nan"))

    z = deviations / np.sqrt(m2)
    return SummaryStatistics(m1, m2, float(np.mean(z**3)), float(np.mean(z**4)))
