"""popstar: polygenic scores with frequency-matched permuted null models."""

__version__ = "0.1.0"
