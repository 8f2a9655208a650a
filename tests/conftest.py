"""Pytest configuration and fixtures for popstar tests."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))

from fixtures.dosage_generator import (  # noqa: E402
    ModelRowSpec,
    write_dosage_file,
    write_model_file,
)

# Two samples, two variants:
#   sample1 dosages [1, 2], sample2 dosages [0, 1]
SMALL_SAMPLES = ["sample1", "sample2"]
SMALL_VARIANTS = {
    "variant1": [1, 0],
    "variant2": [2, 1],
}


@pytest.fixture
def small_dosage_file(tmp_path):
    """Dosage file with two samples and two variants."""
    return write_dosage_file(tmp_path / "dosages.tsv", SMALL_SAMPLES, SMALL_VARIANTS)


@pytest.fixture
def small_model_file(tmp_path):
    """Model file with offset 0, variant1 coef 2 and variant2 coef 1.

    Model AFs match the dosage AFs (0.25 and 0.75).
    """
    return write_model_file(
        tmp_path / "models.tsv",
        [
            ModelRowSpec("trait", "OFFSET", "NA", 0),
            ModelRowSpec("trait", "variant1", 0.25, 2),
            ModelRowSpec("trait", "variant2", 0.75, 1),
        ],
    )


@pytest.fixture
def dosage_file_factory(tmp_path):
    """Factory writing dosage files into the test's temporary directory."""

    def _factory(samples, variants, name="dosages.tsv"):
        return write_dosage_file(tmp_path / name, samples, variants)

    return _factory


@pytest.fixture
def model_file_factory(tmp_path):
    """Factory writing model files into the test's temporary directory."""

    def _factory(rows, name="models.tsv"):
        return write_model_file(tmp_path / name, rows)

    return _factory
