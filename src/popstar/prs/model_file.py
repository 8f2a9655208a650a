"""Parser for tab-delimited model coefficient files.

Columns (header row is skipped):

    model_id  variant_id  <ignored>  af  coef

A coefficient of ``NA`` is read as 0. A row whose variant id is ``OFFSET``
sets the model intercept from its coef column instead of adding a term.
"""

from collections.abc import Iterator
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path

from ..errors import MalformedRecordError
from ..utils.io import iter_text_lines

OFFSET_VARIANT_ID = "OFFSET"
MISSING_COEFFICIENT = "NA"
N_MODEL_COLUMNS = 5


@dataclass(frozen=True)
class OffsetRow:
    """Model intercept assignment."""

    model_id: str
    offset: float
    line_number: int


@dataclass(frozen=True)
class CoefficientRow:
    """Model variant coefficient with the model's own allele frequency."""

    model_id: str
    variant_id: str
    af: float
    coef: float
    line_number: int


def parse_coefficient(value: str) -> float:
    """Parse a coefficient, reading ``NA`` as 0."""
    if value == MISSING_COEFFICIENT:
        return 0.0
    return float(value)


def parse_model_row(fields: list[str], line_number: int) -> OffsetRow | CoefficientRow:
    """Parse the columns of a single model file row.

    Raises:
        ValueError: If a column is missing or a number cannot be parsed.
    """
    if len(fields) < N_MODEL_COLUMNS:
        raise ValueError(f"Expected {N_MODEL_COLUMNS} columns, found {len(fields)}")

    model_id, variant_id, _, af_field, coef_field = fields[:N_MODEL_COLUMNS]

    try:
        coef = parse_coefficient(coef_field)
    except ValueError as e:
        raise ValueError(f"Invalid coefficient '{coef_field}' for {variant_id}") from e

    if variant_id == OFFSET_VARIANT_ID:
        return OffsetRow(model_id=model_id, offset=coef, line_number=line_number)

    try:
        af = float(af_field)
    except ValueError as e:
        raise ValueError(f"Invalid allele frequency '{af_field}' for {variant_id}") from e

    return CoefficientRow(
        model_id=model_id,
        variant_id=variant_id,
        af=af,
        coef=coef,
        line_number=line_number,
    )


def iter_model_rows(path: Path | str) -> Iterator[OffsetRow | CoefficientRow]:
    """Iterate over the records of a model file.

    Raises:
        MalformedRecordError: If a row cannot be parsed or the file is not
            valid UTF-8 or gzip.
    """
    with closing(iter_text_lines(path)) as lines:
        next(lines, None)
        for line_number, line in lines:
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            try:
                yield parse_model_row(line.split("\t"), line_number)
            except ValueError as e:
                raise MalformedRecordError(str(e), path, line_number) from e
