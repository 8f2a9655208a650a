"""In-memory dosage matrix loaded from a tab-delimited genotype file.

File layout:

    <ignored> <ignored> <ignored> SAMPLE_1 SAMPLE_2 ...
    VARIANT_ID <ignored> <ignored> 0 2 ...

Each dosage is the alternate allele count ('0', '1', '2') or '-' when the
genotype is missing. The whole file is held as one dense int8 matrix of
n_variants x n_samples bytes, so memory grows with the product of the two:
a cohort of 1M samples typed at 1M variants needs about 1 TB.
"""

import logging
from collections.abc import Mapping
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

import numpy as np

from ..errors import (
    AllAllelesMissingError,
    DuplicateSampleError,
    DuplicateVariantError,
    InvalidDosageError,
    MalformedRecordError,
)
from ..utils.io import iter_text_lines
from .binning import (
    DOSAGE_CODES,
    assign_af_bin,
    compute_allele_frequency,
    parse_dosage_codes,
)

logger = logging.getLogger(__name__)

N_METADATA_COLUMNS = 3
PROGRESS_INTERVAL = 10_000


def _read_only(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


def _scan_dosage_file(path: Path) -> tuple[tuple[str, ...], int]:
    """Read sample identifiers from the header and count variant rows.

    Sample uniqueness is checked here, before any variant row is parsed.
    """
    with closing(iter_text_lines(path)) as lines:
        first = next(lines, None)
        if first is None:
            raise MalformedRecordError("Dosage file is empty", path, 1)
        _, header = first

        columns = header.rstrip("\r\n").split("\t")
        if len(columns) <= N_METADATA_COLUMNS:
            raise MalformedRecordError(
                f"Header must have more than {N_METADATA_COLUMNS} columns, "
                f"found {len(columns)}",
                path,
                1,
            )

        samples = columns[N_METADATA_COLUMNS:]
        seen: set[str] = set()
        for sample in samples:
            if sample in seen:
                raise DuplicateSampleError(f"Duplicate sample identifier: {sample}", path, 1)
            seen.add(sample)

        n_variants = sum(1 for _, line in lines if line.strip())

    return tuple(samples), n_variants


@dataclass(frozen=True, eq=False)
class DosageStore:
    """Read-only dosage matrix with per-variant allele frequency metadata.

    Attributes:
        samples: Sample identifiers in column order.
        variant_ids: Variant identifiers in row order.
        variant_index: Variant identifier to row index.
        afs: Allele frequency per variant row.
        afbins: Allele frequency bin per variant row.
        bin_members: For each bin, the rows assigned to it in file order.
        dosages: int8 matrix of shape (n_variants, n_samples); -1 is missing.
        n_bins: Number of allele frequency bins.
        path: Source file, if loaded from disk.
    """

    samples: tuple[str, ...]
    variant_ids: tuple[str, ...]
    variant_index: Mapping[str, int]
    afs: np.ndarray
    afbins: np.ndarray
    bin_members: tuple[np.ndarray, ...]
    dosages: np.ndarray
    n_bins: int
    path: Path | None = None

    @property
    def n_samples(self) -> int:
        return len(self.samples)

    @property
    def n_variants(self) -> int:
        return len(self.variant_ids)

    def has_variant(self, variant_id: str) -> bool:
        return variant_id in self.variant_index

    def row_of(self, variant_id: str) -> int | None:
        """Return the matrix row for a variant, or None if it was not genotyped."""
        return self.variant_index.get(variant_id)

    def bin_sizes(self) -> list[int]:
        return [members.size for members in self.bin_members]

    def min_bin_occupancy(self) -> int:
        return min(self.bin_sizes())

    @classmethod
    def from_rows(
        cls,
        samples: list[str] | tuple[str, ...],
        variant_ids: list[str] | tuple[str, ...],
        dosages: np.ndarray,
        n_bins: int,
        path: Path | None = None,
    ) -> "DosageStore":
        """Build a store from an already-parsed dosage matrix.

        Args:
            samples: Sample identifiers, one per matrix column.
            variant_ids: Variant identifiers, one per matrix row.
            dosages: Matrix of alt-allele counts with -1 for missing.
            n_bins: Number of allele frequency bins.
            path: Source file, used only in error messages.

        Raises:
            DuplicateSampleError: If a sample identifier repeats.
            DuplicateVariantError: If a variant identifier repeats.
            AllAllelesMissingError: If a variant has no called genotypes.
        """
        if n_bins < 1:
            raise ValueError(f"n_bins must be positive, got {n_bins}")

        if len(set(samples)) != len(samples):
            duplicate = next(s for i, s in enumerate(samples) if s in samples[:i])
            raise DuplicateSampleError(f"Duplicate sample identifier: {duplicate}", path)

        matrix = np.array(dosages, dtype=np.int8)
        if matrix.shape != (len(variant_ids), len(samples)):
            raise ValueError(
                f"Dosage matrix shape {matrix.shape} does not match "
                f"{len(variant_ids)} variants x {len(samples)} samples"
            )
        if not np.isin(matrix, list(DOSAGE_CODES.values())).all():
            raise InvalidDosageError("Dosages must be one of -1, 0, 1 or 2", path)

        variant_index: dict[str, int] = {}
        afs = np.empty(len(variant_ids), dtype=np.float64)
        afbins = np.empty(len(variant_ids), dtype=np.int64)
        members: list[list[int]] = [[] for _ in range(n_bins)]

        for row, variant_id in enumerate(variant_ids):
            if variant_id in variant_index:
                raise DuplicateVariantError(f"Duplicate variant identifier: {variant_id}", path)
            variant_index[variant_id] = row
            try:
                afs[row] = compute_allele_frequency(matrix[row])
            except ValueError as e:
                raise AllAllelesMissingError(f"{e} (variant {variant_id})", path) from e
            afbins[row] = assign_af_bin(afs[row], n_bins)
            members[afbins[row]].append(row)

        store = cls._freeze(
            samples, variant_ids, variant_index, afs, afbins, members, matrix, n_bins, path
        )
        store._report_occupancy()
        return store

    @classmethod
    def load(cls, path: Path | str, n_bins: int = 100) -> "DosageStore":
        """Load a dosage file.

        The file is read twice: once to validate the header and count
        variants, then again to fill a matrix allocated at its final size.

        Args:
            path: Dosage file (optionally gzip-compressed).
            n_bins: Number of allele frequency bins.

        Returns:
            Loaded DosageStore.

        Raises:
            DuplicateSampleError: If a sample identifier repeats in the header.
            DuplicateVariantError: If a variant identifier repeats.
            MalformedRecordError: If a row has the wrong number of columns or the
                file is not valid UTF-8 or gzip.
            InvalidDosageError: If a dosage code is not '0', '1', '2' or '-'.
            AllAllelesMissingError: If a variant has no called genotypes.
        """
        if n_bins < 1:
            raise ValueError(f"n_bins must be positive, got {n_bins}")

        path = Path(path)
        logger.info("Loading dosages from %s, %d AF bins", path, n_bins)

        samples, n_variants = _scan_dosage_file(path)
        n_samples = len(samples)
        n_columns = N_METADATA_COLUMNS + n_samples
        logger.info("%d variants x %d samples found, allocating", n_variants, n_samples)

        matrix = np.empty((n_variants, n_samples), dtype=np.int8)
        variant_ids: list[str] = []
        variant_index: dict[str, int] = {}
        afs = np.empty(n_variants, dtype=np.float64)
        afbins = np.empty(n_variants, dtype=np.int64)
        members: list[list[int]] = [[] for _ in range(n_bins)]

        with closing(iter_text_lines(path)) as lines:
            next(lines, None)
            row = 0
            for line_number, line in lines:
                if not line.strip():
                    continue
                if row >= n_variants:
                    raise MalformedRecordError("File grew while it was being read", path, line_number)

                fields = line.rstrip("\r\n").split("\t")
                if len(fields) != n_columns:
                    raise MalformedRecordError(
                        f"Expected {n_columns} columns, found {len(fields)}", path, line_number
                    )

                variant_id = fields[0]
                if variant_id in variant_index:
                    raise DuplicateVariantError(
                        f"Duplicate variant identifier: {variant_id}", path, line_number
                    )

                try:
                    matrix[row] = parse_dosage_codes(fields[N_METADATA_COLUMNS:])
                except ValueError as e:
                    raise InvalidDosageError(str(e), path, line_number) from e

                try:
                    af = compute_allele_frequency(matrix[row])
                except ValueError as e:
                    raise AllAllelesMissingError(
                        f"{e} (variant {variant_id})", path, line_number
                    ) from e

                variant_ids.append(variant_id)
                variant_index[variant_id] = row
                afs[row] = af
                afbins[row] = assign_af_bin(af, n_bins)
                members[afbins[row]].append(row)

                row += 1
                if row % PROGRESS_INTERVAL == 0:
                    logger.debug("  %d / %d variants", row, n_variants)

        if row != n_variants:
            raise MalformedRecordError(
                f"Expected {n_variants} variant rows, read {row}; file changed during load", path
            )

        store = cls._freeze(
            samples, variant_ids, variant_index, afs, afbins, members, matrix, n_bins, path
        )
        store._report_occupancy()
        return store

    @classmethod
    def _freeze(
        cls,
        samples,
        variant_ids,
        variant_index: dict[str, int],
        afs: np.ndarray,
        afbins: np.ndarray,
        members: list[list[int]],
        matrix: np.ndarray,
        n_bins: int,
        path: Path | None,
    ) -> "DosageStore":
        return cls(
            samples=tuple(samples),
            variant_ids=tuple(variant_ids),
            variant_index=MappingProxyType(variant_index),
            afs=_read_only(afs),
            afbins=_read_only(afbins),
            bin_members=tuple(_read_only(np.array(m, dtype=np.int64)) for m in members),
            dosages=_read_only(matrix),
            n_bins=n_bins,
            path=path,
        )

    def _report_occupancy(self) -> None:
        sizes = self.bin_sizes()
        logger.info(
            "Loaded %d variants x %d samples, smallest AF bin size: %d",
            self.n_variants,
            self.n_samples,
            min(sizes),
        )
        n_empty = sum(1 for size in sizes if size == 0)
        if n_empty:
            logger.warning(
                "%d of %d AF bins are empty; null models that need them will fail. "
                "Consider using fewer bins.",
                n_empty,
                self.n_bins,
            )
