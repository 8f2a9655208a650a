"""Collection of linear models loaded from a model coefficient file."""

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from ..dosages import DosageStore, assign_af_bin
from ..errors import MalformedRecordError
from .model_file import CoefficientRow, OffsetRow, iter_model_rows
from .models import Model, VariantCoefficient

logger = logging.getLogger(__name__)

AF_MISMATCH_TOLERANCE = 0.05


@dataclass
class _ModelBuilder:
    model_id: str
    offset: float = 0.0
    terms: dict[str, VariantCoefficient] = field(default_factory=dict)

    def build(self) -> Model:
        return Model(model_id=self.model_id, offset=self.offset, terms=tuple(self.terms.values()))


def is_af_mismatch(model_af: float, dosage_af: float) -> bool:
    """Check whether a model's allele frequency disagrees with the dosage data."""
    return abs(model_af - dosage_af) > AF_MISMATCH_TOLERANCE


@dataclass(frozen=True, eq=False)
class ModelStore:
    """Read-only, insertion-ordered collection of models.

    Attributes:
        models: Model identifier to Model, in order of first appearance.
        excluded: Model identifier to variants dropped for allele frequency mismatch.
        n_bins: Number of allele frequency bins used for coefficient bins.
    """

    models: Mapping[str, Model]
    excluded: Mapping[str, tuple[str, ...]]
    n_bins: int

    def __len__(self) -> int:
        return len(self.models)

    def __iter__(self) -> Iterator[Model]:
        return iter(self.models.values())

    def __getitem__(self, model_id: str) -> Model:
        return self.models[model_id]

    def __contains__(self, model_id: object) -> bool:
        return model_id in self.models

    @property
    def model_ids(self) -> list[str]:
        return list(self.models)

    @classmethod
    def load(cls, path: Path | str, n_bins: int, dosages: DosageStore) -> "ModelStore":
        """Load models, cross-checking allele frequencies against the dosages.

        A coefficient whose variant is genotyped but whose allele frequency
        differs from the dosage estimate by more than 0.05 is skipped with a
        warning. Variants not present in the dosages are kept as-is.

        Args:
            path: Model coefficient file (optionally gzip-compressed).
            n_bins: Number of allele frequency bins; must match the dosages.
            dosages: Loaded dosage store.

        Returns:
            Loaded ModelStore.

        Raises:
            MalformedRecordError: If a row cannot be parsed.
            ValueError: If n_bins differs from the dosage store's.
        """
        if n_bins != dosages.n_bins:
            raise ValueError(
                f"Model AF bins ({n_bins}) must match dosage AF bins ({dosages.n_bins})"
            )

        path = Path(path)
        logger.info("Loading models from %s, %d AF bins", path, n_bins)

        builders: dict[str, _ModelBuilder] = {}
        excluded: dict[str, list[str]] = {}

        for record in iter_model_rows(path):
            if isinstance(record, OffsetRow):
                builder = builders.setdefault(record.model_id, _ModelBuilder(record.model_id))
                builder.offset = record.offset
                continue

            try:
                afbin = assign_af_bin(record.af, n_bins)
            except (ValueError, OverflowError) as e:
                raise MalformedRecordError(
                    f"Invalid allele frequency {record.af} for {record.variant_id}",
                    path,
                    record.line_number,
                ) from e

            if _excluded_by_af(record, dosages):
                excluded.setdefault(record.model_id, []).append(record.variant_id)
                continue

            builder = builders.setdefault(record.model_id, _ModelBuilder(record.model_id))
            if record.variant_id in builder.terms:
                logger.warning(
                    "Model %s lists %s more than once; keeping line %d",
                    record.model_id,
                    record.variant_id,
                    record.line_number,
                )
            builder.terms[record.variant_id] = VariantCoefficient(
                variant_id=record.variant_id,
                af=record.af,
                afbin=afbin,
                coef=record.coef,
            )

        models = {model_id: builder.build() for model_id, builder in builders.items()}

        for model_id, variant_ids in excluded.items():
            logger.info(
                "Model %s: %d coefficients excluded for AF mismatch", model_id, len(variant_ids)
            )
        logger.info("Loaded %d models", len(models))

        return cls(
            models=MappingProxyType(models),
            excluded=MappingProxyType({k: tuple(v) for k, v in excluded.items()}),
            n_bins=n_bins,
        )


def _excluded_by_af(record: CoefficientRow, dosages: DosageStore) -> bool:
    row = dosages.row_of(record.variant_id)
    if row is None:
        return False

    dosage_af = float(dosages.afs[row])
    if is_af_mismatch(record.af, dosage_af):
        logger.warning(
            "AF mismatch for vid %s: Dosages %s, Model %s", record.variant_id, dosage_af, record.af
        )
        return True
    return False
