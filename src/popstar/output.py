"""Tab-delimited score output in complete and summary layouts."""

from collections.abc import Sequence
from enum import Enum
from typing import TextIO

from .prs import SamplingReference
from .summary import summarize


class OutputFormat(str, Enum):
    """COMPLETE writes one row per sample; SUMMARY one row of moments per model iteration."""

    COMPLETE = "complete"
    SUMMARY = "summary"


COMPLETE_COLUMNS = ["model", "sample", "iter", "seed", "nafbins", "external_ref_af", "value"]
SUMMARY_COLUMNS = ["model", "iter", "seed", "nafbins", "external_ref_af", "m1", "m2", "m3", "m4"]


def format_float(value: float) -> str:
    """Format a float with its shortest round-trip representation."""
    return repr(float(value))


class ScoreWriter:
    """Write native and null model scores for one run."""

    def __init__(
        self,
        destination: TextIO,
        output_format: OutputFormat,
        samples: Sequence[str],
        seed: int,
        n_bins: int,
        reference: SamplingReference,
    ):
        self.destination = destination
        self.output_format = OutputFormat(output_format)
        self.samples = samples
        self.seed = seed
        self.n_bins = n_bins
        self.external_ref_af = "1" if reference == SamplingReference.EXTERNAL else "0"

    @property
    def columns(self) -> list[str]:
        if self.output_format == OutputFormat.COMPLETE:
            return COMPLETE_COLUMNS
        return SUMMARY_COLUMNS

    def write_header(self) -> None:
        self.destination.write("\t".join(self.columns) + "\n")

    def write(self, model_id: str, iteration: int, values: Sequence[float]) -> int:
        """Write the scores of one model iteration.

        Args:
            model_id: Source model identifier.
            iteration: 0 for the native model, 1.. for null models.
            values: One score per sample, in sample order.

        Returns:
            Number of rows written.
        """
        run_fields = f"{iteration}\t{self.seed}\t{self.n_bins}\t{self.external_ref_af}"

        if self.output_format == OutputFormat.SUMMARY:
            moments = "\t".join(format_float(m) for m in summarize(values))
            self.destination.write(f"{model_id}\t{run_fields}\t{moments}\n")
            return 1

        self.destination.writelines(
            f"{model_id}\t{sample}\t{run_fields}\t{format_float(value)}\n"
            for sample, value in zip(self.samples, values, strict=True)
        )
        return len(self.samples)
