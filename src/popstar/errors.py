"""Exceptions raised while loading inputs and generating null models."""

from pathlib import Path


class PopstarError(Exception):
    """Base class for fatal popstar errors."""

    pass


class InputParseError(PopstarError):
    """Structural error in a dosage or model file."""

    def __init__(self, message: str, path: Path | str | None = None, line_number: int | None = None):
        self.path = Path(path) if path is not None else None
        self.line_number = line_number
        self.detail = message

        location = ""
        if self.path is not None:
            location = f"{self.path}"
            if line_number is not None:
                location += f":{line_number}"
            location += ": "
        super().__init__(f"{location}{message}")


class DuplicateSampleError(InputParseError):
    """A sample identifier occurs more than once in the dosage header."""

    pass


class DuplicateVariantError(InputParseError):
    """A variant identifier occurs more than once in the dosage file."""

    pass


class MalformedRecordError(InputParseError):
    """A row has the wrong number of columns or an unparsable field."""

    pass


class InvalidDosageError(InputParseError):
    """A dosage code is not one of '0', '1', '2' or '-'."""

    pass


class AllAllelesMissingError(InputParseError):
    """Every sample is missing at a variant, so its allele frequency is undefined."""

    pass


class EmptyAFBinError(PopstarError):
    """Null-model resampling requested an allele frequency bin with no variants."""

    def __init__(self, afbin: int, n_bins: int, variant_id: str | None = None):
        self.afbin = afbin
        self.n_bins = n_bins
        self.variant_id = variant_id
        message = f"Allele frequency bin {afbin} of {n_bins} has no variants to resample from"
        if variant_id is not None:
            message += f" (needed for {variant_id})"
        super().__init__(message)
