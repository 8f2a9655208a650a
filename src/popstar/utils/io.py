"""Text file helpers for plain and gzip-compressed inputs and outputs."""

import gzip
import zlib
from collections.abc import Iterator
from pathlib import Path
from typing import IO

from ..errors import MalformedRecordError

CORRUPT_GZIP_ERRORS = (gzip.BadGzipFile, EOFError, zlib.error)


def is_gzipped(path: Path | str) -> bool:
    """Check whether a path names a gzip file by its extension."""
    return str(path).endswith(".gz")


def open_text(path: Path | str, mode: str = "r") -> IO[str]:
    """Open a text file, transparently handling gzip compression.

    Args:
        path: File path; a ``.gz`` suffix selects gzip.
        mode: ``"r"`` or ``"w"``.

    Returns:
        A text-mode file object.
    """
    open_func = gzip.open if is_gzipped(path) else open
    text_mode = mode if "t" in mode else mode + "t"
    return open_func(path, text_mode)


def iter_text_lines(path: Path | str) -> Iterator[tuple[int, str]]:
    """Yield ``(line_number, line)`` pairs from a plain or gzip UTF-8 file.

    Each line is decoded on its own so an undecodable byte is reported at
    the line that holds it. Line endings are kept.

    Raises:
        MalformedRecordError: If a line is not valid UTF-8 or the gzip
            stream is corrupt or truncated.
    """
    open_func = gzip.open if is_gzipped(path) else open
    line_number = 0
    try:
        with open_func(path, "rb") as f:
            for line_number, raw in enumerate(f, start=1):
                try:
                    line = raw.decode("utf-8")
                except UnicodeDecodeError as e:
                    raise MalformedRecordError(
                        f"Invalid UTF-8 text: {e.reason}", path, line_number
                    ) from e
                yield line_number, line
    except CORRUPT_GZIP_ERRORS as e:
        raise MalformedRecordError(
            f"Corrupt or truncated gzip data: {e}", path, line_number + 1
        ) from e
