"""Tests for complete and summary score output."""

import io
import math

import pytest


def _writer(output_format, reference=None, samples=("sample1", "sample2")):
    from popstar.output import ScoreWriter
    from popstar.prs import SamplingReference

    buffer = io.StringIO()
    writer = ScoreWriter(
        buffer,
        output_format,
        list(samples),
        seed=314159265,
        n_bins=10,
        reference=reference or SamplingReference.EXTERNAL,
    )
    return writer, buffer


class TestCompleteFormat:
    """Test one-row-per-sample output."""

    def test_header(self):
        from popstar.output import OutputFormat

        writer, buffer = _writer(OutputFormat.COMPLETE)
        writer.write_header()

        assert buffer.getvalue() == "model\tsample\titer\tseed\tnafbins\texternal_ref_af\tvalue\n"

    def test_rows_in_sample_order(self):
        from popstar.output import OutputFormat

        writer, buffer = _writer(OutputFormat.COMPLETE)
        rows = writer.write("trait", 0, [4.0, 1.0])

        assert rows == 2
        assert buffer.getvalue().splitlines() == [
            "trait\tsample1\t0\t314159265\t10\t1\t4.0",
            "trait\tsample2\t0\t314159265\t10\t1\t1.0",
        ]

    def test_internal_reference_flag(self):
        from popstar.output import OutputFormat
        from popstar.prs import SamplingReference

        writer, buffer = _writer(OutputFormat.COMPLETE, SamplingReference.INTERNAL)
        writer.write("trait", 3, [0.5, -0.25])

        first = buffer.getvalue().splitlines()[0].split("\t")
        assert first[2] == "3"
        assert first[5] == "0"

    def test_values_round_trip(self):
        from popstar.output import OutputFormat

        value = 0.1 + 0.2
        writer, buffer = _writer(OutputFormat.COMPLETE, samples=["only"])
        writer.write("trait", 0, [value])

        assert float(buffer.getvalue().rstrip("\n").split("\t")[-1]) == value

    def test_value_count_must_match_samples(self):
        from popstar.output import OutputFormat

        writer, _ = _writer(OutputFormat.COMPLETE)

        with pytest.raises(ValueError):
            writer.write("trait", 0, [1.0])


class TestSummaryFormat:
    """Test one-row-per-iteration moment output."""

    def test_header(self):
        from popstar.output import OutputFormat

        writer, buffer = _writer(OutputFormat.SUMMARY)
        writer.write_header()

        assert buffer.getvalue() == (
            "model\titer\tseed\tnafbins\texternal_ref_af\tm1\tm2\tm3\tm4\n"
        )

    def test_single_row_per_iteration(self):
        from popstar.output import OutputFormat

        writer, buffer = _writer(OutputFormat.SUMMARY)
        rows = writer.write("trait", 0, [4.0, 1.0])

        assert rows == 1
        assert buffer.getvalue() == "trait\t0\t314159265\t10\t1\t2.5\t2.25\t0.0\t1.0\n"

    def test_constant_scores_write_nan(self):
        from popstar.output import OutputFormat

        writer, buffer = _writer(OutputFormat.SUMMARY)
        writer.write("trait", 1, [2.0, 2.0])

        fields = buffer.getvalue().rstrip("\n").split("\t")
        assert fields[5:7] == ["2.0", "0.0"]
        assert all(math.isnan(float(f)) for f in fields[7:])

    def test_format_accepts_string_value(self):
        from popstar.output import SUMMARY_COLUMNS

        writer, _ = _writer("summary")

        assert writer.columns == SUMMARY_COLUMNS


class TestFormatFloat:
    """Test float formatting."""

    def test_integral_value_keeps_decimal(self):
        from popstar.output import format_float

        assert format_float(4) == "4.0"

    def test_numpy_scalar(self):
        import numpy as np

        from popstar.output import format_float

        assert format_float(np.float64(1.5)) == "1.5"

    def test_nan(self):
        from popstar.output import format_float

        assert format_float(float("nan")) == "nan"
