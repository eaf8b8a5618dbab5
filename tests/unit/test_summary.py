"""Tests for frame summaries."""

import pytest

from parframes import DataFrame, TypeMismatchError


@pytest.fixture
def frame():
    return DataFrame({"a": [1, 2, 3, None], "s": ["x", "y", "x", None]})


class TestFrameSummary:
    """Test the summary tables of frames and slices."""

    def test_summary_layout(self, frame):
        """Test one row per column with a fixed set of statistics."""
        summary = frame.summary()

        assert summary.shape == (2, 10)
        assert summary.column_names == [
            "column", "count", "missing", "unique", "top", "top_frequency",
            "mean", "standard_deviation", "min", "max",
        ]

    def test_numeric_row(self, frame):
        """Test the statistics of a numeric column."""
        row = frame.summary()[0].to_dict()

        assert row == {
            "column": "a", "count": 3, "missing": 1, "unique": 3, "top": 1,
            "top_frequency": 1, "mean": 2.0, "standard_deviation": 1.0,
            "min": 1.0, "max": 3.0,
        }

    def test_categorical_row(self, frame):
        """Test that numeric statistics are missing for other columns."""
        row = frame.summary()[1].to_dict()

        assert row["column"] == "s"
        assert row["unique"] == 2
        assert row["top"] == "x"
        assert row["top_frequency"] == 2
        assert row["mean"] is None
        assert row["max"] is None

    def test_summary_of_named_columns(self, frame):
        """Test describing selected columns."""
        summary = frame.summary("s")

        assert summary.row_count == 1
        assert summary["column"].to_list() == ["s"]
        assert frame.summary_of_all_columns() == frame.summary()

    def test_numeric_summary(self, frame):
        """Test that only numeric columns are described by default."""
        summary = frame.numeric_summary()

        assert summary.column_names == ["column", "count", "mean", "standard_deviation", "min", "max"]
        assert summary["column"].to_list() == ["a"]

    def test_numeric_summary_of_strings(self, frame):
        """Test naming a non-numeric column."""
        with pytest.raises(TypeMismatchError):
            frame.numeric_summary("s")

    def test_slice_summary(self, frame):
        """Test summarizing the rows of a slice."""
        summary = frame[0:2].summary("a")

        assert summary["count"].to_list() == [2]
        assert summary["mean"].to_list() == [1.5]
