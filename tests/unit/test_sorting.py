"""Tests for sorting frames."""

import numpy as np
import pytest

from parframes import DataFrame, Order, StaleViewError, TypeMismatchError
from parframes.core.sorting import multi_column_lexsort


@pytest.fixture
def frame():
    return DataFrame({"id": [1, 2, 3, 4], "city": ["NYC", "LA", "NYC", None]})


class TestLexsort:
    """Test the multi-key lexsort kernel."""

    def test_single_key(self):
        """Test sorting by one key."""
        result = multi_column_lexsort([np.array([3, 1, 2])])
        assert result.tolist() == [1, 2, 0]

    def test_stability(self):
        """Test that equal keys keep their original order."""
        result = multi_column_lexsort([np.array([1, 0, 1, 0])])
        assert result.tolist() == [1, 3, 0, 2]

    def test_mixed_orders(self):
        """Test one ascending and one descending key."""
        first = np.array([1, 1, 0, 0])
        second = np.array([1.0, 2.0, 1.0, 2.0])
        result = multi_column_lexsort([first, second], [True, False])

        assert result.tolist() == [3, 2, 1, 0]

    def test_empty(self):
        """Test sorting nothing."""
        assert multi_column_lexsort([np.array([], dtype=np.int64)]).tolist() == []


class TestSorted:
    """Test sorted copies of frames."""

    def test_missing_first_ascending(self, frame):
        """Test that missing values come first in ascending order."""
        result = frame.sorted("city")

        assert result["city"].to_list() == [None, "LA", "NYC", "NYC"]
        assert result["id"].to_list() == [4, 2, 1, 3]

    def test_missing_first_descending(self, frame):
        """Test that missing values come first in descending order too."""
        result = frame.sorted("city", Order.DESCENDING)

        assert result["city"].to_list() == [None, "NYC", "NYC", "LA"]
        assert result["id"].to_list() == [4, 1, 3, 2]

    def test_numeric_with_missing(self):
        """Test numeric sort keys with missing values."""
        df = DataFrame({"x": [3.5, None, -1.0, 2.0]})

        assert df.sorted("x")["x"].to_list() == [None, -1.0, 2.0, 3.5]
        assert df.sorted("x", "descending")["x"].to_list() == [None, 3.5, 2.0, -1.0]

    def test_wide_integer_range(self):
        """Test descending order for integers spanning most of the 64-bit range."""
        values = [-2 ** 62, 2 ** 62, 0, -2 ** 62 - 5, None, 2 ** 63 - 1, -2 ** 63]
        df = DataFrame({"x": values})

        assert df.sorted("x", Order.DESCENDING)["x"].to_list() == [
            None, 2 ** 63 - 1, 2 ** 62, 0, -2 ** 62, -2 ** 62 - 5, -2 ** 63,
        ]
        assert df.sorted("x")["x"].to_list() == [
            None, -2 ** 63, -2 ** 62 - 5, -2 ** 62, 0, 2 ** 62, 2 ** 63 - 1,
        ]

    def test_multiple_columns(self):
        """Test lexicographic sorting by several columns."""
        df = DataFrame({"a": [2, 1, 2, 1], "b": ["x", "y", "y", "x"]})
        result = df.sorted(["a", "b"], [Order.ASCENDING, Order.DESCENDING])

        assert result["a"].to_list() == [1, 1, 2, 2]
        assert result["b"].to_list() == ["y", "x", "y", "x"]

    def test_order_count_must_match(self, frame):
        """Test that one order per column is required."""
        with pytest.raises(ValueError):
            frame.sorted(["id", "city"], [Order.ASCENDING])

    def test_key_function(self):
        """Test sorting by a key derived from each value."""
        df = DataFrame({"word": ["bb", "a", None, "ccc"]})
        result = df.sorted("word", key=lambda w: -len(w))

        assert result["word"].to_list() == [None, "ccc", "bb", "a"]

    def test_unorderable_values(self):
        """Test sorting values without an ordering."""
        df = DataFrame({"d": [{"a": 1}, {"b": 2}]})

        with pytest.raises(TypeMismatchError):
            df.sorted("d")

    def test_sorted_slice(self, frame):
        """Test sorting the rows of a slice."""
        result = frame[0:3].sorted("id", Order.DESCENDING)
        assert result["id"].to_list() == [3, 2, 1]

    def test_sorted_keeps_source(self, frame):
        """Test that sorted leaves the frame untouched."""
        frame.sorted("id", Order.DESCENDING)
        assert frame["id"].to_list() == [1, 2, 3, 4]


class TestSortInPlace:
    """Test sorting a frame in place."""

    def test_sort(self, frame):
        """Test that every column is reordered."""
        frame.sort("id", Order.DESCENDING)

        assert frame["id"].to_list() == [4, 3, 2, 1]
        assert frame["city"].to_list() == [None, "NYC", "LA", "NYC"]

    def test_sort_invalidates_slices(self, frame):
        """Test that reordering rows makes slices stale."""
        view = frame[0:2]
        frame.sort("id", Order.DESCENDING)

        with pytest.raises(StaleViewError):
            view["id"]
