"""Tests for typed nullable columns."""

import math

import numpy as np
import pytest

from parframes import (
    CategoricalSummary, Column, IndexOutOfBoundsError, NumericSummary, RowCountMismatchError,
    TypeMismatchError,
)
from parframes.core import ElementKind


class TestColumnCreation:
    """Test building columns and reading elements back."""

    def test_infers_int_with_missing(self):
        """Test that None marks a missing value in an inferred int column."""
        col = Column("x", [1, None, 3])

        assert col.element_type is int
        assert col.kind is ElementKind.INT
        assert len(col) == 3
        assert col.count == 3
        assert col[0] == 1
        assert col[1] is None
        assert col.is_missing(1)
        assert not col.is_missing(2)
        assert col.missing_count == 1

    def test_mixed_int_float_becomes_float(self):
        """Test that ints and floats mix into a float column."""
        col = Column("f", [1, 2.5])

        assert col.element_type is float
        assert col.to_list() == [1.0, 2.5]

    def test_nan_is_present(self):
        """Test that NaN is a stored value, not a missing one."""
        col = Column("f", [float("nan"), None])

        assert math.isnan(col[0])
        assert not col.is_missing(0)
        assert col.is_missing(1)

    def test_from_numpy(self):
        """Test that numpy arrays keep their storage dtype."""
        col = Column("n", np.array([1, 2, 3]))

        assert col.element_type is int
        assert col.to_numpy().dtype == np.int64
        assert col.to_list() == [1, 2, 3]

    def test_explicit_type_rejects_wrong_values(self):
        """Test that values are checked against an explicit element type."""
        with pytest.raises(TypeMismatchError):
            Column("x", [1, "a"], int)

    def test_empty_with_capacity(self):
        """Test empty columns with reserved storage."""
        col = Column.empty("e", float, capacity=10)

        assert len(col) == 0
        assert col.capacity >= 10
        col.append(1.5)
        assert col.to_list() == [1.5]

    def test_negative_index(self):
        """Test reading from the end."""
        col = Column("x", [1, 2, 3])
        assert col[-1] == 3

    def test_out_of_bounds(self):
        """Test that indexing past the end raises."""
        col = Column("x", [1, 2, 3])

        with pytest.raises(IndexOutOfBoundsError):
            col[5]
        # the builtin exception type is honored too
        with pytest.raises(IndexError):
            col[-4]

    def test_to_numpy_with_missing(self):
        """Test that missing values produce an object array holding None."""
        result = Column("x", [1, None]).to_numpy()

        assert result.dtype == object
        assert result.tolist() == [1, None]


class TestColumnMutation:
    """Test element assignment, growth and removal."""

    def test_assignment(self):
        """Test assigning present and missing values."""
        col = Column("x", [1, 2, 3])
        col[0] = 10
        col[2] = None

        assert col.to_list() == [10, 2, None]

    def test_assignment_type_checked(self):
        """Test that assigning a value of the wrong type raises."""
        col = Column("x", [1, 2, 3])

        with pytest.raises(TypeMismatchError):
            col[0] = "a"
        assert col.to_list() == [1, 2, 3]

    def test_integers_outside_int64_rejected(self):
        """Test that integer columns only accept 64-bit values."""
        col = Column("x", [1, 2])

        with pytest.raises(TypeMismatchError):
            col.append(2 ** 63)
        with pytest.raises(TypeMismatchError):
            Column("y", [1, 2 ** 80])
        col.append(-2 ** 63)
        assert col.to_list() == [1, 2, -2 ** 63]
        assert len(col) == 3

    def test_append_insert_remove(self):
        """Test growing and shrinking a column."""
        col = Column("x", [1, 2])
        col.append(None)
        col.insert(0, 0)

        assert col.to_list() == [0, 1, 2, None]
        assert col.remove(1) == 1
        assert col.to_list() == [0, 2, None]

    def test_insert_bounds(self):
        """Test that inserting past the end raises."""
        col = Column("x", [1])

        with pytest.raises(IndexOutOfBoundsError):
            col.insert(3, 2)

    def test_extend_is_atomic(self):
        """Test that a rejected value leaves the column unchanged."""
        col = Column("x", [1])

        with pytest.raises(TypeMismatchError):
            col.extend([2, "three"])
        assert col.to_list() == [1]

    def test_extend_with_column(self):
        """Test extending with another column of the same type."""
        col = Column("x", [1])
        col.extend(Column("y", [2, None]))
        assert col.to_list() == [1, 2, None]

        with pytest.raises(TypeMismatchError):
            col.extend(Column("z", ["a"]))

    def test_growth_beyond_capacity(self):
        """Test that appends reallocate storage as needed."""
        col = Column("x", [], int)
        for i in range(100):
            col.append(i)

        assert len(col) == 100
        assert col.sum() == sum(range(100))

    def test_transform_in_place(self):
        """Test replacing every element with a function of itself."""
        col = Column("x", [1, None, 3])
        col.transform(lambda v: None if v is None else v * 2)
        assert col.to_list() == [2, None, 6]


class TestColumnArithmetic:
    """Test element-wise arithmetic."""

    def test_add_scalar_propagates_missing(self):
        """Test that missing elements stay missing."""
        result = Column("a", [1, 2, None]) + 1

        assert result.element_type is int
        assert result.to_list() == [2, 3, None]

    def test_true_division_of_ints_is_float(self):
        """Test that dividing ints produces floats."""
        result = Column("a", [1, 2, None]) / 2

        assert result.element_type is float
        assert result.to_list() == [0.5, 1.0, None]

    def test_integer_division_by_zero_is_missing(self):
        """Test that integer division by zero yields a missing element."""
        result = Column("a", [4, 5]) // Column("b", [2, 0])
        assert result.to_list() == [2, None]

    def test_float_division_by_zero_is_infinite(self):
        """Test that float division follows IEEE semantics."""
        result = Column("f", [1.0]) / 0
        assert math.isinf(result[0])

    def test_column_operands(self):
        """Test arithmetic between two columns."""
        a = Column("a", [1, 2, 3])
        b = Column("b", [10, None, 30])

        assert (a * b).to_list() == [10, None, 90]
        assert (b - a).to_list() == [9, None, 27]

    def test_reflected_operands(self):
        """Test scalars on the left-hand side."""
        col = Column("a", [1, 2])

        assert (10 - col).to_list() == [9, 8]
        assert (2 * col).to_list() == [2, 4]

    def test_length_mismatch(self):
        """Test that operands must have the same length."""
        with pytest.raises(RowCountMismatchError):
            Column("a", [1, 2]) + Column("b", [1])

    def test_string_concatenation(self):
        """Test that + concatenates strings."""
        result = Column("s", ["a", None]) + "x"
        assert result.to_list() == ["ax", None]

    def test_non_numeric_arithmetic_raises(self):
        """Test arithmetic on incompatible types."""
        with pytest.raises(TypeMismatchError):
            Column("s", ["a"]) * 2

    def test_in_place_operators(self):
        """Test that in-place operators keep the element type."""
        col = Column("a", [1, 2])
        col += 5
        assert col.to_list() == [6, 7]

        col = Column("a", [7, 8])
        col /= 2
        assert col.to_list() == [3, 4]
        assert col.element_type is int

    def test_in_place_type_change_raises(self):
        """Test that an in-place result of another type is rejected."""
        col = Column("a", [1, 2])

        with pytest.raises(TypeMismatchError):
            col += 0.5

    def test_unary(self):
        """Test negation and absolute value."""
        col = Column("a", [-1, None, 2])

        assert (-col).to_list() == [1, None, -2]
        assert abs(col).to_list() == [1, None, 2]


class TestColumnComparisons:
    """Test element-wise comparisons."""

    def test_scalar_comparison_is_false_for_missing(self):
        """Test that missing elements compare false."""
        col = Column("a", [1, None, 3])

        assert (col > 1).tolist() == [False, False, True]
        assert (col != 1).tolist() == [False, False, True]
        assert (col == 3).tolist() == [False, False, True]

    def test_string_comparison(self):
        """Test comparisons of object-stored values."""
        col = Column("s", ["a", None, "c"])

        assert (col == "a").tolist() == [True, False, False]
        assert (col >= "b").tolist() == [False, False, True]

    def test_incomparable_values_are_false(self):
        """Test that comparing unrelated types does not raise."""
        assert (Column("s", ["a"]) < 1).tolist() == [False]

    def test_structural_equality(self):
        """Test column equality by name, type and elements."""
        assert Column("x", [1, None]) == Column("x", [1, None])
        assert Column("x", [1, None]) != Column("y", [1, None])
        assert Column("x", [1, 2]) != Column("x", [1.0, 2.0])


class TestColumnSelection:
    """Test filtering, distinct and mapping."""

    def test_filter_returns_discontiguous_slice(self):
        """Test filtering by a predicate over optional values."""
        col = Column("x", [1, None, 3, 0])
        result = col.filter(lambda v: v is not None and v > 0)

        assert result.to_list() == [1, 3]
        assert result.indices.tolist() == [0, 2]

    def test_distinct_keeps_first_occurrence(self):
        """Test that distinct ignores missing values and keeps order."""
        col = Column("c", ["a", "b", "a", None, "b"])
        result = col.distinct()

        assert result.to_list() == ["a", "b"]
        assert result.indices.tolist() == [0, 1]
        assert col.unique_count() == 2

    def test_map(self):
        """Test mapping over every element."""
        col = Column("x", [1, None])

        assert col.map(lambda v: 0 if v is None else v * 2).to_list() == [2, 0]
        mapped = col.map_non_missing(str)
        assert mapped.to_list() == ["1", None]
        assert mapped.element_type is str

    def test_filled(self):
        """Test replacing missing values."""
        assert Column("x", [1, None]).filled(0).to_list() == [1, 0]
        assert Column("s", ["a", None]).filled("z").to_list() == ["a", "z"]

        with pytest.raises(TypeMismatchError):
            Column("x", [1, None]).filled("z")


class TestColumnStatistics:
    """Test reductions and summaries."""

    def test_sum_and_mean_ignore_missing(self):
        """Test that reductions skip missing values."""
        col = Column("x", [1, None, 3])

        assert col.sum() == 4
        assert isinstance(col.sum(), int)
        assert col.mean() == 2.0

    def test_empty_reductions(self):
        """Test reductions without present values."""
        col = Column("x", [None, None], int)

        assert col.sum() == 0
        assert col.mean() is None
        assert col.min() is None
        assert col.argmax() is None

    def test_standard_deviation(self):
        """Test the sample standard deviation."""
        assert Column("x", [1, 2, 3, 4]).std() == pytest.approx(1.2909944487)
        assert Column("x", [1, 2, 3, 4]).std(ddof=0) == pytest.approx(1.1180339887)
        assert Column("x", [1.0]).std() is None

    def test_min_max_argmin(self):
        """Test extremes and their positions."""
        col = Column("x", [3, None, 1, 1])

        assert col.min() == 1
        assert col.max() == 3
        assert col.argmin() == 2
        assert col.argmax() == 0

    def test_string_extremes(self):
        """Test min and max of orderable non-numeric values."""
        col = Column("s", ["b", "a", None])

        assert col.min() == "a"
        assert col.max() == "b"

    def test_numeric_reduction_on_strings_raises(self):
        """Test that sums need a numeric column."""
        with pytest.raises(TypeMismatchError):
            Column("s", ["a"]).sum()

    def test_categorical_summary(self):
        """Test count, unique count and most frequent value."""
        summary = Column("c", ["a", "b", "a", None]).summary()
        assert summary == CategoricalSummary(3, 2, "a", 2)

    def test_summary_tie_goes_to_first_seen(self):
        """Test the most frequent value when counts tie."""
        summary = Column("c", ["b", "a", "a", "b"]).summary()

        assert summary.top == "b"
        assert summary.top_frequency == 2

    def test_numeric_summary(self):
        """Test the numeric summary of a column with a missing value."""
        summary = Column("x", [1, 2, 3, None]).numeric_summary()
        assert summary == NumericSummary(3, 2.0, 1.0, 1.0, 3.0)

    def test_erase(self):
        """Test wrapping a column in a type-erased column."""
        col = Column("x", [1])
        erased = col.erase()

        assert erased.assume_type(int) is col
