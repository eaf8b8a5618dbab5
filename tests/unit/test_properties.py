"""Property-based tests over generated columns and frames."""

from hypothesis import given, settings
import hypothesis.strategies as st

from parframes import Column, DataFrame, Order
from parframes.testing import columns, data_frames, optional_values

# JIT compilation makes the first examples slow
PROPERTY_SETTINGS = settings(max_examples=25, deadline=None)


class TestColumnProperties:
    """Properties of single columns."""

    @PROPERTY_SETTINGS
    @given(optional_values(int))
    def test_sum_matches_python(self, values):
        """Test that the sum ignores missing values."""
        col = Column("x", values, int)
        assert col.sum() == sum(v for v in values if v is not None)

    @PROPERTY_SETTINGS
    @given(columns())
    def test_distinct_count_is_unique_count(self, col):
        """Test that distinct agrees with the summary."""
        assert len(col.distinct()) == col.summary().unique_count

    @PROPERTY_SETTINGS
    @given(columns())
    def test_missing_count(self, col):
        """Test that missing and present elements add up."""
        assert col.missing_count + col.summary().count == len(col)

    @PROPERTY_SETTINGS
    @given(optional_values(float), st.floats(min_value=-100, max_value=100))
    def test_filled_has_no_missing(self, values, fill):
        """Test that filling removes every missing value."""
        assert Column("x", values, float).filled(fill).missing_count == 0


class TestFrameProperties:
    """Properties of frames and their operations."""

    @PROPERTY_SETTINGS
    @given(data_frames())
    def test_rebuild_from_columns(self, frame):
        """Test that a frame equals the frame built from its columns."""
        assert DataFrame(frame.columns) == frame

    @PROPERTY_SETTINGS
    @given(data_frames(min_cols=2))
    def test_group_sizes_add_up(self, frame):
        """Test that ungrouping keeps every row."""
        grouping = frame.grouped("key")

        assert sum(group.row_count for _, group in grouping) == frame.row_count
        assert grouping.ungrouped().row_count == frame.row_count

    @PROPERTY_SETTINGS
    @given(data_frames())
    def test_sort_orders_mirror_each_other(self, frame):
        """Test that both orders put missing values first and reverse the rest."""
        ascending = frame.sorted("key")["key"].to_list()
        descending = frame.sorted("key", Order.DESCENDING)["key"].to_list()
        missing = ascending.count(None)
        present = [v for v in frame["key"].to_list() if v is not None]

        assert ascending[:missing] == [None] * missing
        assert descending[:missing] == [None] * missing
        assert ascending[missing:] == sorted(present)
        assert descending[missing:] == sorted(present, reverse=True)

    @PROPERTY_SETTINGS
    @given(data_frames(max_rows=10))
    def test_left_join_on_unique_key_keeps_rows(self, frame):
        """Test that a left self-join on a unique key keeps the row count."""
        frame.append_column(Column("row", list(range(frame.row_count)), int))
        assert frame.join(frame, on="row", kind="left").row_count == frame.row_count

    @PROPERTY_SETTINGS
    @given(data_frames(), st.floats(min_value=0.0, max_value=1.0), st.integers(0, 100))
    def test_random_split_partitions_rows(self, frame, proportion, seed):
        """Test that the two parts of a split cover every row once."""
        first, second = frame.random_split(proportion, seed=seed)
        rows = first.row_indices.tolist() + second.row_indices.tolist()

        assert sorted(rows) == list(range(frame.row_count))
