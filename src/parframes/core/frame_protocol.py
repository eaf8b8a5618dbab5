"""Read operations shared by DataFrame and DataFrame slices."""

import logging
from collections import abc
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..errors import ColumnNotFoundError, TypeMismatchError
from .any_column import AnyColumn, AnyColumnSlice
from .column import Column
from .dtypes import type_name
from .protocols import normalize_index, positions_from_key
from .slices import DiscontiguousColumnSlice
from .sorting import Order, sort_positions

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = (
    ("column", str), ("count", int), ("missing", int), ("unique", int), ("top", object),
    ("top_frequency", int), ("mean", float), ("standard_deviation", float),
    ("min", float), ("max", float),
)

NUMERIC_SUMMARY_COLUMNS = (
    ("column", str), ("count", int), ("mean", float), ("standard_deviation", float),
    ("min", float), ("max", float),
)


def _as_name_list(names: Union[str, Sequence[str]]) -> List[str]:
    if isinstance(names, str):
        return [names]
    return list(names)


def _as_orders(order, count: int) -> List[Order]:
    if isinstance(order, (list, tuple)):
        if len(order) != count:
            raise ValueError(f"Expected {count} sort orders, got {len(order)}")
        return [Order.parse(o) for o in order]
    return [Order.parse(order)] * count


def summary_row(view) -> List[Any]:
    """One row of a summary table for a typed column or column slice."""
    categorical = view.summary()
    row = [view.name, categorical.count, view.missing_count, categorical.unique_count,
           categorical.top, categorical.top_frequency]
    if view.kind.is_numeric:
        numeric = view.numeric_summary()
        row.extend([numeric.mean, numeric.standard_deviation, numeric.min, numeric.max])
    else:
        row.extend([None, None, None, None])
    return row


def numeric_summary_row(view) -> List[Any]:
    numeric = view.numeric_summary()
    return [view.name, numeric.count, numeric.mean, numeric.standard_deviation,
            numeric.min, numeric.max]


def build_table(schema: Sequence[Tuple[str, type]], rows: List[List[Any]],
                leading: Sequence[Column] = ()):
    """Assemble a DataFrame from row lists, optionally prefixed by ready-made columns."""
    from .frame import DataFrame
    columns = [Column(name, [row[i] for row in rows], element_type)
               for i, (name, element_type) in enumerate(schema)]
    return DataFrame(list(leading) + columns)


class DataFrameProtocol:
    """
    Operations available on both :class:`DataFrame` and its slices.

    A host provides ``_base_frame()``, the owning frame, and
    ``_row_positions()``, the base row positions of its rows in order.
    """

    def _base_frame(self):
        raise NotImplementedError

    def _row_positions(self) -> np.ndarray:
        raise NotImplementedError

    def _view_column(self, index: int):
        raise NotImplementedError

    # Shape and lookup

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self._base_frame()._columns]

    @property
    def column_count(self) -> int:
        return len(self._base_frame()._columns)

    @property
    def row_count(self) -> int:
        return len(self._row_positions())

    @property
    def shape(self) -> Tuple[int, int]:
        """Return ``(row_count, column_count)``."""
        return (self.row_count, self.column_count)

    def __len__(self) -> int:
        return self.row_count

    @property
    def columns(self) -> list:
        return [self._view_column(i) for i in range(self.column_count)]

    def index_of_column(self, name: str) -> Optional[int]:
        """Position of the column with this name or alias, or ``None``."""
        return self._base_frame().index_of_column(name)

    def _require_column(self, name: str) -> int:
        index = self.index_of_column(name)
        if index is None:
            raise ColumnNotFoundError(f"Column '{name}' not found")
        return index

    def __contains__(self, name: str) -> bool:
        return self.index_of_column(name) is not None

    def _typed_view(self, name: str):
        """Typed column or discontiguous slice for ``name``."""
        view = self._view_column(self._require_column(name))
        return view._column

    def _column_data(self, name: str):
        column = self._base_frame()._columns[self._require_column(name)]._column
        positions = self._row_positions()
        return column._values[positions], column._mask[positions], column

    # Rows

    def row(self, index: int):
        """Return the row at ``index`` as a :class:`Row` view."""
        from .row import Row
        positions = self._row_positions()
        return Row(self._base_frame(), int(positions[normalize_index(index, len(positions))]))

    @property
    def rows(self):
        from .row import Rows
        return Rows(self)

    def __iter__(self):
        return iter(self.rows)

    def __getitem__(self, key):
        """
        Column, row or row-subset access.

        ``frame["name"]`` returns a column (or column slice), a list of names
        selects columns, an integer returns a :class:`Row`, and a slice,
        boolean mask or list of integers returns a :class:`DataFrameSlice`.
        """
        if isinstance(key, str):
            return self._view_column(self._require_column(key))
        if isinstance(key, (int, np.integer)) and not isinstance(key, (bool, np.bool_)):
            return self.row(int(key))
        if isinstance(key, slice):
            return self._slice(self._row_positions()[key])
        if isinstance(key, (list, tuple)) and key and all(isinstance(k, str) for k in key):
            return self.select(key)
        positions = self._row_positions()
        return self._slice(positions[positions_from_key(key, len(positions))])

    def _slice(self, base_positions: np.ndarray):
        from .frame_slice import DataFrameSlice
        return DataFrameSlice(self._base_frame(), base_positions)

    # Row subsets

    def filter(self, predicate: Callable[[Any], bool]):
        """Keep the rows for which ``predicate(row)`` is true, in order."""
        from .row import Row
        base = self._base_frame()
        positions = self._row_positions()
        keep = [p for p in positions.tolist() if predicate(Row(base, p))]
        return self._slice(np.asarray(keep, dtype=np.int64))

    def filter_on(self, name: str, predicate: Callable[[Any], bool]):
        """Keep the rows whose value in column ``name`` satisfies ``predicate``."""
        values = self._typed_view(name).to_list()
        positions = self._row_positions()
        keep = [i for i, value in enumerate(values) if predicate(value)]
        return self._slice(positions[np.asarray(keep, dtype=np.int64)])

    def prefix(self, length: int):
        """The first ``length`` rows."""
        return self._slice(self._row_positions()[:max(length, 0)])

    def suffix(self, length: int):
        positions = self._row_positions()
        return self._slice(positions[len(positions) - min(max(length, 0), len(positions)):])

    def random_split(self, proportion: float, seed: Optional[int] = None):
        """
        Split the rows in two at random.

        Parameters
        ----------
        proportion : float
            Fraction of rows, between 0 and 1, in the first part
        seed : int, optional
            Seed making the split reproducible

        Returns
        -------
        Tuple[DataFrameSlice, DataFrameSlice]
            Both parts keep the original row order
        """
        if not 0.0 <= proportion <= 1.0:
            raise ValueError(f"Proportion must be between 0 and 1, got {proportion}")
        positions = self._row_positions()
        chosen = _choose(len(positions), proportion, np.random.RandomState(seed))
        return self._slice(positions[chosen]), self._slice(positions[~chosen])

    def stratified_split(self, on: Union[str, Sequence[str]], proportion: float,
                         seed: Optional[int] = None):
        """
        Split the rows of every group of ``on`` separately.

        Each group contributes ``proportion`` of its rows to the first frame,
        so both frames keep the distribution of the ``on`` values.
        """
        if not 0.0 <= proportion <= 1.0:
            raise ValueError(f"Proportion must be between 0 and 1, got {proportion}")
        random_state = np.random.RandomState(seed)
        positions = self._row_positions()
        chosen = np.zeros(len(positions), dtype=np.bool_)
        for relative in _group_members(self, _as_name_list(on)):
            chosen[relative[_choose(len(relative), proportion, random_state)]] = True
        return (self._slice(positions[chosen]).to_frame(),
                self._slice(positions[~chosen]).to_frame())

    # Materializing operations

    def _materialize(self, base_positions: np.ndarray, indices: Optional[List[int]] = None,
                     names: Optional[List[str]] = None):
        from .frame import DataFrame
        base = self._base_frame()
        if indices is None:
            indices = list(range(len(base._columns)))
        columns = []
        for j, index in enumerate(indices):
            column = base._columns[index]._column.take(base_positions)
            if names is not None:
                column.name = names[j]
            columns.append(AnyColumn(column))
        aliases = {}
        for alias, index in base._alias_indices().items():
            if index in indices:
                aliases[alias] = columns[indices.index(index)]
        return DataFrame._from_parts(columns, aliases, len(base_positions))

    def to_frame(self):
        """Copy the rows into a new owning :class:`DataFrame`."""
        return self._materialize(self._row_positions())

    def select(self, names: Sequence[str]):
        """
        Project the named columns into a new frame, in the requested order.

        A column reached through an alias is named after the alias.
        Repeating a name repeats the column.
        """
        names = _as_name_list(names)
        indices = [self._require_column(name) for name in names]
        return self._materialize(self._row_positions(), indices, names)

    def _sort_order(self, on, order, key) -> np.ndarray:
        names = _as_name_list(on)
        orders = _as_orders(order, len(names))
        sort_columns = []
        for name in names:
            values, mask, column = self._column_data(name)
            sort_columns.append((values, mask, column.kind, name))
        return sort_positions(sort_columns, orders, key)

    def exploding_column(self, name: str):
        """
        Return a new frame with one row per element of a collection column.

        Every other column repeats the value of the row the element came
        from. A missing or empty collection keeps its row, with a missing
        element. The element type of the new column is inferred from the
        elements.

        Raises
        ------
        TypeMismatchError
            If the column does not hold collections such as lists, tuples or sets
        """
        index = self._require_column(name)
        view = self._typed_view(name)
        element_type = view.element_type
        if not (isinstance(element_type, type) and issubclass(element_type, abc.Collection)
                and not issubclass(element_type, (str, bytes, abc.Mapping))):
            raise TypeMismatchError(
                f"Column '{name}' holds {type_name(element_type)} values, not collections"
            )
        repeats, elements = [], []
        for value in view.to_list():
            items = [] if value is None else list(value)
            repeats.append(max(len(items), 1))
            elements.extend(items or [None])

        frame = self._materialize(np.repeat(self._row_positions(), repeats))
        old = frame._columns[index]
        exploded = AnyColumn(Column(old.name, elements))
        frame._columns[index] = exploded
        frame._aliases = {alias: exploded if column is old else column
                          for alias, column in frame._aliases.items()}
        logger.debug("Exploded column '%s' from %d to %d rows", name, len(repeats), len(elements))
        return frame

    def sorted(self, on: Union[str, Sequence[str]], order=Order.ASCENDING,
               key: Optional[Callable[[Any], Any]] = None):
        """
        Return a new frame with the rows stably sorted.

        Parameters
        ----------
        on : str or List[str]
            Sort column(s), compared lexicographically in the given order
        order : Order or List[Order]
            One order for all sort columns, or one per column
        key : callable, optional
            Maps present values to the value that is compared

        Notes
        -----
        Missing values sort before all present values in both orders.
        """
        positions = self._row_positions()
        return self._materialize(positions[self._sort_order(on, order, key)])

    def grouped(self, by: Union[str, Sequence[str]],
                transform: Optional[Callable[[Any], Any]] = None, time_unit=None):
        """
        Partition the rows by the values of one or more columns.

        With ``time_unit`` a date column is grouped by one calendar
        component such as the month; see :class:`TimeUnit`.
        """
        from .grouping import RowGrouping
        return RowGrouping(self, by, transform, time_unit)

    def join(self, other, on, kind="inner"):
        """Join with another frame or slice on key columns; see :func:`join`."""
        from .join import join
        return join(self, other, on, kind)

    # Statistics

    def summary(self, *names: str):
        """
        Describe the named columns (all columns when none are given).

        Returns
        -------
        DataFrame
            One row per column with the columns ``column, count, missing,
            unique, top, top_frequency, mean, standard_deviation, min, max``.
            The numeric statistics are missing for non-numeric columns
        """
        names = list(names) or self.column_names
        rows = [summary_row(self._typed_view(name)) for name in names]
        return build_table(SUMMARY_COLUMNS, rows)

    def summary_of_all_columns(self):
        return self.summary()

    def numeric_summary(self, *names: str):
        """
        Describe numeric columns.

        Without names every int and float column is described; naming a
        non-numeric column raises ``TypeMismatchError``.
        """
        if names:
            views = [self._typed_view(name) for name in names]
            for view in views:
                if not view.kind.is_numeric:
                    raise TypeMismatchError(f"Column '{view.name}' is not numeric")
        else:
            views = [column._column for column in self.columns if column.kind.is_numeric]
        return build_table(NUMERIC_SUMMARY_COLUMNS, [numeric_summary_row(v) for v in views])

    # Conversion

    def to_pandas(self):
        """Convert to a pandas DataFrame."""
        from ..io.pandas_interop import to_pandas
        return to_pandas(self)

    def csv_representation(self, options=None) -> str:
        from ..io.csv_codec import write_csv
        return write_csv(self, options)

    def __eq__(self, other):
        if not isinstance(other, DataFrameProtocol):
            return NotImplemented
        if self.shape != other.shape or self.column_names != other.column_names:
            return False
        return all(mine._column._structurally_equal(theirs._column)
                   for mine, theirs in zip(self.columns, other.columns))

    __hash__ = None


def _choose(count: int, proportion: float, random_state: np.random.RandomState) -> np.ndarray:
    """Boolean mask selecting ``round(count * proportion)`` random entries."""
    chosen = np.zeros(count, dtype=np.bool_)
    chosen[random_state.permutation(count)[:int(round(count * proportion))]] = True
    return chosen


def _group_members(frame, names: List[str]) -> List[np.ndarray]:
    """Relative row positions of each distinct key tuple, in discovery order."""
    from .dtypes import hashable_key
    key_values = [frame._typed_view(name).to_list() for name in names]
    groups: Dict[Any, List[int]] = {}
    for i, key in enumerate(zip(*key_values)):
        groups.setdefault(tuple(hashable_key(k) for k in key), []).append(i)
    return [np.asarray(members, dtype=np.int64) for members in groups.values()]


def column_slice(column: AnyColumn, positions: np.ndarray) -> AnyColumnSlice:
    """Type-erased view of ``column`` at base row ``positions``."""
    return AnyColumnSlice(DiscontiguousColumnSlice.from_positions(column._column, positions))
