"""DataFrame: an ordered collection of equally long, named columns."""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

import numpy as np

from ..errors import (
    AmbiguousColumnNameError, ColumnNotFoundError, DuplicateColumnNameError,
    IndexOutOfBoundsError, RowCountMismatchError, SchemaMismatchError,
)
from .any_column import AnyColumn, AnyColumnSlice, as_any_column
from .column import Column
from .dtypes import type_name
from .frame_protocol import DataFrameProtocol
from .protocols import Sliceable, normalize_index
from .sorting import Order

logger = logging.getLogger(__name__)


class DataFrame(DataFrameProtocol):
    """
    A table of named, typed, nullable columns of equal length.

    Columns are stored type-erased as :class:`AnyColumn` in insertion order.
    Aliases give a column additional names; duplicate column names only
    appear as the result of joins, and such columns are reachable through
    their aliases.

    Parameters
    ----------
    data : mapping, sequence of columns or DataFrameSlice, optional
        A mapping of column name to values or column, a sequence of
        :class:`Column` / :class:`AnyColumn` objects, or a frame slice to
        materialize. Columns are copied

    Notes
    -----
    Columns returned by ``frame[name]`` and :meth:`column` are the frame's
    own storage: elements may be assigned through them, but changing their
    length must go through the frame's row operations.
    """

    def __init__(self, data: Union[Mapping[str, Any], Sequence[Any], DataFrameProtocol, None] = None):
        """Initialize a DataFrame."""
        self._columns: List[AnyColumn] = []
        self._aliases: Dict[str, AnyColumn] = {}
        self._row_count = 0
        self._generation = 0

        if data is None:
            return
        if isinstance(data, DataFrameProtocol):
            copied = data.to_frame()
            self._columns, self._aliases = copied._columns, copied._aliases
            self._row_count = copied._row_count
            return
        if isinstance(data, Mapping):
            columns = []
            for name, values in data.items():
                if isinstance(values, (AnyColumn, AnyColumnSlice, Sliceable)):
                    columns.append(as_any_column(values, name))
                else:
                    columns.append(AnyColumn(Column(name, values)))
        else:
            columns = [as_any_column(column) for column in data]
        for column in columns:
            self._add_column(column, len(self._columns))

    @classmethod
    def _from_parts(cls, columns: List[AnyColumn], aliases: Dict[str, AnyColumn],
                    row_count: int) -> 'DataFrame':
        """Adopt already validated columns; duplicate names are allowed here."""
        frame = cls()
        frame._columns = columns
        frame._aliases = aliases
        frame._row_count = row_count if columns else 0
        return frame

    @classmethod
    def from_pandas(cls, df) -> 'DataFrame':
        """Create a DataFrame from a pandas DataFrame."""
        from ..io.pandas_interop import from_pandas
        return from_pandas(df)

    def _base_frame(self) -> 'DataFrame':
        return self

    def _row_positions(self) -> np.ndarray:
        return np.arange(self._row_count)

    def _view_column(self, index: int) -> AnyColumn:
        return self._columns[index]

    @property
    def row_count(self) -> int:
        return self._row_count

    @property
    def columns(self) -> List[AnyColumn]:
        return list(self._columns)

    # Column lookup and aliases

    def index_of_column(self, name: str) -> Optional[int]:
        """
        Position of the column with this name or alias.

        Raises
        ------
        AmbiguousColumnNameError
            If several columns carry the name
        """
        matches = [i for i, column in enumerate(self._columns) if column.name == name]
        if len(matches) > 1:
            aliases = sorted(a for a, c in self._aliases.items() if c.name == name)
            raise AmbiguousColumnNameError(
                f"Column name '{name}' is ambiguous; use one of its aliases {aliases}"
            )
        if matches:
            return matches[0]
        column = self._aliases.get(name)
        if column is not None:
            return self._position_of(column)
        return None

    def _position_of(self, column: AnyColumn) -> int:
        for i, candidate in enumerate(self._columns):
            if candidate is column:
                return i
        raise ColumnNotFoundError(f"Column '{column.name}' is not part of this frame")

    def _alias_indices(self) -> Dict[str, int]:
        return {alias: self._position_of(column) for alias, column in self._aliases.items()}

    def column(self, name: str, element_type: Optional[type] = None):
        """
        Look up a column by name or alias.

        Parameters
        ----------
        name : str
            Column name or alias
        element_type : type, optional
            When given, the typed :class:`Column` is returned after checking
            the element type; otherwise the :class:`AnyColumn`
        """
        column = self._columns[self._require_column(name)]
        if element_type is None:
            return column
        return column.assume_type(element_type)

    def _check_new_name(self, name: str, ignore: Optional[AnyColumn] = None):
        if any(c.name == name and c is not ignore for c in self._columns) or name in self._aliases:
            raise DuplicateColumnNameError(f"Column name '{name}' already exists")

    def add_alias(self, alias: str, column_name: str):
        """Make ``alias`` an additional name of the column ``column_name``."""
        index = self._require_column(column_name)
        self._check_new_name(alias)
        self._aliases[alias] = self._columns[index]

    def remove_alias(self, alias: str):
        if alias not in self._aliases:
            raise ColumnNotFoundError(f"Alias '{alias}' not found")
        del self._aliases[alias]

    def column_names_for_alias(self, alias: str) -> List[str]:
        """Names of the columns an alias refers to (empty for an unknown alias)."""
        column = self._aliases.get(alias)
        return [] if column is None else [column.name]

    @property
    def aliases(self) -> Dict[str, str]:
        return {alias: column.name for alias, column in self._aliases.items()}

    # Column mutation

    def _add_column(self, column: AnyColumn, at: int):
        if self._columns and column.count != self._row_count:
            raise RowCountMismatchError(
                f"Column '{column.name}' has {column.count} rows, frame has {self._row_count}"
            )
        self._check_new_name(column.name)
        if not self._columns:
            self._row_count = column.count
        self._columns.insert(at, column)
        self._generation += 1

    def append_column(self, column):
        """
        Append a copy of ``column``.

        Raises
        ------
        RowCountMismatchError
            If the column length differs from the row count of a frame that
            already has columns
        DuplicateColumnNameError
            If the name is already used by a column or alias
        """
        self._add_column(as_any_column(column), len(self._columns))

    def insert_column(self, column, at: int):
        """Insert a copy of ``column`` before position ``at``."""
        if at < 0 or at > len(self._columns):
            raise IndexOutOfBoundsError(
                f"Column index {at} out of bounds for {len(self._columns)} columns"
            )
        self._add_column(as_any_column(column), at)

    def remove_column(self, name: str) -> AnyColumn:
        """Remove and return a column, dropping its aliases."""
        column = self._columns.pop(self._require_column(name))
        self._aliases = {a: c for a, c in self._aliases.items() if c is not column}
        if not self._columns:
            self._row_count = 0
        self._generation += 1
        return column

    def rename_column(self, old: str, new: str):
        column = self._columns[self._require_column(old)]
        self._check_new_name(new, ignore=column)
        column.name = new

    def replace_column(self, name: str, column):
        """Replace a column in place by a copy of ``column`` of the same length."""
        index = self._require_column(name)
        old = self._columns[index]
        new = as_any_column(column)
        if new.count != self._row_count:
            raise RowCountMismatchError(
                f"Column '{new.name}' has {new.count} rows, frame has {self._row_count}"
            )
        self._check_new_name(new.name, ignore=old)
        self._columns[index] = new
        for alias, target in self._aliases.items():
            if target is old:
                self._aliases[alias] = new
        self._generation += 1

    def transform_column(self, name: str, transform: Callable[[Any], Any],
                         element_type: Optional[type] = None, skip_missing: bool = False):
        """
        Replace a column by ``transform`` applied to each of its elements.

        With ``skip_missing`` the transform only sees present values and
        missing elements stay missing.
        """
        column = self._columns[self._require_column(name)]._column
        if skip_missing:
            result = column.map_non_missing(transform, element_type)
        else:
            result = column.map(transform, element_type)
        self.replace_column(name, result)

    def combine_columns(self, names: Sequence[str], into: str, transform: Callable[..., Any],
                        element_type: Optional[type] = None):
        """Append column ``into`` holding ``transform(*values)`` for every row."""
        sources = [self._columns[self._require_column(n)].to_list() for n in names]
        values = [transform(*row) for row in zip(*sources)] if sources else []
        self.append_column(Column(into, values, element_type))

    def __setitem__(self, name: str, values):
        if not isinstance(values, (AnyColumn, AnyColumnSlice, Sliceable)):
            values = Column(name, values)
        column = as_any_column(values, name)
        if self.index_of_column(name) is None:
            self.append_column(column)
        else:
            self.replace_column(name, column)

    def __delitem__(self, name: str):
        self.remove_column(name)

    # Row mutation

    def _coerce_row(self, values: Sequence[Any]) -> List[Any]:
        if len(values) != len(self._columns):
            raise RowCountMismatchError(
                f"Row has {len(values)} values, frame has {len(self._columns)} columns"
            )
        return [column.coerce(value) for column, value in zip(self._columns, values)]

    def append_row(self, *values: Any):
        """
        Append one row; either every value is stored or none is.

        A frame without columns has no rows, so appending to it does nothing.

        Raises
        ------
        RowCountMismatchError
            If the number of values differs from the column count
        TypeMismatchError
            If a value cannot be stored in its column
        """
        coerced = self._coerce_row(values)
        if not self._columns:
            return
        for column, value in zip(self._columns, coerced):
            column._column._append_coerced(value)
        self._row_count += 1
        self._generation += 1

    def append_row_values(self, values: Mapping[str, Any]):
        """Append a row given by column name; unnamed columns get a missing value."""
        row = [None] * len(self._columns)
        for name, value in values.items():
            row[self._require_column(name)] = value
        self.append_row(*row)

    def append_empty_row(self):
        self.append_row(*([None] * len(self._columns)))

    def insert_row(self, values, at: int):
        """Insert a row of values (or a :class:`Row`) before row ``at``."""
        if at < 0 or at > self._row_count:
            raise IndexOutOfBoundsError(f"Row index {at} out of bounds for {self._row_count} rows")
        if hasattr(values, "to_list"):
            values = values.to_list()
        coerced = self._coerce_row(list(values))
        if not self._columns:
            return
        for column, value in zip(self._columns, coerced):
            column._column._insert_coerced(at, value)
        self._row_count += 1
        self._generation += 1

    def remove_row(self, at: int) -> List[Any]:
        """Remove row ``at`` and return its values."""
        position = normalize_index(at, self._row_count)
        removed = [column.remove(position) for column in self._columns]
        self._row_count -= 1
        self._generation += 1
        return removed

    def append(self, other: DataFrameProtocol):
        """
        Append the rows of a frame or slice with the same schema.

        Raises
        ------
        SchemaMismatchError
            If the column names or element types differ
        """
        if not self._columns:
            copied = other.to_frame()
            for column in copied._columns:
                self._add_column(column, len(self._columns))
            return
        schema = [(c.name, c.element_type) for c in self._columns]
        other_schema = [(c.name, c.element_type) for c in other.columns]
        if schema != other_schema:
            raise SchemaMismatchError(
                "Cannot append rows with schema "
                f"{[(n, type_name(t)) for n, t in other_schema]} to "
                f"{[(n, type_name(t)) for n, t in schema]}"
            )
        added = other.row_count
        for column, source in zip(self._columns, other.columns):
            column._column.extend(source._column)
        self._row_count += added
        self._generation += 1

    def sort(self, on: Union[str, Sequence[str]], order=Order.ASCENDING,
             key: Optional[Callable[[Any], Any]] = None):
        """Stably sort the rows in place; see :meth:`sorted`."""
        positions = self._sort_order(on, order, key)
        for column in self._columns:
            column._column._reorder(positions)
        self._generation += 1

    def explode_column(self, name: str):
        """Replace every row by one row per element of its ``name`` collection in place."""
        exploded = self.exploding_column(name)
        self._columns, self._aliases = exploded._columns, exploded._aliases
        self._row_count = exploded._row_count
        self._generation += 1

    def __repr__(self) -> str:
        """Return string representation."""
        return f"DataFrame(shape={self.shape}, columns={self.column_names})"


def _attach_slice_type():
    from .frame_slice import DataFrameSlice
    DataFrame.Slice = DataFrameSlice


_attach_slice_type()
