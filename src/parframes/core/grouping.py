"""Partitioning frame rows by key and aggregating the groups."""

import datetime
import enum
import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..errors import SchemaMismatchError, TypeMismatchError
from .column import Column
from .dtypes import ElementKind, hashable_key
from .frame_protocol import (
    NUMERIC_SUMMARY_COLUMNS, SUMMARY_COLUMNS, _as_name_list, _choose, build_table,
    numeric_summary_row, summary_row,
)
from .sorting import Order

logger = logging.getLogger(__name__)


class TimeUnit(enum.Enum):
    """Calendar component used to group a date column."""
    YEAR = "year"
    QUARTER = "quarter"
    MONTH = "month"
    WEEK_OF_YEAR = "weekOfYear"
    DAY = "day"
    WEEKDAY = "weekday"
    HOUR = "hour"
    MINUTE = "minute"
    SECOND = "second"

    def extract(self, value: Optional[datetime.date]) -> Optional[int]:
        """The component of ``value`` as an integer; ``None`` stays ``None``."""
        if value is None:
            return None
        if self is TimeUnit.QUARTER:
            return (value.month - 1) // 3 + 1
        if self is TimeUnit.WEEK_OF_YEAR:
            return value.isocalendar()[1]
        if self is TimeUnit.WEEKDAY:
            return value.isoweekday()
        if not isinstance(value, datetime.datetime) and self.value in ("hour", "minute", "second"):
            # plain dates start at midnight
            return 0
        return getattr(value, self.value)

    def key_name(self, column: str) -> str:
        """Name of the key column for dates taken from ``column``."""
        return column + self.value[0].upper() + self.value[1:]


class RowGrouping:
    """
    Rows of a frame partitioned by a key, in discovery order.

    Parameters
    ----------
    source : DataFrame or DataFrameSlice
        Frame whose rows are grouped
    by : str or List[str]
        Grouping column(s). Several columns group by the tuple of values
    transform : callable, optional
        Maps the value of a single grouping column to the group key. Rows
        whose transform returns ``None`` belong to no group
    time_unit : TimeUnit or str, optional
        Groups a single date column by one calendar component. The integer
        key column is named after the column plus the unit, e.g. ``dateMonth``,
        and rows with a missing date belong to no group

    Notes
    -----
    Without a transform a missing value is a key of its own: the ``None``
    group for one column, a tuple holding ``None`` for several columns.
    Groups are views of the source rows and go stale with it.
    """

    def __init__(self, source, by: Union[str, Sequence[str]],
                 transform: Optional[Callable[[Any], Any]] = None,
                 time_unit: Optional[Union[TimeUnit, str]] = None):
        self._key_names = _as_name_list(by)
        if (transform is not None or time_unit is not None) and len(self._key_names) != 1:
            raise ValueError("A key transform needs exactly one grouping column")
        views = [source._typed_view(name) for name in self._key_names]
        if time_unit is not None:
            if transform is not None:
                raise ValueError("Pass either a key transform or a time unit, not both")
            time_unit = TimeUnit(time_unit)
            if views[0].kind is not ElementKind.DATE:
                raise TypeMismatchError(
                    f"Column '{self._key_names[0]}' holds {views[0].element_type.__name__} "
                    f"values, not dates"
                )
            transform = time_unit.extract
            self._key_names = [time_unit.key_name(self._key_names[0])]
            self._key_types = [int]
        elif transform is None:
            self._key_types = [view.element_type for view in views]
        else:
            self._key_types = [None]

        values = [view.to_list() for view in views]
        single = len(values) == 1
        members: Dict[Any, Tuple[Any, List[int]]] = {}
        for i, key in enumerate(zip(*values)):
            key = key[0] if single else key
            if transform is not None:
                key = transform(key)
                if key is None:
                    continue
            entry = members.get(hashable_key(key))
            if entry is None:
                members[hashable_key(key)] = (key, [i])
            else:
                entry[1].append(i)

        positions = source._row_positions()
        self._groups = [
            (key, source._slice(positions[np.asarray(rows, dtype=np.int64)]))
            for key, rows in members.values()
        ]
        self._index = {hashable_key(key): i for i, (key, _) in enumerate(self._groups)}
        logger.debug("Grouped %d rows by %s into %d groups",
                     len(positions), self._key_names, len(self._groups))

    @classmethod
    def _from_groups(cls, key_names: List[str], key_types: List[Optional[type]],
                     groups: List[Tuple[Any, Any]]) -> 'RowGrouping':
        grouping = cls.__new__(cls)
        grouping._key_names = key_names
        grouping._key_types = key_types
        grouping._groups = groups
        grouping._index = {hashable_key(key): i for i, (key, _) in enumerate(groups)}
        return grouping

    @property
    def key_names(self) -> List[str]:
        return list(self._key_names)

    @property
    def keys(self) -> List[Any]:
        return [key for key, _ in self._groups]

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[Tuple[Any, Any]]:
        return iter(self._groups)

    def __getitem__(self, key: Any):
        """The group of ``key``; ``KeyError`` when no row has that key."""
        index = self._index.get(hashable_key(key))
        if index is None:
            raise KeyError(key)
        return self._groups[index][1]

    def __contains__(self, key: Any) -> bool:
        return hashable_key(key) in self._index

    def _key_columns(self, groups: Optional[List[Tuple[Any, Any]]] = None) -> List[Column]:
        groups = self._groups if groups is None else groups
        keys = [key for key, _ in groups]
        if len(self._key_names) == 1:
            return [Column(self._key_names[0], keys, self._key_types[0])]
        return [Column(name, [key[j] for key in keys], element_type)
                for j, (name, element_type) in enumerate(zip(self._key_names, self._key_types))]

    def _value_names(self, group) -> List[str]:
        return [name for name in group.column_names if name not in self._key_names]

    def counts(self, order: Optional[Order] = None):
        """
        Number of rows in every group.

        Returns
        -------
        DataFrame
            The key column(s) followed by a ``count`` column; rows are in
            group order, or stably sorted by count when ``order`` is given
        """
        table = build_table((("count", int),), [[group.row_count] for _, group in self._groups],
                            leading=self._key_columns())
        if order is not None:
            table.sort("count", order)
        return table

    def aggregated(self, on: Union[str, Sequence[str]], transform: Callable[[Any], Any],
                   naming: Optional[Callable[[str], str]] = None,
                   element_type: Optional[type] = None):
        """
        Reduce every group's values of the ``on`` columns with ``transform``.

        ``transform`` receives the group's values of one column as a typed
        column slice, in original row order. The result has one row per
        group: the key column(s), then one column per ``on`` column named
        ``naming(name)``.
        """
        names = _as_name_list(on)
        naming = naming or (lambda name: name)
        results = [[transform(group._typed_view(name)) for _, group in self._groups]
                   for name in names]
        columns = self._key_columns()
        for name, values in zip(names, results):
            columns.append(Column(naming(name), values, element_type))
        from .frame import DataFrame
        return DataFrame(columns)

    def _shortcut(self, column: str, label: str, reducer: Callable[[Any], Any],
                  element_type: Optional[type], order: Optional[Order]):
        table = self.aggregated(column, reducer, lambda name: f"{label}({name})", element_type)
        if order is not None:
            table.sort(f"{label}({column})", order)
        return table

    def sums(self, column: str, order: Optional[Order] = None):
        """Per-group sum of ``column``, in a column named ``sum(column)``."""
        return self._shortcut(column, "sum", lambda view: view.sum(), None, order)

    def means(self, column: str, order: Optional[Order] = None):
        return self._shortcut(column, "mean", lambda view: view.mean(), float, order)

    def minimums(self, column: str, order: Optional[Order] = None):
        return self._shortcut(column, "min", lambda view: view.min(), None, order)

    def maximums(self, column: str, order: Optional[Order] = None):
        return self._shortcut(column, "max", lambda view: view.max(), None, order)

    def ungrouped(self):
        """
        Concatenate the groups, in group order, without the key column(s).

        Raises
        ------
        SchemaMismatchError
            If the groups do not share the same columns and element types
        """
        from .frame import DataFrame
        result = None
        for key, group in self._groups:
            indices = [i for i, name in enumerate(group.column_names)
                       if name not in self._key_names]
            part = group._materialize(group._row_positions(), indices,
                                      [group.column_names[i] for i in indices])
            if result is None:
                result = part
                continue
            try:
                result.append(part)
            except SchemaMismatchError as exc:
                raise SchemaMismatchError(f"Group {key!r} does not match the other groups: {exc}") from exc
        return DataFrame() if result is None else result

    def map_groups(self, transform: Callable[[Any], Any]) -> 'RowGrouping':
        """Replace every group by ``transform(group)``, keeping the keys."""
        groups = [(key, transform(group)) for key, group in self._groups]
        return RowGrouping._from_groups(self._key_names, self._key_types, groups)

    def random_split(self, proportion: float,
                     seed: Optional[int] = None) -> Tuple['RowGrouping', 'RowGrouping']:
        """
        Split the groups, never the rows of a group, in two at random.

        Both parts keep the original group order.
        """
        if not 0.0 <= proportion <= 1.0:
            raise ValueError(f"Proportion must be between 0 and 1, got {proportion}")
        chosen = _choose(len(self._groups), proportion, np.random.RandomState(seed))
        first = [g for g, pick in zip(self._groups, chosen) if pick]
        second = [g for g, pick in zip(self._groups, chosen) if not pick]
        return (RowGrouping._from_groups(self._key_names, self._key_types, first),
                RowGrouping._from_groups(self._key_names, self._key_types, second))

    def _per_group_table(self, schema, row_builder, names: Sequence[str], numeric_only: bool):
        rows, groups = [], []
        for key, group in self._groups:
            described = list(names) or self._value_names(group)
            for name in described:
                view = group._typed_view(name)
                if numeric_only and not names and not view.kind.is_numeric:
                    continue
                rows.append(row_builder(view))
                groups.append((key, group))
        return build_table(schema, rows, leading=self._key_columns(groups))

    def summary(self, *names: str):
        """Summary table of every group, key column(s) first."""
        return self._per_group_table(SUMMARY_COLUMNS, summary_row, names, False)

    def summary_of_all_columns(self):
        return self.summary()

    def numeric_summary(self, *names: str):
        return self._per_group_table(NUMERIC_SUMMARY_COLUMNS, numeric_summary_row, names, True)

    def __repr__(self) -> str:
        return f"RowGrouping(by={self._key_names}, groups={len(self._groups)})"
