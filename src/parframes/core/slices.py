"""Non-owning views over a column."""

from typing import List

import numpy as np

from ..config import FrameConfig
from ..errors import IndexOutOfBoundsError, StaleViewError
from .protocols import (
    ColumnArithmetic, NumericAggregatable, Sliceable, Summarizable, normalize_index,
)


class _ColumnView(Sliceable, Summarizable, NumericAggregatable, ColumnArithmetic):
    """
    Shared behaviour of column slices.

    A view remembers the generation of its parent column. Appending,
    inserting, removing or reordering elements of the parent invalidates
    the view; using it afterwards raises ``StaleViewError``.
    """

    def __init__(self, column):
        self._column = column
        self._generation = column._generation

    def _check(self):
        if FrameConfig.check_stale_views and self._column._generation != self._generation:
            raise StaleViewError(
                f"Column '{self._column.name}' was structurally mutated after this slice was taken"
            )

    @property
    def base(self):
        """The column this slice views."""
        return self._column

    @property
    def name(self) -> str:
        return self._column.name

    @property
    def element_type(self) -> type:
        return self._column.element_type

    @property
    def kind(self):
        return self._column.kind

    @property
    def indices(self) -> np.ndarray:
        """Parent indices of the elements, in slice order."""
        return self._parent_positions()[1].copy()

    def erase(self):
        from .any_column import AnyColumnSlice
        return AnyColumnSlice(self)


class ColumnSlice(_ColumnView):
    """
    A contiguous range of a column.

    Parameters
    ----------
    column : Column
        Parent column
    bounds : range
        Contiguous parent index range with step 1
    """

    def __init__(self, column, bounds: range):
        super().__init__(column)
        if bounds.step != 1:
            raise ValueError("ColumnSlice requires a contiguous range")
        if bounds.start < 0 or bounds.stop > len(column) or bounds.start > bounds.stop:
            raise IndexOutOfBoundsError(
                f"Range {bounds.start}..<{bounds.stop} out of bounds for length {len(column)}"
            )
        self._range = bounds

    @property
    def range(self) -> range:
        return self._range

    def __len__(self) -> int:
        return len(self._range)

    def _parent_positions(self):
        self._check()
        return self._column, np.arange(self._range.start, self._range.stop)

    def _data(self):
        self._check()
        return (self._column._values[self._range.start:self._range.stop],
                self._column._mask[self._range.start:self._range.stop])

    def _locate(self, index: int):
        self._check()
        return self._column, self._range.start + normalize_index(index, len(self._range))

    def __getitem__(self, key):
        if isinstance(key, slice):
            sub = self._range[key]
            if sub.step == 1:
                return ColumnSlice(self._column, sub)
        return super().__getitem__(key)

    def __repr__(self) -> str:
        return (f"ColumnSlice(name={self.name!r}, range={self._range.start}..<"
                f"{self._range.stop})")


class DiscontiguousColumnSlice(_ColumnView):
    """
    An arbitrary selection of column elements.

    The selection is stored as an ordered list of disjoint ranges; the order
    of the ranges is the order of the selection.

    Parameters
    ----------
    column : Column
        Parent column
    ranges : List[range], optional
        Parent index ranges, in selection order. Defaults to the whole column
    """

    def __init__(self, column, ranges: List[range] = None):
        super().__init__(column)
        if ranges is None:
            ranges = [range(0, len(column))] if len(column) else []
        for bounds in ranges:
            if bounds.step != 1 or bounds.start < 0 or bounds.stop > len(column):
                raise IndexOutOfBoundsError(
                    f"Range {bounds.start}..<{bounds.stop} out of bounds for length {len(column)}"
                )
        self._ranges = [r for r in ranges if len(r)]
        self._positions = None
        self._length = sum(len(r) for r in self._ranges)

    @classmethod
    def from_positions(cls, column, positions) -> 'DiscontiguousColumnSlice':
        """Build a slice from parent indices, merging consecutive runs into ranges."""
        positions = np.asarray(positions, dtype=np.int64)
        ranges = []
        if len(positions):
            # a new run starts wherever the next index is not previous + 1
            breaks = np.flatnonzero(np.diff(positions) != 1) + 1
            starts = np.concatenate(([0], breaks))
            stops = np.concatenate((breaks, [len(positions)]))
            for start, stop in zip(starts.tolist(), stops.tolist()):
                first = int(positions[start])
                ranges.append(range(first, first + (stop - start)))
        view = cls(column, ranges)
        view._positions = positions
        return view

    @property
    def ranges(self) -> List[range]:
        return list(self._ranges)

    def __len__(self) -> int:
        return self._length

    def _parent_positions(self):
        self._check()
        if self._positions is None:
            if self._ranges:
                self._positions = np.concatenate(
                    [np.arange(r.start, r.stop) for r in self._ranges]
                )
            else:
                self._positions = np.zeros(0, dtype=np.int64)
        return self._column, self._positions

    def __repr__(self) -> str:
        return f"DiscontiguousColumnSlice(name={self.name!r}, count={self._length})"
