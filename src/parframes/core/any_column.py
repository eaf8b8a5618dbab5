"""Type-erased column wrappers used for heterogeneous frame storage."""

from typing import Any, Iterator, List, Optional

import numpy as np

from ..errors import TypeMismatchError
from .column import Column
from .dtypes import ElementKind, coerce, type_name
from .protocols import Sliceable
from .slices import DiscontiguousColumnSlice
from .summary import CategoricalSummary


def _unwrap(other):
    if isinstance(other, (AnyColumn, AnyColumnSlice)):
        return other._column
    return other


def _mismatch(name: str, stored: type, requested: type) -> TypeMismatchError:
    return TypeMismatchError(
        f"Column '{name}' holds {type_name(stored)} elements, not {type_name(requested)}"
    )


class _ErasedComparisons:
    """Element-wise comparisons forwarded to the wrapped column."""

    def __lt__(self, other):
        return self._column < _unwrap(other)

    def __le__(self, other):
        return self._column <= _unwrap(other)

    def __gt__(self, other):
        return self._column > _unwrap(other)

    def __ge__(self, other):
        return self._column >= _unwrap(other)

    def __eq__(self, other):
        other = _unwrap(other)
        if isinstance(other, Sliceable):
            return self._column._structurally_equal(other)
        return self._column == other

    def __ne__(self, other):
        result = self.__eq__(other)
        return not result if isinstance(result, bool) else ~result

    __hash__ = None


class AnyColumn(_ErasedComparisons):
    """
    A column whose element type is only known at runtime.

    Wraps exactly one :class:`Column` and exposes it through dynamically
    typed accessors. :meth:`assume_type` is the checked downcast back to the
    typed column; check :attr:`element_type` or :attr:`kind` first when the
    type is not known.

    Parameters
    ----------
    column : Column
        The wrapped column. The wrapper takes ownership of it
    """

    def __init__(self, column: Column):
        if not isinstance(column, Column):
            raise TypeError(f"AnyColumn wraps a Column, got {type(column).__name__}")
        self._column = column

    @property
    def name(self) -> str:
        return self._column.name

    @name.setter
    def name(self, value: str):
        self._column.name = value

    @property
    def element_type(self) -> type:
        return self._column.element_type

    @property
    def kind(self) -> ElementKind:
        return self._column.kind

    @property
    def count(self) -> int:
        return len(self._column)

    def __len__(self) -> int:
        return len(self._column)

    def assume_type(self, element_type: type) -> Column:
        """
        Return the wrapped column as a typed column.

        Raises
        ------
        TypeMismatchError
            If ``element_type`` is not exactly the stored element type
        """
        if element_type is not self._column.element_type:
            raise _mismatch(self.name, self._column.element_type, element_type)
        return self._column

    def is_missing(self, index: int) -> bool:
        return self._column.is_missing(index)

    def __getitem__(self, key):
        result = self._column[key]
        if isinstance(result, Sliceable):
            return AnyColumnSlice(result)
        return result

    def __setitem__(self, index: int, value: Any):
        self._column[index] = value

    def __iter__(self) -> Iterator[Any]:
        return iter(self._column)

    def append(self, value: Any):
        self._column.append(value)

    def extend(self, other):
        """Append the elements of another erased column or slice of the same type."""
        if isinstance(other, (AnyColumn, AnyColumnSlice)):
            other = other._column
        self._column.extend(other)

    def insert(self, index: int, value: Any):
        self._column.insert(index, value)

    def remove(self, index: int) -> Any:
        return self._column.remove(index)

    def coerce(self, value: Any) -> Any:
        """Validate ``value`` for this column without storing it."""
        return coerce(value, self._column.element_type, self.name)

    def summary(self) -> CategoricalSummary:
        return self._column.summary()

    def distinct(self) -> 'AnyColumnSlice':
        return AnyColumnSlice(self._column.distinct())

    def take(self, positions: np.ndarray) -> 'AnyColumn':
        return AnyColumn(self._column.take(positions))

    def copy(self) -> 'AnyColumn':
        return AnyColumn(self._column.copy())

    def make_empty(self, capacity: int = 0, name: Optional[str] = None) -> 'AnyColumn':
        """Create an empty column with the same name and element type."""
        return AnyColumn(Column.empty(self.name if name is None else name,
                                      self.element_type, capacity))

    def to_list(self) -> List[Any]:
        return self._column.to_list()

    def to_numpy(self) -> np.ndarray:
        return self._column.to_numpy()

    def __repr__(self) -> str:
        return (f"AnyColumn(name={self.name!r}, count={self.count}, "
                f"element_type={type_name(self.element_type)})")


class AnyColumnSlice(_ErasedComparisons):
    """A type-erased view over part of a column."""

    def __init__(self, view):
        self._column = view

    @property
    def name(self) -> str:
        return self._column.name

    @property
    def element_type(self) -> type:
        return self._column.element_type

    @property
    def kind(self) -> ElementKind:
        return self._column.kind

    @property
    def count(self) -> int:
        return len(self._column)

    def __len__(self) -> int:
        return len(self._column)

    def assume_type(self, element_type: type) -> DiscontiguousColumnSlice:
        """Return the view as a typed discontiguous slice."""
        if element_type is not self._column.element_type:
            raise _mismatch(self.name, self._column.element_type, element_type)
        if isinstance(self._column, DiscontiguousColumnSlice):
            return self._column
        column, positions = self._column._parent_positions()
        return DiscontiguousColumnSlice.from_positions(column, positions)

    def is_missing(self, index: int) -> bool:
        return self._column.is_missing(index)

    def __getitem__(self, key):
        result = self._column[key]
        if isinstance(result, Sliceable):
            return AnyColumnSlice(result)
        return result

    def __iter__(self) -> Iterator[Any]:
        return iter(self._column)

    def summary(self) -> CategoricalSummary:
        return self._column.summary()

    def distinct(self) -> 'AnyColumnSlice':
        return AnyColumnSlice(self._column.distinct())

    def to_list(self) -> List[Any]:
        return self._column.to_list()

    def to_column(self) -> AnyColumn:
        """Copy the viewed elements into a new owning column."""
        return AnyColumn(self._column.to_column())

    def __repr__(self) -> str:
        return (f"AnyColumnSlice(name={self.name!r}, count={self.count}, "
                f"element_type={type_name(self.element_type)})")


def as_any_column(column, name: Optional[str] = None) -> AnyColumn:
    """
    Copy a column-like object, or a plain sequence of values, into a new
    owning :class:`AnyColumn`.

    Parameters
    ----------
    column : Column, AnyColumn, AnyColumnSlice, column slice or sequence
        Source of the values
    name : str, optional
        Name for the new column; defaults to the source's name
    """
    if isinstance(column, (AnyColumn, AnyColumnSlice)):
        column = column._column
    if isinstance(column, Sliceable):
        copied = column.to_column(name)
    else:
        if name is None:
            raise ValueError("A name is required to build a column from plain values")
        copied = Column(name, column)
    return AnyColumn(copied)
