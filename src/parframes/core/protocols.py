"""
Capability mixins shared by columns and column slices.

A host class provides ``name``, ``element_type``, ``kind``, ``__len__`` and
two accessors:

``_parent_positions()``
    the owning :class:`~parframes.core.column.Column` and the parent indices
    of the host's elements, in order
``_data()``
    ``(values, mask)`` numpy arrays of the host's elements, where ``mask`` is
    True for present values

The mixins are composed rather than stacked so each behaviour can be reused
on its own.
"""

import operator
from typing import Any, Callable, Iterator, List, Optional, Tuple

import numpy as np

from ..config import FrameConfig
from ..errors import IndexOutOfBoundsError, RowCountMismatchError, TypeMismatchError
from . import summary as _summary
from .dtypes import (
    ElementKind, coerce, fill_value, hashable_key, kind_of, object_array, storage_dtype, type_name,
)
from .jit_utils import apply_binary, apply_unary, masked_fill, reduce_present


def is_column_like(obj: Any) -> bool:
    return isinstance(obj, Sliceable)


def normalize_index(index: int, length: int) -> int:
    """Resolve a possibly negative index, raising ``IndexOutOfBoundsError``."""
    position = index + length if index < 0 else index
    if position < 0 or position >= length:
        raise IndexOutOfBoundsError(f"Index {index} out of bounds for length {length}")
    return position


def positions_from_key(key: Any, length: int) -> np.ndarray:
    """
    Turn a boolean mask or a sequence of indices into positions.

    Raises
    ------
    RowCountMismatchError
        If a boolean mask does not have exactly ``length`` entries
    """
    array = np.asarray(key)
    if array.dtype == np.bool_:
        if array.shape != (length,):
            raise RowCountMismatchError(
                f"Boolean mask of length {array.size} does not match length {length}"
            )
        return np.flatnonzero(array)
    if array.size == 0:
        return np.zeros(0, dtype=np.int64)
    if not np.issubdtype(array.dtype, np.integer):
        raise TypeError(f"Cannot select elements with {type(key).__name__}")
    array = array.astype(np.int64)
    array = np.where(array < 0, array + length, array)
    if array.min() < 0 or array.max() >= length:
        raise IndexOutOfBoundsError(f"Selection out of bounds for length {length}")
    return array


class Sliceable:
    """Element access, selection, filtering and mapping."""

    def _parent_positions(self):
        raise NotImplementedError

    def _data(self) -> Tuple[np.ndarray, np.ndarray]:
        column, positions = self._parent_positions()
        return column._values[positions], column._mask[positions]

    def _locate(self, index: int):
        column, positions = self._parent_positions()
        return column, int(positions[normalize_index(index, len(positions))])

    def _select(self, positions: np.ndarray):
        """Build a discontiguous slice over the given relative positions."""
        from .slices import DiscontiguousColumnSlice
        column, parent_positions = self._parent_positions()
        return DiscontiguousColumnSlice.from_positions(column, parent_positions[positions])

    @property
    def count(self) -> int:
        return len(self)

    @property
    def missing_count(self) -> int:
        _, mask = self._data()
        return int(len(mask) - np.count_nonzero(mask))

    def __getitem__(self, key):
        if isinstance(key, (int, np.integer)) and not isinstance(key, (bool, np.bool_)):
            column, position = self._locate(int(key))
            return column._get(position)
        if isinstance(key, slice):
            return self._select(np.arange(len(self))[key])
        return self._select(positions_from_key(key, len(self)))

    def __iter__(self) -> Iterator[Any]:
        return iter(self.to_list())

    def is_missing(self, index: int) -> bool:
        column, position = self._locate(index)
        return not column._mask[position]

    def to_list(self) -> List[Any]:
        values, mask = self._data()
        return [v if present else None for v, present in zip(values.tolist(), mask.tolist())]

    def to_numpy(self) -> np.ndarray:
        """
        Return the elements as a numpy array.

        Columns without missing values keep their storage dtype; otherwise
        an object array with ``None`` in missing slots is returned.
        """
        values, mask = self._data()
        if mask.all():
            return values.copy()
        return object_array(self.to_list())

    def to_column(self, name: Optional[str] = None):
        """Copy the elements into a new owning column."""
        from .column import Column
        values, mask = self._data()
        return Column._from_arrays(self.name if name is None else name,
                                   self.element_type, values.copy(), mask.copy())

    def map(self, transform: Callable[[Any], Any], element_type: Optional[type] = None):
        """Apply ``transform`` to every element, missing ones included."""
        from .column import Column
        return Column(self.name, [transform(v) for v in self.to_list()], element_type)

    def map_non_missing(self, transform: Callable[[Any], Any],
                        element_type: Optional[type] = None):
        """Apply ``transform`` to present elements; missing ones stay missing."""
        from .column import Column
        return Column(self.name, [None if v is None else transform(v) for v in self.to_list()],
                      element_type)

    def filter(self, predicate: Callable[[Any], bool]):
        keep = [i for i, value in enumerate(self.to_list()) if predicate(value)]
        return self._select(np.asarray(keep, dtype=np.int64))

    def distinct(self):
        """Keep the first occurrence of every distinct non-missing value."""
        seen = set()
        keep = []
        for i, value in enumerate(self.to_list()):
            if value is None:
                continue
            key = hashable_key(value)
            if key not in seen:
                seen.add(key)
                keep.append(i)
        return self._select(np.asarray(keep, dtype=np.int64))

    def filled(self, value: Any):
        """Return a column with every missing element replaced by ``value``."""
        from .column import Column
        value = coerce(value, self.element_type, self.name)
        values, mask = self._data()
        if self.kind in (ElementKind.BOOL, ElementKind.INT, ElementKind.FLOAT) and len(values):
            filled = np.asarray(masked_fill(values, mask, value)).astype(values.dtype)
        else:
            filled = values.copy()
            for i in np.flatnonzero(~mask):
                filled[i] = value
        return Column._from_arrays(self.name, self.element_type, filled,
                                   np.ones(len(filled), dtype=np.bool_))

    def _structurally_equal(self, other) -> bool:
        if self.name != other.name or self.element_type is not other.element_type:
            return False
        values, mask = self._data()
        other_values, other_mask = other._data()
        if len(mask) != len(other_mask) or not np.array_equal(mask, other_mask):
            return False
        present, other_present = values[mask], other_values[other_mask]
        if self.kind is ElementKind.FLOAT:
            return bool(np.array_equal(present, other_present, equal_nan=True))
        return present.tolist() == other_present.tolist()


class Summarizable:
    """Categorical statistics for any element type."""

    def summary(self) -> _summary.CategoricalSummary:
        return _summary.categorical_summary(self.to_list())

    def unique_count(self) -> int:
        return self.summary().unique_count


class NumericAggregatable:
    """Reductions ignoring missing values."""

    def _present(self) -> np.ndarray:
        values, mask = self._data()
        return values[mask]

    def _require_numeric(self, operation: str):
        if not self.kind.is_numeric:
            raise TypeMismatchError(
                f"{operation} requires a numeric column, '{self.name}' holds "
                f"{type_name(self.element_type)}"
            )

    def sum(self):
        """Sum of present values; 0 for an empty column."""
        self._require_numeric("sum")
        present = self._present()
        if len(present) == 0:
            return self.element_type(0)
        return self.element_type(reduce_present('sum', present))

    def mean(self) -> Optional[float]:
        self._require_numeric("mean")
        return _summary.mean(self._present())

    def std(self, ddof: Optional[int] = None) -> Optional[float]:
        """Standard deviation, or ``None`` when ``count <= ddof``."""
        self._require_numeric("std")
        ddof = FrameConfig.default_ddof if ddof is None else ddof
        return _summary.standard_deviation(self._present(), ddof)

    standard_deviation = std

    def _extreme(self, op_name: str, builtin: Callable):
        present = self._present()
        if len(present) == 0:
            return None
        if self.kind in (ElementKind.BOOL, ElementKind.INT, ElementKind.FLOAT):
            return self.element_type(reduce_present(op_name, present))
        try:
            return builtin(present.tolist())
        except TypeError as exc:
            raise TypeMismatchError(f"Values of column '{self.name}' are not orderable") from exc

    def min(self):
        return self._extreme('min', min)

    def max(self):
        return self._extreme('max', max)

    def _arg_extreme(self, op_name: str, better: Callable) -> Optional[int]:
        values, mask = self._data()
        present_positions = np.flatnonzero(mask)
        if len(present_positions) == 0:
            return None
        if self.kind in (ElementKind.BOOL, ElementKind.INT, ElementKind.FLOAT):
            return int(present_positions[reduce_present(op_name, values[mask])])
        present = values[mask].tolist()
        best = 0
        try:
            for i in range(1, len(present)):
                if better(present[i], present[best]):
                    best = i
        except TypeError as exc:
            raise TypeMismatchError(f"Values of column '{self.name}' are not orderable") from exc
        return int(present_positions[best])

    def argmin(self) -> Optional[int]:
        """Position of the first minimum, or ``None`` without present values."""
        return self._arg_extreme('argmin', operator.lt)

    def argmax(self) -> Optional[int]:
        return self._arg_extreme('argmax', operator.gt)

    def numeric_summary(self, ddof: Optional[int] = None) -> _summary.NumericSummary:
        self._require_numeric("numeric_summary")
        ddof = FrameConfig.default_ddof if ddof is None else ddof
        return _summary.numeric_summary(self._present(), ddof)


_COMPARISONS = {
    'greater': operator.gt,
    'less': operator.lt,
    'greater_equal': operator.ge,
    'less_equal': operator.le,
    'equal': operator.eq,
    'not_equal': operator.ne,
}

_NUMERIC_KINDS = (ElementKind.BOOL, ElementKind.INT, ElementKind.FLOAT)


def _operand(other: Any, length: int):
    """Return ``(values, mask, element_type)`` for a column-like or scalar operand."""
    if is_column_like(other):
        values, mask = other._data()
        if len(values) != length:
            raise RowCountMismatchError(
                f"Operand length {len(values)} does not match column length {length}"
            )
        return values, mask, other.element_type
    from .dtypes import unwrap_scalar
    other = unwrap_scalar(other)
    if other is None:
        return None, np.zeros(length, dtype=np.bool_), type(None)
    return other, np.ones(length, dtype=np.bool_), type(other)


class ColumnArithmetic:
    """Element-wise arithmetic and comparisons."""

    def _binary(self, other: Any, op_name: str, reflected: bool = False):
        from .column import Column
        values, mask = self._data()
        other_values, other_mask, other_type = _operand(other, len(values))
        result_mask = mask & other_mask

        if other_type is type(None):
            element_type = self.element_type
            if self.kind is ElementKind.INT and op_name == 'divide':
                element_type = float
            return Column._from_arrays(
                self.name, element_type,
                np.full(len(values), fill_value(kind_of(element_type)),
                        dtype=storage_dtype(kind_of(element_type))),
                result_mask)

        other_kind = kind_of(other_type)
        if self.kind is ElementKind.STRING and other_kind is ElementKind.STRING and op_name == 'add':
            others = other_values if is_column_like(other) else [other_values] * len(values)
            result = np.empty(len(values), dtype=object)
            for i in np.flatnonzero(result_mask):
                result[i] = others[i] + values[i] if reflected else values[i] + others[i]
            return Column._from_arrays(self.name, str, result, result_mask)

        if not (self.kind.is_numeric and other_kind.is_numeric):
            raise TypeMismatchError(
                f"Cannot apply {op_name} to {type_name(self.element_type)} and "
                f"{type_name(other_type)}"
            )

        both_int = self.kind is ElementKind.INT and other_kind is ElementKind.INT
        left, right = (other_values, values) if reflected else (values, other_values)
        if op_name in ('divide', 'floordiv') and both_int:
            # integer division by zero yields a missing element
            zero = np.asarray(right) == 0
            result_mask = result_mask & ~zero
            right = np.where(zero, 1, right)
        result = apply_binary(op_name, left, right)

        element_type = int if both_int and op_name != 'divide' else float
        result = result.astype(storage_dtype(kind_of(element_type)))
        result = np.where(result_mask, result, fill_value(kind_of(element_type)))
        return Column._from_arrays(self.name, element_type, result, result_mask)

    def __add__(self, other):
        return self._binary(other, 'add')

    def __radd__(self, other):
        return self._binary(other, 'add', reflected=True)

    def __sub__(self, other):
        return self._binary(other, 'subtract')

    def __rsub__(self, other):
        return self._binary(other, 'subtract', reflected=True)

    def __mul__(self, other):
        return self._binary(other, 'multiply')

    def __rmul__(self, other):
        return self._binary(other, 'multiply', reflected=True)

    def __truediv__(self, other):
        return self._binary(other, 'divide')

    def __rtruediv__(self, other):
        return self._binary(other, 'divide', reflected=True)

    def __floordiv__(self, other):
        return self._binary(other, 'floordiv')

    def __rfloordiv__(self, other):
        return self._binary(other, 'floordiv', reflected=True)

    def __neg__(self):
        return self._unary('neg')

    def __abs__(self):
        return self._unary('abs')

    def _unary(self, op_name: str):
        from .column import Column
        if not self.kind.is_numeric:
            raise TypeMismatchError(f"Cannot apply {op_name} to {type_name(self.element_type)}")
        values, mask = self._data()
        result = apply_unary(op_name, values).astype(values.dtype)
        return Column._from_arrays(self.name, self.element_type, result, mask.copy())

    def _compare(self, other: Any, op_name: str) -> np.ndarray:
        values, mask = self._data()
        other_values, other_mask, other_type = _operand(other, len(values))
        result_mask = mask & other_mask
        if other_type is type(None):
            return result_mask
        if self.kind in _NUMERIC_KINDS and kind_of(other_type) in _NUMERIC_KINDS:
            return apply_binary(op_name, values, other_values).astype(np.bool_) & result_mask

        compare = _COMPARISONS[op_name]
        result = np.zeros(len(values), dtype=np.bool_)
        scalar = not is_column_like(other)
        for i in np.flatnonzero(result_mask):
            right = other_values if scalar else other_values[i]
            try:
                result[i] = bool(compare(values[i], right))
            except TypeError:
                result[i] = False
        return result

    def __lt__(self, other):
        return self._compare(other, 'less')

    def __le__(self, other):
        return self._compare(other, 'less_equal')

    def __gt__(self, other):
        return self._compare(other, 'greater')

    def __ge__(self, other):
        return self._compare(other, 'greater_equal')

    def __eq__(self, other):
        if is_column_like(other):
            return self._structurally_equal(other)
        return self._compare(other, 'equal')

    def __ne__(self, other):
        if is_column_like(other):
            return not self._structurally_equal(other)
        return self._compare(other, 'not_equal')

    __hash__ = None
