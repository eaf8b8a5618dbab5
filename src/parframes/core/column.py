"""Column: an owning, typed, nullable sequence of values."""

from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

import numpy as np

from ..errors import IndexOutOfBoundsError, TypeMismatchError
from .dtypes import (
    ElementKind, coerce, fill_value, infer_element_type, kind_of, storage_array, storage_dtype,
    type_name,
)
from .protocols import (
    ColumnArithmetic, NumericAggregatable, Sliceable, Summarizable, normalize_index,
)

T = TypeVar("T")

_NUMPY_KINDS = {'b': bool, 'i': int, 'u': int, 'f': float}


class Column(Sliceable, Summarizable, NumericAggregatable, ColumnArithmetic, Generic[T]):
    """
    A named column of optional values sharing one element type.

    Values live in a growable numpy buffer next to a validity mask, so a
    float ``NaN`` is a present value while ``None`` marks a missing one.

    Parameters
    ----------
    name : str
        Column name
    contents : Iterable, optional
        Initial values; ``None`` marks a missing value
    element_type : type, optional
        Element type of the column. Inferred from ``contents`` when omitted
    capacity : int, default 0
        Number of elements to reserve storage for
    """

    def __init__(self, name: str, contents: Iterable[Optional[T]] = (),
                 element_type: Optional[type] = None, capacity: int = 0):
        """Initialize a Column."""
        if isinstance(contents, np.ndarray) and contents.dtype.kind in _NUMPY_KINDS:
            inferred = _NUMPY_KINDS[contents.dtype.kind]
            if element_type is None or element_type is inferred:
                self._init_storage(name, inferred, 0)
                self._values = contents.astype(storage_dtype(self._kind))
                self._mask = np.ones(len(contents), dtype=np.bool_)
                self._count = len(contents)
                self._reserve(capacity)
                return
            contents = contents.tolist()
        elif not isinstance(contents, (list, tuple)):
            contents = list(contents)

        if element_type is None:
            element_type = infer_element_type(contents)
        self._init_storage(name, element_type, max(capacity, len(contents)))
        for value in contents:
            self._append_coerced(coerce(value, element_type, name))
        self._generation = 0

    def _init_storage(self, name: str, element_type: type, capacity: int):
        self._name = name
        self._element_type = element_type
        self._kind = kind_of(element_type)
        self._values = np.full(capacity, fill_value(self._kind), dtype=storage_dtype(self._kind))
        self._mask = np.zeros(capacity, dtype=np.bool_)
        self._count = 0
        self._generation = 0

    @classmethod
    def empty(cls, name: str, element_type: type, capacity: int = 0) -> 'Column':
        """Create an empty column with reserved capacity."""
        return cls(name, (), element_type, capacity)

    @classmethod
    def _from_arrays(cls, name: str, element_type: type, values: np.ndarray,
                     mask: np.ndarray) -> 'Column':
        """Wrap existing storage arrays; the column takes ownership of them."""
        column = cls.__new__(cls)
        column._init_storage(name, element_type, 0)
        column._values = values.astype(storage_dtype(column._kind), copy=False)
        column._mask = mask.astype(np.bool_, copy=False)
        column._count = len(values)
        return column

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str):
        self._name = value

    @property
    def element_type(self) -> type:
        return self._element_type

    @property
    def kind(self) -> ElementKind:
        return self._kind

    @property
    def capacity(self) -> int:
        return len(self._values)

    def __len__(self) -> int:
        return self._count

    def _parent_positions(self):
        return self, np.arange(self._count)

    def _data(self):
        return self._values[:self._count], self._mask[:self._count]

    def _locate(self, index: int):
        return self, normalize_index(index, self._count)

    def _get(self, position: int) -> Optional[T]:
        if not self._mask[position]:
            return None
        value = self._values[position]
        return value.item() if isinstance(value, np.generic) else value

    def __getitem__(self, key):
        if isinstance(key, slice):
            start, stop, step = key.indices(self._count)
            if step == 1:
                from .slices import ColumnSlice
                return ColumnSlice(self, range(start, max(start, stop)))
        return super().__getitem__(key)

    def __setitem__(self, index: int, value: Optional[T]):
        position = normalize_index(index, self._count)
        self._store(position, coerce(value, self._element_type, self._name))

    def _store(self, position: int, value: Any):
        if value is None:
            self._values[position] = fill_value(self._kind)
            self._mask[position] = False
        else:
            self._values[position] = value
            self._mask[position] = True

    def _reserve(self, capacity: int):
        if capacity <= len(self._values):
            return
        new_capacity = max(capacity, 2 * len(self._values), 8)
        values = np.full(new_capacity, fill_value(self._kind), dtype=storage_dtype(self._kind))
        mask = np.zeros(new_capacity, dtype=np.bool_)
        values[:self._count] = self._values[:self._count]
        mask[:self._count] = self._mask[:self._count]
        self._values, self._mask = values, mask

    def _append_coerced(self, value: Any):
        self._reserve(self._count + 1)
        self._store(self._count, value)
        self._count += 1
        self._generation += 1

    def _insert_coerced(self, position: int, value: Any):
        self._reserve(self._count + 1)
        self._values[position + 1:self._count + 1] = self._values[position:self._count]
        self._mask[position + 1:self._count + 1] = self._mask[position:self._count]
        self._store(position, value)
        self._count += 1
        self._generation += 1

    def append(self, value: Optional[T]):
        """Append one value, type-checked against the element type."""
        self._append_coerced(coerce(value, self._element_type, self._name))

    def extend(self, values: Iterable[Optional[T]]):
        """Append several values; nothing is appended if any value is rejected."""
        if isinstance(values, Sliceable):
            if values.element_type is not self._element_type:
                raise TypeMismatchError(
                    f"Cannot extend {type_name(self._element_type)} column '{self._name}' "
                    f"with {type_name(values.element_type)} values"
                )
            new_values, new_mask = values._data()
            new_values, new_mask = new_values.copy(), new_mask.copy()
        else:
            coerced = [coerce(v, self._element_type, self._name) for v in values]
            new_mask = np.array([v is not None for v in coerced], dtype=np.bool_)
            new_values = storage_array(coerced, self._kind)
        end = self._count + len(new_values)
        self._reserve(end)
        self._values[self._count:end] = new_values
        self._mask[self._count:end] = new_mask
        self._count = end
        self._generation += 1

    def insert(self, index: int, value: Optional[T]):
        """Insert a value before ``index`` (``0 <= index <= count``)."""
        if index < 0 or index > self._count:
            raise IndexOutOfBoundsError(f"Insert index {index} out of bounds for length {self._count}")
        self._insert_coerced(index, coerce(value, self._element_type, self._name))

    def remove(self, index: int) -> Optional[T]:
        """Remove and return the element at ``index``."""
        position = normalize_index(index, self._count)
        value = self._get(position)
        self._values[position:self._count - 1] = self._values[position + 1:self._count]
        self._mask[position:self._count - 1] = self._mask[position + 1:self._count]
        self._count -= 1
        self._store(self._count, None)
        self._generation += 1
        return value

    def transform(self, transform: Callable[[Optional[T]], Optional[T]]):
        """Replace every element in place with ``transform(element)``."""
        coerced = [coerce(transform(v), self._element_type, self._name) for v in self.to_list()]
        for position, value in enumerate(coerced):
            self._store(position, value)

    def take(self, positions: np.ndarray) -> 'Column':
        """Copy the elements at ``positions`` into a new column."""
        positions = np.asarray(positions, dtype=np.int64)
        return Column._from_arrays(self._name, self._element_type,
                                   self._values[positions], self._mask[positions])

    def _take_optional(self, positions: np.ndarray) -> 'Column':
        """Like :meth:`take`, with ``-1`` producing a missing element."""
        positions = np.asarray(positions, dtype=np.int64)
        valid = positions >= 0
        if self._count == 0:
            values = np.full(len(positions), fill_value(self._kind), dtype=storage_dtype(self._kind))
            return Column._from_arrays(self._name, self._element_type, values,
                                       np.zeros(len(positions), dtype=np.bool_))
        safe = np.where(valid, positions, 0)
        values = self._values[safe]
        mask = self._mask[safe] & valid
        values[~mask] = fill_value(self._kind)
        return Column._from_arrays(self._name, self._element_type, values, mask)

    def _reorder(self, positions: np.ndarray):
        self._values = self._values[:self._count][positions]
        self._mask = self._mask[:self._count][positions]
        self._generation += 1

    def copy(self) -> 'Column':
        values, mask = self._data()
        return Column._from_arrays(self._name, self._element_type, values.copy(), mask.copy())

    def erase(self):
        """Wrap this column in a type-erased :class:`AnyColumn`."""
        from .any_column import AnyColumn
        return AnyColumn(self)

    def _assign(self, result: 'Column', operation: str):
        if result.element_type is not self._element_type:
            raise TypeMismatchError(
                f"Result of {operation} is {type_name(result.element_type)}, which cannot be "
                f"stored in {type_name(self._element_type)} column '{self._name}'"
            )
        values, mask = result._data()
        self._values[:self._count] = values
        self._mask[:self._count] = mask
        return self

    def __iadd__(self, other):
        return self._assign(self._binary(other, 'add'), 'addition')

    def __isub__(self, other):
        return self._assign(self._binary(other, 'subtract'), 'subtraction')

    def __imul__(self, other):
        return self._assign(self._binary(other, 'multiply'), 'multiplication')

    def __itruediv__(self, other):
        # integer columns keep their type: /= is floor division for them
        op_name = 'floordiv' if self._kind is ElementKind.INT else 'divide'
        return self._assign(self._binary(other, op_name), 'division')

    def __ifloordiv__(self, other):
        return self._assign(self._binary(other, 'floordiv'), 'division')

    def __repr__(self) -> str:
        """Return string representation."""
        return (f"Column(name={self._name!r}, count={self._count}, "
                f"element_type={type_name(self._element_type)})")
