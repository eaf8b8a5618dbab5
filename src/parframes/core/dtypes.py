"""Element types, storage dtypes and value coercion for columns."""

import datetime
import enum
import math
import sys
from typing import Any, Iterable, Optional

import numpy as np

from ..errors import TypeMismatchError


class ElementKind(enum.Enum):
    """Tag describing how a column stores its elements."""
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    DATE = "date"
    BYTES = "bytes"
    OTHER = "other"

    @property
    def is_numeric(self) -> bool:
        return self in (ElementKind.INT, ElementKind.FLOAT)


_STORAGE_DTYPES = {
    ElementKind.BOOL: np.bool_,
    ElementKind.INT: np.int64,
    ElementKind.FLOAT: np.float64,
}

_INT64_MIN = -2 ** 63
_INT64_MAX = 2 ** 63 - 1

_FILL_VALUES = {
    ElementKind.BOOL: False,
    ElementKind.INT: 0,
    ElementKind.FLOAT: 0.0,
}


def kind_of(element_type: type) -> ElementKind:
    """Return the storage tag for a Python element type."""
    if element_type is bool:
        return ElementKind.BOOL
    if element_type is int:
        return ElementKind.INT
    if element_type is float:
        return ElementKind.FLOAT
    if element_type is str:
        return ElementKind.STRING
    if element_type is bytes:
        return ElementKind.BYTES
    if isinstance(element_type, type) and issubclass(element_type, datetime.date):
        return ElementKind.DATE
    return ElementKind.OTHER


def storage_dtype(kind: ElementKind) -> Any:
    """Return the numpy dtype backing a column of the given kind."""
    return _STORAGE_DTYPES.get(kind, object)


def fill_value(kind: ElementKind) -> Any:
    """Placeholder stored in the value buffer under a missing element."""
    return _FILL_VALUES.get(kind)


def unwrap_scalar(value: Any) -> Any:
    """Convert numpy scalars to the equivalent Python scalar."""
    if isinstance(value, np.generic):
        return value.item()
    return value


def type_name(element_type: type) -> str:
    return getattr(element_type, "__name__", repr(element_type))


def infer_element_type(values: Iterable[Any]) -> type:
    """
    Infer the element type of a sequence of optional values.

    Parameters
    ----------
    values : Iterable[Any]
        Values to inspect; ``None`` marks a missing value

    Returns
    -------
    type
        ``bool``, ``int``, ``float`` (ints mixed with floats), the single
        class shared by all values, or ``object``
    """
    seen = set()
    for value in values:
        value = unwrap_scalar(value)
        if value is None:
            continue
        seen.add(type(value))
    if not seen:
        return object
    if len(seen) == 1:
        return seen.pop()
    if seen <= {int, float}:
        return float
    return object


def is_assignable(value: Any, element_type: type) -> bool:
    """Check whether ``value`` may be stored in a column of ``element_type``."""
    value = unwrap_scalar(value)
    if value is None or element_type is object:
        return True
    if element_type is int:
        return (isinstance(value, int) and not isinstance(value, bool)
                and _INT64_MIN <= value <= _INT64_MAX)
    if element_type is float:
        if isinstance(value, int) and not isinstance(value, bool):
            return abs(value) <= sys.float_info.max
        return isinstance(value, float)
    if element_type is bool:
        return isinstance(value, bool)
    return isinstance(value, element_type)


def coerce(value: Any, element_type: type, column: Optional[str] = None) -> Any:
    """
    Convert ``value`` into the stored representation for ``element_type``.

    Raises
    ------
    TypeMismatchError
        If the value cannot be stored in such a column
    """
    value = unwrap_scalar(value)
    if not is_assignable(value, element_type):
        where = f" in column '{column}'" if column is not None else ""
        raise TypeMismatchError(
            f"Cannot store {type(value).__name__} value {value!r}{where} "
            f"of element type {type_name(element_type)}"
        )
    if value is not None and element_type is float:
        return float(value)
    return value


def hashable_key(value: Any) -> Any:
    """Return a hashable stand-in for ``value`` used by grouping and distinct."""
    if isinstance(value, float) and math.isnan(value):
        return _NAN_KEY
    if isinstance(value, (list, tuple)):
        return tuple(hashable_key(v) for v in value)
    if isinstance(value, dict):
        return tuple(sorted((k, hashable_key(v)) for k, v in value.items()))
    if isinstance(value, set):
        return frozenset(value)
    return value


class _NaNKey:
    """Single key shared by every NaN value."""

    def __repr__(self) -> str:
        return "nan"


_NAN_KEY = _NaNKey()


def object_array(values: Iterable[Any]) -> np.ndarray:
    """Build a 1-d object array without numpy unpacking nested sequences."""
    values = list(values)
    array = np.empty(len(values), dtype=object)
    for i, value in enumerate(values):
        array[i] = value
    return array


def storage_array(values: Iterable[Any], kind: ElementKind) -> np.ndarray:
    """Build the value buffer for already coerced values of ``kind``."""
    fill = fill_value(kind)
    values = [fill if v is None else v for v in values]
    if storage_dtype(kind) is object:
        return object_array(values)
    return np.array(values, dtype=storage_dtype(kind))
