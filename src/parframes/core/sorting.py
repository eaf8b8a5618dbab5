"""Stable multi-key row ordering with missing values first."""

import enum
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

import jax.numpy as jnp
import numpy as np

from ..errors import TypeMismatchError
from .dtypes import ElementKind


class Order(enum.Enum):
    """Sort direction."""
    ASCENDING = "ascending"
    DESCENDING = "descending"

    @classmethod
    def parse(cls, order: Union['Order', str, bool]) -> 'Order':
        if isinstance(order, Order):
            return order
        if isinstance(order, bool):
            return cls.ASCENDING if order else cls.DESCENDING
        return cls(str(order).lower())


def multi_column_lexsort(keys: List[np.ndarray], ascending: Union[bool, List[bool]] = True) -> np.ndarray:
    """
    Get indices that would sort multiple arrays lexicographically.

    Uses stable sorts from the last key to the first.

    Parameters
    ----------
    keys : List[np.ndarray]
        Numeric arrays to sort by, in order of priority
    ascending : bool or List[bool]
        Sort order for each key

    Returns
    -------
    np.ndarray
        Indices that would sort the arrays lexicographically
    """
    if isinstance(ascending, bool):
        ascending = [ascending] * len(keys)

    n = len(keys[0]) if keys else 0
    indices = jnp.arange(n)
    if n == 0:
        return np.zeros(0, dtype=np.int64)

    # Sort by each key from last to first (stable sort preserves order)
    for arr, asc in zip(reversed(keys), reversed(ascending)):
        arr = jnp.asarray(arr)
        if not asc:
            if jnp.issubdtype(arr.dtype, jnp.floating):
                arr = -arr
            else:
                # bitwise not reverses integer order without overflow
                arr = ~arr
        sort_idx = jnp.argsort(arr[indices], stable=True)
        indices = indices[sort_idx]

    return np.asarray(indices, dtype=np.int64)


def _dense_rank(values: Sequence[Any], present: np.ndarray, column: str) -> np.ndarray:
    """Rank present values with Python ordering; equal values share a rank."""
    ranks = np.zeros(len(values), dtype=np.int64)
    positions = np.flatnonzero(present).tolist()
    try:
        ordered = sorted(positions, key=lambda i: values[i])
        rank = 0
        for previous, current in zip([None] + ordered, ordered):
            if previous is not None and values[previous] < values[current]:
                rank += 1
            ranks[current] = rank
    except TypeError as exc:
        raise TypeMismatchError(f"Values of column '{column}' are not orderable") from exc
    return ranks


def sort_keys(values: np.ndarray, mask: np.ndarray, kind: ElementKind, column: str,
              key: Optional[Callable[[Any], Any]] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Build the ``(presence, rank)`` key pair for one sort column.

    ``presence`` is 0 for missing elements so they come first; ``rank``
    orders the present elements.
    """
    presence = mask.astype(np.int8)
    if key is not None:
        keyed = [key(v) if present else None for v, present in zip(values.tolist(), mask.tolist())]
        return presence, _dense_rank(keyed, mask, column)
    if kind is ElementKind.BOOL:
        return presence, values.astype(np.int8)
    if kind in (ElementKind.INT, ElementKind.FLOAT):
        return presence, np.where(mask, values, 0).astype(values.dtype)
    return presence, _dense_rank(values.tolist(), mask, column)


def sort_positions(columns: List[Tuple[np.ndarray, np.ndarray, ElementKind, str]],
                   orders: List[Order],
                   key: Optional[Callable[[Any], Any]] = None) -> np.ndarray:
    """
    Compute the stable ordering of rows for several sort columns.

    Parameters
    ----------
    columns : list of (values, mask, kind, name)
        Sort columns in order of priority
    orders : List[Order]
        One order per sort column
    key : callable, optional
        Maps present values to the value actually compared

    Returns
    -------
    np.ndarray
        Row positions in sorted order. Missing values come first in every
        sort column regardless of its order
    """
    keys, ascending = [], []
    for (values, mask, kind, name), order in zip(columns, orders):
        presence, rank = sort_keys(values, mask, kind, name, key)
        keys.extend([presence, rank])
        ascending.extend([True, order is Order.ASCENDING])
    return multi_column_lexsort(keys, ascending)
