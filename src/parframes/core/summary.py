"""Categorical and numeric summaries of columns."""

from dataclasses import dataclass
from typing import Any, Iterable, Optional

import numpy as np

from .dtypes import hashable_key
from .jit_utils import reduce_present


@dataclass(frozen=True)
class CategoricalSummary:
    """
    Statistics that apply to any column.

    Attributes
    ----------
    count : int
        Number of non-missing elements
    unique_count : int
        Number of distinct non-missing values
    top : Any
        Most frequent value; ties go to the value seen first. ``None`` for an
        empty column
    top_frequency : int
        Number of occurrences of ``top``
    """
    count: int
    unique_count: int
    top: Any
    top_frequency: int

    def __repr__(self) -> str:
        return (f"CategoricalSummary(count={self.count}, unique={self.unique_count}, "
                f"top={self.top!r}, freq={self.top_frequency})")


@dataclass(frozen=True)
class NumericSummary:
    """
    Statistics of a numeric column, ignoring missing elements.

    ``standard_deviation`` is ``None`` when there are no more non-missing
    values than degrees of freedom removed; ``mean``, ``min`` and ``max``
    are ``None`` for an empty column.
    """
    count: int
    mean: Optional[float]
    standard_deviation: Optional[float]
    min: Optional[float]
    max: Optional[float]

    def __repr__(self) -> str:
        return (f"NumericSummary(count={self.count}, mean={self.mean}, "
                f"std={self.standard_deviation}, min={self.min}, max={self.max})")


def categorical_summary(values: Iterable[Any]) -> CategoricalSummary:
    """Summarize a sequence of optional values."""
    frequencies = {}
    count = 0
    for value in values:
        if value is None:
            continue
        count += 1
        key = hashable_key(value)
        entry = frequencies.get(key)
        if entry is None:
            frequencies[key] = [value, 1]
        else:
            entry[1] += 1

    top, top_frequency = None, 0
    # dicts keep insertion order, so the first value seen wins ties
    for value, frequency in frequencies.values():
        if frequency > top_frequency:
            top, top_frequency = value, frequency
    return CategoricalSummary(count, len(frequencies), top, top_frequency)


def mean(present: np.ndarray) -> Optional[float]:
    if len(present) == 0:
        return None
    return float(reduce_present('mean', present))


def standard_deviation(present: np.ndarray, ddof: int) -> Optional[float]:
    if len(present) <= ddof:
        return None
    return float(reduce_present('std', present, ddof))


def numeric_summary(present: np.ndarray, ddof: int) -> NumericSummary:
    """
    Summarize the non-missing values of a numeric column.

    Parameters
    ----------
    present : np.ndarray
        Non-missing values of an int or float column
    ddof : int
        Delta degrees of freedom for the standard deviation
    """
    if len(present) == 0:
        return NumericSummary(0, None, None, None, None)
    return NumericSummary(
        count=len(present),
        mean=mean(present),
        standard_deviation=standard_deviation(present, ddof),
        min=float(reduce_present('min', present)),
        max=float(reduce_present('max', present)),
    )
