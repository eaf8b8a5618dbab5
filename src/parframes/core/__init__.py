"""Core data structures for ParFrames."""

from parframes.core.any_column import AnyColumn, AnyColumnSlice
from parframes.core.column import Column
from parframes.core.dtypes import ElementKind
from parframes.core.frame import DataFrame
from parframes.core.frame_slice import DataFrameSlice
from parframes.core.grouping import RowGrouping, TimeUnit
from parframes.core.join import JoinKind
from parframes.core.row import Row, Rows
from parframes.core.slices import ColumnSlice, DiscontiguousColumnSlice
from parframes.core.sorting import Order
from parframes.core.summary import CategoricalSummary, NumericSummary

__all__ = [
    "AnyColumn",
    "AnyColumnSlice",
    "Column",
    "ColumnSlice",
    "DiscontiguousColumnSlice",
    "DataFrame",
    "DataFrameSlice",
    "ElementKind",
    "JoinKind",
    "Order",
    "Row",
    "Rows",
    "RowGrouping",
    "TimeUnit",
    "CategoricalSummary",
    "NumericSummary",
]
