"""ParFrames: in-memory columnar DataFrames with typed, nullable columns.

Columns store their values in numpy buffers next to a validity mask, and
numeric kernels (reductions, arithmetic, sorting) run through JAX.
"""

import logging

from parframes.config import FrameConfig, config_context
from parframes.core import (
    AnyColumn,
    AnyColumnSlice,
    CategoricalSummary,
    Column,
    ColumnSlice,
    DataFrame,
    DataFrameSlice,
    DiscontiguousColumnSlice,
    ElementKind,
    JoinKind,
    NumericSummary,
    Order,
    Row,
    RowGrouping,
    TimeUnit,
)
from parframes.core.jit_utils import clear_jit_cache, enable_jit, set_debug
from parframes.errors import (
    AmbiguousColumnNameError,
    ColumnNotFoundError,
    CSVReadingError,
    DuplicateColumnNameError,
    IndexOutOfBoundsError,
    JSONReadingError,
    ParFrameError,
    RowCountMismatchError,
    SchemaMismatchError,
    StaleViewError,
    TypeMismatchError,
)
from parframes.io import (
    CSVReadingOptions,
    CSVType,
    CSVWritingOptions,
    JSONReadingOptions,
    JSONType,
    from_pandas,
    read_csv,
    read_json,
    write_csv,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())


def get_logger(name: str = "parframes") -> logging.Logger:
    """Return the package logger, or one of its children."""
    if name != "parframes" and not name.startswith("parframes."):
        name = f"parframes.{name}"
    return logging.getLogger(name)


__version__ = "0.1.0"
__all__ = [
    # Core
    "Column",
    "ColumnSlice",
    "DiscontiguousColumnSlice",
    "AnyColumn",
    "AnyColumnSlice",
    "DataFrame",
    "DataFrameSlice",
    "Row",
    "RowGrouping",
    "TimeUnit",
    "JoinKind",
    "Order",
    "ElementKind",
    "CategoricalSummary",
    "NumericSummary",

    # Codecs
    "read_csv",
    "read_json",
    "write_csv",
    "from_pandas",
    "CSVType",
    "CSVReadingOptions",
    "CSVWritingOptions",
    "JSONType",
    "JSONReadingOptions",

    # Errors
    "ParFrameError",
    "RowCountMismatchError",
    "DuplicateColumnNameError",
    "ColumnNotFoundError",
    "AmbiguousColumnNameError",
    "TypeMismatchError",
    "IndexOutOfBoundsError",
    "SchemaMismatchError",
    "StaleViewError",
    "CSVReadingError",
    "JSONReadingError",

    # Configuration
    "FrameConfig",
    "config_context",
    "enable_jit",
    "set_debug",
    "clear_jit_cache",
    "get_logger",
]
