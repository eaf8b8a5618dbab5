"""Exception types raised by ParFrames.

Every error subclasses :class:`ParFrameError` and the builtin exception a
caller would naturally expect (``KeyError`` for lookups, ``TypeError`` for
type problems and so on), so both ``except ParFrameError`` and the builtin
form work.
"""

from typing import Any, Optional


class ParFrameError(Exception):
    """Base class for all ParFrames errors."""

    def __str__(self) -> str:
        # KeyError would otherwise quote the message
        return str(self.args[0]) if self.args else ""


class RowCountMismatchError(ParFrameError, ValueError):
    """A column or row does not have the length the frame requires."""


class DuplicateColumnNameError(ParFrameError, ValueError):
    """A column name collides with an existing column or alias."""


class ColumnNotFoundError(ParFrameError, KeyError):
    """No column or alias with the requested name exists."""


class AmbiguousColumnNameError(ParFrameError, KeyError):
    """More than one column carries the requested name."""


class TypeMismatchError(ParFrameError, TypeError):
    """A value or column does not have the expected element type."""


class IndexOutOfBoundsError(ParFrameError, IndexError):
    """A row, column or element index is outside the valid range."""


class SchemaMismatchError(ParFrameError, ValueError):
    """Two frames (or groups) do not share the same columns and types."""


class StaleViewError(ParFrameError, RuntimeError):
    """A slice, row or grouping outlived a structural mutation of its base."""


class CSVReadingError(ParFrameError, ValueError):
    """
    A CSV document could not be turned into a DataFrame.

    Parameters
    ----------
    reason : str
        Human readable description of the failure
    row : int, optional
        Zero-based data row of the offending cell
    column : str, optional
        Column name of the offending cell
    cell_contents : str, optional
        Raw text of the offending cell
    """

    def __init__(self, reason: str, row: Optional[int] = None,
                 column: Optional[str] = None, cell_contents: Optional[str] = None):
        location = []
        if row is not None:
            location.append(f"row {row}")
        if column is not None:
            location.append(f"column '{column}'")
        if cell_contents is not None:
            location.append(f"cell {cell_contents!r}")
        message = reason if not location else f"{reason} ({', '.join(location)})"
        super().__init__(message)
        self.reason = reason
        self.row = row
        self.column = column
        self.cell_contents = cell_contents


class JSONReadingError(ParFrameError, ValueError):
    """A JSON document could not be turned into a DataFrame."""

    def __init__(self, reason: str, row: Optional[int] = None,
                 column: Optional[str] = None, value: Any = None):
        location = []
        if row is not None:
            location.append(f"row {row}")
        if column is not None:
            location.append(f"column '{column}'")
        if value is not None:
            location.append(f"value {value!r}")
        message = reason if not location else f"{reason} ({', '.join(location)})"
        super().__init__(message)
        self.reason = reason
        self.row = row
        self.column = column
        self.value = value
