"""Row views of a DataFrame."""

from typing import Any, Dict, Iterator, List, Union

from ..config import FrameConfig
from ..errors import ColumnNotFoundError, IndexOutOfBoundsError, StaleViewError
from .protocols import normalize_index


class Row:
    """
    One row of a DataFrame, addressed by base row position.

    Values are read from the frame on access. Assigning through a row
    writes into the frame. The row becomes stale when the frame's rows
    are added, removed or reordered.
    """

    def __init__(self, base, index: int):
        if index < 0 or index >= base.row_count:
            raise IndexOutOfBoundsError(f"Row index {index} out of bounds for {base.row_count} rows")
        self._base = base
        self._index = index
        self._generation = base._generation

    def _check(self):
        if FrameConfig.check_stale_views and self._base._generation != self._generation:
            raise StaleViewError("The base frame was structurally mutated after this row was taken")

    @property
    def base(self):
        return self._base

    @property
    def index(self) -> int:
        """Position of the row in its base frame."""
        return self._index

    def _position(self, key: Union[str, int]) -> int:
        self._check()
        if isinstance(key, str):
            position = self._base.index_of_column(key)
            if position is None:
                raise ColumnNotFoundError(f"Column '{key}' not found")
            return position
        return normalize_index(key, len(self._base._columns))

    def __getitem__(self, key: Union[str, int]) -> Any:
        return self._base._columns[self._position(key)][self._index]

    def __setitem__(self, key: Union[str, int], value: Any):
        self._base._columns[self._position(key)][self._index] = value

    def __len__(self) -> int:
        self._check()
        return len(self._base._columns)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.to_list())

    def to_list(self) -> List[Any]:
        self._check()
        return [column[self._index] for column in self._base._columns]

    def to_dict(self) -> Dict[str, Any]:
        """Values keyed by column name; later duplicates win."""
        self._check()
        return {column.name: column[self._index] for column in self._base._columns}

    def __eq__(self, other):
        if isinstance(other, Row):
            return self.to_list() == other.to_list()
        if isinstance(other, (list, tuple)):
            return self.to_list() == list(other)
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f"Row(index={self._index}, values={self.to_list()!r})"


class Rows:
    """The rows of a frame or frame slice as a sequence."""

    def __init__(self, frame):
        self._frame = frame

    def __len__(self) -> int:
        return self._frame.row_count

    def __getitem__(self, index: int) -> Row:
        return self._frame.row(index)

    def __iter__(self) -> Iterator[Row]:
        base = self._frame._base_frame()
        for position in self._frame._row_positions().tolist():
            yield Row(base, position)
