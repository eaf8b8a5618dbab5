"""Non-owning row subsets of a DataFrame."""

import numpy as np

from ..config import FrameConfig
from ..errors import IndexOutOfBoundsError, StaleViewError
from .any_column import AnyColumnSlice
from .frame_protocol import DataFrameProtocol, column_slice


class DataFrameSlice(DataFrameProtocol):
    """
    A view of selected rows of a DataFrame, in selection order.

    The slice shares the base frame's columns. Once the base's rows are
    added, removed or reordered, or its columns are added, removed or
    replaced, using the slice raises ``StaleViewError``.

    Parameters
    ----------
    base : DataFrame
        Frame the rows belong to
    row_indices : array-like of int
        Base row positions, in order
    """

    def __init__(self, base, row_indices):
        self._base = base
        self._generation = base._generation
        positions = np.asarray(row_indices, dtype=np.int64).reshape(-1)
        if len(positions) and (positions.min() < 0 or positions.max() >= base.row_count):
            raise IndexOutOfBoundsError(
                f"Row selection out of bounds for {base.row_count} rows"
            )
        self._positions = positions

    def _check(self):
        if FrameConfig.check_stale_views and self._base._generation != self._generation:
            raise StaleViewError("The base frame was structurally mutated after this slice was taken")

    @property
    def base(self):
        return self._base

    @property
    def row_indices(self) -> np.ndarray:
        """Base row positions of the slice's rows."""
        self._check()
        return self._positions.copy()

    def _base_frame(self):
        self._check()
        return self._base

    def _row_positions(self) -> np.ndarray:
        self._check()
        return self._positions

    def _view_column(self, index: int) -> AnyColumnSlice:
        return column_slice(self._base_frame()._columns[index], self._positions)

    def __repr__(self) -> str:
        return f"DataFrameSlice(shape={self.shape}, columns={self.column_names})"
