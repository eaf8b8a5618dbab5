"""Hash joins between frames."""

import enum
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..config import FrameConfig
from ..errors import TypeMismatchError
from .any_column import AnyColumn
from .column import Column
from .dtypes import hashable_key, type_name

logger = logging.getLogger(__name__)


class JoinKind(enum.Enum):
    """Which unmatched rows a join keeps."""
    INNER = "inner"
    LEFT = "left"
    RIGHT = "right"
    FULL = "full"

    @classmethod
    def parse(cls, kind: Union['JoinKind', str]) -> 'JoinKind':
        if isinstance(kind, JoinKind):
            return kind
        kind = str(kind).lower()
        if kind == "outer":
            return cls.FULL
        return cls(kind)


KeySpec = Union[str, Tuple[str, str], Sequence[Union[str, Tuple[str, str]]]]


def _key_pairs(on: KeySpec) -> List[Tuple[str, str]]:
    """Normalize ``on`` to a list of ``(left_name, right_name)`` pairs."""
    if isinstance(on, str):
        return [(on, on)]
    if isinstance(on, tuple):
        if len(on) != 2 or not all(isinstance(name, str) for name in on):
            raise ValueError(f"A key pair must hold two column names, got {on!r}")
        return [on]
    pairs = []
    for item in on:
        pairs.extend(_key_pairs(item))
    if not pairs:
        raise ValueError("At least one join key is required")
    return pairs


def _row_keys(frame, names: List[str]) -> List[Optional[tuple]]:
    """Hashable key tuple of every row, or ``None`` when a component is missing."""
    values = [frame._typed_view(name).to_list() for name in names]
    keys = []
    for row in zip(*values):
        if any(value is None for value in row):
            keys.append(None)
        else:
            keys.append(tuple(hashable_key(value) for value in row))
    return keys


def _index_keys(keys: List[Optional[tuple]]) -> Dict[tuple, List[int]]:
    table: Dict[tuple, List[int]] = {}
    for position, key in enumerate(keys):
        if key is not None:
            table.setdefault(key, []).append(position)
    return table


def _match(left_keys: List[Optional[tuple]], right_keys: List[Optional[tuple]]) -> List[List[int]]:
    """
    Right rows matching every left row, in right order.

    The smaller side is hashed and the larger side probes it.
    """
    if len(right_keys) <= len(left_keys):
        logger.debug("Join builds on the right side (%d rows), probes with %d left rows",
                     len(right_keys), len(left_keys))
        table = _index_keys(right_keys)
        return [list(table.get(key, ())) if key is not None else [] for key in left_keys]

    logger.debug("Join builds on the left side (%d rows), probes with %d right rows",
                 len(left_keys), len(right_keys))
    table = _index_keys(left_keys)
    matches: List[List[int]] = [[] for _ in left_keys]
    for j, key in enumerate(right_keys):
        if key is None:
            continue
        for i in table.get(key, ()):
            matches[i].append(j)
    return matches


def _take(frame, index: int, rows: np.ndarray) -> Column:
    """Column ``index`` of ``frame`` at relative ``rows``; ``-1`` gives a missing value."""
    positions = frame._row_positions()
    base_rows = np.where(rows >= 0, positions[np.maximum(rows, 0)] if len(positions) else -1, -1)
    return frame._base_frame()._columns[index]._column._take_optional(base_rows)


def join(left, right, on: KeySpec, kind: Union[JoinKind, str] = JoinKind.INNER):
    """
    Join two frames (or frame slices) on equal key values.

    Parameters
    ----------
    left, right : DataFrame or DataFrameSlice
        Frames to join
    on : str, (str, str) or list of these
        Key columns: a name shared by both frames or a
        ``(left_name, right_name)`` pair
    kind : JoinKind or str
        ``inner``, ``left``, ``right`` or ``full`` (``outer``)

    Returns
    -------
    DataFrame
        Key column(s) named after the left keys, then the other left
        columns, then the other right columns. Left rows come in order,
        each followed by its matches in right order; unmatched right rows
        of a right or full join come last. Rows with a missing key
        component never match.

    Notes
    -----
    Other columns with the same name on both sides are both kept and get
    the aliases ``left.<name>`` and ``right.<name>``.
    """
    from .frame import DataFrame

    kind = JoinKind.parse(kind)
    pairs = _key_pairs(on)
    left_names = [l for l, _ in pairs]
    right_names = [r for _, r in pairs]
    left_indices = [left._require_column(name) for name in left_names]
    right_indices = [right._require_column(name) for name in right_names]
    left_columns = left._base_frame()._columns
    right_columns = right._base_frame()._columns
    for l, r in zip(left_indices, right_indices):
        if left_columns[l].element_type is not right_columns[r].element_type:
            raise TypeMismatchError(
                f"Join key '{left_columns[l].name}' is {type_name(left_columns[l].element_type)} "
                f"but '{right_columns[r].name}' is {type_name(right_columns[r].element_type)}"
            )

    matches = _match(_row_keys(left, left_names), _row_keys(right, right_names))
    left_rows, right_rows = [], []
    matched_right = np.zeros(right.row_count, dtype=np.bool_)
    for i, found in enumerate(matches):
        if found:
            left_rows.extend([i] * len(found))
            right_rows.extend(found)
            matched_right[found] = True
        elif kind in (JoinKind.LEFT, JoinKind.FULL):
            left_rows.append(i)
            right_rows.append(-1)
    if kind in (JoinKind.RIGHT, JoinKind.FULL):
        unmatched = np.flatnonzero(~matched_right).tolist()
        left_rows.extend([-1] * len(unmatched))
        right_rows.extend(unmatched)
    left_rows = np.asarray(left_rows, dtype=np.int64)
    right_rows = np.asarray(right_rows, dtype=np.int64)

    columns: List[AnyColumn] = []
    sides: List[str] = []
    for l, r in zip(left_indices, right_indices):
        key = _take(left, l, left_rows)
        other = _take(right, r, right_rows)
        from_right = left_rows < 0
        key._values[from_right] = other._values[from_right]
        key._mask[from_right] = other._mask[from_right]
        columns.append(AnyColumn(key))
        sides.append("key")
    for index in range(len(left_columns)):
        if index not in left_indices:
            columns.append(AnyColumn(_take(left, index, left_rows)))
            sides.append("left")
    for index in range(len(right_columns)):
        if index not in right_indices:
            columns.append(AnyColumn(_take(right, index, right_rows)))
            sides.append("right")

    aliases = _collision_aliases(columns, sides)
    logger.debug("%s join on %s produced %d rows", kind.value, pairs, len(left_rows))
    return DataFrame._from_parts(columns, aliases, len(left_rows))


def _collision_aliases(columns: List[AnyColumn], sides: List[str]) -> Dict[str, AnyColumn]:
    """Aliases ``left.<name>`` / ``right.<name>`` for names used more than once."""
    left_prefix, right_prefix = FrameConfig.join_prefixes
    separator = FrameConfig.alias_separator
    names = [column.name for column in columns]
    aliases: Dict[str, AnyColumn] = {}
    for column, side in zip(columns, sides):
        if names.count(column.name) < 2:
            continue
        prefix = right_prefix if side == "right" else left_prefix
        alias = f"{prefix}{separator}{column.name}"
        if alias not in aliases and alias not in names:
            aliases[alias] = column
    return aliases
