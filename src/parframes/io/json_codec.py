"""Reading JSON arrays of objects into frames."""

import datetime
import enum
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ..core.column import Column
from ..core.dtypes import infer_element_type, is_assignable
from ..errors import JSONReadingError

logger = logging.getLogger(__name__)


class JSONType(enum.Enum):
    """Types a JSON column can be read as."""
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DOUBLE = "double"
    DATE = "date"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


@dataclass
class JSONReadingOptions:
    """
    Options for :func:`read_json`.

    Attributes
    ----------
    date_format : str, optional
        ``strptime`` format of date strings; ISO 8601 when omitted
    """
    date_format: Optional[str] = None


def _convert(value: Any, json_type: JSONType, options: JSONReadingOptions) -> Any:
    """Convert one JSON value; raises ``ValueError`` when it does not fit."""
    if json_type is JSONType.INTEGER:
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, int) and is_assignable(value, int):
            return value
    elif json_type is JSONType.BOOLEAN:
        if isinstance(value, bool):
            return value
    elif json_type is JSONType.DOUBLE:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif json_type is JSONType.DATE:
        if isinstance(value, str):
            if options.date_format is not None:
                return datetime.datetime.strptime(value, options.date_format)
            return datetime.datetime.fromisoformat(value)
    elif json_type is JSONType.STRING:
        if isinstance(value, str):
            return value
    elif json_type is JSONType.ARRAY:
        if isinstance(value, list):
            return value
    elif json_type is JSONType.OBJECT:
        if isinstance(value, dict):
            return value
    raise ValueError(f"expected {json_type.value}")


_ELEMENT_TYPES = {
    JSONType.INTEGER: int,
    JSONType.BOOLEAN: bool,
    JSONType.DOUBLE: float,
    JSONType.DATE: datetime.datetime,
    JSONType.STRING: str,
    JSONType.ARRAY: list,
    JSONType.OBJECT: dict,
}


def read_json(data, columns: Optional[Sequence[str]] = None,
              types: Optional[Dict[str, JSONType]] = None,
              options: Optional[JSONReadingOptions] = None):
    """
    Read a JSON array of objects into a DataFrame.

    Every object is a row; column order is the order in which keys first
    appear. Keys absent from an object and ``null`` values are missing.

    Raises
    ------
    JSONReadingError
        If the document does not parse, is not an array of objects, or a
        column's values do not share one type
    """
    from ..core.frame import DataFrame

    options = options or JSONReadingOptions()
    types = types or {}
    if isinstance(data, os.PathLike):
        with open(data, "rb") as handle:
            data = handle.read()
    elif hasattr(data, "read"):
        data = data.read()
    try:
        document = json.loads(data)
    except (ValueError, TypeError) as exc:
        raise JSONReadingError(f"Failed to parse: {exc}") from exc

    if not isinstance(document, list):
        raise JSONReadingError("Unsupported structure: expected an array of objects")
    names: List[str] = []
    seen = set()
    for row, item in enumerate(document):
        if not isinstance(item, dict):
            raise JSONReadingError("Unsupported structure: expected an object", row=row, value=item)
        for key in item:
            if key not in seen:
                seen.add(key)
                names.append(key)

    if columns is not None:
        for name in columns:
            if name not in seen:
                raise JSONReadingError(f"Column '{name}' does not exist", column=name)
        names = list(columns)

    parsed = []
    for name in names:
        values = [item.get(name) for item in document]
        if name in types:
            json_type = JSONType(types[name])
            converted = []
            for row, value in enumerate(values):
                if value is None:
                    converted.append(None)
                    continue
                try:
                    converted.append(_convert(value, json_type, options))
                except ValueError as exc:
                    raise JSONReadingError(f"Wrong type: {exc}", row=row, column=name,
                                           value=value) from exc
            parsed.append(Column(name, converted, _ELEMENT_TYPES[json_type]))
            continue
        element_type = infer_element_type(values)
        if element_type is object and any(v is not None for v in values):
            raise JSONReadingError("Incompatible values", column=name)
        for row, value in enumerate(values):
            if not is_assignable(value, element_type):
                raise JSONReadingError("Value out of range", row=row, column=name, value=value)
        parsed.append(Column(name, values, element_type))

    frame = DataFrame(parsed)
    logger.debug("Read JSON with shape %s", frame.shape)
    return frame
