"""CSV reading and writing.

Tokenizing is done by pandas with every cell read as text; turning cells
into typed columns is done here.
"""

import base64
import binascii
import csv
import datetime
import enum
import io
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

from ..core.column import Column
from ..core.dtypes import ElementKind, is_assignable
from ..errors import CSVReadingError

logger = logging.getLogger(__name__)


class CSVType(enum.Enum):
    """Types a CSV column can be parsed as."""
    INTEGER = "integer"
    BOOLEAN = "boolean"
    FLOAT = "float"
    DOUBLE = "double"
    DATE = "date"
    STRING = "string"
    DATA = "data"


@dataclass
class CSVReadingOptions:
    """
    Options for :func:`read_csv`.

    Attributes
    ----------
    has_header_row : bool
        Use the first line as column names. Otherwise columns are named
        ``Column 0``, ``Column 1`` and so on
    nil_encodings : set of str
        Cell texts read as missing values
    true_encodings, false_encodings : set of str
        Cell texts read as booleans
    delimiter : str
        Field separator
    ignores_empty_lines : bool
        Skip lines without any content
    uses_quoting : bool
        Treat double quotes as field quoting
    date_format : str, optional
        ``strptime`` format of date cells; ISO 8601 when omitted
    """
    has_header_row: bool = True
    nil_encodings: set = field(default_factory=lambda: {
        "", "#N/A", "#N/A N/A", "#NA", "N/A", "NA", "NULL", "n/a", "null",
    })
    true_encodings: set = field(default_factory=lambda: {"1", "True", "TRUE", "true"})
    false_encodings: set = field(default_factory=lambda: {"0", "False", "FALSE", "false"})
    delimiter: str = ","
    ignores_empty_lines: bool = True
    uses_quoting: bool = True
    date_format: Optional[str] = None


@dataclass
class CSVWritingOptions:
    """Options for :func:`write_csv`."""
    include_header: bool = True
    nil_encoding: str = ""
    true_encoding: str = "true"
    false_encoding: str = "false"
    delimiter: str = ","
    date_format: Optional[str] = None


def _text(data: Union[bytes, str, os.PathLike, Any]) -> str:
    if isinstance(data, os.PathLike):
        with open(data, "rb") as handle:
            data = handle.read()
    elif hasattr(data, "read"):
        data = data.read()
    if isinstance(data, bytes):
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CSVReadingError(f"Input is not valid UTF-8: {exc}") from exc
    return data


def _parse_integer(text: str, options: CSVReadingOptions) -> int:
    value = int(text)
    if not is_assignable(value, int):
        raise ValueError(f"integer out of range: {text!r}")
    return value


def _parse_double(text: str, options: CSVReadingOptions) -> float:
    return float(text)


def _parse_boolean(text: str, options: CSVReadingOptions) -> bool:
    if text in options.true_encodings:
        return True
    if text in options.false_encodings:
        return False
    raise ValueError(f"not a boolean: {text!r}")


def _parse_date(text: str, options: CSVReadingOptions) -> datetime.datetime:
    if options.date_format is not None:
        return datetime.datetime.strptime(text, options.date_format)
    return datetime.datetime.fromisoformat(text)


def _parse_string(text: str, options: CSVReadingOptions) -> str:
    return text


def _parse_data(text: str, options: CSVReadingOptions) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except binascii.Error as exc:
        raise ValueError(str(exc)) from exc


_PARSERS: Dict[CSVType, Tuple[Callable[[str, CSVReadingOptions], Any], type]] = {
    CSVType.INTEGER: (_parse_integer, int),
    CSVType.BOOLEAN: (_parse_boolean, bool),
    CSVType.FLOAT: (_parse_double, float),
    CSVType.DOUBLE: (_parse_double, float),
    CSVType.DATE: (_parse_date, datetime.datetime),
    CSVType.STRING: (_parse_string, str),
    CSVType.DATA: (_parse_data, bytes),
}

_INFERENCE_ORDER = (CSVType.INTEGER, CSVType.DOUBLE, CSVType.BOOLEAN)


def _parse_column(name: str, cells: List[str], csv_type: CSVType, options: CSVReadingOptions,
                  first_row: int) -> Column:
    parse, element_type = _PARSERS[csv_type]
    values = []
    for i, text in enumerate(cells):
        if not isinstance(text, str):
            raise CSVReadingError("Row has fewer fields than the header",
                                  row=first_row + i, column=name)
        if text in options.nil_encodings:
            values.append(None)
            continue
        try:
            values.append(parse(text, options))
        except ValueError as exc:
            raise CSVReadingError(f"Cannot parse cell as {csv_type.value}: {exc}",
                                  row=first_row + i, column=name, cell_contents=text) from exc
    return Column(name, values, element_type)


def _infer_column(name: str, cells: List[str], options: CSVReadingOptions,
                  first_row: int) -> Column:
    present = [text for text in cells
               if isinstance(text, str) and text not in options.nil_encodings]
    for csv_type in _INFERENCE_ORDER:
        parse = _PARSERS[csv_type][0]
        try:
            for text in present:
                parse(text, options)
        except ValueError:
            continue
        return _parse_column(name, cells, csv_type, options, first_row)
    return _parse_column(name, cells, CSVType.STRING, options, first_row)


def read_csv(data, columns: Optional[Sequence[str]] = None, rows: Optional[range] = None,
             types: Optional[Dict[str, CSVType]] = None,
             options: Optional[CSVReadingOptions] = None):
    """
    Read a CSV document into a DataFrame.

    Parameters
    ----------
    data : bytes, str, path or file-like
        The CSV text, its UTF-8 bytes, a path or an open file
    columns : List[str], optional
        Columns to keep, in this order
    rows : range, optional
        Data rows to keep
    types : Dict[str, CSVType], optional
        Parse types of some columns; the others are inferred as integer,
        double, boolean or string, whichever first fits every cell
    options : CSVReadingOptions, optional
        Reading options

    Raises
    ------
    CSVReadingError
        If the document is malformed, a requested column does not exist, or
        a cell cannot be parsed as its column type
    """
    from ..core.frame import DataFrame

    options = options or CSVReadingOptions()
    types = types or {}
    text = _text(data)
    try:
        table = pd.read_csv(
            io.StringIO(text),
            sep=options.delimiter,
            header=0 if options.has_header_row else None,
            dtype=str,
            keep_default_na=False,
            na_filter=False,
            skip_blank_lines=options.ignores_empty_lines,
            quoting=csv.QUOTE_MINIMAL if options.uses_quoting else csv.QUOTE_NONE,
            engine="python",
        )
    except pd.errors.EmptyDataError:
        return DataFrame()
    except (pd.errors.ParserError, csv.Error) as exc:
        raise CSVReadingError(f"Malformed CSV: {exc}") from exc

    if not options.has_header_row:
        table.columns = [f"Column {i}" for i in range(len(table.columns))]
    names = [str(name) for name in table.columns]

    first_row = 0
    if rows is not None:
        table = table.iloc[rows.start:rows.stop:rows.step]
        first_row = rows.start

    for name in types:
        if name not in names:
            raise CSVReadingError(f"Column '{name}' given a type does not exist", column=name)
    if columns is not None:
        for name in columns:
            if name not in names:
                raise CSVReadingError(f"Column '{name}' does not exist", column=name)
        selected = [names.index(name) for name in columns]
    else:
        selected = list(range(len(names)))

    parsed = []
    for index in selected:
        name = names[index]
        cells = table.iloc[:, index].tolist()
        if name in types:
            parsed.append(_parse_column(name, cells, CSVType(types[name]), options, first_row))
        else:
            parsed.append(_infer_column(name, cells, options, first_row))
    frame = DataFrame(parsed)
    logger.debug("Read CSV with shape %s and types %s", frame.shape,
                 {c.name: c.element_type.__name__ for c in parsed})
    return frame


def _format(value: Any, kind: ElementKind, options: CSVWritingOptions) -> str:
    if value is None:
        return options.nil_encoding
    if kind is ElementKind.BOOL:
        return options.true_encoding if value else options.false_encoding
    if isinstance(value, (datetime.date, datetime.datetime)):
        if options.date_format is not None:
            return value.strftime(options.date_format)
        return value.isoformat()
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    return str(value)


def write_csv(frame, options: Optional[CSVWritingOptions] = None) -> str:
    """
    Serialize a frame or frame slice as CSV text.

    Booleans, missing values and dates are written with the encodings of
    ``options``; bytes are written as base64.
    """
    options = options or CSVWritingOptions()
    columns = frame.columns
    if not columns:
        return ""
    cells = [[_format(value, column.kind, options) for value in column.to_list()]
             for column in columns]
    table = pd.DataFrame(list(zip(*cells)), columns=[column.name for column in columns])
    return table.to_csv(index=False, header=options.include_header, sep=options.delimiter,
                        lineterminator="\n")
