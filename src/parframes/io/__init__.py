"""Codecs between frames and CSV, JSON and pandas."""

from parframes.io.csv_codec import (
    CSVReadingOptions, CSVType, CSVWritingOptions, read_csv, write_csv,
)
from parframes.io.json_codec import JSONReadingOptions, JSONType, read_json
from parframes.io.pandas_interop import from_pandas, to_pandas

__all__ = [
    "CSVReadingOptions",
    "CSVType",
    "CSVWritingOptions",
    "JSONReadingOptions",
    "JSONType",
    "from_pandas",
    "read_csv",
    "read_json",
    "to_pandas",
    "write_csv",
]
