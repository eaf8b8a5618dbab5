"""Conversion between ParFrames frames and pandas DataFrames."""

import datetime

import numpy as np
import pandas as pd

from ..core.any_column import AnyColumn
from ..core.column import Column
from ..core.dtypes import ElementKind, infer_element_type, object_array


def _column_to_series(column) -> pd.Series:
    typed = column._column
    values, mask = typed._data()
    if typed.kind is ElementKind.INT:
        if mask.all():
            return pd.Series(values.copy(), dtype=np.int64)
        return pd.Series(pd.array(typed.to_list(), dtype="Int64"))
    if typed.kind is ElementKind.BOOL:
        if mask.all():
            return pd.Series(values.copy(), dtype=np.bool_)
        return pd.Series(pd.array(typed.to_list(), dtype="boolean"))
    if typed.kind is ElementKind.FLOAT:
        return pd.Series(np.where(mask, values, np.nan), dtype=np.float64)
    return pd.Series(object_array(typed.to_list()), dtype=object)


def to_pandas(frame) -> pd.DataFrame:
    """
    Convert a frame or frame slice to a pandas DataFrame.

    Int and bool columns with missing values use the nullable ``Int64`` and
    ``boolean`` dtypes; missing floats become ``NaN``; other columns are
    object columns holding ``None`` for missing values. Duplicate column
    names are kept.
    """
    columns = frame.columns
    data = {i: _column_to_series(column) for i, column in enumerate(columns)}
    df = pd.DataFrame(data, index=pd.RangeIndex(frame.row_count))
    df.columns = [column.name for column in columns]
    return df


def _series_to_column(name: str, series: pd.Series) -> Column:
    dtype = series.dtype
    missing = series.isna().to_numpy()
    if pd.api.types.is_bool_dtype(dtype):
        element_type = bool
    elif pd.api.types.is_integer_dtype(dtype):
        element_type = int
    elif pd.api.types.is_float_dtype(dtype):
        element_type = float
    elif pd.api.types.is_datetime64_any_dtype(dtype):
        values = [None if m else ts.to_pydatetime() for ts, m in zip(series, missing)]
        return Column(name, values, datetime.datetime)
    else:
        values = [None if m else v for v, m in zip(series.tolist(), missing)]
        return Column(name, values, infer_element_type(values))

    if not missing.any():
        return Column(name, series.to_numpy(dtype=element_type), element_type)
    values = [None if m else v for v, m in zip(series.tolist(), missing)]
    return Column(name, values, element_type)


def from_pandas(df: pd.DataFrame):
    """
    Create a DataFrame from a pandas DataFrame.

    ``NaN``, ``NA`` and ``NaT`` become missing values. The index is
    dropped.
    """
    from ..core.frame import DataFrame
    columns = [AnyColumn(_series_to_column(str(name), df.iloc[:, i]))
               for i, name in enumerate(df.columns)]
    return DataFrame(columns)
