"""Testing utilities and pandas comparison framework for ParFrames."""

from parframes.testing.comparison import assert_column_equal, assert_frame_equal
from parframes.testing.generators import (
    columns,
    data_frames,
    generate_random_column,
    generate_random_frame,
    optional_values,
)

__all__ = [
    "assert_frame_equal",
    "assert_column_equal",
    "generate_random_frame",
    "generate_random_column",
    "optional_values",
    "columns",
    "data_frames",
]
