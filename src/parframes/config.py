"""Library-wide configuration for ParFrames."""

import contextlib
from typing import Iterator, Tuple


class FrameConfig:
    """
    Class-level settings consulted by columns, frames and kernels.

    Attributes
    ----------
    jit_enabled : bool
        Compile numeric kernels with ``jax.jit``
    enable_x64 : bool
        Run JAX in 64-bit mode so int64/float64 columns are not truncated.
        Only read once, when :mod:`parframes.core.jit_utils` is imported
    debug : bool
        Emit debug log records for kernel compilation
    check_stale_views : bool
        Make slices, rows and groupings fail with ``StaleViewError`` once
        their base has been structurally mutated
    default_ddof : int
        Delta degrees of freedom used by standard deviations
    join_prefixes : Tuple[str, str]
        Alias prefixes for colliding column names produced by joins
    alias_separator : str
        Separator between a join prefix and a column name
    """
    jit_enabled: bool = True
    enable_x64: bool = True
    debug: bool = False
    check_stale_views: bool = True
    default_ddof: int = 1
    join_prefixes: Tuple[str, str] = ("left", "right")
    alias_separator: str = "."


_SETTINGS = (
    "jit_enabled", "enable_x64", "debug", "check_stale_views",
    "default_ddof", "join_prefixes", "alias_separator",
)


@contextlib.contextmanager
def config_context(**overrides) -> Iterator[None]:
    """Temporarily override :class:`FrameConfig` settings."""
    for key in overrides:
        if key not in _SETTINGS:
            raise ValueError(f"Unknown setting: {key}")
    previous = {key: getattr(FrameConfig, key) for key in overrides}
    try:
        for key, value in overrides.items():
            setattr(FrameConfig, key, value)
        yield
    finally:
        for key, value in previous.items():
            setattr(FrameConfig, key, value)
