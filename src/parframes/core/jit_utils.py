"""JIT compiled numeric kernels backing column arithmetic and statistics."""

import functools
import logging
from functools import lru_cache
from typing import Any, Callable, Dict, Optional, Tuple

import jax
import jax.numpy as jnp
import numpy as np

from ..config import FrameConfig

logger = logging.getLogger(__name__)

if FrameConfig.enable_x64:
    # int64/float64 columns would otherwise be truncated to 32 bits
    jax.config.update("jax_enable_x64", True)


# Global cache for compiled functions
_JIT_CACHE: Dict[str, Callable] = {}


def is_jax_compatible(*args) -> bool:
    """Check if arguments are compatible with JAX JIT compilation."""
    for arg in args:
        if arg is None:
            continue
        if isinstance(arg, (list, tuple)):
            if not all(is_jax_compatible(item) for item in arg):
                return False
        elif hasattr(arg, 'dtype'):
            if arg.dtype == np.object_:
                return False
        elif isinstance(arg, (str, bytes, dict)):
            return False
        elif not isinstance(arg, (bool, int, float, complex)):
            return False
    return True


def _compile(fn: Callable, name: str, **compile_kwargs) -> Callable:
    if not FrameConfig.jit_enabled:
        return fn
    if FrameConfig.debug:
        logger.debug("JIT compiled: %s", name)
    return jax.jit(fn, **compile_kwargs)


def auto_jit(func: Optional[Callable] = None,
             static_argnums: Optional[Tuple[int, ...]] = None,
             static_argnames: Optional[Tuple[str, ...]] = None,
             cache_key: Optional[str] = None) -> Callable:
    """
    Decorator that applies JIT compilation when the inputs allow it.

    Object-dtype arrays and Python objects fall back to the plain function,
    and compiled versions are cached by ``cache_key``.
    """
    def decorator(f: Callable) -> Callable:
        nonlocal cache_key
        if cache_key is None:
            cache_key = f"{f.__module__}.{f.__name__}"

        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            if not FrameConfig.jit_enabled:
                return f(*args, **kwargs)

            if not is_jax_compatible(*args, *kwargs.values()):
                if FrameConfig.debug:
                    logger.debug("Skipping JIT for %s: incompatible arguments", cache_key)
                return f(*args, **kwargs)

            jit_key = f"{cache_key}_jit"
            if jit_key not in _JIT_CACHE:
                compile_kwargs = {}
                if static_argnums is not None:
                    compile_kwargs['static_argnums'] = static_argnums
                if static_argnames is not None:
                    compile_kwargs['static_argnames'] = static_argnames
                _JIT_CACHE[jit_key] = _compile(f, cache_key, **compile_kwargs)

            return _JIT_CACHE[jit_key](*args, **kwargs)

        wrapper._original = f
        wrapper._cache_key = cache_key
        return wrapper

    if func is None:
        return decorator
    return decorator(func)


@lru_cache(maxsize=32)
def get_binary_op(op_name: str) -> Callable:
    """Get a JIT-compiled binary operation."""
    ops = {
        'add': lambda x, y: x + y,
        'subtract': lambda x, y: x - y,
        'multiply': lambda x, y: x * y,
        'divide': lambda x, y: x / y,
        'floordiv': lambda x, y: x // y,
        'greater': lambda x, y: x > y,
        'less': lambda x, y: x < y,
        'greater_equal': lambda x, y: x >= y,
        'less_equal': lambda x, y: x <= y,
        'equal': lambda x, y: x == y,
        'not_equal': lambda x, y: x != y,
    }

    if op_name in ops:
        return _compile(ops[op_name], f"binary.{op_name}")
    raise ValueError(f"Unknown operation: {op_name}")


@lru_cache(maxsize=32)
def get_unary_op(op_name: str) -> Callable:
    """Get a JIT-compiled unary operation."""
    ops = {
        'neg': lambda x: -x,
        'abs': lambda x: jnp.abs(x),
    }

    if op_name in ops:
        return _compile(ops[op_name], f"unary.{op_name}")
    raise ValueError(f"Unknown operation: {op_name}")


@lru_cache(maxsize=32)
def get_reduction_op(op_name: str, ddof: int = 0) -> Callable:
    """Get a JIT-compiled reduction operation."""
    ops = {
        'sum': lambda x: jnp.sum(x),
        'mean': lambda x: jnp.mean(x),
        'std': lambda x: jnp.std(x, ddof=ddof),
        'var': lambda x: jnp.var(x, ddof=ddof),
        'min': lambda x: jnp.min(x),
        'max': lambda x: jnp.max(x),
        'argmin': lambda x: jnp.argmin(x),
        'argmax': lambda x: jnp.argmax(x),
    }

    if op_name in ops:
        return _compile(ops[op_name], f"reduction.{op_name}")
    raise ValueError(f"Unknown operation: {op_name}")


@auto_jit
def masked_fill(values, mask, fill):
    """Replace every element whose mask entry is False with ``fill``."""
    return jnp.where(mask, values, fill)


def reduce_present(op_name: str, present: np.ndarray, ddof: int = 0) -> Any:
    """
    Run a reduction over the non-missing values of a numeric column.

    Parameters
    ----------
    op_name : str
        Name understood by :func:`get_reduction_op`
    present : np.ndarray
        The non-missing values, already compressed
    ddof : int
        Delta degrees of freedom for ``std``/``var``

    Returns
    -------
    Any
        A Python scalar
    """
    result = get_reduction_op(op_name, ddof)(jnp.asarray(present))
    return np.asarray(result).item()


def apply_binary(op_name: str, left: Any, right: Any) -> np.ndarray:
    """Apply a binary kernel to numeric arrays or scalars and return numpy."""
    return np.asarray(get_binary_op(op_name)(jnp.asarray(left), jnp.asarray(right)))


def apply_unary(op_name: str, values: np.ndarray) -> np.ndarray:
    return np.asarray(get_unary_op(op_name)(jnp.asarray(values)))


def enable_jit(enabled: bool = True):
    """Enable or disable JIT compilation of kernels."""
    FrameConfig.jit_enabled = enabled
    clear_jit_cache()


def set_debug(debug: bool = True):
    """Enable or disable JIT debug log records."""
    FrameConfig.debug = debug


def clear_jit_cache():
    """Clear the JIT compilation cache."""
    _JIT_CACHE.clear()
    get_binary_op.cache_clear()
    get_unary_op.cache_clear()
    get_reduction_op.cache_clear()
