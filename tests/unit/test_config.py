"""Tests for configuration, JIT switches and logging."""

import logging

import numpy as np
import pytest

import parframes
from parframes import Column, DataFrame, FrameConfig, config_context, enable_jit, get_logger, set_debug
from parframes.core.jit_utils import auto_jit, is_jax_compatible, masked_fill


class TestConfig:
    """Test library settings."""

    def test_config_context_restores(self):
        """Test that overrides are undone on exit."""
        with config_context(default_ddof=0):
            assert FrameConfig.default_ddof == 0
            assert Column("x", [1, 2, 3, 4]).std() == pytest.approx(1.1180339887)
        assert FrameConfig.default_ddof == 1

    def test_unknown_setting(self):
        """Test that misspelled settings are rejected."""
        with pytest.raises(ValueError):
            with config_context(bogus=1):
                pass

    def test_version(self):
        """Test the package version."""
        assert parframes.__version__ == "0.1.0"


class TestJIT:
    """Test the JIT helpers."""

    def test_results_without_jit(self):
        """Test that disabling JIT gives the same results."""
        col = Column("x", [1, None, 3])
        try:
            enable_jit(False)
            assert FrameConfig.jit_enabled is False
            assert col.sum() == 4
            assert (col + 1).to_list() == [2, None, 4]
        finally:
            enable_jit(True)
        assert col.mean() == 2.0

    def test_is_jax_compatible(self):
        """Test which arguments can be traced."""
        assert is_jax_compatible(np.array([1, 2]), 1, 2.5, True)
        assert not is_jax_compatible(np.array(["a"], dtype=object))
        assert not is_jax_compatible("text")

    def test_auto_jit_falls_back_for_objects(self):
        """Test that incompatible arguments run the plain function."""
        @auto_jit
        def first(values):
            return values[0]

        assert first(np.array(["a", "b"], dtype=object)) == "a"

    def test_masked_fill(self):
        """Test the fill kernel."""
        result = masked_fill(np.array([1, 2, 3]), np.array([True, False, True]), 0)
        assert np.asarray(result).tolist() == [1, 0, 3]


class TestLogging:
    """Test logging integration."""

    def test_get_logger(self):
        """Test logger names under the package logger."""
        assert get_logger().name == "parframes"
        assert get_logger("core.join").name == "parframes.core.join"
        assert get_logger("parframes.io").name == "parframes.io"

    def test_join_logs_debug(self, caplog):
        """Test that joins log at debug level."""
        caplog.set_level(logging.DEBUG, logger="parframes")
        a = DataFrame({"id": [1, 2]})
        a.join(a, on="id")

        assert any("join" in record.getMessage() for record in caplog.records)

    def test_debug_logs_compilation(self, caplog):
        """Test the JIT debug switch."""
        caplog.set_level(logging.DEBUG, logger="parframes")
        try:
            set_debug(True)
            parframes.clear_jit_cache()
            Column("x", [1.0, 2.0]).sum()
        finally:
            set_debug(False)

        assert any("JIT compiled" in record.getMessage() for record in caplog.records)
