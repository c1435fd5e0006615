"""Tests for the state transition tracer."""
from __future__ import annotations

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import debug_trace
from debug_trace import enable_trace, trace, trace_call


@pytest.fixture
def log_path(tmp_path):
    path = tmp_path / "trace.log"
    enable_trace(True, str(path))
    yield path
    enable_trace(False)


def _lines(path):
    debug_trace.close_log()
    return path.read_text(encoding="utf-8").splitlines()


class TestTrace:
    def test_disabled_by_default(self, capsys):
        enable_trace(False)
        trace("hidden", "STATE")
        assert capsys.readouterr().err == ""

    def test_writes_category(self, log_path):
        trace("Default -> Selected", "STATE")
        lines = _lines(log_path)
        assert len(lines) == 1
        assert lines[0].endswith("[STATE] Default -> Selected")

    def test_verbose_category_needs_opt_in(self, tmp_path):
        path = tmp_path / "trace.log"
        enable_trace(True, str(path))
        trace("dropped", "EVENT")
        trace("kept", "STATE")
        assert [line.split("] ")[-1] for line in _lines(path)] == ["kept"]

        enable_trace(True, str(path), categories=["EVENT"])
        trace("pointerdown", "EVENT")
        assert _lines(path)[0].endswith("[EVENT] pointerdown")
        enable_trace(False)


class TestTraceCall:
    def test_wraps_call(self, log_path):
        @trace_call("COMMIT")
        def commit(x):
            return x * 2

        assert commit(3) == 6
        lines = _lines(log_path)
        assert ">>> " in lines[0] and "commit" in lines[0]
        assert "<<< " in lines[1]

    def test_reraises(self, log_path):
        @trace_call()
        def boom():
            raise ValueError("bad")

        with pytest.raises(ValueError):
            boom()
        assert "!!!" in _lines(log_path)[-1]
