"""Unit tests for pyprocesses.copiers."""

import io
import os

import pytest

from pyprocesses.copiers import ByteCopier, LineCopier, start_copier
from pyprocesses.errors import CopyError


class _BrokenBytes(io.RawIOBase):
    def read(self, size=-1):
        raise OSError("broken pipe")


class _BrokenText(io.TextIOBase):
    def __iter__(self):
        raise OSError("broken pipe")


class TestByteCopier:
    def test_copies_everything(self):
        sink = io.BytesIO()
        ByteCopier(io.BytesIO(b"abc" * 10_000), sink, chunk_size=7).call()
        assert sink.getvalue() == b"abc" * 10_000

    def test_call_raises_os_error(self):
        with pytest.raises(OSError, match="broken pipe"):
            ByteCopier(_BrokenBytes(), io.BytesIO()).call()

    def test_run_wraps_failure(self):
        with pytest.raises(CopyError) as exc_info:
            ByteCopier(_BrokenBytes(), io.BytesIO()).run()
        assert isinstance(exc_info.value.__cause__, OSError)


class TestLineCopier:
    def test_copies_lines_with_platform_separator(self):
        sink = io.StringIO()
        LineCopier(io.StringIO("one\ntwo\r\nthree"), sink).call()
        assert sink.getvalue() == os.linesep.join(["one", "two", "three"]) + os.linesep

    def test_decodes_binary_sources(self):
        sink = io.StringIO()
        LineCopier(io.BytesIO(b"Hello Ada!\n"), sink).call()
        assert sink.getvalue() == "Hello Ada!" + os.linesep

    def test_undecodable_bytes_are_replaced(self):
        sink = io.StringIO()
        LineCopier(io.BytesIO(b"ok\n\xff\nafter\n"), sink, encoding="utf-8").run()
        assert sink.getvalue().split(os.linesep) == ["ok", "\ufffd", "after", ""]

    def test_run_wraps_failure(self):
        with pytest.raises(CopyError):
            LineCopier(_BrokenText(), io.StringIO()).run()


def test_start_copier_runs_on_daemon_thread():
    sink = io.BytesIO()
    thread = start_copier(ByteCopier(io.BytesIO(b"data"), sink), name="copier")
    thread.join(timeout=5)

    assert thread.daemon is True
    assert thread.name == "copier"
    assert sink.getvalue() == b"data"
