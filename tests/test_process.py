"""Unit tests for pyprocesses.process."""

import subprocess
import sys
from unittest.mock import MagicMock, patch

import pytest

from pyprocesses.process import ProcessHandle

PYTHON = sys.executable


@pytest.fixture
def handles():
    started = []
    yield started
    for handle in started:
        handle.destroy_forcibly()
        handle.wait(timeout=10)
        handle.close()


def _start(handles, code, **kwargs):
    handle = ProcessHandle.start([PYTHON, "-c", code], **kwargs)
    handles.append(handle)
    return handle


class TestStart:
    @patch("pyprocesses.process.subprocess.Popen")
    def test_pipes_all_standard_streams(self, mock_popen):
        mock_popen.return_value.pid = 42
        ProcessHandle.start(("python", "-V"), cwd="/tmp")
        mock_popen.assert_called_once_with(
            ["python", "-V"],
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd="/tmp",
        )

    @patch("pyprocesses.process.subprocess.Popen")
    def test_redirect_error_stream_merges_stderr(self, mock_popen):
        mock_popen.return_value.pid = 42
        ProcessHandle.start(["python"], redirect_error_stream=True)
        assert mock_popen.call_args.kwargs["stderr"] == subprocess.STDOUT

    def test_missing_executable_raises_os_error(self):
        with pytest.raises(FileNotFoundError):
            ProcessHandle.start(["/nonexistent/interpreter"])

    def test_bad_working_directory_raises_os_error(self, tmp_path):
        with pytest.raises(OSError):
            ProcessHandle.start([PYTHON, "-c", "pass"], cwd=str(tmp_path / "missing"))


class TestLifecycle:
    def test_exit_code_is_none_while_running(self, handles):
        handle = _start(handles, "import time; time.sleep(60)")
        assert handle.is_alive()
        assert handle.exit_code is None

    def test_wait_returns_exit_code(self, handles):
        handle = _start(handles, "raise SystemExit(3)")
        assert handle.wait(timeout=10) == 3
        assert handle.exit_code == 3
        assert not handle.is_alive()

    def test_destroy_terminates(self, handles):
        handle = _start(handles, "import time; time.sleep(60)")
        handle.destroy()
        assert handle.wait(timeout=10) != 0

    def test_destroy_forcibly_kills(self, handles):
        handle = _start(handles, "import time; time.sleep(60)")
        handle.destroy_forcibly()
        assert handle.wait(timeout=10) != 0

    def test_destroy_after_exit_is_a_no_op(self, handles):
        handle = _start(handles, "pass")
        assert handle.wait(timeout=10) == 0

        handle.destroy()
        handle.destroy()
        handle.destroy_forcibly()

        assert handle.exit_code == 0

    def test_streams(self, handles):
        handle = _start(handles, "import sys; print(sys.stdin.read().upper())")
        handle.stdin.write(b"hello")
        handle.stdin.close()
        assert handle.stdout.read().strip() == b"HELLO"
        assert handle.wait(timeout=10) == 0
        assert handle.stderr.read() == b""

    def test_merged_streams_have_no_stderr(self, handles):
        handle = _start(handles, "pass", redirect_error_stream=True)
        assert handle.stderr is None
        assert handle.stdout is not None

    def test_wait_timeout(self, handles):
        handle = _start(handles, "import time; time.sleep(60)")
        with pytest.raises(subprocess.TimeoutExpired):
            handle.wait(timeout=0.1)


def test_close_closes_all_pipes():
    popen = MagicMock()
    ProcessHandle(popen).close()
    popen.stdin.close.assert_called_once_with()
    popen.stdout.close.assert_called_once_with()
    popen.stderr.close.assert_called_once_with()
