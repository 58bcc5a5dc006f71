"""Handles for started child processes."""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence
from typing import IO

log = logging.getLogger(__name__)


class ProcessHandle:
    """A child process started with piped standard streams.

    ``stdin``, ``stdout`` and ``stderr`` are binary pipes; ``stderr`` is
    ``None`` when the error stream is merged into ``stdout``. A child running
    with AutoExit stays alive only while ``stdin`` is open on this side, so do
    not close it early.
    """

    def __init__(self, popen: subprocess.Popen[bytes]) -> None:
        self._popen = popen

    @classmethod
    def start(
        cls,
        command: Sequence[str],
        cwd: str | None = None,
        redirect_error_stream: bool = False,
    ) -> ProcessHandle:
        """Start ``command``. OSError from process creation is not caught."""
        command = list(command)
        popen = subprocess.Popen(
            command,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if redirect_error_stream else subprocess.PIPE,
            cwd=cwd,
        )
        log.debug("started pid %d: %s", popen.pid, shlex.join(command))
        return cls(popen)

    @property
    def pid(self) -> int:
        return self._popen.pid

    @property
    def stdin(self) -> IO[bytes] | None:
        return self._popen.stdin

    @property
    def stdout(self) -> IO[bytes] | None:
        return self._popen.stdout

    @property
    def stderr(self) -> IO[bytes] | None:
        return self._popen.stderr

    @property
    def exit_code(self) -> int | None:
        """Exit status, or None while the process runs. Negative for signals."""
        return self._popen.poll()

    def is_alive(self) -> bool:
        return self._popen.poll() is None

    def wait(self, timeout: float | None = None) -> int:
        """Wait for the process to end and return its exit status.

        Raises subprocess.TimeoutExpired when ``timeout`` elapses first.
        """
        return self._popen.wait(timeout)

    def destroy(self) -> None:
        """Ask the process to terminate (SIGTERM). No-op once it has ended."""
        if self._popen.poll() is not None:
            return
        log.debug("terminating pid %d", self.pid)
        self._popen.terminate()

    def destroy_forcibly(self) -> None:
        """Kill the process (SIGKILL). No-op once it has ended."""
        if self._popen.poll() is not None:
            return
        log.debug("killing pid %d", self.pid)
        self._popen.kill()

    def close(self) -> None:
        """Close this side of the standard stream pipes."""
        for stream in (self._popen.stdin, self._popen.stdout, self._popen.stderr):
            if stream is not None:
                stream.close()

    def __repr__(self) -> str:
        state = "alive" if self.is_alive() else f"exit_code={self.exit_code}"
        return f"<ProcessHandle pid={self.pid} {state}>"
