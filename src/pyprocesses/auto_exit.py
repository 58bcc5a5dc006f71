"""Shut a child interpreter down when its parent process goes away.

A parent that starts its children through ``ProcessHandle`` keeps the write
end of each child's stdin pipe open for as long as it lives. When the parent
dies, by any means including SIGKILL, the operating system closes that end
and a blocking read on the child's stdin returns end of stream. ``AutoExit``
waits for exactly that on a daemon thread and then ends the child.

Do not use it in programs that read standard input for anything else.
"""

from __future__ import annotations

import atexit
import logging
import os
import sys
import threading
from collections.abc import Callable

log = logging.getLogger(__name__)

STDIN_FD = 0
READ_SIZE = 4096
EXIT_STATUS = 0


def run_exit_hooks() -> None:
    """Run and clear the ``atexit`` hooks registered so far."""
    atexit._run_exitfuncs()


def terminate_process(status: int = EXIT_STATUS) -> None:
    """End the whole process from any thread, running exit hooks first."""
    try:
        run_exit_hooks()
        for stream in (sys.stdout, sys.stderr):
            if stream is None:
                continue
            try:
                stream.flush()
            except (OSError, ValueError):
                pass
    finally:
        os._exit(status)


class AutoExit(threading.Thread):
    """Daemon thread that exits the process once ``fd`` reaches end of stream.

    Data read from ``fd`` is logged as a warning and reading continues. A read
    error counts as end of stream: a spurious exit is preferable to an
    orphaned child.
    """

    def __init__(
        self,
        fd: int = STDIN_FD,
        on_exit: Callable[[int], None] = terminate_process,
    ) -> None:
        super().__init__(name="pyprocesses-auto-exit", daemon=True)
        self._fd = fd
        self._on_exit = on_exit

    @classmethod
    def install(cls) -> AutoExit:
        """Start a new probe on standard input. Every call starts another one."""
        probe = cls()
        probe.start()
        return probe

    def run(self) -> None:
        try:
            while True:
                data = os.read(self._fd, READ_SIZE)
                if not data:
                    log.debug("fd %d reached end of stream, parent is gone", self._fd)
                    break
                log.warning(
                    "Standard input returned %d byte(s) of data. AutoExit should not "
                    "be used if standard input is used for anything other than "
                    "automatic shutdown.",
                    len(data),
                )
        except (OSError, ValueError) as e:
            log.debug("reading fd %d failed (%s), assuming parent is gone", self._fd, e)
        self._on_exit(EXIT_STATUS)


def install() -> AutoExit:
    """Shortcut for ``AutoExit.install()``."""
    return AutoExit.install()
