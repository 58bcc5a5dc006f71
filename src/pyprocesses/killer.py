"""Terminate child processes when this interpreter shuts down.

``ProcessKiller`` is a plain callable that can be hooked into any shutdown
mechanism; ``AutoProcessKiller`` hooks itself into ``atexit``. Exit hooks do
not run when the interpreter dies from SIGKILL or leaves through
``os._exit``, so children that must never outlive their parent should also
run with AutoExit.
"""

from __future__ import annotations

import atexit
import logging
import signal
import threading
from types import FrameType
from typing import Protocol

from pyprocesses.config import load_config

log = logging.getLogger(__name__)


class Destroyable(Protocol):
    def destroy(self) -> None: ...

    def is_alive(self) -> bool: ...


class ProcessKiller:
    """Destroys a list of processes, once, when called."""

    def __init__(self) -> None:
        self._processes: list[Destroyable] = []
        self._lock = threading.Lock()
        self._ran = False

    @property
    def processes(self) -> list[Destroyable]:
        """Snapshot of the registered processes, in registration order."""
        with self._lock:
            return list(self._processes)

    def add(self, process: Destroyable) -> None:
        """Register ``process``. Processes that already ended are dropped."""
        with self._lock:
            self._processes = [p for p in self._processes if p.is_alive()]
            self._processes.append(process)

    def run(self) -> None:
        with self._lock:
            if self._ran:
                return
            self._ran = True
            processes = list(self._processes)
        log.debug("destroying %d registered process(es)", len(processes))
        for process in processes:
            try:
                process.destroy()
            except Exception:
                # The interpreter is exiting; keep going with the rest.
                log.debug("failed to destroy %r", process, exc_info=True)

    __call__ = run


class AutoProcessKiller(ProcessKiller):
    """A ProcessKiller that runs as an ``atexit`` hook.

    Every instance registers its own hook. With ``handle_signals`` (default:
    ``PYPROCESSES_HANDLE_SIGTERM``) SIGTERM is turned into a normal exit so
    the hook also runs when the parent is terminated from outside.
    """

    def __init__(self, handle_signals: bool | None = None) -> None:
        super().__init__()
        if handle_signals is None:
            handle_signals = load_config().handle_sigterm
        atexit.register(self.run)
        if handle_signals:
            install_sigterm_handler()

    def unregister(self) -> None:
        """Remove the ``atexit`` hook without running it."""
        atexit.unregister(self.run)


def install_sigterm_handler() -> bool:
    """Make SIGTERM raise SystemExit so ``atexit`` hooks run.

    Only possible on the main thread, and only when SIGTERM still has its
    default disposition. Returns whether the handler was installed.
    """
    if threading.current_thread() is not threading.main_thread():
        log.debug("not on the main thread, SIGTERM handler not installed")
        return False
    if signal.getsignal(signal.SIGTERM) is not signal.SIG_DFL:
        return False
    signal.signal(signal.SIGTERM, _exit_on_signal)
    log.debug("SIGTERM handler installed")
    return True


def _exit_on_signal(signum: int, frame: FrameType | None) -> None:
    raise SystemExit(128 + signum)


_default_killer: AutoProcessKiller | None = None
_default_lock = threading.Lock()


def default_killer() -> AutoProcessKiller:
    """The process-wide killer behind ``PythonProcessBuilder.kill_on_shutdown``."""
    global _default_killer
    with _default_lock:
        if _default_killer is None:
            _default_killer = AutoProcessKiller()
        return _default_killer
