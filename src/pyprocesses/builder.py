"""Build command lines for child Python processes and start them.

By default a child runs on the interpreter, module search path and
interpreter flags of the current process. Those defaults are captured when a
builder is created; later changes to ``sys.path`` do not affect it.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from collections.abc import Iterable
from typing import Any

from pyprocesses import auto_exit_program
from pyprocesses.config import load_config
from pyprocesses.entry_points import entry_point_name
from pyprocesses.errors import InvalidEntryPoint
from pyprocesses.killer import default_killer
from pyprocesses.models import LaunchSpec
from pyprocesses.process import ProcessHandle

log = logging.getLogger(__name__)

LAUNCHER_MODULE = "pyprocesses"
CLASSPATH_OPTION = "-cp"
AUTO_EXIT_PROGRAM = auto_exit_program.__name__


def build_command(spec: LaunchSpec) -> list[str]:
    """Return the command line that starts ``spec``.

    Interpreter flags must precede ``-m``; ``-cp`` is read by the launcher.
    """
    command = [
        spec.interpreter,
        *spec.vm_args,
        "-m",
        LAUNCHER_MODULE,
        CLASSPATH_OPTION,
        spec.classpath,
    ]
    if spec.auto_exit:
        command.append(AUTO_EXIT_PROGRAM)
    command.append(spec.entry_point)
    command.extend(spec.args)
    return command


def current_classpath() -> str:
    return os.pathsep.join(sys.path)


def current_vm_args() -> list[str]:
    """Interpreter flags of the running process, such as ``-O`` or ``-X dev``."""
    return subprocess._args_from_interpreter_flags()


def _require(value: Any, name: str) -> Any:
    if value is None:
        raise TypeError(f"{name} must not be None")
    return value


class PythonProcessBuilder:
    """Configure and start a Python program in a child process.

    ``main`` is the program's entry point: a function taking the argument
    list, a class with a static ``main`` method or a module with a ``main``
    function. Those are checked right away and InvalidEntryPoint is raised if
    they cannot serve as an entry point. ``main`` may also be an entry-point
    name such as ``"package.module:function"``, which is not checked; use
    this for programs that are not importable in the current process.

    ``args`` is not copied. Later changes to the list show up in the builder
    but never in commands or processes built before.
    """

    def __init__(self, main: Any, args: list[str] | None = None) -> None:
        if isinstance(main, str):
            if not main.strip():
                raise InvalidEntryPoint("No entry point provided.")
            self._entry_point = main
        else:
            self._entry_point = entry_point_name(main)
        self._args = args if args is not None else []

        config = load_config()
        self._interpreter: str = config.interpreter or sys.executable
        self._classpath = current_classpath()
        self._vm_args = current_vm_args()
        self._auto_exit = False
        self._kill_on_shutdown = False
        self._redirect_error_stream = False
        self._cwd: str | None = None

    @property
    def entry_point(self) -> str:
        return self._entry_point

    @property
    def args(self) -> list[str]:
        """The argument list itself, not a copy."""
        return self._args

    @property
    def interpreter(self) -> str:
        """Python executable of the child. Defaults to ``sys.executable``."""
        return self._interpreter

    @interpreter.setter
    def interpreter(self, path: str) -> None:
        self._interpreter = _require(path, "interpreter")

    @property
    def classpath(self) -> str:
        """``os.pathsep``-separated entries the child adds to its ``sys.path``."""
        return self._classpath

    @classpath.setter
    def classpath(self, classpath: str) -> None:
        self._classpath = _require(classpath, "classpath")

    def add_classpath(self, entry: str) -> None:
        _require(entry, "entry")
        if self._classpath:
            self._classpath += os.pathsep + entry
        else:
            self._classpath = entry

    @property
    def vm_args(self) -> list[str]:
        """Copy of the interpreter flags passed to the child."""
        return list(self._vm_args)

    @vm_args.setter
    def vm_args(self, flags: Iterable[str]) -> None:
        self._vm_args = list(_require(flags, "vm_args"))

    def add_vm_args(self, *flags: str) -> None:
        self._vm_args.extend(flags)

    @property
    def auto_exit(self) -> bool:
        """Start the child through the AutoExit trampoline."""
        return self._auto_exit

    @auto_exit.setter
    def auto_exit(self, enabled: bool) -> None:
        self._auto_exit = bool(enabled)

    @property
    def kill_on_shutdown(self) -> bool:
        """Register started children with the default AutoProcessKiller."""
        return self._kill_on_shutdown

    @kill_on_shutdown.setter
    def kill_on_shutdown(self, enabled: bool) -> None:
        self._kill_on_shutdown = bool(enabled)

    @property
    def redirect_error_stream(self) -> bool:
        """Merge the child's stderr into its stdout."""
        return self._redirect_error_stream

    @redirect_error_stream.setter
    def redirect_error_stream(self, enabled: bool) -> None:
        self._redirect_error_stream = bool(enabled)

    @property
    def cwd(self) -> str | None:
        """Working directory of the child. None means the current one."""
        return self._cwd

    @cwd.setter
    def cwd(self, path: str | os.PathLike[str] | None) -> None:
        self._cwd = os.fspath(path) if path is not None else None

    def spec(self) -> LaunchSpec:
        """Snapshot of the current configuration."""
        return LaunchSpec(
            interpreter=self._interpreter,
            classpath=self._classpath,
            vm_args=tuple(self._vm_args),
            entry_point=self._entry_point,
            args=tuple(self._args),
            auto_exit=self._auto_exit,
        )

    def command(self) -> list[str]:
        return build_command(self.spec())

    def start(self) -> ProcessHandle:
        """Start a child process with the current configuration.

        OSError from process creation (missing interpreter, bad working
        directory, ...) propagates unchanged.
        """
        process = ProcessHandle.start(
            self.command(),
            cwd=self._cwd,
            redirect_error_stream=self._redirect_error_stream,
        )
        if self._kill_on_shutdown:
            default_killer().add(process)
            log.debug("pid %d will be killed on shutdown", process.pid)
        return process
