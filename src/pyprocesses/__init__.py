"""Launch child Python processes that never outlive their parent."""

__version__ = "0.1.0"

from pyprocesses.auto_exit import AutoExit
from pyprocesses.builder import PythonProcessBuilder, build_command
from pyprocesses.copiers import ByteCopier, LineCopier, start_copier
from pyprocesses.errors import CopyError, InvalidEntryPoint, MissingEntryPoint, ProcessesError
from pyprocesses.killer import AutoProcessKiller, ProcessKiller, default_killer
from pyprocesses.models import LaunchSpec
from pyprocesses.process import ProcessHandle

__all__ = [
    "AutoExit",
    "AutoProcessKiller",
    "ByteCopier",
    "CopyError",
    "InvalidEntryPoint",
    "LaunchSpec",
    "LineCopier",
    "MissingEntryPoint",
    "ProcessHandle",
    "ProcessKiller",
    "ProcessesError",
    "PythonProcessBuilder",
    "build_command",
    "default_killer",
    "start_copier",
]
