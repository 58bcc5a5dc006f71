"""Start a program with AutoExit installed.

Children built with ``auto_exit`` run this module's ``main`` instead of their
own entry point. The real entry point is the first argument; the rest are
passed on to it.
"""

from pyprocesses import auto_exit
from pyprocesses.entry_points import resolve_entry_point
from pyprocesses.errors import MissingEntryPoint


def main(args: list[str]) -> None:
    """Install AutoExit, then run ``args[0]`` with ``args[1:]``.

    Whatever the entry point raises propagates unchanged.
    """
    auto_exit.install()

    if not args:
        raise MissingEntryPoint("No entry point provided.")

    entry_point = resolve_entry_point(args[0])
    entry_point(list(args[1:]))
