"""Child-side launcher behind ``python -m pyprocesses``.

Usage:
    python [flags] -m pyprocesses -cp CLASSPATH ENTRY_POINT [ARGS...]

Adds the classpath entries to ``sys.path``, resolves the entry point and
calls it with the remaining arguments.
"""

import argparse
import logging
import os
import sys

from pyprocesses import __version__
from pyprocesses.config import load_config
from pyprocesses.entry_points import resolve_entry_point
from pyprocesses.errors import InvalidEntryPoint

log = logging.getLogger("pyprocesses")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m pyprocesses",
        description="Run a Python entry point as the main program of this process",
        allow_abbrev=False,
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-cp",
        dest="classpath",
        default="",
        metavar="CLASSPATH",
        help=f"Entries to add to sys.path, separated by {os.pathsep!r}",
    )
    parser.add_argument(
        "entry_point",
        help="'module', 'module:qualname' or 'module.Class' to run",
    )
    parser.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        help="Arguments passed to the entry point",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse launcher options. Everything after the entry point is kept verbatim.

    argparse drops a ``--`` right after the entry point, so the entry point's
    arguments are split off before parsing.
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    index = _entry_point_index(argv)
    if index is None:
        return parser.parse_args(argv)
    args = parser.parse_args(argv[: index + 1])
    args.args = argv[index + 1 :]
    return args


def _entry_point_index(argv: list[str]) -> int | None:
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "-cp":
            i += 2
        elif arg.startswith("-") and arg != "-":
            i += 1
        else:
            return i
    return None


def extend_sys_path(classpath: str) -> list[str]:
    """Put classpath entries in front of ``sys.path``, keeping their order.

    Entries already on ``sys.path`` stay where they are. Returns the added ones.
    """
    added = [entry for entry in classpath.split(os.pathsep) if entry not in sys.path]
    added = list(dict.fromkeys(added))
    sys.path[:0] = added
    return added


_handler: logging.Handler | None = None


def configure_logging(level: str) -> None:
    """Send pyprocesses log records to stderr without touching the root logger."""
    global _handler
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter("%(name)s %(levelname)s: %(message)s"))
        log.addHandler(_handler)
    log.setLevel(level)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    config = load_config()
    configure_logging(config.log_level)

    added = extend_sys_path(args.classpath) if args.classpath else []
    log.debug("added %d sys.path entries", len(added))

    try:
        entry_point = resolve_entry_point(args.entry_point)
    except InvalidEntryPoint as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    log.debug("running %s with %d argument(s)", args.entry_point, len(args.args))
    entry_point(args.args)
    return 0


def entrypoint() -> None:
    raise SystemExit(main())
