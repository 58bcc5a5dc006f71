"""Exceptions raised by pyprocesses."""


class ProcessesError(Exception):
    """Base class for pyprocesses errors."""


class InvalidEntryPoint(ProcessesError, ValueError):
    """The entry point cannot be resolved or does not look like a main function."""


class MissingEntryPoint(ProcessesError, ValueError):
    """No entry point name was given to the auto-exit trampoline."""


class CopyError(ProcessesError, OSError):
    """Copying a stream failed on a background thread."""
