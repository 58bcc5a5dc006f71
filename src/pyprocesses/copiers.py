"""Copy a child's output somewhere else on a background thread.

Each copier can be called directly (``call()``, raises OSError) or used as a
thread target (``run()``, raises CopyError).
"""

import io
import os
import threading
from typing import IO, Protocol

from pyprocesses.errors import CopyError

CHUNK_SIZE = 8192


class Copier(Protocol):
    def call(self) -> None: ...

    def run(self) -> None: ...


class ByteCopier:
    """Copies all bytes from a binary stream to another until end of stream."""

    def __init__(self, source: IO[bytes], sink: IO[bytes], chunk_size: int = CHUNK_SIZE) -> None:
        self._source = source
        self._sink = sink
        self._chunk_size = chunk_size

    def call(self) -> None:
        while chunk := self._source.read(self._chunk_size):
            self._sink.write(chunk)
            self._sink.flush()

    def run(self) -> None:
        try:
            self.call()
        except OSError as e:
            raise CopyError(f"copying bytes failed: {e}") from e


class LineCopier:
    """Copies text line by line, ending every line with ``os.linesep``.

    A binary source is decoded with ``encoding`` (default: the locale's); bytes
    that do not decode are replaced with U+FFFD.
    """

    def __init__(
        self,
        source: IO[str] | IO[bytes],
        sink: IO[str],
        encoding: str | None = None,
    ) -> None:
        if isinstance(source, io.TextIOBase):
            self._source = source
        else:
            self._source = io.TextIOWrapper(source, encoding=encoding, errors="replace")
        self._sink = sink

    def call(self) -> None:
        for line in self._source:
            self._sink.write(line.rstrip("\r\n"))
            self._sink.write(os.linesep)
            self._sink.flush()

    def run(self) -> None:
        try:
            self.call()
        except OSError as e:
            raise CopyError(f"copying lines failed: {e}") from e


def start_copier(copier: Copier, name: str | None = None) -> threading.Thread:
    """Run ``copier`` on a new daemon thread and return the thread."""
    thread = threading.Thread(target=copier.run, name=name, daemon=True)
    thread.start()
    return thread
