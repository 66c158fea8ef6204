"""Byte-stream fan-out and copy helpers."""

from __future__ import annotations

from typing import IO, Protocol


class ByteSink(Protocol):
    """Anything accepting ``write(bytes)``."""

    def write(self, data: bytes) -> int:
        """Consume one chunk."""


class FanOutWriter:
    """Write every chunk to each sink, in order, exactly once."""

    def __init__(self, *sinks: ByteSink) -> None:
        self._sinks = sinks

    def write(self, data: bytes) -> int:
        for sink in self._sinks:
            sink.write(data)
        return len(data)


def copy_stream(source: IO[bytes], sink: ByteSink, *, chunk_size: int) -> int:
    """Copy ``source`` into ``sink`` until exhaustion and return the byte count."""
    total = 0
    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            return total
        sink.write(chunk)
        total += len(chunk)
