"""
Classic offset / hex / ASCII rendering of byte buffers.

Output mirrors ``hexdump -C``: 16 bytes per line, an 8-digit offset, hex pairs with an
extra gap after the 8th byte and the printable ASCII column between bars.

    00000000  48 65 6c 6c 6f 2c 20 77  6f 72 6c 64 21 0a 00 ff  |Hello, world!...|
"""

# Standard library -----------------------------------------------------------------------------------------------------
import io

from typing import Any, Protocol

# Local ----------------------------------------------------------------------------------------------------------------
from .pool import ResourcePool
from .utils import fmt_type

# Constants ------------------------------------------------------------------------------------------------------------

BYTES_PER_LINE = 16

# Printable ASCII column, everything outside 0x20..0x7E becomes '.'
_ASCII = "".join(chr(b) if 0x20 <= b <= 0x7E else "." for b in range(256))


# Classes --------------------------------------------------------------------------------------------------------------

class TextSink(Protocol):
    def write(self, s: str, /) -> Any: ...


class HexDumper:
    """
    Streaming hex renderer writing to a text sink.

    Data may be fed in any number of ``write()`` calls; offsets and line breaks continue
    across calls. ``close()`` pads and terminates a partial last line.

    Args:
        sink: Any object with a ``write(str)`` method.
        indent: Text written at the start of every line.

    Raises:
        ValueError: On ``write()`` after ``close()``.

    Examples:
        >>> buf = io.StringIO()
        >>> with HexDumper(buf) as h:
        ...     h.write(b"AB")
        2
        >>> buf.getvalue()
        '00000000  41 42                                             |AB|\\n'
    """

    __slots__ = ("sink", "indent", "_right", "_used", "_total", "_closed")

    def __init__(self, sink: TextSink | None = None, indent: str = "") -> None:
        self.reset(sink, indent)

    def __enter__(self) -> "HexDumper":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def reset(self, sink: TextSink | None = None, indent: str = "") -> None:
        """Rebind to a new sink and clear offsets, used when reusing a pooled dumper."""
        self.sink = sink
        self.indent = indent
        self._right: list[str] = []
        self._used = 0
        self._total = 0
        self._closed = False

    def write(self, data: bytes | bytearray | memoryview) -> int:
        """
        Render ``data`` and return the number of bytes consumed.

        Raises:
            ValueError: If the dumper is closed.
            TypeError: If ``data`` does not expose a byte buffer.
        """
        if self._closed:
            raise ValueError("write to closed HexDumper")
        try:
            view = memoryview(data).cast("B")
        except TypeError as e:
            raise TypeError(f"data must support the buffer protocol, but found {fmt_type(data)}") from e

        out = []
        with view:
            for b in view:
                if self._used == 0:
                    out.append(f"{self.indent}{self._total & 0xFFFFFFFF:08x}  ")
                if self._used == 7:
                    out.append(f"{b:02x}  ")
                elif self._used == 15:
                    out.append(f"{b:02x}  |")
                else:
                    out.append(f"{b:02x} ")
                self._right.append(_ASCII[b])
                self._used += 1
                self._total += 1
                if self._used == BYTES_PER_LINE:
                    out.append("".join(self._right))
                    out.append("|\n")
                    self._right.clear()
                    self._used = 0
            count = len(view)
        self.sink.write("".join(out))
        return count

    def close(self) -> None:
        """Pad and finish the last partial line. Calling it twice is a no-op."""
        if self._closed:
            return
        self._closed = True
        if self._used == 0:
            return

        out = []
        for used in range(self._used, BYTES_PER_LINE):
            if used == 7:
                out.append("    ")
            elif used == 15:
                out.append("    |")
            else:
                out.append("   ")
        out.append("".join(self._right))
        out.append("|\n")
        self._right.clear()
        self.sink.write("".join(out))


# Methods --------------------------------------------------------------------------------------------------------------

def hex_dump(sink: TextSink, data: bytes | bytearray | memoryview, indent: str = "") -> None:
    """Write the full hex rendering of ``data`` to ``sink``, every line prefixed by ``indent``."""
    with _dumpers.borrow() as h:
        h.sink = sink
        h.indent = indent
        try:
            h.write(data)
            h.close()
        finally:
            h.sink = None


def sdump_hex(data: bytes | bytearray | memoryview, indent: str = "") -> str:
    """
    Return the hex rendering of ``data`` as a string.

    Examples:
        >>> print(sdump_hex(b"spew"), end="")
        00000000  73 70 65 77                                       |spew|
    """
    buf = io.StringIO()
    hex_dump(buf, data, indent)
    return buf.getvalue()


# Module state ---------------------------------------------------------------------------------------------------------

_dumpers: ResourcePool[HexDumper] = ResourcePool(HexDumper, reset=HexDumper.reset)
