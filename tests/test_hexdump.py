#
# Deepspew - Hex Dump Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import array
import io

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from deepspew import hexdump
from deepspew.hexdump import HexDumper, hex_dump, sdump_hex

# Constants ------------------------------------------------------------------------------------------------------------

LINE_0_15 = "00000000  00 01 02 03 04 05 06 07  08 09 0a 0b 0c 0d 0e 0f  |................|\n"


# Tests ----------------------------------------------------------------------------------------------------------------

class TestSdumpHex:
    def test_full_line(self):
        """Sixteen non-printable bytes give one full line."""
        assert sdump_hex(bytes(range(16))) == LINE_0_15

    def test_padded_second_line(self):
        """A 17th byte starts a second line padded to the ASCII column."""
        out = sdump_hex(bytes(range(17)))
        assert out == LINE_0_15 + "00000010  10" + " " * 48 + "|.|\n"

    def test_lines_align(self):
        """Every line has the same width up to the ASCII column."""
        lines = sdump_hex(bytes(range(20))).splitlines()
        assert [line.index("|") for line in lines] == [60, 60]

    @pytest.mark.parametrize(
        "data, expected",
        [
            pytest.param(b"Hello", "00000000  48 65 6c 6c 6f" + " " * 36 + "|Hello|\n", id="printable"),
            pytest.param(b"\x1f\x20\x7e\x7f", "00000000  1f 20 7e 7f" + " " * 39 + "|. ~.|\n", id="ascii-bounds"),
            pytest.param(b"", "", id="empty"),
        ],
    )
    def test_ascii_column(self, data, expected):
        assert sdump_hex(data) == expected

    @pytest.mark.parametrize(
        "data",
        [
            pytest.param(bytearray(b"spew"), id="bytearray"),
            pytest.param(memoryview(b"spew"), id="memoryview"),
            pytest.param(array.array("B", b"spew"), id="array"),
        ],
    )
    def test_buffer_types(self, data):
        """Anything exposing a byte buffer renders like bytes."""
        assert sdump_hex(data) == sdump_hex(b"spew")

    def test_indent(self):
        out = sdump_hex(bytes(range(17)), indent="  ")
        lines = out.splitlines()
        assert len(lines) == 2
        assert all(line.startswith("  0000") for line in lines)


class TestHexDumper:
    def test_streaming_writes(self):
        """Offsets and line breaks continue across write() calls."""
        buf = io.StringIO()
        h = HexDumper(buf)
        assert h.write(b"\x00" * 10) == 10
        assert h.write(b"\x00" * 10) == 10
        h.close()
        assert buf.getvalue() == sdump_hex(b"\x00" * 20)

    def test_close_idempotent(self):
        buf = io.StringIO()
        h = HexDumper(buf)
        h.write(b"ab")
        h.close()
        first = buf.getvalue()
        h.close()
        assert buf.getvalue() == first
        assert h.closed

    def test_write_after_close(self):
        h = HexDumper(io.StringIO())
        h.close()
        with pytest.raises(ValueError, match=r"(?i)closed"):
            h.write(b"x")

    def test_context_manager(self):
        buf = io.StringIO()
        with HexDumper(buf) as h:
            h.write(b"A")
        assert h.closed
        assert buf.getvalue().endswith("|A|\n")

    def test_not_a_buffer(self):
        with pytest.raises(TypeError, match=r"(?i)buffer"):
            HexDumper(io.StringIO()).write("text")

    def test_hex_dump_to_sink(self, sink):
        hex_dump(sink, bytes(range(16)))
        hex_dump(sink, bytes(range(16)))
        assert sink.getvalue() == LINE_0_15 * 2

    def test_pooled_dumper_reset_on_acquire(self, sink):
        """A dumper returned to the pool mid-line starts clean on the next call."""
        stale = hexdump._dumpers.acquire()
        stale.reset(io.StringIO())
        stale.write(b"xyz")
        hexdump._dumpers.release(stale)

        hex_dump(sink, b"A")
        assert sink.getvalue() == "00000000  41" + " " * 48 + "|A|\n"
        assert stale.sink is None
