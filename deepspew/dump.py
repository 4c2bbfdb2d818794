"""
Verbose multi-line rendering with type annotations.

Every value is annotated with its type, containers with their length (and capacity for
types that over-allocate), indirections with their identity chain. Byte buffers are
shown as a hex dump.

Example output of ``sdump({"a": (1, 2)})``::

    (dict) (len=1) {
     (str) (len=1) 'a': (tuple) (len=2) {
      (int) 1,
      (int) 2
     }
    }
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .common import (
    CYCLE_MARKER,
    INVALID_MARKER,
    MAX_DEPTH_MARKER,
    NIL_MARKER,
    Renderer,
    format_chain,
)
from .hexdump import hex_dump
from .options import SpewOptions, resolve_options
from .pool import ResourcePool, cycle_trackers, text_buffers
from .shapes import (
    Shape,
    Value,
    byte_buffer,
    capacity_of,
    child_of,
    classify,
    has_length,
    length_of,
    value_of,
)
from .utils import type_name


# Classes --------------------------------------------------------------------------------------------------------------

class Dumper(Renderer):
    """Per-call state of a verbose render."""

    cycle_marker = CYCLE_MARKER

    def __init__(self) -> None:
        super().__init__()
        self.ignore_next_indent = False

    def reset(self) -> None:
        super().reset()
        self.ignore_next_indent = False

    def indent(self) -> None:
        """Write the indentation of the current depth, unless a parent already did."""
        if self.ignore_next_indent:
            self.ignore_next_indent = False
            return
        self.write(self.opts.indent * self.depth)

    def dump_top(self, obj: Any) -> None:
        self.depth = 0
        self.ignore_next_type = False
        self.ignore_next_indent = False
        self.tracker.pointers.clear()
        self.render(value_of(obj))
        self.write("\n")

    def render(self, value: Value) -> None:
        shape = value.shape
        if shape is Shape.INVALID:
            self.write(INVALID_MARKER)
            self.ignore_next_type = False
            self.ignore_next_indent = False
            return
        if shape is Shape.POINTER:
            self.indent()
            self.render_pointer(value)
            return

        if not self.ignore_next_type:
            self.indent()
            self.write(f"({type_name(value.obj)}) ")
        self.ignore_next_type = False

        if has_length(shape):
            self._write_len_cap(value)
        self.print_value(value)

    def render_pointer(self, value: Value) -> None:
        target = self.deref_pointer(value)
        tracker = self.tracker
        stars = tracker.indirects + (1 if tracker.cycle_found else 0)
        self.write(f"({'*' * stars}{type_name(target)})")

        if not self.opts.disable_pointer_addresses and tracker.chain:
            self.write(format_chain(tracker.chain))

        self.write("(")
        if tracker.nil_found:
            self.write(NIL_MARKER)
        elif tracker.cycle_found:
            self.write(CYCLE_MARKER)
        else:
            self.ignore_next_type = True
            self.render(Value(target, classify(target), value.exported, indirect=True))
        self.write(")")

    def render_boxed_content(self, content: Value) -> None:
        # The box annotation already opened the line
        self.ignore_next_indent = True
        super().render_boxed_content(content)

    def render_string(self, value: Value) -> None:
        self.write(str.__repr__(value.obj))

    def render_bytes(self, value: Value) -> None:
        self.write("{\n")
        self.depth += 1
        try:
            if self.max_depth_exceeded():
                self.indent()
                self.write(MAX_DEPTH_MARKER)
            else:
                with byte_buffer(value) as buf:
                    if len(buf):
                        hex_dump(self.sink, buf, self.opts.indent * self.depth)
        finally:
            self.depth -= 1
        self.indent()
        self.write("}")

    def render_sequence(self, value: Value, items: list) -> None:
        self._render_entries(value, items, self._render_item)

    def render_set(self, value: Value, items: list) -> None:
        self._render_entries(value, items, self._render_item)

    def render_mapping(self, value: Value, items: list[tuple[Any, Any]]) -> None:
        self._render_entries(value, items, self._render_pair)

    def render_record(self, value: Value, fields: list[tuple[str, Any]]) -> None:
        self._render_entries(value, fields, self._render_field)

    # Private Methods ------------------------------

    def _write_len_cap(self, value: Value) -> None:
        length = length_of(value)
        capacity = 0 if self.opts.disable_capacities else capacity_of(value)
        if length == 0 and capacity == 0:
            return
        parts = []
        if length:
            parts.append(f"len={length}")
        if capacity:
            parts.append(f"cap={capacity}")
        self.write(f"({' '.join(parts)}) ")

    def _render_entries(self, value: Value, entries: list, render_entry) -> None:
        self.write("{\n")
        self.depth += 1
        if self.max_depth_exceeded():
            self.indent()
            self.write(MAX_DEPTH_MARKER)
        else:
            last = len(entries) - 1
            for i, entry in enumerate(entries):
                render_entry(value, entry)
                self.write(",\n" if i < last else "\n")
        self.depth -= 1
        self.indent()
        self.write("}")

    def _render_item(self, parent: Value, item: Any) -> None:
        self.render(child_of(parent, item))

    def _render_pair(self, parent: Value, pair: tuple[Any, Any]) -> None:
        key, val = pair
        self.render(child_of(parent, key))
        self.write(": ")
        self.ignore_next_indent = True
        self.render(child_of(parent, val))

    def _render_field(self, parent: Value, field: tuple[str, Any]) -> None:
        name, val = field
        self.indent()
        self.write(f"{name}: ")
        self.ignore_next_indent = True
        self.render(child_of(parent, val, name))


# Methods --------------------------------------------------------------------------------------------------------------

def fdump(sink, *args: Any, opts: SpewOptions | None = None) -> None:
    """
    Write the verbose rendering of each argument to ``sink``, one per line.

    Args:
        sink: Any object with a ``write(str)`` method.
        *args: Values to render.
        opts: Render options; the shared default configuration when None.
    """
    opts = resolve_options(opts)
    with _dumpers.borrow() as dumper, cycle_trackers.borrow() as tracker:
        dumper.bind(sink, opts, tracker)
        try:
            for arg in args:
                dumper.dump_top(arg)
        finally:
            dumper.reset()


def sdump(*args: Any, opts: SpewOptions | None = None) -> str:
    """
    Return the verbose rendering of the arguments as a string.

    Examples:
        >>> sdump(None)
        '(NoneType) <nil>\\n'
        >>> print(sdump((1, "a")), end="")
        (tuple) (len=2) {
         (int) 1,
         (str) (len=1) 'a'
        }
    """
    with text_buffers.borrow() as buf:
        fdump(buf, *args, opts=opts)
        return buf.getvalue()


# Module state ---------------------------------------------------------------------------------------------------------

_dumpers: ResourcePool[Dumper] = ResourcePool(Dumper, reset=Dumper.reset)
