"""
Compact single-line rendering through Python's format protocol.

Wrap any value in a ``Formatter`` and use it with ``format()``, f-strings or
``str.format``. The ``v`` verb (also the empty format spec) renders the value graph;
the ``+`` flag adds indirection chains and the ``#`` flag adds type annotations. Any
other format spec is passed unchanged to the wrapped value.

Examples:
    >>> f"{Formatter([1, None, 'a'])}"
    '[1 <nil> a]'
    >>> f"{Formatter({'k': 1.5}):#v}"
    '(dict)map[(str)k:(float)1.5]'
    >>> f"{Formatter(255):>6x}"
    '    ff'
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .common import (
    CYCLE_SHORT_MARKER,
    INVALID_MARKER,
    MAX_MARKER,
    NIL_MARKER,
    Renderer,
    format_chain,
)
from .cycles import CycleTracker
from .options import SpewOptions, resolve_options
from .pool import ResourcePool, cycle_trackers, text_buffers
from .shapes import Shape, Value, byte_buffer, child_of, classify, is_nil_pointer, value_of
from .utils import safe_repr, type_name

# Constants ------------------------------------------------------------------------------------------------------------

VERB = "v"
FLAGS = "+#"


# Classes --------------------------------------------------------------------------------------------------------------

class Formatter:
    """
    Format-protocol wrapper around a value.

    Recognized specs are ``v``, ``+v``, ``#v`` and ``#+v`` (flags in any order); the empty
    spec means ``v``. Width, precision and other flags before ``v`` are ignored.
    ``str()`` gives ``v`` and ``repr()`` gives ``#v``.

    Args:
        value: Any object, borrowed for the duration of each format call.
        opts: Render options; the shared default configuration when None.
    """

    __slots__ = ("value", "opts")

    def __init__(self, value: Any, opts: SpewOptions | None = None) -> None:
        self.value = value
        self.opts = resolve_options(opts)

    def __format__(self, spec: str) -> str:
        flags = parse_verb(spec)
        if flags is None:
            return format(self.value, spec)
        return render_compact(self.value, self.opts, show_types="#" in flags, show_pointers="+" in flags)

    def __str__(self) -> str:
        return self.__format__(VERB)

    def __repr__(self) -> str:
        return self.__format__("#" + VERB)


class FormatState(Renderer):
    """Per-call state of a compact render."""

    cycle_marker = CYCLE_SHORT_MARKER

    def __init__(self) -> None:
        super().__init__()
        self.show_types = False
        self.show_pointers = False

    def bind(self, sink, opts: SpewOptions, tracker: CycleTracker,
             show_types: bool = False, show_pointers: bool = False) -> None:
        super().bind(sink, opts, tracker)
        self.show_types = show_types
        self.show_pointers = show_pointers

    def reset(self) -> None:
        super().reset()
        self.show_types = False
        self.show_pointers = False

    def format_top(self, obj: Any) -> None:
        if obj is None:
            if self.show_types:
                self.write(f"({type_name(None)})")
            self.write(NIL_MARKER)
            return
        self.render(value_of(obj))

    def render(self, value: Value) -> None:
        shape = value.shape
        if shape is Shape.INVALID:
            self.write(INVALID_MARKER)
            self.ignore_next_type = False
            return
        if shape is Shape.POINTER:
            self.render_pointer(value)
            return

        if self.show_types and not self.ignore_next_type:
            self.write(f"({type_name(value.obj)})")
        self.ignore_next_type = False
        self.print_value(value)

    def render_pointer(self, value: Value) -> None:
        if is_nil_pointer(value.obj) and (not self.show_types or self.ignore_next_type):
            self.write(NIL_MARKER)
            self.ignore_next_type = False
            return

        target = self.deref_pointer(value)
        tracker = self.tracker
        nil_found = tracker.nil_found
        cycle_found = tracker.cycle_found

        if self.show_types and not self.ignore_next_type:
            stars = tracker.indirects + (1 if cycle_found else 0)
            self.write(f"({'*' * stars}{type_name(target)})")
        else:
            stars = tracker.indirects
            if cycle_found or (nil_found and classify(target) is Shape.POINTER):
                stars += 1
            self.write(f"<{'*' * stars}>")

        if self.show_pointers and tracker.chain:
            self.write(format_chain(tracker.chain))

        if nil_found:
            self.write(NIL_MARKER)
            self.ignore_next_type = False
        elif cycle_found:
            self.write(CYCLE_SHORT_MARKER)
            self.ignore_next_type = False
        else:
            self.ignore_next_type = True
            self.render(Value(target, classify(target), value.exported, indirect=True))

    def render_string(self, value: Value) -> None:
        self.write(str.__str__(value.obj))

    def render_bytes(self, value: Value) -> None:
        self.write("[")
        self.depth += 1
        try:
            if self.max_depth_exceeded():
                self.write(MAX_MARKER)
            else:
                with byte_buffer(value) as buf:
                    self.write(" ".join(str(b) for b in buf))
        finally:
            self.depth -= 1
            self.write("]")

    def render_sequence(self, value: Value, items: list) -> None:
        self._render_items("[", value, items, "]")

    def render_set(self, value: Value, items: list) -> None:
        self._render_items("set[", value, items, "]")

    def render_mapping(self, value: Value, items: list[tuple[Any, Any]]) -> None:
        self.write("map[")
        self.depth += 1
        if self.max_depth_exceeded():
            self.write(MAX_MARKER)
        else:
            for i, (k, v) in enumerate(items):
                if i > 0:
                    self.write(" ")
                self.render(child_of(value, k))
                self.write(":")
                self.render(child_of(value, v))
        self.depth -= 1
        self.write("]")

    def render_record(self, value: Value, fields: list[tuple[str, Any]]) -> None:
        show_names = self.show_pointers or self.show_types
        self.write("{")
        self.depth += 1
        if self.max_depth_exceeded():
            self.write(MAX_MARKER)
        else:
            for i, (name, v) in enumerate(fields):
                if i > 0:
                    self.write(" ")
                if show_names:
                    self.write(f"{name}:")
                self.render(child_of(value, v, name))
        self.depth -= 1
        self.write("}")

    def default_format(self, value: Value) -> str:
        if self.show_types:
            return safe_repr(value.obj)
        return format(value.obj, "")

    def _render_items(self, open_: str, value: Value, items: list, close: str) -> None:
        self.write(open_)
        self.depth += 1
        if self.max_depth_exceeded():
            self.write(MAX_MARKER)
        else:
            for i, item in enumerate(items):
                if i > 0:
                    self.write(" ")
                self.render(child_of(value, item))
        self.depth -= 1
        self.write(close)


# Methods --------------------------------------------------------------------------------------------------------------

def parse_verb(spec: str) -> str | None:
    """
    Return the flags of a compact-verb spec, or None if ``spec`` is some other format spec.

    Any spec ending in ``v`` is a compact verb; only the ``+`` and ``#`` flags are kept.

    Examples:
        >>> parse_verb("#+v"), parse_verb(""), parse_verb("-10v"), parse_verb(">10")
        ('#+', '', '', None)
    """
    if spec == "":
        return ""
    if not spec.endswith(VERB):
        return None
    return "".join(c for c in spec[:-1] if c in FLAGS)


def render_compact(
    obj: Any,
    opts: SpewOptions,
    show_types: bool = False,
    show_pointers: bool = False,
) -> str:
    """Render ``obj`` in compact form using pooled traversal state."""
    with _states.borrow() as state, cycle_trackers.borrow() as tracker, text_buffers.borrow() as buf:
        state.bind(buf, opts, tracker, show_types=show_types, show_pointers=show_pointers)
        try:
            state.format_top(obj)
        finally:
            state.reset()
        return buf.getvalue()


# Module state ---------------------------------------------------------------------------------------------------------

_states: ResourcePool[FormatState] = ResourcePool(FormatState, reset=FormatState.reset)
