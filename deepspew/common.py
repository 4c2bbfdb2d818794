"""
Traversal shared by the compact formatter and the verbose dumper.

``Renderer`` owns the per-call traversal state and the shape dispatch. Subclasses only
decide how each shape looks: brackets, separators, annotations and markers.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .cycles import CycleTracker
from .methods import handle_methods, panic_text
from .options import SpewOptions
from .sentinels import DANGLING
from .shapes import (
    Shape,
    Value,
    address_of,
    child_of,
    classify,
    deref,
    identity_of,
    mapping_items,
    record_fields,
    sequence_items,
    unbox,
)
from .sorting import sort_values

# Constants ------------------------------------------------------------------------------------------------------------

NIL_MARKER = "<nil>"
INVALID_MARKER = "<invalid>"
MAX_MARKER = "<max>"
MAX_DEPTH_MARKER = "<max depth reached>\n"
CYCLE_MARKER = "<already shown>"
CYCLE_SHORT_MARKER = "<shown>"
POINTER_CHAIN_SEP = "->"

_SCALAR_SHAPES = frozenset({Shape.BOOL, Shape.INT, Shape.FLOAT, Shape.COMPLEX})
_ADDRESS_SHAPES = frozenset({Shape.UINTPTR, Shape.FUNC, Shape.CHAN})
_NO_METHOD_SHAPES = frozenset({Shape.INVALID, Shape.NIL, Shape.POINTER, Shape.BOXED})


# Methods --------------------------------------------------------------------------------------------------------------

def format_number(obj: Any, shape: Shape) -> str:
    """
    Canonical text of a bool, int, float or complex.

    Floats use the shortest repr that round-trips. Complex numbers are written as
    ``(re+imi)`` with float components.

    Examples:
        >>> format_number(complex(1, -2), Shape.COMPLEX)
        '(1.0-2.0i)'
    """
    if shape is Shape.BOOL:
        return "True" if obj else "False"
    if shape is Shape.INT:
        try:
            return int.__repr__(obj)
        except ValueError:
            # Exceeds the int->str digit limit; hex has none
            return f"{int(obj):#x}"
    if shape is Shape.FLOAT:
        return float.__repr__(obj)
    real = float.__repr__(obj.real)
    imag = float.__repr__(obj.imag)
    sign = "" if imag.startswith("-") else "+"
    return f"({real}{sign}{imag}i)"


def format_address(addr: int) -> str:
    """``0x``-prefixed lowercase hex, or ``<nil>`` for 0."""
    if addr == 0:
        return NIL_MARKER
    return f"0x{addr:x}"


def format_chain(chain: list[int]) -> str:
    """Parenthesized identity chain, e.g. ``(0x10->0x20)``."""
    return "(" + POINTER_CHAIN_SEP.join(format_address(a) for a in chain) + ")"


# Classes --------------------------------------------------------------------------------------------------------------

class Renderer:
    """
    Base of the rendering strategies.

    A renderer is bound to a sink, options and a cycle tracker for the duration of one
    top-level call, then reset and returned to its pool.

    Subclasses implement ``render`` (entry for one value, including annotations),
    ``render_pointer`` and the per-shape hooks called from ``print_value``.
    """

    cycle_marker = CYCLE_MARKER

    def __init__(self) -> None:
        self.sink = None
        self.opts: SpewOptions | None = None
        self.tracker: CycleTracker | None = None
        self.depth = 0
        self.ignore_next_type = False

    def bind(self, sink, opts: SpewOptions, tracker: CycleTracker) -> None:
        self.sink = sink
        self.opts = opts
        self.tracker = tracker
        self.depth = 0
        self.ignore_next_type = False

    def reset(self) -> None:
        """Drop all references to the last call's sink, options and tracker."""
        self.sink = None
        self.opts = None
        self.tracker = None
        self.depth = 0
        self.ignore_next_type = False

    def write(self, text: str) -> None:
        self.sink.write(text)

    # Strategy contract ----------------------------

    def render(self, value: Value) -> None:
        raise NotImplementedError

    def render_pointer(self, value: Value) -> None:
        raise NotImplementedError

    def render_string(self, value: Value) -> None:
        raise NotImplementedError

    def render_bytes(self, value: Value) -> None:
        raise NotImplementedError

    def render_sequence(self, value: Value, items: list) -> None:
        raise NotImplementedError

    def render_set(self, value: Value, items: list) -> None:
        raise NotImplementedError

    def render_mapping(self, value: Value, items: list[tuple[Any, Any]]) -> None:
        raise NotImplementedError

    def render_record(self, value: Value, fields: list[tuple[str, Any]]) -> None:
        raise NotImplementedError

    def default_format(self, value: Value) -> str:
        return format(value.obj, "")

    # Shared traversal -----------------------------

    def max_depth_exceeded(self) -> bool:
        return self.opts.max_depth != 0 and self.depth > self.opts.max_depth

    def print_value(self, value: Value) -> None:
        """
        Invoke self-description, then dispatch on the shape of ``value``.

        Type annotations are the caller's job; this writes only the value body.
        """
        shape = value.shape
        if shape not in _NO_METHOD_SHAPES and handle_methods(self.opts, self.sink, value):
            return

        if shape is Shape.INVALID:
            self.write(INVALID_MARKER)
        elif shape is Shape.NIL:
            self.write(NIL_MARKER)
        elif shape in _SCALAR_SHAPES:
            self.write(format_number(value.obj, shape))
        elif shape is Shape.STRING:
            self.render_string(value)
        elif shape is Shape.BYTES:
            self.guarded(self.render_bytes, value)
        elif shape in (Shape.SEQUENCE, Shape.SET, Shape.MAPPING, Shape.RECORD):
            self.print_container(value)
        elif shape is Shape.POINTER:
            self.render_pointer(value)
        elif shape is Shape.BOXED:
            self.print_boxed(value)
        elif shape in _ADDRESS_SHAPES:
            self.write(format_address(address_of(value)))
        else:
            self.guarded(lambda v: self.write(self.default_format(v)), value)

    def print_container(self, value: Value) -> None:
        """Collect the entries of a container and hand them to the strategy hook."""
        if not self.tracker.visit(identity_of(value.obj), self.depth):
            self.write(self.cycle_marker)
            return

        obj = value.obj
        shape = value.shape
        try:
            if shape is Shape.MAPPING:
                entries = mapping_items(obj)
                if self.opts.sort_keys:
                    entries = sort_values(entries, self.opts, key=_entry_key)
            elif shape is Shape.RECORD:
                entries = record_fields(obj)
            else:
                entries = sequence_items(obj)
                if shape is Shape.SET and self.opts.sort_keys:
                    entries = sort_values(entries, self.opts)
        except Exception as exc:
            self.write(f"(PANIC={panic_text(exc)})")
            return

        if shape is Shape.MAPPING:
            self.render_mapping(value, entries)
        elif shape is Shape.RECORD:
            self.render_record(value, entries)
        elif shape is Shape.SET:
            self.render_set(value, entries)
        else:
            self.render_sequence(value, entries)

    def print_boxed(self, value: Value) -> None:
        """Open a box, and any box directly inside it, then render the content."""
        seen = {id(value.obj)}
        obj = unbox(value.obj)
        while obj is not DANGLING and classify(obj) is Shape.BOXED:
            if id(obj) in seen:
                self.write(self.cycle_marker)
                return
            seen.add(id(obj))
            obj = unbox(obj)

        if obj is DANGLING:
            self.write(NIL_MARKER)
            return
        self.render_boxed_content(child_of(value, obj))

    def render_boxed_content(self, content: Value) -> None:
        """Render the content of a box with its own type annotation."""
        self.ignore_next_type = False
        self.render(content)

    def deref_pointer(self, value: Value) -> Any:
        """
        Unwrap a chain of indirections starting at ``value``.

        The tracker is left describing the pass: ``indirects``, ``chain`` and whether it
        ended on a dangling indirection (the last pointer, or the empty box, is returned)
        or on a back-reference (the repeated target is returned).
        """
        tracker = self.tracker
        tracker.begin_unwrap(self.depth)
        obj = value.obj
        while True:
            identity, target = deref(obj)
            if target is DANGLING:
                tracker.mark_nil()
                return obj
            if not tracker.follow(identity):
                return target
            if classify(target) is Shape.BOXED:
                box, target = target, unbox(target)
                if target is DANGLING:
                    tracker.mark_nil()
                    return box
            if classify(target) is not Shape.POINTER:
                return target
            obj = target

    def guarded(self, render, value: Value) -> None:
        """Run a render step that calls into caller code; a failure becomes a PANIC marker."""
        try:
            render(value)
        except Exception as exc:
            self.write(f"(PANIC={panic_text(exc)})")


# Private Methods ------------------------------------------------------------------------------------------------------

def _entry_key(entry: tuple[Any, Any]) -> Any:
    return entry[0]
