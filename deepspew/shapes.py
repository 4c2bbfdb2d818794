"""
Runtime shape classification of arbitrary Python values.

Every value handed to a renderer is wrapped in a ``Value`` carrying its ``Shape``. The
helpers here are the only place that knows how a shape is taken apart: how a record
lists its fields, how an indirection is followed, how a box is opened and how a
byte buffer is viewed. They never mutate the caller's objects.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import array
import asyncio
import collections.abc as abc
import ctypes
import dataclasses
import functools
import queue
import re
import struct
import types
import weakref

from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator

# Local ----------------------------------------------------------------------------------------------------------------
from .options import UNSAFE_DISABLED
from .sentinels import DANGLING, INVALID


# Classes --------------------------------------------------------------------------------------------------------------

class Shape(Enum):
    """Closed set of value shapes the renderers dispatch on."""

    INVALID = "invalid"
    NIL = "nil"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    COMPLEX = "complex"
    STRING = "string"
    BYTES = "bytes"
    SEQUENCE = "sequence"
    SET = "set"
    MAPPING = "mapping"
    RECORD = "record"
    POINTER = "pointer"
    BOXED = "boxed"
    UINTPTR = "uintptr"
    FUNC = "func"
    CHAN = "chan"
    UNKNOWN = "unknown"


@dataclasses.dataclass(frozen=True)
class Value:
    """
    A borrowed caller object together with its classified shape.

    Attributes:
        obj: The caller's object, never modified.
        shape: Result of ``classify(obj)``.
        exported: False once the value was read from a private (underscore) record
            field; inherited by everything below it.
        indirect: The value is the direct target of a followed indirection.
    """

    obj: Any
    shape: Shape
    exported: bool = True
    indirect: bool = False


# Constants ------------------------------------------------------------------------------------------------------------

PTR_SIZE = struct.calcsize("P")

# memoryview and array.array formats holding single bytes
_BYTE_FORMATS = frozenset("Bbc")

# ctypes element types that hold raw bytes or C characters
_CTYPES_BYTE_RE = re.compile(r"^(c_char|c_byte|c_ubyte|c_uint8|c_int8)$")

_CTYPES_BUFFERS = (ctypes.Structure, ctypes.Union, ctypes.Array)

_LENGTH_SHAPES = frozenset({Shape.BYTES, Shape.SEQUENCE, Shape.SET, Shape.MAPPING, Shape.STRING, Shape.CHAN})

_FUNC_TYPES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.MethodWrapperType,
    types.WrapperDescriptorType,
    types.MethodDescriptorType,
    types.ClassMethodDescriptorType,
    functools.partial,
)

_CHAN_TYPES = (
    types.GeneratorType,
    types.CoroutineType,
    types.AsyncGeneratorType,
    queue.Queue,
    queue.SimpleQueue,
    asyncio.Queue,
)

# Exact-type fast path, subclasses fall through to the issubclass() checks
_EXACT_SHAPES: dict[type, Shape] = {
    type(None): Shape.NIL,
    bool: Shape.BOOL,
    int: Shape.INT,
    float: Shape.FLOAT,
    complex: Shape.COMPLEX,
    str: Shape.STRING,
    bytes: Shape.BYTES,
    bytearray: Shape.BYTES,
    list: Shape.SEQUENCE,
    tuple: Shape.SEQUENCE,
    range: Shape.SEQUENCE,
    dict: Shape.MAPPING,
    set: Shape.SET,
    frozenset: Shape.SET,
    types.CellType: Shape.BOXED,
    weakref.ref: Shape.POINTER,
    ctypes.c_void_p: Shape.UINTPTR,
    ctypes.py_object: Shape.BOXED,
}


# Methods --------------------------------------------------------------------------------------------------------------

def classify(obj: Any) -> Shape:
    """
    Return the shape of ``obj``.

    Examples:
        >>> classify([1, 2]), classify({"a": 1}), classify(None)
        (<Shape.SEQUENCE: 'sequence'>, <Shape.MAPPING: 'mapping'>, <Shape.NIL: 'nil'>)
    """
    if obj is INVALID:
        return Shape.INVALID

    cls = type(obj)
    shape = _EXACT_SHAPES.get(cls)
    if shape is not None:
        return shape

    # Priority 1: builtin scalars and text, including subclasses
    if issubclass(cls, bool):
        return Shape.BOOL
    if issubclass(cls, int):
        return Shape.INT
    if issubclass(cls, float):
        return Shape.FLOAT
    if issubclass(cls, complex):
        return Shape.COMPLEX
    if issubclass(cls, str):
        return Shape.STRING
    if issubclass(cls, (bytes, bytearray)):
        return Shape.BYTES
    if issubclass(cls, memoryview):
        return Shape.BYTES if _memoryview_is_bytes(obj) else Shape.SEQUENCE
    if issubclass(cls, array.array):
        return Shape.BYTES if obj.typecode in _BYTE_FORMATS else Shape.SEQUENCE

    # Priority 2: ctypes, before the generic protocols
    if issubclass(cls, ctypes._Pointer):
        return Shape.POINTER
    if issubclass(cls, ctypes.Array):
        return Shape.BYTES if _is_ctypes_byte_array(obj) else Shape.SEQUENCE
    if issubclass(cls, (ctypes.Structure, ctypes.Union)):
        return Shape.RECORD
    if issubclass(cls, ctypes.c_void_p):
        return Shape.UINTPTR
    if issubclass(cls, ctypes.py_object):
        return Shape.BOXED
    if issubclass(cls, ctypes._SimpleCData):
        return Shape.UNKNOWN

    # Priority 3: indirections, callables and channel-likes
    if issubclass(cls, weakref.ref):
        return Shape.POINTER
    if issubclass(cls, (type, types.ModuleType)):
        return Shape.UNKNOWN
    if issubclass(cls, _FUNC_TYPES):
        return Shape.FUNC
    if issubclass(cls, _CHAN_TYPES):
        return Shape.CHAN

    # Priority 4: container protocols, namedtuples are records
    if issubclass(cls, tuple) and _is_namedtuple(cls):
        return Shape.RECORD
    if issubclass(cls, abc.Mapping):
        return Shape.MAPPING
    if issubclass(cls, abc.Set):
        return Shape.SET
    if issubclass(cls, abc.Sequence):
        return Shape.SEQUENCE

    # Priority 5: anything with instance fields
    if dataclasses.is_dataclass(cls) or _has_instance_fields(cls):
        return Shape.RECORD
    return Shape.UNKNOWN


def value_of(obj: Any, exported: bool = True, indirect: bool = False) -> Value:
    """Classify ``obj`` and wrap it."""
    return Value(obj, classify(obj), exported, indirect)


def child_of(parent: Value, obj: Any, name: str | None = None) -> Value:
    """Wrap an element or field of ``parent``; a private field name un-exports the child."""
    exported = parent.exported and not (name is not None and name.startswith("_"))
    return Value(obj, classify(obj), exported)


def has_length(shape: Shape) -> bool:
    return shape in _LENGTH_SHAPES


def identity_of(obj: Any) -> int:
    """Identity used by the cycle tracker: buffer address for ctypes objects, ``id()`` otherwise."""
    if issubclass(type(obj), _CTYPES_BUFFERS):
        return ctypes.addressof(obj)
    return id(obj)


def address_of(value: Value) -> int:
    """Address shown for UINTPTR, FUNC and CHAN values; 0 stands for nil."""
    if value.shape is Shape.UINTPTR:
        return value.obj.value or 0
    return id(value.obj)


def deref(obj: Any) -> tuple[int, Any]:
    """
    Follow one indirection.

    Returns:
        ``(identity, target)``, or ``(0, DANGLING)`` for a dead weakref or a NULL pointer.
    """
    if issubclass(type(obj), weakref.ref):
        target = obj()
        if target is None:
            return 0, DANGLING
        return identity_of(target), target
    if issubclass(type(obj), ctypes._Pointer):
        if not obj:
            return 0, DANGLING
        target = obj.contents
        return ctypes.addressof(target), target
    return 0, DANGLING


def unbox(obj: Any) -> Any:
    """Open a closure cell or ``ctypes.py_object``; an empty box gives DANGLING."""
    try:
        if issubclass(type(obj), types.CellType):
            return obj.cell_contents
        if issubclass(type(obj), ctypes.py_object):
            return obj.value
    except ValueError:
        # Empty cell or NULL PyObject
        return DANGLING
    return DANGLING


def is_nil_pointer(obj: Any) -> bool:
    return deref(obj)[1] is DANGLING


def length_of(value: Value) -> int:
    """Number of elements, or queued items for channel-likes; 0 when unknown."""
    obj = value.obj
    try:
        if value.shape is Shape.CHAN:
            qsize = getattr(obj, "qsize", None)
            return qsize() if qsize is not None else 0
        if issubclass(type(obj), memoryview):
            return obj.nbytes if value.shape is Shape.BYTES else len(obj)
        return len(obj)
    except Exception:
        return 0


def capacity_of(value: Value) -> int:
    """
    Allocated capacity for types that over-allocate; 0 for everything else.

    ``list`` reports its allocated slots, ``bytearray`` its allocated buffer and queues
    their ``maxsize`` (0 for unbounded queues).
    """
    obj = value.obj
    try:
        if issubclass(type(obj), list):
            return (list.__sizeof__(obj) - type(obj).__basicsize__) // PTR_SIZE
        if issubclass(type(obj), bytearray):
            return obj.__alloc__()
        if issubclass(type(obj), (queue.Queue, asyncio.Queue)):
            return max(obj.maxsize, 0)
    except Exception:
        return 0
    return 0


def sequence_items(obj: Any) -> list:
    if issubclass(type(obj), memoryview):
        return obj.tolist()
    return list(obj)


def mapping_items(obj: Any) -> list[tuple[Any, Any]]:
    return list(obj.items())


def record_fields(obj: Any) -> list[tuple[str, Any]]:
    """
    Return ``(name, value)`` pairs of a record in declaration order.

    Namedtuples list ``_fields``, ctypes structures their ``_fields_`` from base to
    subclass, dataclasses their declared fields. Other objects list ``__slots__`` members
    (base classes first) followed by the instance ``__dict__``. A field that cannot be
    read is reported as INVALID.
    """
    cls = type(obj)

    if issubclass(cls, tuple) and _is_namedtuple(cls):
        return list(zip(cls._fields, tuple.__iter__(obj)))

    if issubclass(cls, (ctypes.Structure, ctypes.Union)):
        names = [f[0] for klass in reversed(cls.__mro__) for f in vars(klass).get("_fields_", ())]
        return [(name, _read_field(obj, name)) for name in names]

    if dataclasses.is_dataclass(cls):
        return [(f.name, _read_field(obj, f.name)) for f in dataclasses.fields(cls)]

    result = [(name, _read_field(obj, attr)) for name, attr in _slot_names(cls)]
    try:
        instance_dict = object.__getattribute__(obj, "__dict__")
    except AttributeError:
        return result
    result.extend((str(k), v) for k, v in list(instance_dict.items()))
    return result


@contextmanager
def byte_buffer(value: Value) -> Iterator[bytes | memoryview]:
    """
    Yield the bytes of a BYTES value as a flat buffer.

    Buffers are viewed in place through ``memoryview`` unless the value is private and
    unsafe introspection is disabled, in which case they are copied. Views are released
    on exit.
    """
    obj = value.obj
    if issubclass(type(obj), ctypes.Array) or (UNSAFE_DISABLED and not value.exported):
        yield bytes(obj)
        return

    with memoryview(obj) as view:
        if not view.c_contiguous:
            yield view.tobytes()
            return
        with view.cast("B") as flat:
            yield flat


# Private Methods ------------------------------------------------------------------------------------------------------

def _memoryview_is_bytes(view: memoryview) -> bool:
    try:
        return view.format in _BYTE_FORMATS
    except ValueError:
        # Released view
        return False


def _is_ctypes_byte_array(obj: Any) -> bool:
    elem = getattr(type(obj), "_type_", None)
    return _CTYPES_BYTE_RE.match(getattr(elem, "__name__", "")) is not None


def _is_namedtuple(cls: type) -> bool:
    fields = getattr(cls, "_fields", None)
    return isinstance(fields, tuple) and all(isinstance(f, str) for f in fields)


def _has_instance_fields(cls: type) -> bool:
    if cls is object:
        return False
    if getattr(cls, "__dictoffset__", 0):
        return True
    return any(True for _ in _slot_names(cls))


def _slot_names(cls: type) -> Iterator[tuple[str, str]]:
    """Yield ``(display name, attribute name)`` for every slot member, base classes first."""
    for klass in reversed(cls.__mro__):
        slots = vars(klass).get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ("__dict__", "__weakref__"):
                continue
            attr = name
            if name.startswith("__") and not name.endswith("__"):
                # Private slots are stored under the mangled name
                attr = f"_{klass.__name__.lstrip('_')}{name}"
            yield name, attr


def _read_field(obj: Any, name: str) -> Any:
    getter = getattr if UNSAFE_DISABLED else object.__getattribute__
    try:
        return getter(obj, name)
    except Exception:
        return INVALID
