#
# Deepspew - Shapes Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import array
import collections
import ctypes
import queue
import types
import weakref

from dataclasses import dataclass

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest
from frozendict import frozendict

# Local ----------------------------------------------------------------------------------------------------------------
from deepspew.sentinels import DANGLING, INVALID
from deepspew.shapes import (
    Shape,
    Value,
    byte_buffer,
    capacity_of,
    child_of,
    classify,
    deref,
    identity_of,
    length_of,
    record_fields,
    unbox,
    value_of,
)


# Local Classes & Methods ----------------------------------------------------------------------------------------------

@dataclass
class Point:
    x: int
    y: int


Pair = collections.namedtuple("Pair", "a b")


class Plain:
    def __init__(self):
        self.a = 1
        self._b = 2


class Slotted:
    __slots__ = ("a", "__hidden")

    def __init__(self):
        self.a = 1


class CPoint(ctypes.Structure):
    _fields_ = [("x", ctypes.c_int), ("y", ctypes.c_int)]


class CPoint3(CPoint):
    _fields_ = [("z", ctypes.c_int)]


class Target:
    pass


def _cell(value):
    def inner():
        return value

    return inner.__closure__[0]


def _gen():
    yield 1


# Tests ----------------------------------------------------------------------------------------------------------------

class TestClassify:
    @pytest.mark.parametrize(
        "obj, shape",
        [
            pytest.param(INVALID, Shape.INVALID, id="invalid"),
            pytest.param(None, Shape.NIL, id="none"),
            pytest.param(True, Shape.BOOL, id="bool"),
            pytest.param(7, Shape.INT, id="int"),
            pytest.param(1.5, Shape.FLOAT, id="float"),
            pytest.param(1j, Shape.COMPLEX, id="complex"),
            pytest.param("s", Shape.STRING, id="str"),
            pytest.param(b"b", Shape.BYTES, id="bytes"),
            pytest.param(bytearray(b"b"), Shape.BYTES, id="bytearray"),
            pytest.param(memoryview(b"b"), Shape.BYTES, id="memoryview-bytes"),
            pytest.param(memoryview(array.array("i", [1])), Shape.SEQUENCE, id="memoryview-int"),
            pytest.param(array.array("B", b"x"), Shape.BYTES, id="array-bytes"),
            pytest.param(array.array("d", [1.0]), Shape.SEQUENCE, id="array-double"),
            pytest.param(ctypes.create_string_buffer(4), Shape.BYTES, id="ctypes-char-array"),
            pytest.param((ctypes.c_ubyte * 2)(), Shape.BYTES, id="ctypes-ubyte-array"),
            pytest.param((ctypes.c_int * 2)(), Shape.SEQUENCE, id="ctypes-int-array"),
            pytest.param([1], Shape.SEQUENCE, id="list"),
            pytest.param((1,), Shape.SEQUENCE, id="tuple"),
            pytest.param(collections.deque(), Shape.SEQUENCE, id="deque"),
            pytest.param(range(3), Shape.SEQUENCE, id="range"),
            pytest.param({1}, Shape.SET, id="set"),
            pytest.param(frozenset(), Shape.SET, id="frozenset"),
            pytest.param({}, Shape.MAPPING, id="dict"),
            pytest.param(collections.OrderedDict(), Shape.MAPPING, id="ordereddict"),
            pytest.param(frozendict(a=1), Shape.MAPPING, id="frozendict"),
            pytest.param(types.MappingProxyType({}), Shape.MAPPING, id="mappingproxy"),
            pytest.param(Point(1, 2), Shape.RECORD, id="dataclass"),
            pytest.param(Pair(1, 2), Shape.RECORD, id="namedtuple"),
            pytest.param(Plain(), Shape.RECORD, id="object"),
            pytest.param(Slotted(), Shape.RECORD, id="slots"),
            pytest.param(CPoint(), Shape.RECORD, id="ctypes-struct"),
            pytest.param(ctypes.pointer(ctypes.c_int(1)), Shape.POINTER, id="ctypes-pointer"),
            pytest.param(_cell(1), Shape.BOXED, id="cell"),
            pytest.param(ctypes.py_object(1), Shape.BOXED, id="py_object"),
            pytest.param(ctypes.c_void_p(16), Shape.UINTPTR, id="c_void_p"),
            pytest.param(len, Shape.FUNC, id="builtin"),
            pytest.param(lambda: None, Shape.FUNC, id="lambda"),
            pytest.param([].append, Shape.FUNC, id="bound-builtin"),
            pytest.param(_gen(), Shape.CHAN, id="generator"),
            pytest.param(queue.Queue(), Shape.CHAN, id="queue"),
            pytest.param(int, Shape.UNKNOWN, id="class"),
            pytest.param(types, Shape.UNKNOWN, id="module"),
            pytest.param(ctypes.c_int(1), Shape.UNKNOWN, id="ctypes-scalar"),
            pytest.param(object(), Shape.UNKNOWN, id="bare-object"),
        ],
    )
    def test_shapes(self, obj, shape):
        assert classify(obj) is shape

    def test_weakref(self):
        target = Target()
        assert classify(weakref.ref(target)) is Shape.POINTER

    def test_subclasses(self):
        class Name(str):
            pass

        class Count(int):
            pass

        assert classify(Name("x")) is Shape.STRING
        assert classify(Count(1)) is Shape.INT


class TestValues:
    def test_value_of(self):
        v = value_of([1])
        assert v == Value([1], Shape.SEQUENCE, True, False)

    @pytest.mark.parametrize(
        "parent_exported, name, expected",
        [
            pytest.param(True, "a", True, id="public"),
            pytest.param(True, "_a", False, id="private"),
            pytest.param(False, "a", False, id="inherited"),
            pytest.param(True, None, True, id="element"),
        ],
    )
    def test_child_exported(self, parent_exported, name, expected):
        parent = value_of(Plain(), exported=parent_exported)
        assert child_of(parent, 1, name).exported is expected


class TestRecordFields:
    def test_dataclass(self):
        assert record_fields(Point(1, 2)) == [("x", 1), ("y", 2)]

    def test_namedtuple(self):
        assert record_fields(Pair(1, 2)) == [("a", 1), ("b", 2)]

    def test_instance_dict(self):
        assert record_fields(Plain()) == [("a", 1), ("_b", 2)]

    def test_slots_unset_and_mangled(self):
        """Unset slots are INVALID, private slots are read under the mangled name."""
        fields = record_fields(Slotted())
        assert fields == [("a", 1), ("__hidden", INVALID)]

    def test_ctypes_inherited_fields(self):
        fields = record_fields(CPoint3(1, 2, 3))
        assert fields == [("x", 1), ("y", 2), ("z", 3)]

    def test_overridden_getattribute_bypassed(self):
        class Guarded:
            def __init__(self):
                self.a = 1

            def __getattribute__(self, name):
                raise RuntimeError("no access")

        assert record_fields(Guarded()) == [("a", 1)]


class TestIndirection:
    def test_weakref_live(self):
        target = Target()
        identity, obj = deref(weakref.ref(target))
        assert obj is target
        assert identity == id(target)

    def test_weakref_dead(self):
        target = Target()
        ref = weakref.ref(target)
        del target
        assert deref(ref) == (0, DANGLING)

    def test_ctypes_pointer(self):
        c = ctypes.c_int(5)
        identity, obj = deref(ctypes.pointer(c))
        assert obj.value == 5
        assert identity == ctypes.addressof(c)

    def test_ctypes_null(self):
        assert deref(ctypes.POINTER(ctypes.c_int)())[1] is DANGLING

    def test_identity_of_ctypes(self):
        p = CPoint(1, 2)
        assert identity_of(p) == ctypes.addressof(p)

    @pytest.mark.parametrize(
        "box, expected",
        [
            pytest.param(_cell(None), None, id="cell-none"),
            pytest.param(types.CellType(), DANGLING, id="cell-empty"),
            pytest.param(ctypes.py_object("x"), "x", id="py_object"),
            pytest.param(ctypes.py_object(), DANGLING, id="py_object-null"),
        ],
    )
    def test_unbox(self, box, expected):
        assert unbox(box) is expected or unbox(box) == expected


class TestSizes:
    @pytest.mark.parametrize(
        "obj, expected",
        [
            pytest.param("abc", 3, id="str"),
            pytest.param({1: 2}, 1, id="dict"),
            pytest.param(memoryview(b"abcd"), 4, id="memoryview"),
            pytest.param(_gen(), 0, id="generator"),
        ],
    )
    def test_length(self, obj, expected):
        assert length_of(value_of(obj)) == expected

    def test_queue_length_and_capacity(self):
        q = queue.Queue(maxsize=5)
        q.put(1)
        v = value_of(q)
        assert length_of(v) == 1
        assert capacity_of(v) == 5

    def test_list_capacity(self):
        items = []
        for i in range(10):
            items.append(i)
        assert capacity_of(value_of(items)) >= 10

    def test_bytearray_capacity(self):
        buf = bytearray(b"abc")
        assert capacity_of(value_of(buf)) == buf.__alloc__()

    @pytest.mark.parametrize(
        "obj",
        [
            pytest.param((1, 2), id="tuple"),
            pytest.param("abc", id="str"),
            pytest.param({1: 2}, id="dict"),
        ],
    )
    def test_no_capacity(self, obj):
        assert capacity_of(value_of(obj)) == 0


class TestByteBuffer:
    @pytest.mark.parametrize(
        "obj, expected",
        [
            pytest.param(b"ab", b"ab", id="bytes"),
            pytest.param(memoryview(b"ab"), b"ab", id="memoryview"),
            pytest.param(array.array("b", [1, -1]), b"\x01\xff", id="signed-array"),
            pytest.param(ctypes.create_string_buffer(b"ab", 3), b"ab\x00", id="ctypes"),
        ],
    )
    def test_contents(self, obj, expected):
        with byte_buffer(value_of(obj)) as buf:
            assert bytes(buf) == expected

    def test_view_released(self):
        """The caller's bytearray can be resized after rendering."""
        data = bytearray(b"ab")
        with byte_buffer(value_of(data)) as buf:
            assert len(buf) == 2
        data.extend(b"cd")
        assert data == bytearray(b"abcd")
