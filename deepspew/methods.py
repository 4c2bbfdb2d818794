"""
Self-description of values through their error-like or string-like capability.

A value is error-like when it is an exception and string-like when its class (not a
builtin base) defines ``__str__``. The rendered description replaces or prefixes the
raw structure; a description that raises is reported inline as ``(PANIC=...)``.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import logging

from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Callable

# Local ----------------------------------------------------------------------------------------------------------------
from .options import UNSAFE_DISABLED, SpewOptions
from .shapes import Value
from .utils import class_name, type_name

logger = logging.getLogger(__name__)


# Classes --------------------------------------------------------------------------------------------------------------

class CapabilityKind(Enum):
    ERROR = "error"
    STRING = "string"


@dataclass(frozen=True)
class Capability:
    """
    A self-description a value offers.

    Attributes:
        kind: ERROR for exceptions, STRING for classes defining ``__str__``.
        call: Produces the description text; may raise.
    """

    kind: CapabilityKind
    call: Callable[[], str]


# Methods --------------------------------------------------------------------------------------------------------------

def query_capability(obj: Any) -> Capability | None:
    """
    Return the self-description capability of ``obj``, errors first, or None.

    Examples:
        >>> query_capability(ValueError("bad")).kind
        <CapabilityKind.ERROR: 'error'>
        >>> query_capability([1, 2]) is None
        True
    """
    cls = type(obj)
    if issubclass(cls, BaseException):
        return Capability(CapabilityKind.ERROR, partial(str, obj))
    if _defines_str(cls):
        return Capability(CapabilityKind.STRING, partial(str, obj))
    return None


def handle_methods(opts: SpewOptions, sink, value: Value) -> bool:
    """
    Write the self-description of ``value`` to ``sink`` if it has one.

    Returns:
        True when the description was written and the raw structure must be skipped.
        False when there is no usable description, when ``continue_on_method`` is set
        (the description is written as a ``(text) `` prefix), or when the description
        raised (a ``(PANIC=...)`` marker is written in its place).
    """
    if opts.disable_methods:
        return False
    if not value.exported and UNSAFE_DISABLED:
        return False
    if value.indirect and opts.disable_pointer_methods:
        return False

    capability = query_capability(value.obj)
    if capability is None:
        return False

    try:
        text = capability.call()
    except Exception as exc:
        logger.debug("%s self-description of %s failed", capability.kind.value, type_name(value.obj), exc_info=True)
        sink.write(f"(PANIC={panic_text(exc)})")
        return False

    if opts.continue_on_method:
        sink.write(f"({text}) ")
        return False
    sink.write(text)
    return True


def panic_text(exc: BaseException) -> str:
    """
    Text of a recovered failure: ``Type: message``, or just ``Type`` for an empty message.

    Examples:
        >>> panic_text(RuntimeError("boom"))
        'RuntimeError: boom'
    """
    name = class_name(exc)
    try:
        msg = str(exc)
    except Exception:
        msg = ""
    return f"{name}: {msg}" if msg else name


# Private Methods ------------------------------------------------------------------------------------------------------

def _defines_str(cls: type) -> bool:
    """The first class in the MRO defining ``__str__`` is not a builtin."""
    for klass in cls.__mro__:
        if "__str__" in vars(klass):
            return getattr(klass, "__module__", "builtins") != "builtins"
    return False

