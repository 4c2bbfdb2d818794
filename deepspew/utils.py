"""
Deepspew utilities shared across the package.

Contains type naming and error message helpers used by multiple modules to avoid circular imports.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any

# Constants ------------------------------------------------------------------------------------------------------------

_LOCALS_MARKER = "<locals>."


# Methods --------------------------------------------------------------------------------------------------------------


def class_name(obj: Any) -> str:
    """
    Get the class name of an object or a class.

    Returns class name whether given an instance or the class itself.
    For example, both `class_name(10)` and `class_name(int)` return 'int'.

    Parameters:
        obj (Any): An object or a class.

    Returns:
        str: The qualified class name without its module. Never raises, a class with
        broken metadata is reported as '?'.

    Examples:
        >>> class_name(10)
        'int'

        >>> class_name(KeyError)
        'KeyError'
    """
    cls = obj if issubclass(type(obj), type) else type(obj)

    try:
        name = cls.__qualname__
    except Exception:
        return "?"
    return name if isinstance(name, str) else "?"


def type_name(obj: Any) -> str:
    """
    Get the display name used in type annotations of rendered values.

    The name always describes ``type(obj)``, so a class passed as a value is
    reported as ``type``. Builtin types are shown bare, other types are prefixed
    with the last component of their module the way a package-qualified name
    reads: ``test_dump.Node`` for ``tests.test_dump.Node``. Classes defined
    inside functions drop the ``<locals>`` path.

    Examples:
        >>> type_name([])
        'list'

        >>> import collections
        >>> type_name(collections.OrderedDict())
        'collections.OrderedDict'
    """
    cls = type(obj)
    try:
        module = cls.__module__
        qualname = cls.__qualname__
    except Exception:
        return "?"

    if not isinstance(module, str) or not isinstance(qualname, str):
        return "?"

    if _LOCALS_MARKER in qualname:
        qualname = qualname.rsplit(_LOCALS_MARKER, 1)[-1]
    if module == "builtins":
        return qualname
    return f"{module.rsplit('.', 1)[-1]}.{qualname}"


def fmt_type(obj: Any) -> str:
    """Format type information for exception messages, e.g. '<int>'."""
    return f"<{class_name(obj)}>"


def fmt_value(obj: Any, max_repr: int = 120) -> str:
    """
    Format a single value as a type–value pair for exception messages.

    Broken __repr__ methods are handled gracefully and long reprs are truncated.

    Examples:
        >>> fmt_value(42)
        '<int: 42>'
    """
    repr_ = safe_repr(obj)
    if max_repr > 0 and len(repr_) > max_repr:
        repr_ = repr_[:max_repr] + "..."
    return f"<{class_name(obj)}: {repr_}>"


def safe_repr(obj: Any) -> str:
    """
    Defensive repr() call - handle broken __repr__ methods gracefully
    """
    try:
        repr_ = repr(obj)
    except Exception as e:
        exc_type = type(e).__name__
        repr_ = f"<{class_name(obj)} object (repr failed: {exc_type})>"
    return repr_
