"""
Deterministic ordering of mapping keys and set elements.

Natural ordering is used when all keys belong to one comparable family. Otherwise keys
are ordered by a derived text: their self-description, their compact rendering with
types, or their repr, in that order of preference.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import math

from typing import Any, Callable, Sequence

# Local ----------------------------------------------------------------------------------------------------------------
from .methods import handle_methods
from .options import SpewOptions
from .pool import text_buffers
from .shapes import value_of
from .utils import safe_repr


# Methods --------------------------------------------------------------------------------------------------------------

def sort_values(
    values: Sequence[Any],
    opts: SpewOptions,
    key: Callable[[Any], Any] | None = None,
) -> list:
    """
    Return ``values`` in a stable, reproducible display order.

    Policy:
        1. Numbers (bool, int, float), str, bytes and tuples sort natively when every
           key is of the same family. Booleans order False before True, NaN sorts last.
           A TypeError from comparing mixed tuple members falls through.
        2. Unless methods are disabled, keys sort by their self-description when every
           key has one.
        3. With ``spew_keys``, keys sort by their compact rendering with type annotations.
        4. Otherwise keys sort by their repr.

    Args:
        values: Items to order; not modified.
        opts: Render options.
        key: Extracts the sort key from an item, e.g. the key of a ``(key, value)`` pair.

    Examples:
        >>> sort_values([3, True, 1.5], SpewOptions())
        [True, 1.5, 3]
        >>> sort_values([("b", 1), ("a", 2)], SpewOptions(), key=lambda kv: kv[0])
        [('a', 2), ('b', 1)]
    """
    items = list(values)
    if len(items) < 2:
        return items

    keys = [key(v) for v in items] if key is not None else items
    order = _natural_order(keys)
    if order is None:
        texts = _described(keys, opts)
        if texts is None and opts.spew_keys:
            texts = _surrogates(keys, opts)
        if texts is None:
            texts = [safe_repr(k) for k in keys]
        order = sorted(range(len(keys)), key=texts.__getitem__)
    return [items[i] for i in order]


# Private Methods ------------------------------------------------------------------------------------------------------

def _family(k: Any) -> str | None:
    cls = type(k)
    if issubclass(cls, (bool, int, float)):
        return "number"
    if issubclass(cls, str):
        return "str"
    if issubclass(cls, (bytes, bytearray)):
        return "bytes"
    if issubclass(cls, tuple):
        return "tuple"
    return None


def _number_key(k: int | float) -> tuple:
    if issubclass(type(k), float) and math.isnan(k):
        return (True, 0)
    return (False, k)


def _natural_order(keys: list) -> list[int] | None:
    family = _family(keys[0])
    if family is None or any(_family(k) != family for k in keys):
        return None

    indices = range(len(keys))
    try:
        if family == "number":
            return sorted(indices, key=lambda i: _number_key(keys[i]))
        return sorted(indices, key=keys.__getitem__)
    except TypeError:
        return None


def _described(keys: list, opts: SpewOptions) -> list[str] | None:
    if opts.disable_methods:
        return None
    texts = []
    with text_buffers.borrow() as buf:
        for k in keys:
            buf.seek(0)
            buf.truncate(0)
            if not handle_methods(opts, buf, value_of(k)):
                return None
            texts.append(buf.getvalue())
    return texts


def _surrogates(keys: list, opts: SpewOptions) -> list[str]:
    from .formatters import Formatter

    return [format(Formatter(k, opts), "#v") for k in keys]
