"""
Convenience entry points over the compact formatter and the verbose dumper.

Print-style functions render every argument in compact form and join them with
spaces; format-style functions accept ``str.format`` templates where each positional
and keyword argument is wrapped in a ``Formatter``, so ``{}`` renders ``v``, ``{:#v}``
adds types and ``{!r}`` gives ``#v``. Every function takes an optional ``opts`` and
otherwise uses the shared default configuration.

Examples:
    >>> sprint([1, 2], {"a": None})
    '[1 2] map[a:<nil>]'
    >>> sprintf("{:#v} and {}", (1,), None)
    '(tuple)[(int)1] and <nil>'
"""

# Standard library -----------------------------------------------------------------------------------------------------
import sys

from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .dump import fdump, sdump
from .formatters import Formatter
from .options import SpewOptions, resolve_options

__all__ = [
    "dump",
    "fdump",
    "fprint",
    "fprintf",
    "fprintln",
    "new_formatter",
    "printf",
    "println",
    "sdump",
    "sprint",
    "sprintf",
    "sprintln",
]


# Methods --------------------------------------------------------------------------------------------------------------

def new_formatter(value: Any, opts: SpewOptions | None = None) -> Formatter:
    """Wrap ``value`` for use with ``format()``, f-strings and ``str.format``."""
    return Formatter(value, opts)


def dump(*args: Any, opts: SpewOptions | None = None) -> None:
    """Write the verbose rendering of each argument to standard output."""
    fdump(sys.stdout, *args, opts=opts)


def sprint(*args: Any, opts: SpewOptions | None = None) -> str:
    """Return the compact renderings of the arguments separated by spaces."""
    opts = resolve_options(opts)
    return " ".join(format(Formatter(a, opts), "v") for a in args)


def sprintln(*args: Any, opts: SpewOptions | None = None) -> str:
    """Like ``sprint`` with a trailing newline."""
    return sprint(*args, opts=opts) + "\n"


def fprint(sink, *args: Any, opts: SpewOptions | None = None) -> int:
    """Write ``sprint(*args)`` to ``sink`` and return the number of characters written."""
    text = sprint(*args, opts=opts)
    sink.write(text)
    return len(text)


def fprintln(sink, *args: Any, opts: SpewOptions | None = None) -> int:
    text = sprintln(*args, opts=opts)
    sink.write(text)
    return len(text)


def println(*args: Any, opts: SpewOptions | None = None) -> int:
    """Write ``sprintln(*args)`` to standard output."""
    return fprintln(sys.stdout, *args, opts=opts)


def sprintf(template: str, *args: Any, opts: SpewOptions | None = None, **kwargs: Any) -> str:
    """
    Return ``template.format(...)`` with every argument wrapped in a ``Formatter``.

    Format specs other than the compact verbs pass through to the wrapped values, so
    ``{:>8.2f}`` still formats a float.

    Raises:
        IndexError, KeyError, ValueError: As ``str.format`` does for a bad template.
    """
    opts = resolve_options(opts)
    wrapped_args = [Formatter(a, opts) for a in args]
    wrapped_kwargs = {k: Formatter(v, opts) for k, v in kwargs.items()}
    return template.format(*wrapped_args, **wrapped_kwargs)


def fprintf(sink, template: str, *args: Any, opts: SpewOptions | None = None, **kwargs: Any) -> int:
    """Write ``sprintf(...)`` to ``sink`` and return the number of characters written."""
    text = sprintf(template, *args, opts=opts, **kwargs)
    sink.write(text)
    return len(text)


def printf(template: str, *args: Any, opts: SpewOptions | None = None, **kwargs: Any) -> int:
    """Write ``sprintf(...)`` to standard output."""
    return fprintf(sys.stdout, template, *args, opts=opts, **kwargs)

