"""
Rendering options for the compact formatter and the verbose dumper.

A frozen ``SpewOptions`` instance is consumed by every render call. The module keeps
a shared default configuration which entry points use when no ``opts`` is given;
it can be replaced with ``configure()`` and inspected with ``get_options()``.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import os
import threading
import warnings

from dataclasses import dataclass, fields, replace as dataclasses_replace
from typing import Any, Final, Literal

# Local ----------------------------------------------------------------------------------------------------------------
from .utils import fmt_type, fmt_value

# Constants ------------------------------------------------------------------------------------------------------------

UNSAFE_ENV_VAR: Final[str] = "DEEPSPEW_DISABLE_UNSAFE"

Preset = Literal["default", "debug", "stable"]


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


# Escape hatch for values that are not directly introspectable. When available, record
# fields are read through object.__getattribute__, private field values still get their
# self-description invoked and byte buffers are viewed in place instead of copied.
UNSAFE_DISABLED: Final[bool] = _env_flag(UNSAFE_ENV_VAR)


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class SpewOptions:
    """
    Configuration consumed by a single render call.

    Attributes:
        indent: Indentation text written once per depth level by the verbose dumper.
        max_depth: Maximum nesting depth to descend into; 0 means unlimited. Deeper
            levels are replaced with a depth marker.
        disable_methods: Do not invoke the error-like or string-like self-description
            of values.
        disable_pointer_methods: Do not invoke self-description on values which were
            only reached by following an indirection (weakref, ctypes pointer).
        continue_on_method: Show the self-description parenthesized and still render
            the raw structure of the value.
        sort_keys: Sort mapping keys and set elements for deterministic output.
        spew_keys: When keys have no natural order and no self-description, sort
            them by their compact rendering with type annotations.
        disable_pointer_addresses: Hide identity chains in verbose output.
        disable_capacities: Hide ``cap=`` for containers with real over-allocation.

    Examples:
        >>> opts = SpewOptions(indent="  ", sort_keys=True)
        >>> opts.merge(max_depth=2).max_depth
        2

        >>> SpewOptions.stable().disable_pointer_addresses
        True
    """

    indent: str = " "
    max_depth: int = 0
    disable_methods: bool = False
    disable_pointer_methods: bool = False
    continue_on_method: bool = False
    sort_keys: bool = False
    spew_keys: bool = False
    disable_pointer_addresses: bool = False
    disable_capacities: bool = False

    def __post_init__(self) -> None:
        """Validate field types and ranges."""
        if not isinstance(self.indent, str):
            raise TypeError(f"SpewOptions.indent must be a str, got {fmt_type(self.indent)}")
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
            raise TypeError(f"SpewOptions.max_depth must be an int, got {fmt_type(self.max_depth)}")
        if self.max_depth < 0:
            raise ValueError(f"SpewOptions.max_depth must be >=0, but got {fmt_value(self.max_depth)}")
        for f in fields(self):
            if f.name in ("indent", "max_depth"):
                continue
            val = getattr(self, f.name)
            if not isinstance(val, bool):
                raise TypeError(f"SpewOptions.{f.name} must be a bool, got {fmt_type(val)}")

    # Class Methods ------------------------------------

    @classmethod
    def debug(cls) -> "SpewOptions":
        """
        Options for interactive debugging: sorted keys, full type and address detail.
        """
        return cls(sort_keys=True)

    @classmethod
    def stable(cls) -> "SpewOptions":
        """
        Options for output that is reproducible across runs and processes.

        Keys are sorted with the surrogate fallback, addresses and capacities are hidden
        since both depend on the allocator.
        """
        return cls(
            sort_keys=True,
            spew_keys=True,
            disable_pointer_addresses=True,
            disable_capacities=True,
        )

    @classmethod
    def preset(cls, name: Preset) -> "SpewOptions":
        """Return options for a named preset; unknown names warn and fall back to defaults."""
        factories = {"default": cls, "debug": cls.debug, "stable": cls.stable}
        factory = factories.get(name)
        if factory is None:
            warnings.warn(
                f"Unknown SpewOptions preset {fmt_value(name)}, using 'default'",
                UserWarning,
                stacklevel=3,
            )
            factory = cls
        return factory()

    # Methods ------------------------------------------

    def merge(self, **kwargs: Any) -> "SpewOptions":
        """Return a copy with the given fields replaced."""
        return dataclasses_replace(self, **kwargs)


# Module state ---------------------------------------------------------------------------------------------------------

_options: SpewOptions = SpewOptions()
_options_lock = threading.Lock()


# Methods --------------------------------------------------------------------------------------------------------------

def configure(preset: Preset | None = None, **kwargs: Any) -> SpewOptions:
    """
    Replace the shared default configuration.

    With a preset the new configuration starts from that preset, otherwise from the
    current default; keyword arguments are merged on top.

    Args:
        preset: "default", "debug" or "stable", or None to keep the current base.
        **kwargs: SpewOptions fields to override.

    Returns:
        The new shared default configuration.

    Examples:
        >>> configure(preset="debug", indent="\\t").indent
        '\\t'
        >>> configure(max_depth=3).sort_keys
        True
    """
    global _options
    with _options_lock:
        base = _options if preset is None else SpewOptions.preset(preset)
        _options = base.merge(**kwargs) if kwargs else base
        return _options


def get_options() -> SpewOptions:
    """Return the shared default configuration."""
    return _options


def reset_options() -> SpewOptions:
    """Restore the shared default configuration to ``SpewOptions()``."""
    return configure(preset="default")


def resolve_options(opts: SpewOptions | None) -> SpewOptions:
    """Return ``opts`` or the shared default; reject anything that is not SpewOptions."""
    if opts is None:
        return _options
    if not isinstance(opts, SpewOptions):
        raise TypeError(f"opts must be a SpewOptions instance, but found {fmt_type(opts)}")
    return opts
