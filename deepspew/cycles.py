"""
Circular reference tracking for the recursive renderers.

A ``CycleTracker`` remembers, for every identity on the active descent chain, the depth
at which it was first reached. Identities are ``id()`` values, or the buffer address
of a ctypes object, and are never shown as stable identifiers across runs.
"""


# Classes --------------------------------------------------------------------------------------------------------------

class CycleTracker:
    """
    Track the chain of indirections followed while unwrapping a value.

    Every unwrap pass starts with ``begin_unwrap(depth)``, which forgets identities
    recorded at ``depth`` or deeper. Only ancestors of the current position stay in
    the map, so the same object reached again on a sibling branch is not a cycle;
    only a genuine back-reference into the active descent chain is.

    Attributes:
        pointers: identity -> depth at which it was first seen.
        chain: identities followed during the current unwrap pass, in order.
        nil_found: The current pass ended on a dangling indirection.
        cycle_found: The current pass ended on a back-reference.
        indirects: Number of indirections followed, not counting a repeated link.

    Examples:
        >>> ci = CycleTracker()
        >>> ci.begin_unwrap(0)
        >>> ci.follow(0x10)
        True
        >>> ci.begin_unwrap(1)
        >>> ci.follow(0x10)
        False
        >>> ci.cycle_found, ci.indirects
        (True, 0)
    """

    __slots__ = ("pointers", "chain", "nil_found", "cycle_found", "indirects", "_depth")

    def __init__(self) -> None:
        self.pointers: dict[int, int] = {}
        self.chain: list[int] = []
        self.nil_found = False
        self.cycle_found = False
        self.indirects = 0
        self._depth = 0

    def __repr__(self) -> str:
        return (
            f"CycleTracker(depth={self._depth}, pointers={len(self.pointers)}, chain={len(self.chain)}, "
            f"nil_found={self.nil_found}, cycle_found={self.cycle_found})"
        )

    def reset(self) -> None:
        """Clear all state so the tracker can be reused by another render call."""
        self.pointers.clear()
        self.chain.clear()
        self.nil_found = False
        self.cycle_found = False
        self.indirects = 0
        self._depth = 0

    def begin_unwrap(self, depth: int) -> None:
        """Start a new unwrap pass at ``depth``."""
        self.chain.clear()
        stale = [k for k, d in self.pointers.items() if d >= depth]
        for k in stale:
            del self.pointers[k]
        self.nil_found = False
        self.cycle_found = False
        self.indirects = 0
        self._depth = depth

    def follow(self, identity: int) -> bool:
        """
        Record one followed indirection.

        Returns:
            True to continue unwrapping, False if ``identity`` is already on the
            active descent chain at a shallower depth or was already followed in
            the current pass.
        """
        repeated = identity in self.chain
        self.indirects += 1
        self.chain.append(identity)
        seen_at = self.pointers.get(identity)
        if repeated or (seen_at is not None and seen_at < self._depth):
            self.cycle_found = True
            self.indirects -= 1
            return False
        self.pointers[identity] = self._depth
        return True

    def mark_nil(self) -> None:
        """End the current pass on a dangling indirection."""
        self.nil_found = True

    def visit(self, identity: int, depth: int) -> bool:
        """
        Register a reference-typed container entered at ``depth``.

        A one-link unwrap pass over the container identity; returns False when the
        container is one of its own ancestors.
        """
        self.begin_unwrap(depth)
        return self.follow(identity)
