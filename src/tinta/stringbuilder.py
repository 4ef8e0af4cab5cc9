"""TextBuilder for O(n) text accumulation with offset tracking.

Appends to a list, joins once at the end: O(n) total vs O(n²) for
repeated string concatenation. Unlike a plain list of parts, it also
tracks the character length built so far, which is exactly the start
offset of the next appended piece. Run boundaries are computed from it.

Thread Safety:
TextBuilder instances are local to each conversion call.
No shared mutable state.

"""

from __future__ import annotations


class TextBuilder:
    """Efficient string accumulator that knows its length.

    Usage:
            >>> tb = TextBuilder()
            >>> tb.append("let")
            0
            >>> tb.append(" x")
            3
            >>> tb.length
            5
            >>> tb.build()
            'let x'

    Thread Safety:
        Instance is local to each conversion call.
        No shared mutable state.

    """

    __slots__ = ("_parts", "_length")

    def __init__(self) -> None:
        """Initialize empty TextBuilder."""
        self._parts: list[str] = []
        self._length = 0

    def append(self, s: str) -> int:
        """Append a string to the builder.

        Args:
            s: String to append (empty strings are skipped)

        Returns:
            Offset at which ``s`` starts in the built text
        """
        start = self._length
        if s:
            self._parts.append(s)
            self._length += len(s)
        return start

    @property
    def length(self) -> int:
        """Total number of characters appended so far."""
        return self._length

    def build(self) -> str:
        """Join all parts into final string.

        Returns:
            Concatenated string of all appended parts
        """
        return "".join(self._parts)

    def __len__(self) -> int:
        """Return total character length (not number of parts)."""
        return self._length

    def __bool__(self) -> bool:
        """Return True if any text has been appended."""
        return self._length > 0
