"""Class stack tracking for nested spans.

The stack holds the class attribute of every span that is open at the
current scan position, base entry first. Entries are opaque strings; a
single entry may carry several space-separated class names, and splitting
them is the theme resolver's business.

Thread Safety:
ClassStack instances are local to one conversion call.
Snapshots are tuples and safe to share.

"""

from __future__ import annotations

from tinta.errors import MarkupError
from tinta.utils.logger import get_logger

logger = get_logger(__name__)


class ClassStack:
    """Ordered stack of active class tokens, never popped below its base.

    Usage:
            >>> stack = ClassStack("hljs")
            >>> stack.push("hljs-string")
            >>> stack.snapshot()
            ('hljs', 'hljs-string')
            >>> stack.pop()
            'hljs-string'
            >>> stack.at_base
            True

    """

    __slots__ = ("_entries", "_strict")

    def __init__(self, base: str, *, strict: bool = False) -> None:
        """Initialize stack with its base entry.

        Args:
            base: Root class token (always at the bottom)
            strict: Raise MarkupError on underflow instead of ignoring it
        """
        self._entries: list[str] = [base]
        self._strict = strict

    @property
    def base(self) -> str:
        """The root class token."""
        return self._entries[0]

    @property
    def depth(self) -> int:
        """Number of open spans above the base entry."""
        return len(self._entries) - 1

    @property
    def at_base(self) -> bool:
        """True when no span is open."""
        return len(self._entries) == 1

    def push(self, token: str) -> None:
        """Open a span."""
        self._entries.append(token)

    def pop(self, offset: int | None = None) -> str | None:
        """Close the innermost span.

        A close with no open span is spurious. It is ignored (and logged)
        unless the stack is strict.

        Args:
            offset: Markup offset of the close tag, for diagnostics

        Returns:
            The popped token, or None when the close was ignored

        Raises:
            MarkupError: Spurious close on a strict stack
        """
        if len(self._entries) == 1:
            if self._strict:
                raise MarkupError("closing span without a matching open span", offset=offset)
            logger.debug("Ignoring spurious closing span at offset %s", offset)
            return None
        return self._entries.pop()

    def snapshot(self) -> tuple[str, ...]:
        """Return the current stack, outer to inner, as an immutable tuple."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ClassStack({self._entries!r})"
