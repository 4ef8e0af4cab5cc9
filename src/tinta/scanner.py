"""Single-pass scanner for highlighter span markup with O(n) performance.

Highlighting engines emit a tiny HTML dialect: literal (entity-escaped)
text and properly nested ``<span class="...">...</span>`` wrappers. This
scanner walks that dialect left to right exactly once and emits events.
It is not an HTML parser: attributes other than ``class``, comments,
CDATA and self-closing tags are never produced by the engine and are not
recognized.

No regex in the hot path. ``str.find`` and ``str.startswith`` do the work.

Thread Safety:
Scanner instances are single-use. Create one per markup string.
All state is instance-local; no shared mutable state.

"""

from __future__ import annotations

from collections.abc import Iterator

from tinta.errors import MarkupError
from tinta.events import Event, EventType

TAG_START = "<"
SPAN_OPEN = 'span class="'
SPAN_OPEN_END = '">'
SPAN_CLOSE = "/span>"


class SpanScanner:
    """Forward-only scanner over span markup.

    Each step scans up to the next ``<``, flushes the skipped text as a
    TEXT event, then classifies the tag. A ``<`` that starts neither an
    open nor a close span is literal text and becomes a one-character TEXT
    event. Position only ever advances, so the scan always terminates.

    Usage:
            >>> scanner = SpanScanner('<span class="hljs-keyword">if</span> x')
            >>> for event in scanner.tokenize():
            ...     print(event)
        Event(OPEN_SPAN, 'hljs-keyword', @0)
        Event(TEXT, 'if', @27)
        Event(CLOSE_SPAN, '', @29)
        Event(TEXT, ' x', @36)

    Thread Safety:
        Scanner instances are single-use. Create one per markup string.

    """

    __slots__ = (
        "_source",
        "_source_len",  # Cached len(source) to avoid repeated calls
        "_pos",
    )

    def __init__(self, source: str) -> None:
        """Initialize scanner with markup.

        Args:
            source: Markup produced by a highlighting engine
        """
        self._source = source
        self._source_len = len(source)
        self._pos = 0

    @property
    def position(self) -> int:
        """Current scan position (offset of the next unread character)."""
        return self._pos

    def tokenize(self) -> Iterator[Event]:
        """Scan markup into an event stream.

        Yields:
            Event objects in source order

        Raises:
            MarkupError: An open span tag has no closing ``">"``

        Complexity: O(n) where n = len(source)
        Memory: O(1) iterator (events yielded, not accumulated)
        """
        source = self._source
        source_len = self._source_len
        while self._pos < source_len:
            tag_pos = source.find(TAG_START, self._pos)
            if tag_pos == -1:
                tag_pos = source_len

            if tag_pos > self._pos:
                yield Event(EventType.TEXT, source[self._pos : tag_pos], self._pos)
                self._pos = tag_pos

            if self._pos >= source_len:
                return

            yield self._scan_tag()

    def _scan_tag(self) -> Event:
        """Classify the tag at the current ``<`` and advance past it.

        Returns:
            OPEN_SPAN, CLOSE_SPAN, or a one-character TEXT event for a
            literal ``<``.
        """
        source = self._source
        start = self._pos
        after = start + 1

        if source.startswith(SPAN_OPEN, after):
            value_start = after + len(SPAN_OPEN)
            value_end = source.find(SPAN_OPEN_END, value_start)
            if value_end == -1:
                raise MarkupError("unterminated span tag", offset=start)
            self._pos = value_end + len(SPAN_OPEN_END)
            return Event(EventType.OPEN_SPAN, source[value_start:value_end], start)

        if source.startswith(SPAN_CLOSE, after):
            self._pos = after + len(SPAN_CLOSE)
            return Event(EventType.CLOSE_SPAN, "", start)

        self._pos = after
        return Event(EventType.TEXT, TAG_START, start)


def scan(markup: str) -> Iterator[Event]:
    """Scan markup into an event stream.

    Convenience wrapper around ``SpanScanner(markup).tokenize()``.

    Args:
        markup: Markup produced by a highlighting engine

    Yields:
        Event objects in source order
    """
    return SpanScanner(markup).tokenize()
