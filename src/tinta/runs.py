"""Run data types and the run builder.

The run builder consumes scanner events in order, keeps the class stack in
lockstep with them, and pairs every non-empty text chunk with the style
resolved from the stack as it stood at that instant.

Provisional runs (``Run``) still carry entity-encoded text. The entity
decoder turns them into final ``StyledRun`` ranges over the decoded text,
collected in a ``Highlighted`` result.

Thread Safety:
Run, StyledRun and Highlighted are frozen and safe to share.
RunBuilder instances are local to one conversion call.

"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from tinta.errors import MarkupError, ResolverError
from tinta.events import Event, EventType
from tinta.profiling import get_convert_accumulator
from tinta.stack import ClassStack
from tinta.theme import SimpleResolver, ThemeResolver
from tinta.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Run:
    """Provisional run: encoded text plus the stack it was scanned under.

    Attributes:
        text: Text chunk as it appears in the markup (entities not decoded)
        stack: Class stack snapshot, outer to inner
        style: Style returned by the resolver for ``stack``

    """

    text: str
    stack: tuple[str, ...]
    style: Any = None


@dataclass(frozen=True, slots=True)
class StyledRun:
    """Final run: a range of the decoded text and its style.

    Attributes:
        start: Offset in the decoded text
        length: Number of characters covered
        style: Resolved style

    """

    start: int
    length: int
    style: Any = None

    @property
    def end(self) -> int:
        """Exclusive end offset."""
        return self.start + self.length


@dataclass(frozen=True, slots=True)
class Highlighted:
    """Decoded text with its style attributions.

    Runs are ordered, contiguous and non-overlapping: concatenating the
    slices reproduces ``text`` exactly.

    Attributes:
        text: Fully decoded text
        runs: Style attributions over ``text``
        language: Language reported by the highlighting engine, if any

    """

    text: str
    runs: tuple[StyledRun, ...]
    language: str | None = None

    def slices(self) -> Iterator[tuple[str, Any]]:
        """Yield ``(text, style)`` for every run in order."""
        text = self.text
        for run in self.runs:
            yield text[run.start : run.end], run.style

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return self.slices()

    def __len__(self) -> int:
        return len(self.runs)


class RunBuilder:
    """Pairs text chunks with styles while tracking the class stack.

    Usage:
            >>> from tinta.scanner import scan
            >>> builder = RunBuilder(lambda stack: stack[-1], base="hljs")
            >>> for event in scan('<span class="hljs-string">"a"</span>;'):
            ...     builder.feed(event)
            >>> [(run.text, run.style) for run in builder.finish()]
            [('"a"', 'hljs-string'), (';', 'hljs')]

    """

    __slots__ = (
        "_resolve",
        "_stack",
        "_runs",
        "_strict",
        "_opened",
        "_closed",
        "_spurious",
        "_deepest",
    )

    def __init__(
        self,
        resolver: ThemeResolver | SimpleResolver,
        *,
        base: str = "hljs",
        strict: bool = False,
    ) -> None:
        """Initialize builder.

        Args:
            resolver: Theme resolver (object with ``resolve`` or a callable)
            base: Root class token of the stack
            strict: Raise MarkupError for unbalanced spans
        """
        method = getattr(resolver, "resolve", None)
        self._resolve = method if callable(method) else resolver
        self._stack = ClassStack(base, strict=strict)
        self._runs: list[Run] = []
        self._strict = strict
        self._opened = 0
        self._closed = 0
        self._spurious = 0
        self._deepest = 0

    @property
    def stack(self) -> ClassStack:
        return self._stack

    @property
    def span_counts(self) -> tuple[int, int]:
        """Number of (open, close) span events seen so far."""
        return self._opened, self._closed

    @property
    def spurious_closes(self) -> int:
        """Close tags ignored because no span was open."""
        return self._spurious

    def feed(self, event: Event) -> None:
        """Apply one scanner event.

        Raises:
            MarkupError: Strict builder saw a close with no open span
            ResolverError: The resolver raised while styling a chunk
        """
        if event.type is EventType.TEXT:
            if event.value:
                self._append(event.value)
        elif event.type is EventType.OPEN_SPAN:
            self._opened += 1
            self._stack.push(event.value)
            self._deepest = max(self._deepest, self._stack.depth)
        elif event.type is EventType.CLOSE_SPAN:
            self._closed += 1
            if self._stack.pop(event.offset) is None:
                self._spurious += 1

    def finish(self) -> list[Run]:
        """Return the provisional runs.

        Raises:
            MarkupError: Strict builder with spans left open
        """
        if not self._stack.at_base:
            if self._strict:
                raise MarkupError(f"{self._stack.depth} span(s) left open at end of markup")
            logger.debug("Dropping %d unclosed span(s) at end of markup", self._stack.depth)

        acc = get_convert_accumulator()
        if acc is not None:
            acc.record_spans(
                deepest=self._deepest,
                spurious=self._spurious,
                unclosed=self._stack.depth,
            )
        return self._runs

    def _append(self, text: str) -> None:
        stack = self._stack.snapshot()
        try:
            style = self._resolve(stack)
        except Exception as exc:
            raise ResolverError(stack, str(exc) or type(exc).__name__) from exc
        self._runs.append(Run(text, stack, style))


def build_runs(
    events: Iterable[Event],
    resolver: ThemeResolver | SimpleResolver,
    *,
    base: str = "hljs",
    strict: bool = False,
) -> list[Run]:
    """Build provisional runs from a scanner event stream.

    Args:
        events: Events in scan order
        resolver: Theme resolver
        base: Root class token of the stack
        strict: Raise MarkupError for unbalanced spans

    Returns:
        Runs whose concatenated text is the markup with tags stripped
    """
    builder = RunBuilder(resolver, base=base, strict=strict)
    for event in events:
        builder.feed(event)
    return builder.finish()
