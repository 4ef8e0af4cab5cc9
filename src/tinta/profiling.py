"""Opt-in conversion diagnostics.

Highlighter output is trusted, so the converter recovers quietly from the
few irregularities it can meet: a close tag with nothing open, spans still
open at the end, entity references that do not decode. The accumulator
counts those recoveries alongside the volume of work, which makes a
misbehaving engine or theme easy to spot without turning on debug logs.

Stages report to the active accumulator themselves: RunBuilder records
span balance, decode_runs records entity outcomes, convert() records the
markup and run totals, and Highlighter.highlight() records the language
the engine settled on. Nothing is recorded when no accumulator is active.

Example:
    from tinta import convert
    from tinta.profiling import profiled_convert

    with profiled_convert() as metrics:
        convert('</span><span class="hljs-keyword">if</span> a &lt; b', theme)

    metrics.spurious_closes    # 1
    metrics.entities_decoded   # 1

"""

from collections import Counter
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any


@dataclass
class ConversionAccumulator:
    """Counters collected while conversions run in one context.

    Attributes:
        start_time: Profiling start timestamp.
        convert_calls: Number of convert() calls.
        source_length: Total markup length converted.
        run_count: Styled runs produced.
        deepest_nesting: Deepest span nesting seen in any markup.
        spurious_closes: Close tags ignored because no span was open.
        unclosed_spans: Spans still open at the end of markup and dropped.
        entities_decoded: Entity references replaced by their character.
        entities_literal: References left as written (undecodable, or
            straddling two runs).
        languages: Highlight calls per language the engine reported.
        auto_detected: Highlight calls where the engine picked the language.
        illegal: Highlight calls that came back as plain text.

    """

    start_time: float = field(default_factory=perf_counter)
    convert_calls: int = 0
    source_length: int = 0
    run_count: int = 0
    deepest_nesting: int = 0
    spurious_closes: int = 0
    unclosed_spans: int = 0
    entities_decoded: int = 0
    entities_literal: int = 0
    languages: Counter[str] = field(default_factory=Counter)
    auto_detected: int = 0
    illegal: int = 0

    def record_conversion(self, source_length: int, run_count: int) -> None:
        self.convert_calls += 1
        self.source_length += source_length
        self.run_count += run_count

    def record_spans(self, *, deepest: int, spurious: int, unclosed: int) -> None:
        """Record the span balance of one markup string."""
        self.deepest_nesting = max(self.deepest_nesting, deepest)
        self.spurious_closes += spurious
        self.unclosed_spans += unclosed

    def record_entities(self, *, decoded: int, literal: int) -> None:
        self.entities_decoded += decoded
        self.entities_literal += literal

    def record_highlight(self, language: str | None, *, auto_detected: bool, illegal: bool) -> None:
        self.languages[language or "unknown"] += 1
        self.auto_detected += auto_detected
        self.illegal += illegal

    @property
    def recoveries(self) -> int:
        """Irregularities the converter recovered from."""
        return self.spurious_closes + self.unclosed_spans + self.entities_literal

    @property
    def total_duration_ms(self) -> float:
        """Total profiling duration in milliseconds."""
        return (perf_counter() - self.start_time) * 1000

    def summary(self) -> dict[str, Any]:
        """Get summary of conversion metrics."""
        return {
            "total_ms": round(self.total_duration_ms, 2),
            "convert_calls": self.convert_calls,
            "source_length": self.source_length,
            "run_count": self.run_count,
            "deepest_nesting": self.deepest_nesting,
            "spurious_closes": self.spurious_closes,
            "unclosed_spans": self.unclosed_spans,
            "entities_decoded": self.entities_decoded,
            "entities_literal": self.entities_literal,
            "languages": dict(self.languages),
            "auto_detected": self.auto_detected,
            "illegal": self.illegal,
        }


_accumulator: ContextVar[ConversionAccumulator | None] = ContextVar(
    "convert_accumulator",
    default=None,
)


def get_convert_accumulator() -> ConversionAccumulator | None:
    """Get current accumulator (None if profiling disabled)."""
    return _accumulator.get()


@contextmanager
def profiled_convert() -> Iterator[ConversionAccumulator]:
    """Collect conversion diagnostics for the duration of the with block."""
    acc = ConversionAccumulator()
    token: Token[ConversionAccumulator | None] = _accumulator.set(acc)
    try:
        yield acc
    finally:
        _accumulator.reset(token)
