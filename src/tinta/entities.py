"""HTML character entity decoding with run re-alignment.

Highlighting engines escape ``&``, ``<``, ``>`` and quotes in the code they
wrap. Once tags are stripped, the assembled text still holds those
entities. Decoding shrinks the text (``&amp;`` is five characters, ``&`` is
one), so every run boundary computed before decoding has to move.

Approach: find every entity match over the whole text first, then make one
left-to-right merge pass over runs and matches together, copying text
between matches into a fresh buffer. Each run's new start is simply the
buffer length when the run begins. No splicing, no re-matching: O(n).

Recognized forms:
    &name;       named reference (HTML5 table, single code point results)
    &#digits;    decimal reference
    &#xhex;      hexadecimal reference

Anything else, or a reference that does not decode, stays literal.

Thread Safety:
All functions are pure. Safe to call from any thread.

"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from html.entities import html5

from tinta.profiling import get_convert_accumulator
from tinta.runs import Highlighted, Run, StyledRun
from tinta.stringbuilder import TextBuilder
from tinta.utils.logger import get_logger

logger = get_logger(__name__)

ENTITY_PATTERN = re.compile(r"&(?:#[xX][0-9A-Fa-f]+|#[0-9]+|[A-Za-z0-9]+);")

_MAX_CODE_POINT = 0x10FFFF
# Most significant digits a numeric reference may carry (U+10FFFF is 7 decimal)
_MAX_NUMERIC_DIGITS = 8


@dataclass(frozen=True, slots=True)
class EntityMatch:
    """An entity reference found in the pre-decode text.

    Attributes:
        start: Offset of the ``&``
        length: Length of the reference including ``&`` and ``;``
        char: Decoded character, or None if the reference is undecodable

    """

    start: int
    length: int
    char: str | None

    @property
    def end(self) -> int:
        """Exclusive end offset (just past the ``;``)."""
        return self.start + self.length

    @property
    def decoded(self) -> bool:
        return self.char is not None


def decode_entity(entity: str) -> str | None:
    """Decode one entity reference to a single character.

    Args:
        entity: Full reference, e.g. ``"&amp;"``, ``"&#60;"``, ``"&#x3C;"``

    Returns:
        The decoded character, or None when the reference is unknown,
        malformed, or does not denote exactly one valid code point

    Examples:
        >>> decode_entity("&lt;")
        '<'
        >>> decode_entity("&#x41;")
        'A'
        >>> decode_entity("&bogus;") is None
        True
    """
    if len(entity) < 3 or entity[0] != "&" or entity[-1] != ";":
        return None
    body = entity[1:-1]

    if body.startswith("#"):
        digits = body[1:]
        base = 10
        if digits[:1] in ("x", "X"):
            digits = digits[1:]
            base = 16
        significant = digits.lstrip("0")
        if not digits or len(significant) > _MAX_NUMERIC_DIGITS:
            return None
        try:
            code_point = int(significant or "0", base)
        except ValueError:
            return None
        if code_point == 0 or code_point > _MAX_CODE_POINT or 0xD800 <= code_point <= 0xDFFF:
            return None
        return chr(code_point)

    char = html5.get(body + ";")
    if char is None or len(char) != 1:
        return None
    return char


def find_entities(text: str) -> list[EntityMatch]:
    """Find all entity references in ascending, non-overlapping order.

    Args:
        text: Assembled (tag-free) text

    Returns:
        Matches with their decoded character (None when undecodable)
    """
    matches: list[EntityMatch] = []
    for m in ENTITY_PATTERN.finditer(text):
        start, end = m.span()
        char = decode_entity(m.group())
        if char is None:
            logger.debug("Leaving undecodable entity %r at offset %d", m.group(), start)
        matches.append(EntityMatch(start, end - start, char))
    return matches


def decode_text(text: str) -> str:
    """Decode every recognized entity in ``text``.

    Example:
        >>> decode_text("a &lt; b &amp;&amp; c")
        'a < b && c'
    """
    return decode_runs([Run(text, ())]).text if text else ""


def decode_runs(runs: Sequence[Run], *, decode: bool = True) -> Highlighted:
    """Decode entities across provisional runs and re-align their ranges.

    Args:
        runs: Provisional runs in order (entity-encoded text)
        decode: When False, lay runs out over the text as-is

    Returns:
        Highlighted with the decoded text and one StyledRun per input run,
        contiguous and in order

    Complexity: O(n) where n = total text length
    """
    text = "".join(run.text for run in runs)
    matches = find_entities(text) if decode else []
    match_count = len(matches)

    out = TextBuilder()
    styled: list[StyledRun] = []
    pos = 0
    mi = 0
    decoded = 0

    for run in runs:
        run_end = pos + len(run.text)
        run_start = out.length

        while mi < match_count and matches[mi].start < run_end:
            match = matches[mi]
            mi += 1
            # Undecodable or straddling a run boundary: copied literally below
            if match.char is None or match.end > run_end:
                continue
            out.append(text[pos : match.start])
            out.append(match.char)
            pos = match.end
            decoded += 1

        out.append(text[pos:run_end])
        pos = run_end
        styled.append(StyledRun(run_start, out.length - run_start, run.style))

    acc = get_convert_accumulator()
    if acc is not None:
        acc.record_entities(decoded=decoded, literal=match_count - decoded)

    return Highlighted(out.build(), tuple(styled))
