"""Highlighting engine protocol and injection for Tinta.

An engine turns ``(code, language)`` into span markup and knows which
languages and themes it offers. Tinta itself never tokenizes source code:
it only converts the markup an engine produces.

When tinta[syntax] is installed, Pygments is used automatically. Its HTML
formatter (``nowrap=True``) emits exactly the span dialect the scanner
reads: ``<span class="k">def</span>``.

Usage:
    # Automatic with tinta[syntax]
    from tinta.highlighting import get_engine
    engine = get_engine()
    result = engine.highlight("x = 1", "python")

    # Manual injection
    from tinta.highlighting import set_engine
    set_engine(MyEngine())
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Protocol

from tinta.errors import HighlightError
from tinta.theme import Theme
from tinta.utils.logger import get_logger

logger = get_logger(__name__)

_VARIANT_SUFFIXES = ("-dark", "-light")


@dataclass(frozen=True, slots=True)
class HighlightResult:
    """Markup produced by an engine.

    Attributes:
        markup: Restricted span markup (entity-escaped text plus spans)
        language: Language actually used (detected one for auto-detection)
        illegal: The code contained syntax the language does not allow and
            the markup is plain escaped text
        auto_detected: The language was chosen by auto-detection

    """

    markup: str
    language: str | None
    illegal: bool = False
    auto_detected: bool = False


class HighlightEngine(Protocol):
    """Protocol for highlighting engines.

    Thread Safety:
        Implementations must be thread-safe. highlight() may be called
        concurrently from several threads.

    """

    base_class: str
    default_theme: str

    def highlight(
        self,
        code: str,
        language: str | None,
        *,
        ignore_illegals: bool = False,
    ) -> HighlightResult | None:
        """Highlight code.

        Args:
            code: Source code to highlight
            language: Language name or alias; None for auto-detection
            ignore_illegals: Highlight even when illegal syntax is found

        Returns:
            Markup, or None when the engine cannot produce any

        Contract:
            - MUST escape ``&``, ``<`` and ``>`` in the code
            - MUST emit only ``<span class="...">`` and ``</span>`` tags
            - SHOULD fall back to auto-detection for unknown languages
        """
        ...

    def supported_languages(self) -> list[str]:
        """Return every language name and alias the engine accepts."""
        ...

    def available_themes(self) -> list[str]:
        """Return the names of every theme the engine can load."""
        ...

    def load_theme(self, name: str, *, dark: bool = False) -> Theme:
        """Load a theme by name.

        Args:
            name: Theme name
            dark: Load the dark variant when the theme has one

        Raises:
            ThemeError: Unknown theme
        """
        ...


class PygmentsEngine:
    """Pygments-based engine implementing the HighlightEngine protocol."""

    base_class = "highlight"
    default_theme = "default"

    def __init__(self) -> None:
        from pygments.formatters import HtmlFormatter

        self._formatter = HtmlFormatter(nowrap=True)

    def highlight(
        self,
        code: str,
        language: str | None,
        *,
        ignore_illegals: bool = False,
    ) -> HighlightResult | None:
        """Highlight code using Pygments."""
        from pygments import format as format_tokens
        from pygments.lexers import TextLexer, get_lexer_by_name, guess_lexer
        from pygments.token import Error
        from pygments.util import ClassNotFound

        lexer = None
        if language:
            try:
                lexer = get_lexer_by_name(language)
            except ClassNotFound:
                logger.debug("Unknown language %r, falling back to auto-detection", language)

        auto_detected = lexer is None
        if lexer is None:
            try:
                lexer = guess_lexer(code)
            except ClassNotFound:
                lexer = TextLexer()

        name = lexer.aliases[0] if lexer.aliases else lexer.name
        tokens = list(lexer.get_tokens(code))

        if not ignore_illegals and any(ttype in Error for ttype, _ in tokens):
            logger.debug("Illegal syntax for %s, returning plain text", name)
            return HighlightResult(
                html.escape(code, quote=False),
                name,
                illegal=True,
                auto_detected=auto_detected,
            )

        markup: str = format_tokens(tokens, self._formatter)
        return HighlightResult(markup, name, auto_detected=auto_detected)

    def supported_languages(self) -> list[str]:
        """Every lexer alias Pygments knows."""
        from pygments.lexers import get_all_lexers

        return sorted({alias for _, aliases, _, _ in get_all_lexers() for alias in aliases})

    def available_themes(self) -> list[str]:
        """Every registered Pygments style."""
        from pygments.styles import get_all_styles

        return sorted(get_all_styles())

    def load_theme(self, name: str, *, dark: bool = False) -> Theme:
        """Load a Pygments style, preferring its ``-dark`` or ``-light`` sibling.

        ``solarized`` resolves to ``solarized-dark`` or ``solarized-light``.
        A style without a sibling for the requested scheme loads as named.
        """
        return Theme.from_pygments(self._variant(name, dark))

    def _variant(self, name: str, dark: bool) -> str:
        family = name
        for suffix in _VARIANT_SUFFIXES:
            if family.endswith(suffix):
                family = family[: -len(suffix)]
                break
        wanted = f"{family}-dark" if dark else f"{family}-light"
        if wanted != name and wanted in self.available_themes():
            return wanted
        return name


# Global engine
_engine: HighlightEngine | None = None
_tried_pygments: bool = False


def set_engine(engine: HighlightEngine | None) -> None:
    """Set the global highlighting engine.

    Args:
        engine: A HighlightEngine implementation. Pass None to clear it.
    """
    global _engine
    _engine = engine


def _try_import_pygments() -> bool:
    """Try to import and configure the Pygments engine."""
    global _engine, _tried_pygments

    if _tried_pygments:
        return _engine is not None

    _tried_pygments = True

    try:
        _engine = PygmentsEngine()
        return True
    except ImportError:
        return False


def has_engine() -> bool:
    """Check if a highlighting engine is available."""
    if _engine is not None:
        return True
    return _try_import_pygments()


def get_engine() -> HighlightEngine:
    """Get the current engine.

    Automatically tries to load Pygments if not already configured.

    Raises:
        HighlightError: No engine is configured and Pygments is not installed
    """
    if _engine is None:
        _try_import_pygments()
    if _engine is None:
        raise HighlightError(None, "no highlighting engine available (install tinta[syntax])")
    return _engine
