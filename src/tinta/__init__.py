"""
Tinta — styled text runs from syntax-highlighter markup

Highlighting engines (highlight.js, Pygments) describe colored code as
nested ``<span class="...">`` markup. Tinta turns that markup into plain
text plus an ordered list of styled runs, ready for any renderer that
works with attributed text. No HTML parser is involved: a single O(n)
scan drives a class stack, and entity decoding re-aligns run ranges in
one linear pass.

Quick Start:
    >>> from tinta import Style, Theme, convert
    >>> theme = Theme("demo", {"hljs-keyword": Style(bold=True)})
    >>> result = convert('<span class="hljs-keyword">let</span> x = &amp;1', theme)
    >>> result.text
    'let x = &1'
    >>> [text for text, style in result]
    ['let', ' x = &1']

    >>> # Or highlight source code directly (needs tinta[syntax])
    >>> from tinta import Highlighter
    >>> hl = Highlighter(theme="monokai")
    >>> result = hl.highlight("def f(): pass", "python")

Installation:
    pip install tinta              # Core converter and CSS themes (tinycss2)
    pip install tinta[syntax]      # + Pygments highlighting engine and themes
"""

from __future__ import annotations

import dataclasses
import threading
from collections.abc import Callable

from tinta.config import (
    ConvertConfig,
    convert_config_context,
    get_convert_config,
    reset_convert_config,
    set_convert_config,
)
from tinta.entities import EntityMatch, decode_entity, decode_runs, decode_text, find_entities
from tinta.errors import (
    HighlightError,
    MarkupError,
    ResolverError,
    ThemeError,
    TintaError,
)
from tinta.events import Event, EventType
from tinta.highlighting import (
    HighlightEngine,
    HighlightResult,
    PygmentsEngine,
    get_engine,
    has_engine,
    set_engine,
)
from tinta.profiling import ConversionAccumulator, get_convert_accumulator, profiled_convert
from tinta.runs import Highlighted, Run, RunBuilder, StyledRun, build_runs
from tinta.scanner import SpanScanner, scan
from tinta.stack import ClassStack
from tinta.theme import SimpleResolver, Style, Theme, ThemeResolver
from tinta.utils.logger import get_logger

__version__ = "0.1.0"

logger = get_logger(__name__)


def convert(
    markup: str,
    resolver: ThemeResolver | SimpleResolver,
    *,
    base: str | None = None,
    config: ConvertConfig | None = None,
    language: str | None = None,
) -> Highlighted:
    """Convert highlighter markup into decoded text and styled runs.

    Args:
        markup: Span markup produced by a highlighting engine
        resolver: Theme resolver, called once per non-empty text chunk with
            the class stack at that point (outer to inner)
        base: Root class token (defaults to ``config.base_class``)
        config: Conversion config (defaults to the current context's)
        language: Language label to attach to the result

    Returns:
        Highlighted text whose run slices concatenate to ``text``

    Raises:
        MarkupError: Unterminated span tag, or unbalanced spans in strict mode
        ResolverError: The resolver raised

    Example:
        >>> result = convert('<span class="hljs-comment">// a &lt; b</span>', lambda s: s)
        >>> list(result)
        [('// a < b', ('hljs', 'hljs-comment'))]
    """
    cfg = config or get_convert_config()
    base_class = base if base is not None else cfg.base_class

    runs = build_runs(scan(markup), resolver, base=base_class, strict=cfg.strict)
    result = decode_runs(runs, decode=cfg.decode_entities)
    if language is not None:
        result = dataclasses.replace(result, language=language)

    acc = get_convert_accumulator()
    if acc is not None:
        acc.record_conversion(source_length=len(markup), run_count=len(result.runs))

    return result


ThemeListener = Callable[[Theme], None]


class Highlighter:
    """High-level facade combining an engine, a theme and the converter.

    The current theme is an immutable value: every highlight() call reads it
    once and hands it to convert(). Changing the theme notifies subscribers
    so dependent views can re-render.

    Usage:
        >>> hl = Highlighter(theme="friendly")
        >>> unsubscribe = hl.on_theme_changed(lambda theme: print(theme.name))
        >>> hl.set_theme("monokai")
        monokai
        True
        >>> result = hl.highlight("x = 1", "python")

    Thread Safety:
        highlight() may be called from several threads. Subscription
        management is guarded by a lock; callbacks run on the thread that
        calls set_theme().

    """

    __slots__ = (
        "_engine",
        "_theme",
        "_theme_name",
        "_dark",
        "_config",
        "_listeners",
        "_lock",
        "ignore_illegals",
    )

    def __init__(
        self,
        *,
        engine: HighlightEngine | None = None,
        theme: Theme | str | None = None,
        ignore_illegals: bool = False,
        dark: bool = False,
        config: ConvertConfig | None = None,
    ) -> None:
        """Initialize highlighter.

        Args:
            engine: Highlighting engine (defaults to the global engine)
            theme: Theme or theme name (defaults to the engine's default)
            ignore_illegals: Highlight even when illegal syntax is detected
            dark: Use the dark variant of named themes
            config: Conversion config (defaults to the context's at call time)

        Raises:
            HighlightError: No engine available
            ThemeError: Unknown theme name
        """
        self._engine = engine if engine is not None else get_engine()
        self._config = config
        self._listeners: list[ThemeListener] = []
        self._lock = threading.Lock()
        self.ignore_illegals = ignore_illegals
        self._dark = dark
        requested = theme if theme is not None else self._engine.default_theme
        self._theme = self._load_theme(requested, dark)
        self._theme_name = requested if isinstance(requested, str) else None

    @property
    def engine(self) -> HighlightEngine:
        return self._engine

    @property
    def theme(self) -> Theme:
        """The current theme."""
        return self._theme

    @property
    def dark(self) -> bool:
        """True when named themes load their dark variant."""
        return self._dark

    def set_theme(self, theme: Theme | str, *, dark: bool | None = None) -> bool:
        """Switch theme and notify subscribers.

        Args:
            theme: Theme or theme name known to the engine
            dark: Color scheme for a theme name (defaults to the current one)

        Returns:
            True if the theme was changed, False if the name is unknown
        """
        scheme = self._dark if dark is None else dark
        try:
            new_theme = self._load_theme(theme, scheme)
        except ThemeError as exc:
            logger.debug("Keeping current theme: %s", exc)
            return False

        self._theme = new_theme
        self._theme_name = theme if isinstance(theme, str) else None
        self._dark = scheme
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(new_theme)
        return True

    def set_color_scheme(self, dark: bool) -> bool:
        """Reload the current named theme for a light or dark color scheme.

        Args:
            dark: True for the dark variant

        Returns:
            True if the theme was reloaded, False when the current theme was
            set by value and has no name to reload
        """
        if self._theme_name is None:
            self._dark = dark
            return False
        return self.set_theme(self._theme_name, dark=dark)

    def on_theme_changed(self, callback: ThemeListener) -> Callable[[], None]:
        """Subscribe to theme changes.

        Args:
            callback: Called with the new theme after every set_theme()

        Returns:
            A function that removes the subscription
        """
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def highlight(self, code: str, language: str | None = None) -> Highlighted | None:
        """Highlight code and convert the markup to styled runs.

        Args:
            code: Source code
            language: Language name or alias; None (or an unknown name)
                uses auto-detection

        Returns:
            Highlighted text, or None when the engine produced no markup

        Raises:
            MarkupError: The engine produced malformed markup
        """
        result = self._engine.highlight(code, language, ignore_illegals=self.ignore_illegals)
        if result is None:
            logger.debug("Engine produced no markup for language %r", language)
            return None

        acc = get_convert_accumulator()
        if acc is not None:
            acc.record_highlight(
                result.language,
                auto_detected=result.auto_detected,
                illegal=result.illegal,
            )
        return convert(
            result.markup,
            self._theme,
            base=self._engine.base_class,
            config=self._config,
            language=result.language,
        )

    def supported_languages(self) -> list[str]:
        """Languages the engine can highlight."""
        return self._engine.supported_languages()

    def available_themes(self) -> list[str]:
        """Theme names the engine can load."""
        return self._engine.available_themes()

    def _load_theme(self, theme: Theme | str, dark: bool) -> Theme:
        if isinstance(theme, Theme):
            return theme
        return self._engine.load_theme(theme, dark=dark)


__all__ = [  # noqa: RUF022 (grouped by category)
    # Version
    "__version__",
    # Core API
    "convert",
    "Highlighted",
    "StyledRun",
    # Pipeline stages
    "Event",
    "EventType",
    "SpanScanner",
    "scan",
    "ClassStack",
    "Run",
    "RunBuilder",
    "build_runs",
    "EntityMatch",
    "decode_entity",
    "decode_runs",
    "decode_text",
    "find_entities",
    # Themes
    "Style",
    "Theme",
    "ThemeResolver",
    "SimpleResolver",
    # Engines
    "HighlightEngine",
    "HighlightResult",
    "PygmentsEngine",
    "get_engine",
    "has_engine",
    "set_engine",
    # Errors
    "TintaError",
    "MarkupError",
    "ResolverError",
    "HighlightError",
    "ThemeError",
    # Profiling
    "ConversionAccumulator",
    "profiled_convert",
    "get_convert_accumulator",
    # Configuration (ContextVar-based)
    "ConvertConfig",
    "get_convert_config",
    "set_convert_config",
    "reset_convert_config",
    "convert_config_context",
    # High-level
    "Highlighter",
]
