"""Exception classes for Tinta.

Provides standardized exceptions for error handling throughout Tinta.
"""

from __future__ import annotations


class TintaError(Exception):
    """Base exception for all Tinta errors.

    Subclass this for specific error categories.
    """

    pass


class MarkupError(TintaError):
    """Structural error in highlighter markup.

    Raised when the scanner cannot make sense of a tag (an open span
    without its closing ``">"``), or, in strict mode, when spans are
    closed more often than opened or left open at end of input.
    """

    def __init__(self, message: str, offset: int | None = None) -> None:
        """Initialize markup error with optional position.

        Args:
            message: Error description
            offset: Character offset in the markup where the error occurred
        """
        self.message = message
        self.offset = offset

        location = f"offset {offset}: " if offset is not None else ""
        super().__init__(f"{location}{message}")


class ResolverError(TintaError):
    """Theme resolver failed while styling a text chunk.

    The original exception is always chained as ``__cause__``.
    """

    def __init__(self, stack: tuple[str, ...], message: str) -> None:
        """Initialize resolver error.

        Args:
            stack: Class stack that was being resolved
            message: Description of the failure
        """
        self.stack = stack
        super().__init__(f"Cannot resolve style for {' > '.join(stack)}: {message}")


class HighlightError(TintaError):
    """Error from the highlighting engine.

    Raised when no engine is available or the engine cannot produce markup.
    """

    def __init__(self, language: str | None, message: str) -> None:
        """Initialize highlight error.

        Args:
            language: Requested language (None for auto-detection)
            message: Description of the failure
        """
        self.language = language
        label = language if language is not None else "auto"
        super().__init__(f"Language '{label}': {message}")


class ThemeError(TintaError):
    """Error loading or building a theme."""

    def __init__(self, theme: str, message: str) -> None:
        """Initialize theme error.

        Args:
            theme: Theme name
            message: Description of the failure
        """
        self.theme = theme
        super().__init__(f"Theme '{theme}': {message}")
