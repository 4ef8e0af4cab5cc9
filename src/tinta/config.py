"""ContextVar-based conversion configuration for Tinta.

Provides thread-local configuration using Python's ContextVars (PEP 567).
An explicit ``config=`` argument to ``convert()`` always wins; otherwise the
configuration of the current context is used.

Thread Safety:
    ContextVars are thread-local by design. Each thread has independent storage,
    so no locks are needed and race conditions are impossible.

Usage:
    from tinta.config import convert_config_context, ConvertConfig

    with convert_config_context(ConvertConfig(strict=True)):
        result = convert(markup, theme)

"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ConvertConfig:
    """Immutable conversion configuration.

    Attributes:
        base_class: Class token at the bottom of every class stack
            (highlight.js wraps its output in ``class="hljs"``)
        strict: Raise MarkupError for unbalanced spans instead of
            ignoring spurious closes and dropping unclosed spans
        decode_entities: Decode HTML character entities in the text

    """

    base_class: str = "hljs"
    strict: bool = False
    decode_entities: bool = True

    @classmethod
    def from_dict(cls, config_dict: dict) -> "ConvertConfig":
        """Create ConvertConfig from dictionary.

        Only includes keys that are valid ConvertConfig fields; unknown keys
        are silently ignored.

        Args:
            config_dict: Dictionary with config values. Keys should match
                ConvertConfig attribute names.

        Returns:
            New ConvertConfig instance with values from dict.

        Example:
            >>> config = ConvertConfig.from_dict({"strict": True, "colour": "red"})
            >>> config.strict
            True

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: ConvertConfig = ConvertConfig()

_convert_config: ContextVar[ConvertConfig] = ContextVar(
    "convert_config",
    default=_DEFAULT_CONFIG,
)


def get_convert_config() -> ConvertConfig:
    """Get current conversion configuration (thread-local)."""
    return _convert_config.get()


def set_convert_config(config: ConvertConfig) -> None:
    """Set conversion configuration for current context.

    Args:
        config: ConvertConfig instance to use for this context.

    """
    _convert_config.set(config)


def reset_convert_config() -> None:
    """Reset to default configuration.

    Reuses the module-level _DEFAULT_CONFIG singleton, avoiding allocation.

    """
    _convert_config.set(_DEFAULT_CONFIG)


@contextmanager
def convert_config_context(config: ConvertConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Args:
        config: ConvertConfig to use within the context.

    Yields:
        None

    Thread Safety:
        Only affects the current thread's context. Properly restores previous
        config even if an exception is raised.

    """
    previous = _convert_config.get()
    _convert_config.set(config)
    try:
        yield
    finally:
        _convert_config.set(previous)


__all__ = [
    "ConvertConfig",
    "get_convert_config",
    "set_convert_config",
    "reset_convert_config",
    "convert_config_context",
]
