"""Themes: map a stack of span classes to concrete text attributes.

A theme resolver is any pure function ``stack -> Style``. The core calls it
once per non-empty text chunk with the class stack as it stood when that
text was scanned (outer to inner). Cascade rules live here, not in the core:
later (inner) entries override earlier ones, attribute by attribute.

Two ways to build a Theme:

- ``Theme.from_css(name, css)`` reads highlight.js style sheets
  (``.hljs-keyword { color: #a626a4; font-weight: bold }``) with tinycss2.
  Sheets that carry ``@media (prefers-color-scheme: dark)`` blocks yield a
  light and a dark variant.
- ``Theme.from_pygments(style_name)`` reads a Pygments style, keyed by the
  short classes Pygments' HTML formatter emits (``k``, ``nf``, ``s2``...).

Thread Safety:
Style and Theme are immutable. Safe to share across threads.

"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Protocol

import tinycss2

from tinta.errors import ThemeError
from tinta.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Style:
    """Resolved text attributes for one run.

    ``None`` means "not set here": the attribute is inherited from whatever
    the style is merged over.

    Attributes:
        color: Foreground color (CSS color string, e.g. ``#a626a4``)
        background: Background color
        bold: Bold weight
        italic: Italic style
        underline: Underline decoration

    """

    color: str | None = None
    background: str | None = None
    bold: bool | None = None
    italic: bool | None = None
    underline: bool | None = None

    def merge(self, other: Style) -> Style:
        """Return a style where every attribute set on ``other`` wins."""
        return Style(
            color=other.color if other.color is not None else self.color,
            background=other.background if other.background is not None else self.background,
            bold=other.bold if other.bold is not None else self.bold,
            italic=other.italic if other.italic is not None else self.italic,
            underline=other.underline if other.underline is not None else self.underline,
        )

    def to_css(self) -> str:
        """Render as inline CSS declarations (set attributes only)."""
        parts: list[str] = []
        if self.color is not None:
            parts.append(f"color: {self.color}")
        if self.background is not None:
            parts.append(f"background-color: {self.background}")
        if self.bold is not None:
            parts.append(f"font-weight: {'bold' if self.bold else 'normal'}")
        if self.italic is not None:
            parts.append(f"font-style: {'italic' if self.italic else 'normal'}")
        if self.underline is not None:
            parts.append(f"text-decoration: {'underline' if self.underline else 'none'}")
        return "; ".join(parts)


class ThemeResolver(Protocol):
    """Protocol for theme resolvers.

    Contract:
        - MUST be deterministic and side-effect free
        - MUST accept any stack of opaque class entries (an entry may hold
          several space-separated classes)
    """

    def resolve(self, stack: tuple[str, ...]) -> Any:
        """Return the style for text under ``stack`` (outer to inner)."""
        ...


# Support for simple callable-based resolvers
SimpleResolver = Callable[[tuple[str, ...]], Any]


class Theme:
    """Immutable class-to-style table with cascading resolution.

    Usage:
            >>> theme = Theme("demo", {"hljs-keyword": Style(bold=True)}, base=Style(color="#000"))
            >>> theme.resolve(("hljs", "hljs-keyword"))
            Style(color='#000', background=None, bold=True, italic=None, underline=None)

    Compound CSS selectors (``.hljs-title.class_``) are stored under the
    dotted key ``hljs-title.class_`` and apply to a stack entry carrying
    exactly those classes.

    """

    __slots__ = ("_name", "_rules", "_base")

    def __init__(
        self,
        name: str,
        rules: Mapping[str, Style] | None = None,
        *,
        base: Style | None = None,
    ) -> None:
        self._name = name
        self._rules: Mapping[str, Style] = MappingProxyType(dict(rules or {}))
        self._base = base or Style()

    @property
    def name(self) -> str:
        return self._name

    @property
    def rules(self) -> Mapping[str, Style]:
        """Read-only class-to-style table."""
        return self._rules

    @property
    def base(self) -> Style:
        """Style applied beneath every stack."""
        return self._base

    def resolve(self, stack: tuple[str, ...]) -> Style:
        """Cascade the rules for every entry of ``stack``, outer to inner."""
        style = self._base
        rules = self._rules
        for entry in stack:
            classes = entry.split()
            for cls in classes:
                rule = rules.get(cls)
                if rule is not None:
                    style = style.merge(rule)
            if len(classes) > 1:
                rule = rules.get(".".join(classes))
                if rule is not None:
                    style = style.merge(rule)
        return style

    __call__ = resolve

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Theme):
            return NotImplemented
        return (
            self._name == other._name
            and self._base == other._base
            and dict(self._rules) == dict(other._rules)
        )

    def __hash__(self) -> int:
        return hash((self._name, self._base, frozenset(self._rules.items())))

    def __repr__(self) -> str:
        return f"Theme({self._name!r}, {len(self._rules)} rules)"

    @classmethod
    def from_css(
        cls,
        name: str,
        css: str,
        *,
        base_class: str = "hljs",
        dark: bool = False,
    ) -> Theme:
        """Build a theme from a highlight.js style sheet.

        Only simple class selectors (``.a`` or ``.a.b``) are read; other
        selectors are skipped. Declarations for the ``base_class`` rule
        become the theme's base style.

        Top-level rules apply to both color schemes. Rules inside
        ``@media (prefers-color-scheme: dark)`` (or ``light``) apply only
        to that variant, in source order. Other at-rules are ignored.

        Args:
            name: Theme name
            css: Style sheet text
            base_class: Class of the root element in the engine's output
            dark: Read the dark variant of the sheet

        Returns:
            New Theme

        Raises:
            ThemeError: The style sheet has no usable rules
        """
        nodes = tinycss2.parse_stylesheet(css, skip_comments=True, skip_whitespace=True)
        rules: dict[str, Style] = {}
        for selectors, declarations in _iter_css_rules(nodes, dark=dark):
            style = _style_from_declarations(declarations)
            for selector in selectors.split(","):
                key = _class_key(selector.strip())
                if key is None:
                    continue
                previous = rules.get(key)
                rules[key] = previous.merge(style) if previous is not None else style

        if not rules:
            raise ThemeError(name, "style sheet contains no class rules")

        base = rules.pop(base_class, Style())
        logger.debug("Loaded CSS theme %s with %d rules", name, len(rules))
        return cls(name, rules, base=base)

    @classmethod
    def from_pygments(cls, style_name: str) -> Theme:
        """Build a theme from a Pygments style.

        Args:
            style_name: Registered Pygments style name (e.g. ``"friendly"``)

        Returns:
            New Theme keyed by Pygments' short token classes

        Raises:
            ThemeError: Pygments is missing or the style is unknown
        """
        try:
            from pygments.styles import get_style_by_name
            from pygments.token import Token
            from pygments.util import ClassNotFound
        except ImportError as exc:
            raise ThemeError(style_name, "Pygments is not installed") from exc

        try:
            style_cls = get_style_by_name(style_name)
        except ClassNotFound as exc:
            raise ThemeError(style_name, "unknown Pygments style") from exc

        rules: dict[str, Style] = {}
        for ttype, ndef in style_cls:
            css_class = _pygments_class(ttype)
            if css_class:
                rules[css_class] = _style_from_pygments(ndef)

        root = style_cls.style_for_token(Token)
        base = Style(
            color=_pygments_color(root["color"]),
            background=style_cls.background_color or None,
        )
        return cls(style_name, rules, base=base)


# =============================================================================
# CSS reading
# =============================================================================

_CLASS_SELECTOR = re.compile(r"^(?:\.[A-Za-z_][\w-]*)+$")


def _iter_css_rules(nodes: Iterable[Any], *, dark: bool) -> Iterator[tuple[str, list[Any]]]:
    """Yield (selectors, declarations) for the rules that apply, in source order.

    Top-level rules always apply. Rules nested in a color-scheme media block
    apply only to that scheme; every other at-rule is skipped.
    """
    for node in nodes:
        if node.type == "qualified-rule":
            prelude = [token for token in node.prelude if token.type != "comment"]
            declarations = tinycss2.parse_declaration_list(
                node.content, skip_comments=True, skip_whitespace=True
            )
            yield tinycss2.serialize(prelude).strip(), declarations
        elif node.type == "at-rule":
            scheme = _color_scheme(node)
            if scheme is None or node.content is None:
                logger.debug("Skipping @%s rule", node.lower_at_keyword)
                continue
            if scheme == ("dark" if dark else "light"):
                nested = tinycss2.parse_stylesheet(
                    node.content, skip_comments=True, skip_whitespace=True
                )
                yield from _iter_css_rules(nested, dark=dark)
        elif node.type == "error":
            logger.debug("Ignoring malformed CSS at line %d: %s", node.source_line, node.message)


def _color_scheme(rule: Any) -> str | None:
    """Return "dark" or "light" for a ``prefers-color-scheme`` media rule."""
    if rule.lower_at_keyword != "media":
        return None
    query = "".join(tinycss2.serialize(rule.prelude).split()).lower()
    for scheme in ("dark", "light"):
        if query == f"(prefers-color-scheme:{scheme})":
            return scheme
    return None


def _class_key(selector: str) -> str | None:
    """Map ``.a.b`` to ``a.b``; None for anything but a class chain."""
    if not _CLASS_SELECTOR.match(selector):
        return None
    return selector[1:]


def _style_from_declarations(declarations: Iterable[Any]) -> Style:
    color: str | None = None
    background: str | None = None
    bold: bool | None = None
    italic: bool | None = None
    underline: bool | None = None

    for declaration in declarations:
        if declaration.type != "declaration":
            continue
        prop = declaration.lower_name
        value = tinycss2.serialize([t for t in declaration.value if t.type != "comment"]).strip()
        lowered = value.lower()

        if prop == "color":
            color = value
        elif prop in ("background", "background-color"):
            if "url(" not in lowered and "gradient" not in lowered:
                background = value
        elif prop == "font-weight":
            if lowered in ("bold", "bolder"):
                bold = True
            elif lowered.isdigit():
                bold = int(lowered) >= 600
            elif lowered in ("normal", "lighter"):
                bold = False
        elif prop == "font-style":
            italic = lowered in ("italic", "oblique")
        elif prop in ("text-decoration", "text-decoration-line"):
            underline = "underline" in lowered

    return Style(color=color, background=background, bold=bold, italic=italic, underline=underline)


# =============================================================================
# Pygments reading
# =============================================================================


def _pygments_class(ttype: Any) -> str:
    """Short CSS class Pygments' HTML formatter emits for a token type."""
    from pygments.token import STANDARD_TYPES

    fname = STANDARD_TYPES.get(ttype)
    if fname is not None:
        return fname
    aname = ""
    while fname is None:
        aname = ttype[-1] + aname
        ttype = ttype.parent
        fname = STANDARD_TYPES.get(ttype)
    return fname + aname


def _pygments_color(value: str | None) -> str | None:
    if not value:
        return None
    return value if value.startswith("#") else f"#{value}"


def _style_from_pygments(ndef: Mapping[str, Any]) -> Style:
    return Style(
        color=_pygments_color(ndef.get("color")),
        background=_pygments_color(ndef.get("bgcolor")),
        bold=True if ndef.get("bold") else None,
        italic=True if ndef.get("italic") else None,
        underline=True if ndef.get("underline") else None,
    )
