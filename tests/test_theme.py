"""Tests for styles, themes and theme loading."""

import pytest

from tinta.errors import ThemeError
from tinta.theme import Style, Theme

ATOM_LIGHT = """
/* Atom One Light (excerpt) */
pre code.hljs { display: block; padding: 1em }
.hljs { color: #383a42; background: #fafafa }
.hljs-comment,
.hljs-quote { color: #a0a1a7; font-style: italic }
.hljs-keyword { color: #a626a4 }
.hljs-strong { font-weight: bold }
.hljs-emphasis { font-style: italic }
.hljs-section { font-weight: 700 }
.hljs-title.class_ { color: #c18401 }
.hljs-link { text-decoration: underline }
.hljs-keyword { font-weight: 400 !important }
"""


class TestStyle:
    def test_defaults_are_unset(self) -> None:
        style = Style()
        assert style.color is None
        assert style.bold is None

    def test_merge_overrides_set_attributes(self) -> None:
        outer = Style(color="#000", bold=True, background="#fff")
        inner = Style(color="#f00", bold=False)
        assert outer.merge(inner) == Style(color="#f00", bold=False, background="#fff")

    def test_merge_keeps_unset_attributes(self) -> None:
        outer = Style(italic=True)
        assert outer.merge(Style()) == outer

    def test_immutability(self) -> None:
        style = Style()
        with pytest.raises(AttributeError):
            style.color = "#000"  # type: ignore[misc]

    def test_to_css(self) -> None:
        style = Style(color="#a626a4", bold=True, italic=False)
        assert style.to_css() == "color: #a626a4; font-weight: bold; font-style: normal"

    def test_to_css_empty(self) -> None:
        assert Style().to_css() == ""


class TestThemeResolve:
    def _theme(self) -> Theme:
        return Theme(
            "demo",
            {
                "hljs-function": Style(color="#111", italic=True),
                "hljs-params": Style(color="#222"),
                "hljs-title": Style(bold=True),
                "function_": Style(underline=True),
                "hljs-title.function_": Style(color="#333"),
            },
            base=Style(color="#000", background="#fff"),
        )

    def test_base_only(self) -> None:
        assert self._theme().resolve(("hljs",)) == Style(color="#000", background="#fff")

    def test_inner_entries_override_outer(self) -> None:
        style = self._theme().resolve(("hljs", "hljs-function", "hljs-params"))
        assert style == Style(color="#222", background="#fff", italic=True)

    def test_multi_class_entry(self) -> None:
        style = self._theme().resolve(("hljs", "hljs-title function_"))
        assert style == Style(color="#333", background="#fff", bold=True, underline=True)

    def test_unknown_classes_fall_back_to_base(self) -> None:
        assert self._theme().resolve(("hljs", "nope")) == Style(color="#000", background="#fff")

    def test_theme_is_callable(self) -> None:
        theme = self._theme()
        assert theme(("hljs", "hljs-params")) == theme.resolve(("hljs", "hljs-params"))

    def test_rules_are_read_only(self) -> None:
        with pytest.raises(TypeError):
            self._theme().rules["x"] = Style()  # type: ignore[index]

    def test_equality_and_hash(self) -> None:
        assert self._theme() == self._theme()
        assert hash(self._theme()) == hash(self._theme())
        assert self._theme() != Theme("demo")


class TestFromCss:
    def test_base_rule(self) -> None:
        theme = Theme.from_css("atom-one-light", ATOM_LIGHT)
        assert theme.name == "atom-one-light"
        assert theme.base == Style(color="#383a42", background="#fafafa")
        assert "hljs" not in theme.rules

    def test_selector_groups(self) -> None:
        theme = Theme.from_css("atom-one-light", ATOM_LIGHT)
        assert theme.rules["hljs-comment"] == Style(color="#a0a1a7", italic=True)
        assert theme.rules["hljs-quote"] == theme.rules["hljs-comment"]

    def test_font_weight(self) -> None:
        theme = Theme.from_css("atom-one-light", ATOM_LIGHT)
        assert theme.rules["hljs-strong"].bold is True
        assert theme.rules["hljs-section"].bold is True

    def test_repeated_selector_merges(self) -> None:
        theme = Theme.from_css("atom-one-light", ATOM_LIGHT)
        assert theme.rules["hljs-keyword"] == Style(color="#a626a4", bold=False)

    def test_underline(self) -> None:
        theme = Theme.from_css("atom-one-light", ATOM_LIGHT)
        assert theme.rules["hljs-link"].underline is True

    def test_compound_selector(self) -> None:
        theme = Theme.from_css("atom-one-light", ATOM_LIGHT)
        style = theme.resolve(("hljs", "hljs-title class_"))
        assert style.color == "#c18401"

    def test_descendant_selectors_are_skipped(self) -> None:
        theme = Theme.from_css("atom-one-light", ATOM_LIGHT)
        assert not any(" " in key for key in theme.rules)

    def test_custom_base_class(self) -> None:
        theme = Theme.from_css("x", ".code { color: red } .kw { color: blue }", base_class="code")
        assert theme.base == Style(color="red")

    def test_no_rules_raises(self) -> None:
        with pytest.raises(ThemeError, match="no class rules"):
            Theme.from_css("empty", "/* nothing */ body { margin: 0 }")

SCHEMED = """
.hljs { color: #000; background: #fff }
.hljs-keyword { color: #a626a4 }
.hljs-string { color: #50a14f }
@media (prefers-color-scheme: dark) {
  .hljs { color: #fff; background: #000 }
  .hljs-keyword { color: #ffffff }
}
@media (prefers-color-scheme: light) {
  .hljs-string { font-style: italic }
}
@media print {
  .hljs-keyword { color: black }
}
"""


class TestCssColorSchemes:
    def test_media_rules_do_not_leak_into_light(self) -> None:
        theme = Theme.from_css("t", SCHEMED)
        assert theme.rules["hljs-keyword"].color == "#a626a4"
        assert theme.base == Style(color="#000", background="#fff")

    def test_light_block_applies_to_light(self) -> None:
        theme = Theme.from_css("t", SCHEMED)
        assert theme.rules["hljs-string"] == Style(color="#50a14f", italic=True)

    def test_dark_variant(self) -> None:
        theme = Theme.from_css("t", SCHEMED, dark=True)
        assert theme.rules["hljs-keyword"].color == "#ffffff"
        assert theme.rules["hljs-string"] == Style(color="#50a14f")
        assert theme.base == Style(color="#fff", background="#000")

    def test_other_media_blocks_are_ignored(self) -> None:
        for dark in (False, True):
            theme = Theme.from_css("t", SCHEMED, dark=dark)
            assert theme.rules["hljs-keyword"].color != "black"

    def test_sheet_without_dark_block(self) -> None:
        assert Theme.from_css("t", ATOM_LIGHT, dark=True) == Theme.from_css("t", ATOM_LIGHT)

    def test_only_media_rules(self) -> None:
        css = "@media (prefers-color-scheme: dark) { .hljs-title { color: #e5c07b } }"
        with pytest.raises(ThemeError):
            Theme.from_css("t", css)
        assert Theme.from_css("t", css, dark=True).rules["hljs-title"].color == "#e5c07b"


class TestCssReading:
    def test_comments_inside_rules(self) -> None:
        theme = Theme.from_css("t", ".hljs-tag /* tag */ { color: /* red */ #e45649 }")
        assert theme.rules["hljs-tag"].color == "#e45649"

    def test_important_is_stripped(self) -> None:
        theme = Theme.from_css("t", ".hljs-meta { color: #4078f2 !important }")
        assert theme.rules["hljs-meta"].color == "#4078f2"

    def test_functional_colors_are_kept_whole(self) -> None:
        theme = Theme.from_css("t", ".hljs-attr { color: rgb(152, 104, 1); background: none }")
        assert theme.rules["hljs-attr"].color == "rgb(152, 104, 1)"

    def test_image_backgrounds_are_skipped(self) -> None:
        theme = Theme.from_css("t", ".hljs-x { background: url(bg.png) }")
        assert theme.rules["hljs-x"].background is None

    def test_malformed_rule_does_not_break_the_sheet(self) -> None:
        theme = Theme.from_css("t", ".hljs-a { color: #111 } } .hljs-b { color: #222 }")
        assert theme.rules["hljs-a"].color == "#111"


class TestFromPygments:
    def test_keyword_rule(self) -> None:
        theme = Theme.from_pygments("default")
        keyword = theme.rules["k"]
        assert keyword.bold is True
        assert keyword.color is not None and keyword.color.startswith("#")

    def test_comment_is_italic(self) -> None:
        theme = Theme.from_pygments("default")
        assert theme.rules["c"].italic is True

    def test_background(self) -> None:
        theme = Theme.from_pygments("default")
        assert theme.base.background == "#f8f8f8"

    def test_resolves_pygments_stack(self) -> None:
        theme = Theme.from_pygments("monokai")
        style = theme.resolve(("highlight", "nf"))
        assert style.color is not None
        assert style.background == theme.base.background

    def test_unknown_style(self) -> None:
        with pytest.raises(ThemeError, match="unknown Pygments style"):
            Theme.from_pygments("no-such-style")
