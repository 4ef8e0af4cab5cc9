"""Property-based tests for the conversion pipeline using Hypothesis.

These tests verify invariants that should hold for any well-formed markup:
1. Decoded text equals the original code (tags stripped, entities decoded)
2. Run slices are contiguous and reproduce the decoded text
3. Each run carries the class stack under which its text was written
4. Open and close events balance and the stack returns to its base
"""

import html
from typing import Any

from hypothesis import given, settings
from hypothesis import strategies as st

from tinta import convert
from tinta.entities import decode_runs, find_entities
from tinta.events import EventType
from tinta.runs import Run, RunBuilder
from tinta.scanner import scan

CLASSES = ["hljs-keyword", "hljs-string", "hljs-title function_", "hljs-comment", "k", "nf"]

texts = st.text(max_size=12)
trees = st.recursive(
    texts.map(lambda t: ("text", t)),
    lambda children: st.tuples(
        st.just("span"), st.sampled_from(CLASSES), st.lists(children, max_size=4)
    ),
    max_leaves=25,
)
documents = st.lists(trees, max_size=6)


Item = tuple[str, str, tuple[str, ...]]


def _render(nodes: list[Any], stack: tuple[str, ...], items: list[Item]) -> None:
    for node in nodes:
        if node[0] == "text":
            items.append(("text", node[1], stack))
        else:
            _, cls, children = node
            items.append(("tag", f'<span class="{cls}">', stack))
            _render(children, (*stack, cls), items)
            items.append(("tag", "</span>", stack))


def _document(nodes: list[Any]) -> tuple[str, list[tuple[str, tuple[str, ...]]]]:
    """Render a tree to markup plus the runs a correct converter must yield.

    Consecutive text leaves form one chunk in the markup, so they are
    expected as one run.
    """
    items: list[Item] = []
    _render(nodes, ("hljs",), items)

    markup = "".join(html.escape(value) if kind == "text" else value for kind, value, _ in items)
    runs: list[tuple[str, tuple[str, ...]]] = []
    pending = ""
    pending_stack: tuple[str, ...] = ("hljs",)
    for kind, value, stack in items:
        if kind == "text":
            pending += value
            pending_stack = stack
            continue
        if pending:
            runs.append((pending, pending_stack))
        pending = ""
    if pending:
        runs.append((pending, pending_stack))
    return markup, runs


def _identity(stack: tuple[str, ...]) -> tuple[str, ...]:
    return stack


class TestConversionProperties:
    @given(nodes=documents)
    @settings(max_examples=200)
    def test_text_is_the_original_code(self, nodes: list[Any]) -> None:
        markup, expected = _document(nodes)
        result = convert(markup, _identity)
        assert result.text == "".join(text for text, _ in expected)

    @given(nodes=documents)
    @settings(max_examples=200)
    def test_runs_are_contiguous_and_cover_text(self, nodes: list[Any]) -> None:
        markup, _ = _document(nodes)
        result = convert(markup, _identity)
        position = 0
        for run in result.runs:
            assert run.start == position
            assert run.length > 0
            position = run.end
        assert position == len(result.text)
        assert "".join(text for text, _ in result) == result.text

    @given(nodes=documents)
    @settings(max_examples=200)
    def test_runs_carry_their_stack(self, nodes: list[Any]) -> None:
        markup, expected = _document(nodes)
        result = convert(markup, _identity)
        assert list(result) == expected

    @given(nodes=documents)
    @settings(max_examples=100)
    def test_spans_balance(self, nodes: list[Any]) -> None:
        markup, _ = _document(nodes)
        events = list(scan(markup))
        opens = sum(1 for e in events if e.type is EventType.OPEN_SPAN)
        closes = sum(1 for e in events if e.type is EventType.CLOSE_SPAN)
        assert opens == closes

        builder = RunBuilder(_identity, strict=True)
        for event in events:
            builder.feed(event)
        builder.finish()
        assert builder.stack.snapshot() == ("hljs",)


class TestEntityProperties:
    @given(text=st.text(max_size=40))
    @settings(max_examples=200)
    def test_length_shrinks_by_decoded_entities(self, text: str) -> None:
        escaped = html.escape(text)
        matches = [m for m in find_entities(escaped) if m.decoded]
        total = sum(m.length for m in matches)

        result = convert(escaped, _identity)
        assert len(result.text) == len(escaped) - (total - len(matches))
        assert result.text == text

    @given(text=st.text(alphabet=st.characters(exclude_characters="&"), max_size=40))
    @settings(max_examples=100)
    def test_text_without_entities_is_unchanged(self, text: str) -> None:
        halves = [Run(text[: len(text) // 2], (), 1), Run(text[len(text) // 2 :], (), 2)]
        result = decode_runs(halves)
        assert result.text == text
        assert [r.length for r in result.runs] == [len(r.text) for r in halves]
