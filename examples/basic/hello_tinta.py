"""Convert highlight.js markup to styled runs without an HTML parser."""

from tinta import Theme, convert

theme = Theme.from_css(
    "mini",
    ".hljs { color: #383a42 } .hljs-keyword { color: #a626a4; font-weight: bold }",
)
result = convert('<span class="hljs-keyword">if</span> a &amp;&amp; b', theme)

print(repr(result.text))
for text, style in result:
    print(f"{text!r:12} {style.to_css()}")
