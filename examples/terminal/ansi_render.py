"""Print highlighted code to a truecolor terminal.

Requires: pip install tinta[syntax]

Each run's style becomes an ANSI escape sequence; the rendering layer only
ever sees decoded text slices and resolved styles.
"""

import sys

from tinta import Highlighter, Style

RESET = "\x1b[0m"


def _rgb(color: str) -> tuple[int, int, int] | None:
    value = color.lstrip("#")
    if len(value) == 3:
        value = "".join(c * 2 for c in value)
    if len(value) != 6:
        return None
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def ansi(style: Style) -> str:
    codes: list[str] = []
    if style.bold:
        codes.append("1")
    if style.italic:
        codes.append("3")
    if style.underline:
        codes.append("4")
    if style.color and (rgb := _rgb(style.color)):
        codes.append("38;2;{};{};{}".format(*rgb))
    return f"\x1b[{';'.join(codes)}m" if codes else ""


def main() -> None:
    path = sys.argv[1] if len(sys.argv) > 1 else __file__
    language = sys.argv[2] if len(sys.argv) > 2 else None
    with open(path, encoding="utf-8") as f:
        code = f.read()

    highlighter = Highlighter(theme="monokai")
    result = highlighter.highlight(code, language)
    if result is None:
        print(code)
        return

    for text, style in result:
        sys.stdout.write(ansi(style) + text + RESET)


if __name__ == "__main__":
    main()
