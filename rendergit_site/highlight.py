"""Pygments-backed syntax highlighting and small text helpers."""

from __future__ import annotations

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_for_filename, guess_lexer
from pygments.lexers.special import TextLexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from rendergit_site.errors import ConfigError

DEFAULT_THEME = "dracula"
# set filename to something the lexer lookup recognizes as a patch
DIFF_FILENAME = "commit.diff"
TEXT_SNIFF_LEN = 1024


def bytes_human(n: int) -> str:
    units = ["B", "KiB", "MiB", "GiB", "TiB"]
    f = float(n)
    i = 0
    while f >= 1024.0 and i < len(units) - 1:
        f /= 1024.0
        i += 1
    return f"{int(f)} {units[i]}" if i == 0 else f"{f:.1f} {units[i]}"


def is_text(data: bytes) -> bool:
    """
    Report whether a significant prefix of ``data`` looks like UTF-8 text.

    Decoding errors or control characters other than common whitespace mark
    the data as binary. A multi-byte sequence cut off by the sniff window is
    ignored.
    """
    sample = data[:TEXT_SNIFF_LEN]
    text = sample.decode("utf-8", errors="replace")
    if len(sample) == TEXT_SNIFF_LEN:
        # last char may be incomplete
        text = text[:-1]
    for ch in text:
        if ch == "\ufffd":
            return False
        if ch < " " and ch not in "\n\t\f\r":
            return False
    return True


def count_lines(text: str) -> int:
    return len(text.split("\n"))


class Highlighter:
    """Renders source text as highlighted HTML in one color theme."""

    def __init__(self, theme: str = DEFAULT_THEME) -> None:
        try:
            self.style = get_style_by_name(theme)
        except ClassNotFound as e:
            raise ConfigError(f"unknown theme {theme!r}") from e
        self.theme = theme

    def _formatter(self) -> HtmlFormatter:
        return HtmlFormatter(
            style=self.style,
            linenos="table",
            anchorlinenos=True,
            lineanchors="L",
            cssclass="highlight",
        )

    def lexer_for(self, filename: str, text: str):
        try:
            return get_lexer_for_filename(filename, text)
        except ClassNotFound:
            pass
        try:
            return guess_lexer(text)
        except ClassNotFound:
            return TextLexer()

    def parse_text(self, filename: str, text: str) -> str:
        """Highlight ``text``, picking the lexer from ``filename`` when possible."""
        return highlight(text, self.lexer_for(filename, text), self._formatter())

    def parse_diff(self, text: str) -> str:
        return self.parse_text(DIFF_FILENAME, text)

    def css(self) -> str:
        return HtmlFormatter(style=self.style).get_style_defs(".highlight")
