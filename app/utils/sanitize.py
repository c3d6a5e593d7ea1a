"""
Markup stripping for user-submitted review text.

Reviews are stored and scored as plain text. sanitize_content() removes every
HTML tag and attribute (nothing is whitelisted), drops the contents of
elements whose text is never meant to be shown, strips invisible formatting
characters, and escapes the characters that would let the remaining text be
parsed as markup again.

The result is stable under repeated application:
    sanitize_content(sanitize_content(x)) == sanitize_content(x)
"""

import re
from html import escape
from html.parser import HTMLParser

# Elements whose text content is discarded along with the tags
NON_TEXT_TAGS = frozenset({"script", "style", "textarea", "option"})

# Zero-width space, zero-width non-joiner, zero-width joiner, byte order mark
INVISIBLE_CHARS = re.compile("[\u200b-\u200d\ufeff]")


class _TextExtractor(HTMLParser):
    """Collects the text nodes of a document, ignoring all markup."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.parts: list[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in NON_TEXT_TAGS:
            self._skip_depth += 1

    def handle_endtag(self, tag: str) -> None:
        if tag in NON_TEXT_TAGS and self._skip_depth:
            self._skip_depth -= 1

    def handle_data(self, data: str) -> None:
        if not self._skip_depth:
            self.parts.append(data)


def strip_invisible(text: str) -> str:
    """Remove zero-width and byte-order-mark characters."""
    return INVISIBLE_CHARS.sub("", text)


def sanitize_content(text: str) -> str:
    """
    Strip all markup from user text.

    Args:
        text: Raw text as submitted

    Returns:
        Plain text with tags, attributes and invisible characters removed and
        &, <, > escaped
    """
    if not text:
        return ""

    parser = _TextExtractor()
    parser.feed(text)
    parser.close()

    plain = strip_invisible("".join(parser.parts))
    return escape(plain, quote=False)
