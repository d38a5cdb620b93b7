"""
Tokenizer adapter for feedscrub.

Wraps :class:`html.parser.HTMLParser` so that markup is turned into the closed
token types from :mod:`feedscrub.tokens`. Character references are decoded,
comments, doctypes and processing instructions are dropped, and input beyond
``MAX_INPUT_SIZE`` bytes is refused, since the standard parser degrades badly
on large malformed documents.
"""

from __future__ import annotations

from html.parser import HTMLParser
from typing import Iterable, List, Optional, Tuple

from .config import MAX_INPUT_SIZE
from .tokens import (
    Attribute,
    EndTagToken,
    SelfClosingTagToken,
    StartTagToken,
    TextToken,
    Token,
)


class TokenizerError(ValueError):
    """Raised when markup cannot be turned into a token stream."""


def _normalize_attrs(attrs: Iterable[Tuple[str, Optional[str]]]) -> Tuple[Attribute, ...]:
    # Valueless attributes such as ``allowfullscreen`` come through as None
    return tuple((name, value if value is not None else "") for name, value in attrs)


class _TokenCollector(HTMLParser):
    """HTMLParser subclass that records events as tokens and caps its input size."""

    # Elements whose content is raw text, as an HTML5 tokenizer treats them
    CDATA_CONTENT_ELEMENTS = ("script", "style", "iframe", "noscript", "noembed", "noframes", "xmp")

    def __init__(self, max_feed_size: int):
        super().__init__(convert_charrefs=True)
        self.tokens: List[Token] = []
        self._max_feed_size = max_feed_size
        self._fed = 0

    def feed(self, data: str) -> None:
        self._fed += len(data.encode("utf-8", "surrogatepass"))
        if self._fed > self._max_feed_size:
            raise TokenizerError("HTML input exceeds maximum allowed size")
        super().feed(data)

    def handle_starttag(self, tag, attrs):
        self.tokens.append(StartTagToken(tag, _normalize_attrs(attrs)))

    def handle_startendtag(self, tag, attrs):
        self.tokens.append(SelfClosingTagToken(tag, _normalize_attrs(attrs)))

    def handle_endtag(self, tag):
        self.tokens.append(EndTagToken(tag))

    def handle_data(self, data):
        if data:
            self.tokens.append(TextToken(data))


def tokenize(html: str, max_size: Optional[int] = None) -> List[Token]:
    """
    Tokenize an HTML fragment.

    Args:
        html: Markup to tokenize
        max_size: Byte limit for the input, defaults to ``MAX_INPUT_SIZE``

    Returns:
        The tokens in document order

    Raises:
        TokenizerError: If the input is too large or the parser fails on it
    """
    parser = _TokenCollector(MAX_INPUT_SIZE if max_size is None else max_size)
    try:
        parser.feed(html)
        parser.close()
    except TokenizerError:
        raise
    except (AssertionError, ValueError) as exc:
        raise TokenizerError(f"Malformed HTML: {exc}") from exc
    return parser.tokens
