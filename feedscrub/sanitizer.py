"""
HTML sanitizer for feed article bodies.

A single forward pass over the token stream decides, for each token, whether it
is emitted, rewritten or dropped. Only three pieces of state cross token
boundaries: the stack of kept open tags, the depth of blocked subtrees
(script, style, noscript) and the most recent start tag, which identifies
iframe fallback text.
"""

from __future__ import annotations

import html as _html
from typing import Iterable, List, Optional, Sequence, Tuple, assert_never

from loguru import logger

from .attributes import SanitizedAttribute, render_attributes, sanitize_attributes
from .policy import (
    VIDEO_WRAPPER_CLOSE,
    VIDEO_WRAPPER_OPEN,
    TagPolicy,
    classify_tag,
    has_required_attributes,
    is_blocked_tag,
    is_valid_tag,
)
from .tokenizer import TokenizerError, tokenize
from .tokens import EndTagToken, SelfClosingTagToken, StartTagToken, TextToken, Token
from .validation import is_video_iframe


def _serialize_start_tag(tag: str, attributes: Sequence[SanitizedAttribute], self_closing: bool) -> str:
    end = "/>" if self_closing else ">"
    if not attributes:
        return f"<{tag}{end}"
    return f"<{tag} {render_attributes(attributes)}{end}"


class _Sanitizer:
    """Per-call sanitizer state; a new instance is created for every document."""

    def __init__(self, base_url: str):
        self.base_url = base_url
        self.buffer: List[str] = []
        self.tag_stack: List[str] = []
        self.blocked_depth = 0
        self.parent_tag: Optional[str] = None

    def feed(self, token: Token) -> None:
        if isinstance(token, TextToken):
            self._handle_text(token)
        elif isinstance(token, StartTagToken):
            self._handle_start_tag(token)
        elif isinstance(token, EndTagToken):
            self._handle_end_tag(token)
        elif isinstance(token, SelfClosingTagToken):
            self._handle_self_closing_tag(token)
        else:
            assert_never(token)

    def result(self) -> str:
        return "".join(self.buffer)

    def _handle_text(self, token: TextToken) -> None:
        if self.blocked_depth > 0:
            return

        # An iframe never has fallback content in the output
        if self.parent_tag == "iframe":
            return

        self.buffer.append(_html.escape(token.data))

    def _handle_start_tag(self, token: StartTagToken) -> None:
        tag = token.name
        self.parent_tag = tag

        policy = classify_tag(tag)
        if policy is TagPolicy.BLOCK_SUBTREE:
            self.blocked_depth += 1
            return
        if policy is TagPolicy.SKIP or self.blocked_depth > 0:
            return

        self._write_tag(tag, token.attrs, self_closing=False)

    def _handle_end_tag(self, token: EndTagToken) -> None:
        tag = token.name

        # iframes are closed as soon as they are opened
        if tag == "iframe":
            if self.parent_tag == "iframe":
                self.parent_tag = None
            return

        if is_blocked_tag(tag):
            self.blocked_depth = max(0, self.blocked_depth - 1)
            return
        if self.blocked_depth > 0:
            return

        # Any open occurrence authorizes the close; feed markup is rarely balanced
        if is_valid_tag(tag) and tag in self.tag_stack:
            self.buffer.append(f"</{tag}>")

    def _handle_self_closing_tag(self, token: SelfClosingTagToken) -> None:
        policy = classify_tag(token.name)
        # Browsers ignore the slash on <script/>, so its subtree opens as usual
        if policy is TagPolicy.BLOCK_SUBTREE:
            self.blocked_depth += 1
            return
        if self.blocked_depth > 0 or policy is TagPolicy.SKIP:
            return

        self._write_tag(token.name, token.attrs, self_closing=True)

    def _write_tag(self, tag: str, attrs: Iterable[Tuple[str, str]], self_closing: bool) -> None:
        attributes = sanitize_attributes(self.base_url, tag, attrs)
        if not has_required_attributes(tag, (name for name, _ in attributes)):
            logger.debug(f"Dropping <{tag}> without its required attributes")
            return

        if tag == "iframe":
            self._write_iframe(attributes)
            return

        self.buffer.append(_serialize_start_tag(tag, attributes, self_closing))
        if not self_closing:
            self.tag_stack.append(tag)

    def _write_iframe(self, attributes: Sequence[SanitizedAttribute]) -> None:
        src = next((value for name, value in attributes if name == "src"), None) or ""
        wrap = is_video_iframe(src)

        if wrap:
            self.buffer.append(VIDEO_WRAPPER_OPEN)
        self.buffer.append(_serialize_start_tag("iframe", attributes, self_closing=False))
        self.buffer.append("</iframe>")
        if wrap:
            self.buffer.append(VIDEO_WRAPPER_CLOSE)


def sanitize(base_url: str, html: str) -> str:
    """
    Sanitize an HTML fragment for rendering inside a trusted page.

    Args:
        base_url: URL of the document the fragment came from; relative URLs
            are resolved against it
        html: Untrusted markup

    Returns:
        Safe markup, or an empty string if the input could not be tokenized
    """
    if not html:
        return ""

    try:
        tokens = tokenize(html)
    except TokenizerError as exc:
        logger.warning(f"Discarding content from {base_url or 'unknown source'}: {exc}")
        return ""

    sanitizer = _Sanitizer(base_url)
    for token in tokens:
        sanitizer.feed(token)
    return sanitizer.result()
