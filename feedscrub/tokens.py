"""
Token types produced by the tokenizer and consumed by the sanitizer.

The union ``Token`` is closed: the sanitizer dispatches over exactly these four
kinds and raises on anything else.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple, Union

Attribute = Tuple[str, str]


@dataclass(frozen=True)
class TextToken:
    """Character data, with character references already decoded."""

    data: str


@dataclass(frozen=True)
class StartTagToken:
    """An opening tag such as ``<p class="x">``."""

    name: str
    attrs: Tuple[Attribute, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class EndTagToken:
    """A closing tag such as ``</p>``."""

    name: str


@dataclass(frozen=True)
class SelfClosingTagToken:
    """A tag written with a trailing slash such as ``<br/>``."""

    name: str
    attrs: Tuple[Attribute, ...] = field(default_factory=tuple)


Token = Union[TextToken, StartTagToken, EndTagToken, SelfClosingTagToken]
