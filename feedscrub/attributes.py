"""
Attribute policy for feedscrub.

Filters a tag's source attributes against the allowlist, rewrites URL-bearing
values, and appends the fixed defensive attributes for the tag.
"""

from __future__ import annotations

import html as _html
import re
from typing import Iterable, List, Optional, Tuple

from loguru import logger

from .policy import EXTERNAL_RESOURCE_ATTRIBUTES, EXTRA_ATTRIBUTES, is_valid_attribute
from .utils.urls import absolute_url
from .validation import (
    is_safe_resource_url,
    is_valid_data_attribute,
    is_valid_iframe_source,
)

SanitizedAttribute = Tuple[str, Optional[str]]

_SRCSET_SPLIT_PATTERN = re.compile(r",\s+")


def is_valid_width_or_density_descriptor(value: str) -> bool:
    """Return True for a srcset descriptor such as ``640w`` or ``1.5x``."""
    if not value or value[-1] not in ("w", "x"):
        return False

    try:
        float(value[:-1])
    except ValueError:
        return False
    return True


def sanitize_srcset(base_url: str, value: str) -> str:
    """
    Rewrite a srcset value so every candidate URL is absolute.

    Candidates whose URL cannot be resolved, or resolves to a disallowed
    scheme, are dropped. A malformed descriptor is dropped while its URL is
    kept. ``data:`` candidates are left as they are.
    """
    sanitized_sources = []
    for raw_source in _SRCSET_SPLIT_PATTERN.split(value):
        raw_source = raw_source.strip()
        if not raw_source:
            continue

        parts = raw_source.split(" ")
        source = parts[0]
        if not source.startswith("data:"):
            source = absolute_url(source, base_url)
            if not is_safe_resource_url(source):
                continue

        if len(parts) == 2 and is_valid_width_or_density_descriptor(parts[1]):
            source = f"{source} {parts[1]}"

        sanitized_sources.append(source)

    return ", ".join(sanitized_sources)


def _sanitize_value(base_url: str, tag: str, name: str, value: str) -> Optional[str]:
    """Return the value to emit for an allowlisted attribute, or None to drop it."""
    if tag in ("img", "source") and name == "srcset":
        value = sanitize_srcset(base_url, value)
        return value or None

    if name not in EXTERNAL_RESOURCE_ATTRIBUTES:
        return value

    if tag == "iframe":
        return value if is_valid_iframe_source(base_url, value) else None

    # Data URIs are not relative and never go through the resolver
    if tag == "img" and name == "src" and is_valid_data_attribute(value):
        return value

    resolved = absolute_url(value, base_url)
    if not is_safe_resource_url(resolved):
        return None
    return resolved


def get_extra_attributes(tag: str) -> Tuple[SanitizedAttribute, ...]:
    """Return the defensive attributes always appended to the tag."""
    return EXTRA_ATTRIBUTES.get(tag, ())


def sanitize_attributes(
    base_url: str, tag: str, attributes: Iterable[Tuple[str, str]]
) -> List[SanitizedAttribute]:
    """
    Filter and rewrite the attributes of a kept tag.

    Args:
        base_url: URL relative values are resolved against
        tag: Lowercase tag name
        attributes: Source attributes in document order

    Returns:
        Surviving (name, value) pairs in source order, followed by the tag's
        defensive attributes. A value of None marks a bare attribute.
    """
    sanitized: List[SanitizedAttribute] = []

    for name, value in attributes:
        if not is_valid_attribute(tag, name):
            logger.debug(f"Dropping attribute {name!r} on <{tag}>")
            continue

        clean_value = _sanitize_value(base_url, tag, name, value)
        if clean_value is None:
            logger.debug(f"Dropping unsafe {name!r} value on <{tag}>")
            continue

        sanitized.append((name, clean_value))

    sanitized.extend(get_extra_attributes(tag))
    return sanitized


def render_attributes(attributes: Iterable[SanitizedAttribute]) -> str:
    """Serialize attributes as ``name="value"`` pairs joined by spaces."""
    rendered = []
    for name, value in attributes:
        if value is None:
            rendered.append(name)
        else:
            rendered.append(f'{name}="{_html.escape(value)}"')
    return " ".join(rendered)
