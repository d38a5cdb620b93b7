"""
Resource validation for feedscrub.
Decides whether a resolved URL or an embed source is safe to reference. All
checks are string and host comparisons; nothing is fetched.
"""

from .policy import (
    ALLOWED_DATA_URI_PREFIXES,
    ALLOWED_IFRAME_DOMAINS,
    ALLOWED_URI_SCHEMES,
    BLOCKED_RESOURCES,
    VIDEO_IFRAME_DOMAINS,
)
from .utils.urls import absolute_url, url_domain


def has_valid_uri_scheme(url: str) -> bool:
    """Return True if the text before the first colon is an allowlisted scheme."""
    scheme = url.split(":", 1)[0]
    return scheme in ALLOWED_URI_SCHEMES


def is_blocked_resource(url: str) -> bool:
    """Return True if the URL contains a known tracking or share endpoint."""
    return any(blocked in url for blocked in BLOCKED_RESOURCES)


def is_safe_resource_url(url: str) -> bool:
    """Return True for a resolved URL with an allowed scheme that is not blocklisted."""
    return bool(url) and has_valid_uri_scheme(url) and not is_blocked_resource(url)


def is_valid_iframe_source(base_url: str, src: str) -> bool:
    """Return True if src may be embedded in an iframe on a page at base_url."""
    domain = url_domain(src)
    if not domain:
        return False

    # The allowlisted host alone is not enough: javascript://www.youtube.com/ has one too
    if not is_safe_resource_url(absolute_url(src, base_url)):
        return False

    # Same-origin embeds are always allowed
    if domain == url_domain(base_url):
        return True

    return domain in ALLOWED_IFRAME_DOMAINS


def is_video_iframe(src: str) -> bool:
    """Return True if src points at a video platform that needs the responsive wrapper."""
    return url_domain(src) in VIDEO_IFRAME_DOMAINS


def is_valid_data_attribute(value: str) -> bool:
    """Return True if value is a data URI of an allowlisted image type."""
    return value.startswith(ALLOWED_DATA_URI_PREFIXES)
