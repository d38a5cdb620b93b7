"""
URL helpers for feedscrub.
Resolves attribute values against the document base URL and extracts hosts
for iframe origin checks. Nothing here performs network access.
"""

import re
from urllib.parse import urljoin, urlsplit

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def absolute_url(href: str, base: str) -> str:
    """Resolve href against base, returning an empty string when either is unparsable."""
    # Control characters are rejected outright rather than silently stripped
    if _CONTROL_CHARS.search(href):
        return ""

    try:
        parsed = urlsplit(href)
    except ValueError:
        return ""

    if parsed.scheme:
        return href

    try:
        return urljoin(base, href)
    except ValueError:
        return ""


def url_domain(url: str) -> str:
    """Return the lowercased host (with port, without userinfo) of url, or an empty string."""
    try:
        netloc = urlsplit(url).netloc
    except ValueError:
        return ""

    return netloc.rpartition("@")[2].lower()
