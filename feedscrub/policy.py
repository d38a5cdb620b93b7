"""
Sanitizer policy tables for feedscrub.

Every table is built once at import time and is immutable afterwards. Tag and
attribute names are stored lowercase because the tokenizer lowercases them.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

_NO_ATTRS: frozenset = frozenset()

ALLOWED_TAGS: Mapping[str, frozenset] = MappingProxyType(
    {
        "img": frozenset({"alt", "title", "src", "srcset", "sizes"}),
        "picture": _NO_ATTRS,
        "audio": frozenset({"src"}),
        "video": frozenset({"poster", "height", "width", "src"}),
        "source": frozenset({"src", "type", "srcset", "sizes", "media"}),
        "dt": _NO_ATTRS,
        "dd": _NO_ATTRS,
        "dl": _NO_ATTRS,
        "table": _NO_ATTRS,
        "caption": _NO_ATTRS,
        "thead": _NO_ATTRS,
        "tbody": _NO_ATTRS,
        "tfoot": _NO_ATTRS,
        "tr": _NO_ATTRS,
        "td": frozenset({"rowspan", "colspan"}),
        "th": frozenset({"rowspan", "colspan"}),
        "h1": _NO_ATTRS,
        "h2": _NO_ATTRS,
        "h3": _NO_ATTRS,
        "h4": _NO_ATTRS,
        "h5": _NO_ATTRS,
        "h6": _NO_ATTRS,
        "strong": _NO_ATTRS,
        "em": _NO_ATTRS,
        "code": _NO_ATTRS,
        "pre": _NO_ATTRS,
        "blockquote": _NO_ATTRS,
        "q": frozenset({"cite"}),
        "p": _NO_ATTRS,
        "ul": _NO_ATTRS,
        "li": _NO_ATTRS,
        "ol": _NO_ATTRS,
        "br": _NO_ATTRS,
        "del": _NO_ATTRS,
        "a": frozenset({"href", "title"}),
        "figure": _NO_ATTRS,
        "figcaption": _NO_ATTRS,
        "cite": _NO_ATTRS,
        "time": frozenset({"datetime"}),
        "abbr": frozenset({"title"}),
        "acronym": frozenset({"title"}),
        "wbr": _NO_ATTRS,
        "dfn": _NO_ATTRS,
        "sub": _NO_ATTRS,
        "sup": _NO_ATTRS,
        "var": _NO_ATTRS,
        "samp": _NO_ATTRS,
        "s": _NO_ATTRS,
        "ins": _NO_ATTRS,
        "kbd": _NO_ATTRS,
        "rp": _NO_ATTRS,
        "rt": _NO_ATTRS,
        "rtc": _NO_ATTRS,
        "ruby": _NO_ATTRS,
        "iframe": frozenset({"width", "height", "frameborder", "src", "allowfullscreen"}),
    }
)

# SVG content elements; they share ALLOWED_SVG_ATTRS instead of per-tag sets
ALLOWED_SVG_TAGS = frozenset(
    {
        "svg",
        "g",
        "defs",
        "symbol",
        "desc",
        "path",
        "circle",
        "ellipse",
        "line",
        "polygon",
        "polyline",
        "rect",
        "text",
        "tspan",
        "lineargradient",
        "radialgradient",
        "stop",
        "clippath",
        "mask",
        "pattern",
        "marker",
    }
)

# Filter primitives are only meaningful inside <svg><filter>
ALLOWED_SVG_FILTERS = frozenset(
    {
        "filter",
        "feblend",
        "fecolormatrix",
        "fecomponenttransfer",
        "fecomposite",
        "feconvolvematrix",
        "fediffuselighting",
        "fedisplacementmap",
        "fedistantlight",
        "fedropshadow",
        "feflood",
        "fefunca",
        "fefuncb",
        "fefuncg",
        "fefuncr",
        "fegaussianblur",
        "femerge",
        "femergenode",
        "femorphology",
        "feoffset",
        "fepointlight",
        "fespecularlighting",
        "fespotlight",
        "fetile",
        "feturbulence",
    }
)

ALLOWED_SVG_ATTRS = frozenset(
    {
        "xmlns",
        "version",
        "viewbox",
        "preserveaspectratio",
        "width",
        "height",
        "x",
        "y",
        "x1",
        "x2",
        "y1",
        "y2",
        "cx",
        "cy",
        "r",
        "rx",
        "ry",
        "fx",
        "fy",
        "dx",
        "dy",
        "d",
        "points",
        "transform",
        "opacity",
        "fill",
        "fill-opacity",
        "fill-rule",
        "stroke",
        "stroke-width",
        "stroke-linecap",
        "stroke-linejoin",
        "stroke-miterlimit",
        "stroke-dasharray",
        "stroke-dashoffset",
        "stroke-opacity",
        "clip-rule",
        "offset",
        "stop-color",
        "stop-opacity",
        "gradientunits",
        "gradienttransform",
        "patternunits",
        "patterntransform",
        "markerwidth",
        "markerheight",
        "refx",
        "refy",
        "orient",
        "font-family",
        "font-size",
        "font-style",
        "font-weight",
        "text-anchor",
        "dominant-baseline",
    }
)

BLOCKED_TAGS = frozenset({"script", "style", "noscript"})

# See https://www.iana.org/assignments/uri-schemes/uri-schemes.xhtml
ALLOWED_URI_SCHEMES = frozenset(
    {
        "apt",
        "bitcoin",
        "callto",
        "dav",
        "davs",
        "ed2k",
        "facetime",
        "feed",
        "ftp",
        "geo",
        "git",
        "gopher",
        "http",
        "https",
        "irc",
        "irc6",
        "ircs",
        "itms",
        "itms-apps",
        "magnet",
        "mailto",
        "news",
        "nntp",
        "rtmp",
        "sftp",
        "sip",
        "sips",
        "skype",
        "spotify",
        "ssh",
        "steam",
        "svn",
        "svn+ssh",
        "tel",
        "webcal",
        "xmpp",
    }
)

# Share buttons and tracking pixels, matched as substrings of the resolved URL
BLOCKED_RESOURCES: Tuple[str, ...] = (
    "feedsportal.com",
    "api.flattr.com",
    "stats.wordpress.com",
    "plus.google.com/share",
    "twitter.com/share",
    "feeds.feedburner.com",
)

ALLOWED_IFRAME_DOMAINS = frozenset(
    {
        "bandcamp.com",
        "cdn.embedly.com",
        "invidio.us",
        "player.bilibili.com",
        "player.vimeo.com",
        "soundcloud.com",
        "vk.com",
        "w.soundcloud.com",
        "www.dailymotion.com",
        "www.youtube-nocookie.com",
        "www.youtube.com",
    }
)

VIDEO_IFRAME_DOMAINS = frozenset(
    {
        "player.bilibili.com",
        "player.vimeo.com",
        "www.dailymotion.com",
        "www.youtube-nocookie.com",
        "www.youtube.com",
    }
)

VIDEO_WRAPPER_OPEN = '<div class="video-wrapper">'
VIDEO_WRAPPER_CLOSE = "</div>"

ALLOWED_DATA_URI_PREFIXES: Tuple[str, ...] = (
    "data:image/avif",
    "data:image/apng",
    "data:image/png",
    "data:image/svg",
    "data:image/svg+xml",
    "data:image/jpg",
    "data:image/jpeg",
    "data:image/gif",
    "data:image/webp",
)

EXTERNAL_RESOURCE_ATTRIBUTES = frozenset({"src", "href", "poster", "cite"})

# Trusted literals appended to every kept tag of that name; None means a bare attribute
EXTRA_ATTRIBUTES: Mapping[str, Tuple[Tuple[str, Optional[str]], ...]] = MappingProxyType(
    {
        "a": (
            ("rel", "noopener noreferrer"),
            ("target", "_blank"),
            ("referrerpolicy", "no-referrer"),
        ),
        "video": (("controls", None),),
        "audio": (("controls", None),),
        "iframe": (
            ("sandbox", "allow-scripts allow-same-origin allow-popups"),
            ("loading", "lazy"),
        ),
        "img": (("loading", "lazy"),),
    }
)

# A tag listed here is dropped unless at least one of its attributes survived
REQUIRED_ATTRIBUTES: Mapping[str, frozenset] = MappingProxyType(
    {
        "a": frozenset({"href"}),
        "iframe": frozenset({"src"}),
        "img": frozenset({"src"}),
        "source": frozenset({"src", "srcset"}),
    }
)


class TagPolicy(Enum):
    """Structural outcome for a tag name."""

    KEEP = "keep"
    BLOCK_SUBTREE = "block_subtree"
    # Tag markers are dropped but children are still processed
    SKIP = "skip"


def is_valid_tag(name: str) -> bool:
    """Return True if the tag may appear in sanitized output."""
    return name in ALLOWED_TAGS or name in ALLOWED_SVG_TAGS or name in ALLOWED_SVG_FILTERS


def is_blocked_tag(name: str) -> bool:
    """Return True if the tag's whole subtree must be suppressed."""
    return name in BLOCKED_TAGS


def classify_tag(name: str) -> TagPolicy:
    if is_valid_tag(name):
        return TagPolicy.KEEP
    if is_blocked_tag(name):
        return TagPolicy.BLOCK_SUBTREE
    return TagPolicy.SKIP


def is_valid_attribute(tag: str, attribute: str) -> bool:
    """Return True if the attribute is allowlisted for the tag."""
    attrs = ALLOWED_TAGS.get(tag)
    if attrs is not None:
        return attribute in attrs
    # Filter primitives are valid tags but carry no attributes
    if tag in ALLOWED_SVG_TAGS:
        return attribute in ALLOWED_SVG_ATTRS
    return False


def has_required_attributes(tag: str, attribute_names: Iterable[str]) -> bool:
    """Return True unless the tag needs an attribute that is missing from attribute_names."""
    required = REQUIRED_ATTRIBUTES.get(tag)
    if required is None:
        return True
    return any(name in required for name in attribute_names)
