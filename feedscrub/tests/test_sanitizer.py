"""
Unit tests for the sanitizer's token dispatch and output.

Every test goes through the public sanitize() call except where a token
sequence cannot be produced from markup.
"""

import re

import pytest

from feedscrub import sanitize, sanitizer
from feedscrub.policy import (
    ALLOWED_DATA_URI_PREFIXES,
    EXTRA_ATTRIBUTES,
    is_valid_attribute,
    is_valid_tag,
)
from feedscrub.tokenizer import TokenizerError, tokenize
from feedscrub.tokens import EndTagToken, SelfClosingTagToken, StartTagToken, TextToken
from feedscrub.validation import has_valid_uri_scheme

BASE = "https://ex.com"
A_EXTRAS = 'rel="noopener noreferrer" target="_blank" referrerpolicy="no-referrer"'
IFRAME_EXTRAS = 'sandbox="allow-scripts allow-same-origin allow-popups" loading="lazy"'

HOSTILE_INPUTS = [
    "<script>alert(1)</script><p>hi</p>",
    '<a href="javascript:alert(1)">x</a>',
    "<img src=x onerror=alert(1)>",
    '<iframe src="https://www.youtube.com/embed/1">fallback</iframe>tail',
    "<svg><script>alert(1)</script><path d='M0 0'/></svg>",
    "<style>body{display:none}</style><p style='color:red'>t</p>",
    "<<script>script>alert(1)<</script>/script>",
    '<a href="/x" title="&quot;&gt;<script>">l</a>',
    "<noscript><img src=x onerror=alert(1)></noscript>visible",
    "<p>unclosed <em>tags",
    "<p>a</p></p></em>",
    '<img src="/a.jpg" srcset="a.jpg 1x, bad, b.jpg 2x">',
    '<video src="/v.mp4" poster="javascript:x" autoplay></video>',
    '<a href="/a?x=1&amp;y=2">q&amp;a &nbsp;</a>',
    "<!-- <script>alert(1)</script> --><p>c</p>",
    '<iframe src="javascript://www.youtube.com/%0aalert(1)"></iframe>',
    '<div class="video-wrapper"><iframe src="https://player.vimeo.com/video/1"></iframe></div>',
    '<img src="data:image/png;base64,iVBORw0KGgo=" alt="dot">',
    '<a href="https://twitter.com/share?url=x">Share</a>',
    "<SCRIPT SRC=//evil.example/x.js></SCRIPT><P>Upper</P>",
]

_TAG_PATTERN = re.compile(r"<\s*(script|style|noscript)", re.IGNORECASE)


def test_script_is_removed_with_its_content():
    assert sanitize(BASE, "<script>alert(1)</script><p>hi</p>") == "<p>hi</p>"


def test_relative_link_is_resolved_and_hardened():
    assert sanitize(BASE, '<a href="/x">l</a>') == f'<a href="https://ex.com/x" {A_EXTRAS}>l</a>'


def test_image_with_unsafe_src_is_dropped():
    assert sanitize(BASE, '<img src="javascript:evil()">') == ""


def test_video_iframe_is_wrapped_and_auto_closed():
    output = sanitize("https://unrelated.org/post", '<iframe src="https://www.youtube.com/embed/1"></iframe>')
    assert output == (
        '<div class="video-wrapper">'
        f'<iframe src="https://www.youtube.com/embed/1" {IFRAME_EXTRAS}></iframe>'
        "</div>"
    )


def test_non_video_iframe_is_not_wrapped():
    output = sanitize(BASE, '<iframe src="https://w.soundcloud.com/player/?url=1"></iframe>')
    assert output == f'<iframe src="https://w.soundcloud.com/player/?url=1" {IFRAME_EXTRAS}></iframe>'


def test_same_origin_iframe_is_allowed():
    output = sanitize("https://ex.com/post/1", '<iframe src="https://ex.com/embed/2" width="560"></iframe>')
    assert output == f'<iframe src="https://ex.com/embed/2" width="560" {IFRAME_EXTRAS}></iframe>'


def test_iframe_from_unknown_domain_is_dropped():
    assert sanitize(BASE, '<iframe src="https://evil.example/x">fallback</iframe>') == ""


def test_iframe_fallback_text_is_dropped_but_following_text_kept():
    output = sanitize(BASE, '<iframe src="https://player.vimeo.com/video/1">watch it</iframe>after')
    assert "watch it" not in output
    assert output.endswith("</iframe></div>after")


def test_self_closed_iframe_is_emitted_as_a_pair():
    output = sanitize(BASE, '<iframe src="https://www.youtube.com/embed/1"/>')
    assert output == (
        '<div class="video-wrapper">'
        f'<iframe src="https://www.youtube.com/embed/1" {IFRAME_EXTRAS}></iframe>'
        "</div>"
    )


def test_disallowed_attributes_are_dropped():
    assert sanitize(BASE, '<p onclick="x()" style="color:red" class="c">hi</p>') == "<p>hi</p>"


def test_skipped_tags_keep_their_children():
    assert sanitize(BASE, "<div><span>a <b>bold</b></span><p>x</p></div>") == "a bold<p>x</p>"


def test_blocked_tags_drop_whole_subtree():
    assert sanitize(BASE, "<noscript><p>hidden</p></noscript>after") == "after"
    assert sanitize(BASE, "<style>p { color: red }</style><p>x</p>") == "<p>x</p>"


def test_nested_blocked_tags_only_reopen_output_at_outermost_close():
    state = sanitizer._Sanitizer(BASE)
    for token in [
        StartTagToken("script"),
        StartTagToken("script"),
        TextToken("inner"),
        EndTagToken("script"),
        StartTagToken("p"),
        TextToken("still hidden"),
        EndTagToken("script"),
        TextToken("shown"),
    ]:
        state.feed(token)
    assert state.result() == "shown"


def test_stray_blocked_close_tag_is_a_no_op():
    assert sanitize(BASE, "</script>visible<p>x</p>") == "visible<p>x</p>"


def test_close_tag_needs_a_kept_open_tag():
    assert sanitize(BASE, "</em>text") == "text"
    assert sanitize(BASE, '<a title="no href">x</a>') == "x"


def test_close_tags_accepted_out_of_order():
    assert sanitize(BASE, "<p><em>x</p></em>") == "<p><em>x</p></em>"
    assert sanitize(BASE, "<p>a</p></p>") == "<p>a</p></p>"


def test_self_closing_tags_are_not_pushed():
    assert sanitize(BASE, '<img src="/a.png"/></img>') == '<img src="https://ex.com/a.png" loading="lazy"/>'
    assert sanitize(BASE, "<p>a<br/>b</p>") == "<p>a<br/>b</p>"


def test_image_attributes_keep_source_order():
    output = sanitize(BASE, '<img alt="A" src="/a.png" title="T">')
    assert output == '<img alt="A" src="https://ex.com/a.png" title="T" loading="lazy">'


def test_image_data_uri_is_kept_verbatim():
    output = sanitize(BASE, '<img src="data:image/png;base64,AAAA">')
    assert output == '<img src="data:image/png;base64,AAAA" loading="lazy">'
    assert sanitize(BASE, '<img src="data:text/html;base64,AAAA">') == ""


def test_srcset_is_rewritten():
    output = sanitize(BASE, '<img src="/a.jpg" srcset="a.jpg 1x, bad, b.jpg 2x">')
    assert 'srcset="https://ex.com/a.jpg 1x, https://ex.com/bad, https://ex.com/b.jpg 2x"' in output


def test_source_needs_src_or_srcset():
    assert sanitize(BASE, '<picture><source media="(min-width: 1px)"></picture>') == "<picture></picture>"
    output = sanitize(BASE, '<picture><source srcset="a.webp" type="image/webp"></picture>')
    assert output == '<picture><source srcset="https://ex.com/a.webp" type="image/webp"></picture>'


def test_media_elements_get_controls():
    output = sanitize("https://ex.com/dir/post", '<video src="v.mp4" poster="/p.jpg" autoplay></video>')
    assert output == '<video src="https://ex.com/dir/v.mp4" poster="https://ex.com/p.jpg" controls></video>'
    output = sanitize(BASE, '<audio src="/a.mp3"></audio>')
    assert output == '<audio src="https://ex.com/a.mp3" controls></audio>'


def test_quote_cite_is_resolved():
    assert sanitize(BASE, '<q cite="/src">x</q>') == '<q cite="https://ex.com/src">x</q>'


def test_blocklisted_resources_are_dropped():
    assert sanitize(BASE, '<img src="https://stats.wordpress.com/g.gif?x=1">') == ""
    assert sanitize(BASE, '<a href="https://twitter.com/share?u=1">Share</a>') == "Share"


def test_text_and_attribute_values_are_escaped():
    assert sanitize(BASE, '<p>1 < 2 & "x"</p>') == "<p>1 &lt; 2 &amp; &quot;x&quot;</p>"
    output = sanitize(BASE, "<a href=\"/x\" title='a \"b\" <c>'>l</a>")
    assert 'title="a &quot;b&quot; &lt;c&gt;"' in output


def test_svg_uses_shared_attribute_set():
    output = sanitize(BASE, '<svg viewBox="0 0 10 10" onload="x()"><path d="M0 0" class="p"/></svg>')
    assert output == '<svg viewbox="0 0 10 10"><path d="M0 0"/></svg>'


def test_svg_filters_are_kept_without_attributes():
    output = sanitize(BASE, '<svg><filter x="1" width="5"><feOffset dx="2"/></filter></svg>')
    assert output == "<svg><filter><feoffset/></filter></svg>"


def test_empty_input_returns_empty_string():
    assert sanitize(BASE, "") == ""


def test_tokenizer_failure_fails_closed(monkeypatch, log_messages):
    def broken_tokenize(html):
        raise TokenizerError("boom")

    monkeypatch.setattr(sanitizer, "tokenize", broken_tokenize)
    assert sanitize(BASE, "<p>fine</p>") == ""
    assert any(record["level"].name == "WARNING" for record in log_messages)


def test_oversized_input_fails_closed(monkeypatch):
    monkeypatch.setattr("feedscrub.tokenizer.MAX_INPUT_SIZE", 16)
    assert sanitize(BASE, "<p>" + "x" * 100 + "</p>") == ""


def test_unknown_token_type_is_rejected():
    state = sanitizer._Sanitizer(BASE)
    with pytest.raises(AssertionError):
        state.feed("not a token")


@pytest.mark.parametrize("markup", HOSTILE_INPUTS)
def test_output_never_contains_blocked_tags(markup):
    assert not _TAG_PATTERN.search(sanitize(BASE, markup))


@pytest.mark.parametrize("markup", HOSTILE_INPUTS)
def test_sanitize_is_idempotent(markup):
    once = sanitize(BASE, markup)
    assert sanitize(BASE, once) == once


@pytest.mark.parametrize("markup", HOSTILE_INPUTS)
def test_output_only_contains_allowlisted_tags_attributes_and_urls(markup):
    for token in tokenize(sanitize(BASE, markup)):
        if not isinstance(token, (StartTagToken, SelfClosingTagToken)):
            continue

        if token.name == "div":
            assert token.attrs == (("class", "video-wrapper"),)
            continue

        assert is_valid_tag(token.name)
        injected = {name for name, _ in EXTRA_ATTRIBUTES.get(token.name, ())}
        for name, value in token.attrs:
            assert is_valid_attribute(token.name, name) or name in injected
            if name in ("href", "src", "poster", "cite"):
                assert has_valid_uri_scheme(value) or (
                    token.name in ("img", "source") and value.startswith(ALLOWED_DATA_URI_PREFIXES)
                )


@pytest.mark.parametrize("markup", HOSTILE_INPUTS)
def test_iframes_never_have_children(markup):
    output = sanitize(BASE, markup)
    assert re.findall(r"<iframe[^>]*>(.*?)</iframe>", output) == [""] * output.count("<iframe")


def test_self_closed_blocked_tag_still_hides_its_content():
    assert sanitize(BASE, "<script/>alert(1)</script>ok") == "ok"
    assert sanitize(BASE, "<style/>p { display: none }</style><p>x</p>") == "<p>x</p>"


def test_article_with_large_inline_image_is_not_discarded():
    payload = "A" * (1100 * 1024)
    output = sanitize(BASE, f'<p>pic</p><img src="data:image/png;base64,{payload}">')
    assert output == f'<p>pic</p><img src="data:image/png;base64,{payload}" loading="lazy">'


def test_unparsable_url_drops_only_that_attribute():
    assert sanitize(BASE, '<a href="http://[::1" title="t">x</a><p>y</p>') == "x<p>y</p>"
    output = sanitize(BASE, '<q cite="http://[::1">quote</q>')
    assert output == "<q>quote</q>"
