from __future__ import annotations

import base64

import pytest

from morning_secretary.errors import MalformedPayloadError
from morning_secretary.parsing.parser import (
    MAX_PAYLOAD_DEPTH,
    NO_BODY_PLACEHOLDER,
    decode_base64url,
    extract_body_from_payload,
    strip_html,
)


def _b64(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")


def _part(mime_type: str, text: str) -> dict:
    return {"mimeType": mime_type, "body": {"data": _b64(text)}}


@pytest.mark.parametrize(
    "text",
    [
        "hello world",
        "日本語のテキスト 🌅",
        "???>>>~~~ needs url-safe chars",
        "",
    ],
)
def test_decode_base64url_round_trips_utf8_text(text: str) -> None:
    assert decode_base64url(_b64(text)) == text


def test_decode_base64url_accepts_missing_padding() -> None:
    encoded = _b64("ab").rstrip("=")
    assert decode_base64url(encoded) == "ab"


def test_decode_base64url_rejects_garbage() -> None:
    with pytest.raises(MalformedPayloadError):
        decode_base64url("***not base64***")


def test_inline_plain_body_is_returned_as_is() -> None:
    payload = _part("text/plain", "Plain body\nline 2")
    assert extract_body_from_payload(payload) == "Plain body\nline 2"


def test_inline_html_body_is_stripped() -> None:
    payload = _part("text/html", "<p>Hello</p><div>World</div>")
    assert extract_body_from_payload(payload) == "Hello\nWorld"


def test_markup_only_tree_has_no_tags_and_breaks_become_newlines() -> None:
    payload = {
        "mimeType": "multipart/alternative",
        "parts": [_part("text/html", "<b>Hi</b><br>there<br/>friend &amp; co")],
    }

    body = extract_body_from_payload(payload)

    assert body == "Hi\nthere\nfriend & co"
    assert "<" not in body and ">" not in body


def test_plain_text_part_wins_over_html_at_same_level() -> None:
    payload = {
        "mimeType": "multipart/alternative",
        "parts": [
            _part("text/html", "<p>HTML VERSION</p>"),
            _part("text/plain", "plain version"),
        ],
    }

    body = extract_body_from_payload(payload)

    assert body == "plain version"
    assert "HTML VERSION" not in body


def test_first_plain_part_at_a_level_is_kept() -> None:
    payload = {
        "parts": [
            _part("text/plain", "first"),
            _part("text/plain", "second"),
        ],
    }
    assert extract_body_from_payload(payload) == "first"


def test_nested_multipart_returns_first_depth_first_hit() -> None:
    payload = {
        "mimeType": "multipart/mixed",
        "parts": [
            {"mimeType": "text/plain", "body": {"size": 0}},
            {
                "mimeType": "multipart/alternative",
                "parts": [
                    _part("text/plain", "nested plain"),
                    _part("text/html", "<p>nested html</p>"),
                ],
            },
            {"mimeType": "multipart/related", "parts": [_part("text/plain", "later sibling")]},
        ],
    }

    assert extract_body_from_payload(payload) == "nested plain"


def test_empty_nested_container_falls_back_to_level_parts() -> None:
    payload = {
        "parts": [
            {"mimeType": "multipart/alternative", "parts": [{"mimeType": "image/png", "body": {}}]},
            _part("text/html", "<p>outer html</p>"),
        ],
    }
    assert extract_body_from_payload(payload) == "outer html"


def test_empty_parts_yields_placeholder() -> None:
    assert extract_body_from_payload({"mimeType": "multipart/mixed", "parts": []}) == NO_BODY_PLACEHOLDER


def test_missing_everything_yields_placeholder() -> None:
    assert extract_body_from_payload({}) == NO_BODY_PLACEHOLDER


def test_parts_without_body_data_are_skipped() -> None:
    payload = {
        "parts": [
            {"mimeType": "text/plain"},
            {"mimeType": "text/plain", "body": None},
            _part("text/html", "<p>only html</p>"),
        ],
    }
    assert extract_body_from_payload(payload) == "only html"


def test_undecodable_part_is_treated_as_missing() -> None:
    payload = {
        "parts": [
            {"mimeType": "text/plain", "body": {"data": "%%%"}},
            _part("text/html", "<p>fallback</p>"),
        ],
    }
    assert extract_body_from_payload(payload) == "fallback"


def test_nesting_beyond_depth_guard_yields_placeholder() -> None:
    payload: dict = _part("text/plain", "too deep")
    for _ in range(MAX_PAYLOAD_DEPTH + 2):
        payload = {"mimeType": "multipart/mixed", "parts": [payload]}

    assert extract_body_from_payload(payload) == NO_BODY_PLACEHOLDER


def test_nesting_within_depth_guard_is_decoded() -> None:
    payload: dict = _part("text/plain", "deep enough")
    for _ in range(MAX_PAYLOAD_DEPTH):
        payload = {"mimeType": "multipart/mixed", "parts": [payload]}

    assert extract_body_from_payload(payload) == "deep enough"


def test_strip_html_decodes_entities_and_collapses_newlines() -> None:
    html = "<div>a&nbsp;&lt;b&gt;</div>\n\n\n\n<p>&quot;c&quot; &#39;d&#39;</p>"
    assert strip_html(html) == 'a <b>\n\n"c" \'d\''


def test_escaped_entity_stays_literal_text() -> None:
    assert strip_html("a &amp;lt; b &amp;amp; c") == "a &lt; b &amp; c"


def test_strip_html_trims_surrounding_whitespace() -> None:
    assert strip_html("  <br>  text  <br>  ") == "text"
