# tests/test_fetch.py
import pytest
import requests

from conftest import FakeResponse, FakeSession
from imgur_components.core import fetch_page, grab_album, keep_hash_lines
from imgur_components.types import TransportError

ALBUM = "https://imgur.com/a/Xy7Qz"


def test_keep_hash_lines_joins_without_separator():
    text = '<html>\n{"hash":"a1"},\nnoise\n{"hash":"b2"}\n</html>'
    assert keep_hash_lines(text) == '{"hash":"a1"},{"hash":"b2"}'


def test_fetch_page_filters_to_hash_lines(three_image_page):
    session = FakeSession(FakeResponse(three_image_page))
    text = fetch_page(session, ALBUM, timeout=5)
    assert "<title>" not in text
    assert '"hash":"aaa111"' in text
    assert session.calls == [("GET", ALBUM, 5)]


def test_fetch_page_full_page(three_image_page):
    session = FakeSession(FakeResponse(three_image_page))
    assert fetch_page(session, ALBUM, timeout=5, hash_lines_only=False) == three_image_page


def test_http_error_becomes_transport_error():
    session = FakeSession(FakeResponse("gone", status_code=404))
    with pytest.raises(TransportError, match="404"):
        fetch_page(session, ALBUM, timeout=5)


def test_connection_error_becomes_transport_error():
    session = FakeSession(requests.ConnectionError("dns failure"))
    with pytest.raises(TransportError, match="dns failure"):
        fetch_page(session, ALBUM, timeout=5)


def test_no_retry_by_default():
    """A retryable status still fails at once when no retries are configured."""
    session = FakeSession(FakeResponse("busy", status_code=503), FakeResponse("ok"))
    with pytest.raises(TransportError, match="503"):
        fetch_page(session, ALBUM, timeout=5)
    assert len(session.calls) == 1


def test_retries_when_asked(no_sleep, three_image_page):
    session = FakeSession(
        requests.Timeout("slow"),
        FakeResponse("busy", status_code=503),
        FakeResponse(three_image_page),
    )
    text = fetch_page(session, ALBUM, timeout=5, retries=2)
    assert '"hash":"ccc333"' in text
    assert len(session.calls) == 3


def test_grab_album_collects_urls(three_image_page):
    result = grab_album(FakeSession(FakeResponse(three_image_page)), ALBUM, timeout=5)
    assert result.album_url == ALBUM
    assert result.urls == [
        "https://imgur.com/aaa111",
        "https://imgur.com/bbb222",
        "https://imgur.com/ccc333",
    ]
    assert result.elapsed_ms >= 0


def test_grab_album_with_suffix(three_image_page):
    result = grab_album(FakeSession(FakeResponse(three_image_page)), ALBUM, suffix=".png")
    assert result.urls[0] == "https://imgur.com/aaa111.png"
    assert len(result.urls) == 3


def test_grab_album_without_marker_is_empty():
    result = grab_album(FakeSession(FakeResponse('<p>"hash" removed</p>')), ALBUM)
    assert result.urls == []


def test_fetch_page_closes_the_response(three_image_page):
    response = FakeResponse(three_image_page)
    fetch_page(FakeSession(response), ALBUM, timeout=5)
    assert response.closed


def test_failed_response_is_closed_too():
    response = FakeResponse("gone", status_code=404)
    with pytest.raises(TransportError):
        fetch_page(FakeSession(response), ALBUM, timeout=5)
    assert response.closed
