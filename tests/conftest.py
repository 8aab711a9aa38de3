# tests/conftest.py
import json

import pytest
import requests


def album_page(hashes, duplicate=True):
    """Builds album HTML the way imgur embeds it: the image array appears twice."""
    images = json.dumps(
        [{"hash": h, "title": f"title {i}", "ext": ".png"} for i, h in enumerate(hashes)],
        separators=(",", ":"),
    )
    block = f'{{"count":{len(hashes)},"images":{images}}}'
    lines = [
        "<!doctype html>",
        "<html><head><title>Album - Imgur</title></head><body>",
        f'<script>window.runSlots = {{"item":{block},"layout":"b"}};</script>',
    ]
    if duplicate:
        lines.append(f'<script>var album = {{"album_images":{block}}};</script>')
    lines.append("</body></html>")
    return "\n".join(lines)


class FakeResponse:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code
        self.closed = False

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def close(self):
        self.closed = True


class FakeSession:
    """Stands in for requests.Session; replays queued responses or exceptions."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []
        self.closed = False

    def request(self, method, url, timeout, **kwargs):
        self.calls.append((method, url, timeout))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self):
        self.closed = True


@pytest.fixture
def three_image_page():
    return album_page(["aaa111", "bbb222", "ccc333"])


@pytest.fixture
def no_sleep(monkeypatch):
    monkeypatch.setattr("imgur_components.core.time.sleep", lambda _: None)
