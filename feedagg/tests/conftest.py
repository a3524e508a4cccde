# feedagg/tests/conftest.py
import time
from threading import Lock
from typing import Dict, List, Optional, Union

import pytest

from feedagg.config import Settings
from feedagg.feeds.http import FetchError, HttpClient, HttpResponse
from feedagg.storage.cache import MemoryStore

SOURCE_1 = "https://feeds.test/one.xml"
SOURCE_2 = "https://feeds.test/two.xml"


def rss(*items: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel><title>Test feed</title>'
        + "".join(items)
        + "</channel></rss>"
    )


def item(title: Optional[str] = None, link: Optional[str] = None, pub_date: Optional[str] = None) -> str:
    parts = ["<item>"]
    if title is not None:
        parts.append(f"<title>{title}</title>")
    if link is not None:
        parts.append(f"<link>{link}</link>")
    if pub_date is not None:
        parts.append(f"<pubDate>{pub_date}</pubDate>")
    parts.append("</item>")
    return "".join(parts)


Canned = Union[str, HttpResponse, Exception]


class FakeHttpClient(HttpClient):
    """Serves canned bodies per URL and records how many requests overlap."""

    def __init__(self, responses: Optional[Dict[str, Canned]] = None, default: Canned = "", delay: float = 0.0):
        self.responses = dict(responses or {})
        self.default = default
        self.delay = delay
        self.calls: List[str] = []
        self.events: List[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = Lock()

    def get(self, url: str) -> HttpResponse:
        with self._lock:
            self.calls.append(url)
            self.events.append(("start", url))
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            canned = self.responses.get(url, self.default)
            if isinstance(canned, Exception):
                raise canned
            if isinstance(canned, HttpResponse):
                return canned
            return HttpResponse(status=200, body=canned)
        finally:
            with self._lock:
                self.in_flight -= 1
                self.events.append(("end", url))


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store(clock):
    return MemoryStore(clock=clock)


@pytest.fixture()
def settings():
    return Settings(feed_list=(SOURCE_1, SOURCE_2), cache_backend="memory")


@pytest.fixture()
def http_client():
    return FakeHttpClient({
        SOURCE_1: rss(item("X", "http://x", "2024-01-01T00:00:00Z")),
        SOURCE_2: "<html><body>Service temporarily unavailable</body></html>",
    })


@pytest.fixture()
def pipeline(settings, http_client, store):
    from feedagg.tracker.pipeline import FeedPipeline
    return FeedPipeline(settings, http_client, store)


@pytest.fixture()
def app(monkeypatch, pipeline):
    # No network or background scheduler during API tests
    from feedagg.api import main as api_main

    class DummyScheduler:
        def add_job(self, *a, **k): pass
        def start(self): pass
        def shutdown(self, wait=False): pass

    monkeypatch.setattr(api_main, "scheduler", DummyScheduler(), raising=True)
    monkeypatch.setattr(api_main, "pipeline", pipeline, raising=True)
    monkeypatch.setattr(api_main, "settings", pipeline.settings, raising=True)
    return api_main.app


@pytest.fixture()
def client(app):
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def fetch_error():
    return FetchError("connection refused")
