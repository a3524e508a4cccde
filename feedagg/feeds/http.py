from abc import ABC, abstractmethod
from dataclasses import dataclass

import requests
from requests.adapters import HTTPAdapter
from urllib3.util import Retry


class FetchError(Exception):
    """Raised by an HttpClient when a URL could not be retrieved."""


@dataclass(frozen=True)
class HttpResponse:
    status: int
    body: str
    content: bytes = b""  # undecoded body, when the transport has it


class HttpClient(ABC):
    @abstractmethod
    def get(self, url: str) -> HttpResponse:
        pass

    def close(self) -> None:
        pass


class RequestsHttpClient(HttpClient):
    """Pooled requests.Session with an optional urllib3 retry policy."""

    def __init__(
        self,
        timeout: float = 10,
        retries: int = 0,
        user_agent: str = "FeedAggregator/1.0 (+https://localhost)",
        pool_maxsize: int = 20,
    ) -> None:
        self.timeout = timeout
        retry = Retry(
            total=retries,
            backoff_factor=0.3,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset({"GET"}),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(pool_connections=pool_maxsize, pool_maxsize=pool_maxsize, max_retries=retry)
        self._session = requests.Session()
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)
        self._session.headers.update({"User-Agent": user_agent})

    def get(self, url: str) -> HttpResponse:
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(str(e)) from e
        return HttpResponse(status=response.status_code, body=response.text, content=response.content)

    def close(self) -> None:
        self._session.close()
