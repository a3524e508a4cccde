from .base import BaseFeed
from .http import FetchError, HttpClient, HttpResponse, RequestsHttpClient
from .parser import extract_items
from .rss import RssFeed

__all__ = [
    "BaseFeed",
    "FetchError",
    "HttpClient",
    "HttpResponse",
    "RequestsHttpClient",
    "RssFeed",
    "extract_items",
]
