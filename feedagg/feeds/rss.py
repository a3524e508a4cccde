import logging
from typing import List

from .base import BaseFeed
from .http import FetchError, HttpClient
from .parser import extract_items
from feedagg.storage.models import FeedItem

logger = logging.getLogger(__name__)


class RssFeed(BaseFeed):
    """One remote feed. A failed retrieval yields no items instead of an error."""

    def __init__(self, source: str, client: HttpClient):
        self.source: str = source
        self.client = client

    def fetch(self) -> List[FeedItem]:
        try:
            response = self.client.get(self.source)
        except FetchError as e:
            logger.warning("Fetch failed for %s: %s", self.source, e)
            return []

        if response.status >= 400:
            logger.warning("Fetch failed for %s: HTTP %s", self.source, response.status)
            return []

        # raw bytes let feedparser honour the XML encoding declaration
        items = extract_items(response.content or response.body, self.source)
        logger.debug("Fetched %d items from %s", len(items), self.source)
        return items
