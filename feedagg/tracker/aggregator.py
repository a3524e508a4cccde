import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator, List, Sequence

from feedagg.config import MAX_CONCURRENT
from feedagg.feeds import HttpClient, RssFeed
from feedagg.feeds.base import BaseFeed
from feedagg.storage.models import FeedItem
from feedagg.utils.tz_utils import published_sort_key

logger = logging.getLogger(__name__)


def sort_by_published(items: List[FeedItem]) -> List[FeedItem]:
    """Newest first; unparsable timestamps last. Stable for ties."""
    return sorted(items, key=lambda item: published_sort_key(item.published_at), reverse=True)


def _batches(feeds: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for start in range(0, len(feeds), size):
        yield feeds[start:start + size]


class FeedAggregator:
    """
    Fetches a feed set in batches of `max_concurrent` and merges the items.

    Each batch runs on its own thread pool and is fully drained before the
    next one starts, so no more than `max_concurrent` requests are in flight.
    """

    def __init__(self, client: HttpClient, max_concurrent: int = MAX_CONCURRENT):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.client = client
        self.max_concurrent = max_concurrent

    def build_feed(self, source: str) -> BaseFeed:
        return RssFeed(source, self.client)

    def _fetch_source(self, source: str) -> List[FeedItem]:
        try:
            return self.build_feed(source).fetch() or []
        except Exception as e:
            logger.error("Unexpected failure fetching %s: %s", source, e)
            return []

    def aggregate(self, feeds: Sequence[str]) -> List[FeedItem]:
        feeds = list(feeds)
        merged: List[FeedItem] = []
        for batch in _batches(feeds, self.max_concurrent):
            with ThreadPoolExecutor(max_workers=len(batch)) as ex:
                # map keeps source order, so the merge is deterministic
                for items in ex.map(self._fetch_source, batch):
                    merged.extend(items)

        logger.debug("Aggregated %d items from %d feeds", len(merged), len(feeds))
        return sort_by_published(merged)
