import logging
from typing import List, Optional, Protocol, Sequence

from pydantic import ValidationError

from feedagg.config import DEFAULT_CACHE_TTL
from feedagg.storage.cache import KeyValueStore
from feedagg.storage.models import AggregationResult, FeedItem
from feedagg.utils.tz_utils import utc_now_iso

logger = logging.getLogger(__name__)

FIXED_CACHE_KEY = "aggregated:fixed"
DYNAMIC_KEY_PREFIX = "aggregated:dynamic:"
KEY_SEPARATOR = "|"


class Aggregator(Protocol):
    def aggregate(self, feeds: Sequence[str]) -> List[FeedItem]: ...


def cache_key(feeds: Optional[Sequence[str]] = None) -> str:
    """
    Fixed feed set (None) -> constant key. A dynamic set -> its sources in
    request order, so "A,B" and "B,A" are cached separately.
    """
    if feeds is None:
        return FIXED_CACHE_KEY
    return DYNAMIC_KEY_PREFIX + KEY_SEPARATOR.join(feeds)


class ResultRepository:
    """Read-through / write-through cache of AggregationResults."""

    def __init__(self, store: KeyValueStore, aggregator: Aggregator, default_ttl: int = DEFAULT_CACHE_TTL):
        self.store = store
        self.aggregator = aggregator
        self.default_ttl = default_ttl

    def resolve_ttl(self, ttl: Optional[int]) -> int:
        if isinstance(ttl, int) and not isinstance(ttl, bool) and ttl > 0:
            return ttl
        return self.default_ttl

    def load(self, key: str) -> Optional[AggregationResult]:
        cached = self.store.get(key)
        if cached is None:
            return None
        try:
            return AggregationResult.from_json(cached)
        except ValidationError as e:
            logger.warning("Discarding unreadable cache entry %s: %s", key, e)
            return None

    def get_or_aggregate(self, feeds: Sequence[str], key: str, ttl: Optional[int] = None) -> AggregationResult:
        result = self.load(key)
        if result is not None:
            logger.debug("Cache hit for %s", key)
            return result
        logger.debug("Cache miss for %s", key)
        return self.refresh(feeds, key, ttl)

    def refresh(self, feeds: Sequence[str], key: str, ttl: Optional[int] = None) -> AggregationResult:
        """Aggregates `feeds` and overwrites `key` whether or not it is cached."""
        items = self.aggregator.aggregate(feeds)
        result = AggregationResult(last_update=utc_now_iso(), feeds=list(feeds), items=items)
        self.store.put(key, result.to_json(), self.resolve_ttl(ttl))
        return result
