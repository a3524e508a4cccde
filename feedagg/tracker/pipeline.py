import logging
from dataclasses import dataclass
from typing import List, Mapping, Optional

from feedagg.config import Settings
from feedagg.feeds import HttpClient, RequestsHttpClient
from feedagg.storage.cache import KeyValueStore, build_store
from feedagg.storage.models import AggregationResult
from feedagg.storage.repository import FIXED_CACHE_KEY, ResultRepository, cache_key
from feedagg.tracker.aggregator import FeedAggregator
from feedagg.utils.pagination import paginate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryRequest:
    feeds: Optional[List[str]]  # None -> fixed feed set
    page: int
    page_size: int
    ttl: int


def _positive_int(value, default: int) -> int:
    if value is None:
        return default
    try:
        number = int(str(value).strip())
    except ValueError:
        return default
    return number if number > 0 else default


def parse_feed_list(raw: Optional[str], limit: int) -> Optional[List[str]]:
    """Comma-separated sources, trimmed, empties dropped, first `limit` kept."""
    if not raw:
        return None
    feeds = [f.strip() for f in raw.split(",") if f.strip()]
    return feeds[:limit] or None


def parse_query(params: Mapping[str, Optional[str]], settings: Settings) -> QueryRequest:
    return QueryRequest(
        feeds=parse_feed_list(params.get("feeds"), settings.max_dynamic_feeds),
        page=_positive_int(params.get("page"), 1),
        page_size=_positive_int(params.get("pageSize"), settings.default_page_size),
        ttl=_positive_int(params.get("ttl"), settings.default_ttl),
    )


class FeedPipeline:
    """Scheduled refresh of the fixed feed set and on-demand paginated queries."""

    def __init__(self, settings: Settings, client: HttpClient, store: KeyValueStore):
        self.settings = settings
        self.client = client
        self.store = store
        self.aggregator = FeedAggregator(client, max_concurrent=settings.max_concurrent)
        self.repository = ResultRepository(store, self.aggregator, default_ttl=settings.default_ttl)
        self.last_updated: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "FeedPipeline":
        client = RequestsHttpClient(
            timeout=settings.fetch_timeout,
            retries=settings.http_retries,
            user_agent=settings.user_agent,
        )
        return cls(settings, client, build_store(settings.cache_backend, settings.cache_path))

    def refresh(self) -> AggregationResult:
        result = self.repository.refresh(list(self.settings.feed_list), FIXED_CACHE_KEY, self.settings.default_ttl)
        self.last_updated = result.last_update
        logger.info("Fixed feeds updated (%d items from %d feeds)", len(result.items), len(result.feeds))
        return result

    def query(self, request: QueryRequest) -> AggregationResult:
        if request.feeds:
            feeds = list(request.feeds)
            key = cache_key(feeds)
        else:
            feeds = list(self.settings.feed_list)
            key = cache_key()

        # the full result is cached; only the response is paginated
        result = self.repository.get_or_aggregate(feeds, key, request.ttl)
        return result.model_copy(update={"items": paginate(result.items, request.page, request.page_size)})

    def handle(self, params: Mapping[str, Optional[str]]) -> AggregationResult:
        return self.query(parse_query(params, self.settings))

    def close(self) -> None:
        self.client.close()
