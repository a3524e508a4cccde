import logging
from typing import List, Union

import feedparser

from feedagg.storage.models import FeedItem

logger = logging.getLogger(__name__)


def _entry_field(entry, *names: str) -> str:
    for name in names:
        value = entry.get(name)
        if value:
            return str(value).strip()
    return ""


def extract_items(document: Union[str, bytes], source: str) -> List[FeedItem]:
    """
    Extract the items of one feed document, tagged with `source`.

    Parsing is best effort: missing fields become empty strings and items
    without a title or link are dropped. A malformed document yields
    whatever entries could be recovered, usually none. Never raises.
    """
    if not document:
        return []
    # bytes keep feedparser from treating the body as a URL or file path
    data = document.encode("utf-8") if isinstance(document, str) else document

    try:
        feed = feedparser.parse(data)
    except Exception as e:
        logger.warning("Parse failed for %s: %s", source, e)
        return []

    items: List[FeedItem] = []
    for entry in feed.entries:
        title = _entry_field(entry, "title")
        link = _entry_field(entry, "link")
        if not title or not link:
            continue
        items.append(FeedItem(
            source=source,
            title=title,
            link=link,
            published_at=_entry_field(entry, "published", "updated"),
        ))

    if feed.get("bozo") and not items:
        logger.debug("No items recovered from %s: %s", source, feed.get("bozo_exception"))
    return items
