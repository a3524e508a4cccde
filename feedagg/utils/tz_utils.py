from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional, Tuple

OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def parse_published(raw: Optional[str]) -> Optional[datetime]:
    """Parses an ISO 8601 or RFC 822 timestamp. Naive values are taken as UTC."""
    if not raw:
        return None
    text = raw.strip()
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            dt = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            return None
        if dt is None:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def published_sort_key(raw: Optional[str]) -> Tuple[bool, datetime]:
    # unparsable values rank below every real date, however early
    parsed = parse_published(raw)
    return (parsed is not None, parsed or OLDEST)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
