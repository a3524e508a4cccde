from typing import List, Sequence, TypeVar

from feedagg.config import DEFAULT_PAGE_SIZE

T = TypeVar("T")


def paginate(items: Sequence[T], page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> List[T]:
    """1-based page window over `items`. Out-of-range pages are empty."""
    if page < 1 or page_size < 1:
        return []
    start = (page - 1) * page_size
    return list(items[start:start + page_size])
