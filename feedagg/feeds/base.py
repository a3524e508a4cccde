from abc import ABC, abstractmethod
from typing import List

from feedagg.storage.models import FeedItem


class BaseFeed(ABC):
    source: str

    @abstractmethod
    def fetch(self) -> List[FeedItem]:
        pass
