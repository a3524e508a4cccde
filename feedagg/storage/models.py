from typing import List
from pydantic import BaseModel, ConfigDict, Field


class FeedItem(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: str  # feed URL the item came from
    title: str
    link: str
    published_at: str = Field(default="", alias="publishedAt")  # raw, as published


class AggregationResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    last_update: str = Field(alias="lastUpdate")  # ISO 8601, UTC
    feeds: List[str]
    items: List[FeedItem] = Field(default_factory=list)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str) -> "AggregationResult":
        return cls.model_validate_json(raw)
