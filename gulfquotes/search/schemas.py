"""Pydantic schemas for search suggestions."""

from typing import Any

from pydantic import Field

from gulfquotes.core.schemas import ApiModel


DEFAULT_SUGGESTIONS_LIMIT = 5
MAX_SUGGESTIONS_LIMIT = 10


class SearchSuggestion(ApiModel):
    query: str
    score: float


class PopularSearch(ApiModel):
    query: str
    count: int


class SuggestionsResponse(ApiModel):
    suggestions: list[SearchSuggestion] = Field(default_factory=list)
    popular: list[SearchSuggestion] | None = None

    def dump(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
