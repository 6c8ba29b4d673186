# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Search analytics and suggestions.

Each recorded query bumps a counter keyed by its normalized form. The
popular list is cached in Redis for a short time when Redis is available.
"""

from typing import TYPE_CHECKING

import orjson
import redis.asyncio as redis

from gulfquotes.core.errors import translate_errors
from gulfquotes.core.logging import get_logger

from .models import normalize_query
from .schemas import PopularSearch, SearchSuggestion, SuggestionsResponse


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = get_logger(__name__)

SEARCH_SCAN_LIMIT = 10000
POPULAR_CACHE_KEY = "search:popular"
POPULAR_CACHE_TTL_SECONDS = 60
POPULAR_CACHE_SIZE = 50


class SearchService:
    """Records searches and ranks suggestions by frequency."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        redis_client: redis.Redis | None = None,
    ):
        self.session = session
        self.keyspace = keyspace
        self.redis = redis_client
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._increment = self.session.prepare(f"""
            UPDATE {self.keyspace}.search_query_counts SET total = total + 1
            WHERE query = ?
        """)

        self._scan_counts = self.session.prepare(f"""
            SELECT query, total FROM {self.keyspace}.search_query_counts
            LIMIT {SEARCH_SCAN_LIMIT}
        """)

    async def record(self, query: str) -> None:
        """Count one search for ``query``; blank queries are ignored."""
        normalized = normalize_query(query)
        if not normalized:
            return
        with translate_errors("search_record_failed", "Failed to record search"):
            await self.session.aexecute(self._increment, [normalized])
        logger.debug("search_recorded", query=normalized)

    async def _ranked(self) -> list[PopularSearch]:
        result = await self.session.aexecute(self._scan_counts)
        ranked = [
            PopularSearch(query=row.query, count=row.total or 0)
            for row in result
            if (row.total or 0) > 0
        ]
        ranked.sort(key=lambda s: (-s.count, s.query))
        return ranked

    async def popular(self, limit: int) -> list[PopularSearch]:
        """Most searched queries, highest count first."""
        cached = await self._cache_get()
        if cached is None:
            with translate_errors("search_popular_failed", "Failed to fetch popular searches"):
                cached = (await self._ranked())[:POPULAR_CACHE_SIZE]
            await self._cache_set(cached)
        return cached[:limit]

    async def suggestions(self, prefix: str, limit: int) -> list[SearchSuggestion]:
        """Recorded queries starting with ``prefix``.

        The exact query is excluded. Scores are relative to the top match.
        """
        needle = normalize_query(prefix)
        if not needle:
            return []
        with translate_errors("search_suggestions_failed", "Failed to fetch search suggestions"):
            matches = [
                s
                for s in await self._ranked()
                if s.query.startswith(needle) and s.query != needle
            ][:limit]
        if not matches:
            return []
        top = matches[0].count
        return [SearchSuggestion(query=s.query, score=s.count / top) for s in matches]

    async def get_suggestions(
        self, query: str, limit: int, include_trending: bool = True
    ) -> SuggestionsResponse:
        query = query.strip()
        if not query and include_trending:
            popular = await self.popular(limit)
            return SuggestionsResponse(
                suggestions=[],
                popular=[
                    SearchSuggestion(query=s.query, score=1 - index / len(popular))
                    for index, s in enumerate(popular)
                ],
            )
        if query:
            return SuggestionsResponse(suggestions=await self.suggestions(query, limit))
        return SuggestionsResponse(suggestions=[])

    # ==========================================================================
    # Cache
    # ==========================================================================

    async def _cache_get(self) -> list[PopularSearch] | None:
        if self.redis is None:
            return None
        try:
            raw = await self.redis.get(POPULAR_CACHE_KEY)
        except redis.RedisError as e:
            logger.warning("search_cache_read_failed", error=str(e))
            return None
        if raw is None:
            return None
        return [PopularSearch(**item) for item in orjson.loads(raw)]

    async def _cache_set(self, items: list[PopularSearch]) -> None:
        if self.redis is None:
            return
        payload = orjson.dumps([item.model_dump() for item in items])
        try:
            await self.redis.set(POPULAR_CACHE_KEY, payload, ex=POPULAR_CACHE_TTL_SECONDS)
        except redis.RedisError as e:
            logger.warning("search_cache_write_failed", error=str(e))
