"""Offset pagination over materialized result lists.

Cassandra has no OFFSET, so list endpoints read the candidate rows for a
partition (or a bounded scan), filter and order them in Python, then slice
the page here. ``has_more`` is always ``total > skip + len(items)``.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar


T = TypeVar("T")


def compute_skip(page: int, limit: int) -> int:
    """Number of items before ``page`` (1-based)."""
    return (max(page, 1) - 1) * limit


@dataclass
class Page(Generic[T]):
    """One page of results."""

    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return compute_skip(self.page, self.limit)

    @property
    def has_more(self) -> bool:
        return self.total > self.skip + len(self.items)

    def to_dict(self, items: list[Any] | None = None) -> dict[str, Any]:
        """Serialize as ``{items, total, hasMore, page, limit}``."""
        return {
            "items": self.items if items is None else items,
            "total": self.total,
            "hasMore": self.has_more,
            "page": self.page,
            "limit": self.limit,
        }


def paginate(items: list[T], page: int, limit: int, total: int | None = None) -> Page[T]:
    """Slice an ordered list into a page.

    Args:
        items: Full ordered result list.
        page: 1-based page number.
        limit: Page size.
        total: Overrides ``len(items)`` when the list was truncated by a
            bounded read but the true count is known.
    """
    page = max(page, 1)
    skip = compute_skip(page, limit)
    return Page(
        items=items[skip : skip + limit],
        total=len(items) if total is None else total,
        page=page,
        limit=limit,
    )
