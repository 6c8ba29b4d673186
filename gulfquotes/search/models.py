"""Database models for search analytics."""

SEARCH_QUERIES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.search_query_counts (
    query TEXT PRIMARY KEY,
    total COUNTER
)
"""

SEARCH_TABLES_CQL = [SEARCH_QUERIES_TABLE_CQL]


def normalize_query(query: str) -> str:
    """Trimmed, lowercased, single-spaced form used as the counter key."""
    return " ".join(query.split()).lower()
