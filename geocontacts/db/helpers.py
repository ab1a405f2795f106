"""
Database helper functions for common read patterns.
Reduces boilerplate in the repository layer.
"""

from typing import Any

import psycopg

from geocontacts.db.pool import get_db_connection
from geocontacts.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

KEYSET_MARKER = "{keyset}"


class DatabaseError(Exception):
    """Custom exception for database operations."""

    def __init__(self, message: str, operation: str = "unknown"):
        super().__init__(message)
        self.operation = operation


async def fetch_one(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection | None = None
) -> dict[str, Any] | None:
    """
    Execute query and return single row as dict.

    Args:
        query: SQL query with %s placeholders
        params: Query parameters
        connection: Optional existing connection

    Returns:
        Dict with row data or None if no results
    """
    try:
        if connection:
            async with connection.cursor() as cur:
                await cur.execute(query, params)
                row = await cur.fetchone()
                return row if row else None
        else:
            async with await get_db_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(query, params)
                    row = await cur.fetchone()
                    return row if row else None

    except psycopg.Error as e:
        logger.error("Database fetch_one error", query=query[:100], error=str(e))
        raise DatabaseError(f"Query failed: {e}", operation="fetch_one") from e


async def fetch_all(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection | None = None
) -> list[dict[str, Any]]:
    """
    Execute query and return all rows as list of dicts.

    Args:
        query: SQL query with %s placeholders
        params: Query parameters
        connection: Optional existing connection

    Returns:
        List of dicts with row data
    """
    try:
        if connection:
            async with connection.cursor() as cur:
                await cur.execute(query, params)
                return await cur.fetchall()
        else:
            async with await get_db_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(query, params)
                    return await cur.fetchall()

    except psycopg.Error as e:
        logger.error("Database fetch_all error", query=query[:100], error=str(e))
        raise DatabaseError(f"Query failed: {e}", operation="fetch_all") from e


class PagedQuery:
    """
    Has-more / fetch-next cursor over a SELECT, paged by keyset.

    The query must end in a WHERE clause whose last predicate is the literal
    `{keyset}` marker. Each page continues strictly after the key of the last
    row already read, so rows deleted or re-sorted between pages never shift
    a live row out of the result. key_columns must form a unique key and be
    selected under the same names. ORDER BY and LIMIT are appended here.

    Usage:
        paged = PagedQuery(
            "SELECT name, id FROM t WHERE {keyset}", (), key_columns=("name", "id")
        )
        while paged.has_more_results:
            rows.extend(await paged.fetch_next())
    """

    def __init__(
        self,
        query: str,
        params: tuple = (),
        *,
        key_columns: tuple[str, ...],
        page_size: int = 100,
    ):
        if page_size < 1:
            raise ValueError("page_size must be positive")
        if not key_columns:
            raise ValueError("key_columns must not be empty")
        if KEYSET_MARKER not in query:
            raise ValueError(f"query must contain the {KEYSET_MARKER} marker")
        self.query = query
        self.params = params
        self.key_columns = key_columns
        self.page_size = page_size
        self.has_more_results = True
        self.pages_fetched = 0
        self._last_key: tuple | None = None

    def _build_page_query(self) -> tuple[str, tuple]:
        columns = ", ".join(self.key_columns)
        if self._last_key is None:
            predicate, key_params = "TRUE", ()
        else:
            placeholders = ", ".join(["%s"] * len(self.key_columns))
            predicate, key_params = f"({columns}) > ({placeholders})", self._last_key

        # str.replace, not format: queries contain literal braces ('{}'::jsonb)
        query = self.query.replace(KEYSET_MARKER, predicate)
        query = f"{query}\nORDER BY {columns}\nLIMIT %s"
        # One extra row tells us whether another page exists
        return query, (*self.params, *key_params, self.page_size + 1)

    async def fetch_next(self) -> list[dict[str, Any]]:
        if not self.has_more_results:
            return []

        query, params = self._build_page_query()
        rows = await fetch_all(query, params)

        self.has_more_results = len(rows) > self.page_size
        page = rows[: self.page_size]
        if page:
            self._last_key = tuple(page[-1][column] for column in self.key_columns)
        self.pages_fetched += 1
        return page


async def drain(paged: PagedQuery) -> list[dict[str, Any]]:
    """Fetch every page of a PagedQuery and return the concatenated rows."""
    rows: list[dict[str, Any]] = []
    while paged.has_more_results:
        rows.extend(await paged.fetch_next())

    logger.debug("Paged query drained", pages=paged.pages_fetched, row_count=len(rows))
    return rows
