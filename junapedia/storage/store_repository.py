"""
Supabase table access for canonical store rows.

This module handles:
- Client construction from settings (service-role key for batch writes,
  anon key for the read-only directory).
- Paged reads of the whole table.
- Batched upserts keyed by ``id``; the first failing batch aborts the run.
- Row count and latest-rows sampling used by the ``verify`` command.
"""

from typing import Any, Dict, List, Optional, Sequence

from junapedia.config import DEFAULT_BATCH_SIZE, DEFAULT_TABLE, Settings
from junapedia.utils.logging_config import logger

PAGE_SIZE = 1000
SAMPLE_COLUMNS = "id, canonical_name, addresses, source_names, seeded_at, merged"


class StoreClientNotConfigured(RuntimeError):
    """Raised when no Supabase URL/key was provided."""


class StoreFetchError(RuntimeError):
    """Raised when reading the store table fails."""


class StoreUpsertError(RuntimeError):
    """Raised when an upsert batch is rejected; later batches are not attempted."""


def create_supabase_client(url: str, key: str):
    from supabase import create_client

    return create_client(url, key)


class StoreRepository:
    """Reads and writes canonical store rows in a Supabase table."""

    def __init__(self, client=None, table: str = DEFAULT_TABLE):
        self.client = client
        self.table = table

    @classmethod
    def from_settings(cls, settings: Settings) -> "StoreRepository":
        if not settings.has_supabase:
            logger.warning("SUPABASE_URL / key not set; store repository is not configured")
            return cls(client=None, table=settings.table)
        client = create_supabase_client(settings.supabase_url, settings.supabase_key)
        logger.info(f"StoreRepository initialized for table: {settings.table}")
        return cls(client=client, table=settings.table)

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def _require_client(self):
        if self.client is None:
            raise StoreClientNotConfigured(
                "Supabase client not initialized. Set SUPABASE_URL and "
                "SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_ANON_KEY)."
            )
        return self.client

    def fetch_rows(self, page_size: int = PAGE_SIZE) -> List[Dict[str, Any]]:
        """
        Reads every row of the table.

        Returns:
            List of row dicts as stored remotely.

        Raises:
            StoreClientNotConfigured: no credentials.
            StoreFetchError: the request failed or returned a non-list payload.
        """
        client = self._require_client()
        rows: List[Dict[str, Any]] = []
        start = 0
        while True:
            try:
                response = (
                    client.table(self.table)
                    .select("*")
                    .range(start, start + page_size - 1)
                    .execute()
                )
            except Exception as e:
                logger.error(f"Failed to fetch rows from {self.table}: {e}")
                raise StoreFetchError(str(e)) from e

            page = getattr(response, 'data', None)
            if not isinstance(page, list):
                raise StoreFetchError(f"Unexpected response payload from {self.table}: {type(page).__name__}")
            rows.extend(page)
            if len(page) < page_size:
                break
            start += page_size

        logger.info(f"Fetched {len(rows)} rows from {self.table}")
        return rows

    def upsert(self, rows: Sequence[Dict[str, Any]], batch_size: int = DEFAULT_BATCH_SIZE) -> int:
        """
        Upserts rows in batches using ``id`` as the conflict key.

        Returns:
            int: Number of rows written.

        Raises:
            StoreUpsertError: on the first rejected batch.
        """
        client = self._require_client()
        if not rows:
            return 0

        written = 0
        total_batches = (len(rows) + batch_size - 1) // batch_size
        for i in range(0, len(rows), batch_size):
            batch = list(rows[i:i + batch_size])
            batch_num = i // batch_size + 1
            try:
                client.table(self.table).upsert(batch, on_conflict="id").execute()
            except Exception as e:
                logger.error(f"Upsert error in batch {batch_num}/{total_batches}: {e}")
                raise StoreUpsertError(f"Batch {batch_num} (rows {i}..{i + len(batch) - 1}) failed: {e}") from e
            written += len(batch)
            logger.info(f"Upserted batch {batch_num}/{total_batches} (rows {i}..{i + len(batch) - 1})")
        return written

    def count(self) -> Optional[int]:
        client = self._require_client()
        response = client.table(self.table).select("*", count="exact", head=True).execute()
        return getattr(response, 'count', None)

    def latest(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Most recently seeded rows, for spot checks."""
        client = self._require_client()
        response = (
            client.table(self.table)
            .select(SAMPLE_COLUMNS)
            .order("seeded_at", desc=True)
            .limit(limit)
            .execute()
        )
        return response.data or []
