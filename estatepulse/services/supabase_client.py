"""Supabase client wrapper with async context manager support."""

import os
from typing import Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from estatepulse.utils.errors import SupabaseError
import logging

logger = logging.getLogger(__name__)

# Global client instance (singleton pattern)
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton."""
    global _client

    if _client is None:
        url = os.environ.get("SUPABASE_URL")
        key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")

        if not url or not key:
            raise SupabaseError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        # Serverless handlers never hold a user session
        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )

        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", extra={"url": url})

    return _client


class SupabaseClient:
    """Async context manager for Supabase client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Supabase operation error",
                extra={"error": str(exc_val), "type": exc_type.__name__}
            )
        return False


# Generic record helpers. Every query is scoped to one agency.
async def upsert_record(table: str, record: dict) -> dict:
    """Insert or replace a record by primary key."""
    async with SupabaseClient() as client:
        try:
            result = client.table(table).upsert(record).execute()
            if result.data and len(result.data) > 0:
                return result.data[0]
            raise SupabaseError(f"Failed to upsert into {table}: no data returned")
        except SupabaseError:
            raise
        except Exception as e:
            raise SupabaseError(f"Failed to upsert into {table}: {e}")


async def insert_record(table: str, record: dict) -> dict:
    """Insert a new record."""
    async with SupabaseClient() as client:
        try:
            result = client.table(table).insert(record).execute()
            if result.data and len(result.data) > 0:
                return result.data[0]
            raise SupabaseError(f"Failed to insert into {table}: no data returned")
        except SupabaseError:
            raise
        except Exception as e:
            raise SupabaseError(f"Failed to insert into {table}: {e}")


async def fetch_records(
    table: str,
    agency_id: str,
    filters: Optional[dict] = None,
    order_by: Optional[str] = None,
    desc: bool = True,
    limit: Optional[int] = None,
) -> list[dict]:
    """Select an agency's records, optionally filtered by column equality."""
    async with SupabaseClient() as client:
        try:
            query = client.table(table).select("*").eq("agency_id", agency_id)
            for column, value in (filters or {}).items():
                query = query.eq(column, value)
            if order_by:
                query = query.order(order_by, desc=desc)
            if limit:
                query = query.limit(limit)
            result = query.execute()
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to fetch {table}: {e}")


async def fetch_record(table: str, record_id: str, agency_id: str) -> Optional[dict]:
    """Get one record by ID."""
    async with SupabaseClient() as client:
        try:
            result = client.table(table).select("*").eq("id", record_id).eq("agency_id", agency_id).execute()
            return result.data[0] if result.data and len(result.data) > 0 else None
        except Exception as e:
            raise SupabaseError(f"Failed to get {table} record: {e}")


async def update_record(table: str, record_id: str, agency_id: str, updates: dict) -> dict:
    """Update a record by ID."""
    async with SupabaseClient() as client:
        try:
            result = client.table(table).update(updates).eq("id", record_id).eq("agency_id", agency_id).execute()
            if result.data and len(result.data) > 0:
                return result.data[0]
            raise SupabaseError(f"Failed to update {table}: {record_id}")
        except SupabaseError:
            raise
        except Exception as e:
            raise SupabaseError(f"Failed to update {table}: {e}")


async def delete_records(table: str, ids: list[str], agency_id: str) -> int:
    """Batch delete records by ID. Returns the number removed."""
    if not ids:
        return 0
    async with SupabaseClient() as client:
        try:
            result = client.table(table).delete().in_("id", ids).eq("agency_id", agency_id).execute()
            return len(result.data) if result.data else 0
        except Exception as e:
            raise SupabaseError(f"Failed to delete from {table}: {e}")

