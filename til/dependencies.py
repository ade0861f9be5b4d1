"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from til.config import get_settings
from til.db import DbClient, InMemoryDbClient, SqlDbClient
from til.supabase import SupabaseDbClient

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None


def build_db_client() -> DbClient:
    """Pick a backend from settings: in-memory, Supabase, then SQL."""
    settings = get_settings()
    if settings.use_in_memory_backends:
        return InMemoryDbClient(seed_demo_facts=settings.seed_demo_facts)
    if settings.supabase_url and settings.supabase_key:
        return SupabaseDbClient(
            url=settings.supabase_url,
            api_key=settings.supabase_key,
            table=settings.supabase_table,
            timeout=settings.request_timeout,
        )
    if settings.database_url:
        return SqlDbClient(settings.database_url)
    logger.warning("No fact store configured; using an in-memory store")
    return InMemoryDbClient(seed_demo_facts=settings.seed_demo_facts)


def get_db_client() -> DbClient:
    """
    Return a singleton store client so in-memory state persists across requests.
    """
    global _db_client
    if _db_client:
        return _db_client
    _db_client = build_db_client()
    logger.info("Fact store: %s", _db_client.__class__.__name__)
    return _db_client


def reset_db_client() -> None:
    global _db_client
    _db_client = None
