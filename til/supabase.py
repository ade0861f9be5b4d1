"""
Fact store backed by a hosted Supabase table, spoken to over PostgREST.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import requests

from til.db import DataStoreError
from til.facts import FactRecord, VoteColumn

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10  # seconds


@dataclass
class SupabaseDbClient:
    """
    REST client for the ``facts`` table.

    Every mutation asks for ``return=representation`` so the caller gets the
    row exactly as the server stored it.
    """

    url: str
    api_key: str
    table: str = "facts"
    timeout: float = REQUEST_TIMEOUT
    session: requests.Session = field(default_factory=requests.Session)

    def __post_init__(self):
        if not self.url or not self.api_key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY are required")
        self.url = self.url.rstrip("/")
        self.session.headers.update(
            {
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "Accept": "application/json",
            }
        )

    @property
    def endpoint(self) -> str:
        return f"{self.url}/rest/v1/{self.table}"

    def _request(
        self,
        method: str,
        *,
        params: Optional[dict] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> list[dict]:
        headers = {"Prefer": prefer} if prefer else None
        try:
            response = self.session.request(
                method,
                self.endpoint,
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise DataStoreError(f"{method} {self.endpoint} failed: {exc}") from exc

        if not response.ok:
            logger.warning(
                "Supabase %s %s returned %s: %s",
                method,
                self.table,
                response.status_code,
                response.text[:200],
            )
            raise DataStoreError(
                f"{method} {self.endpoint} returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise DataStoreError(f"Malformed response from {self.endpoint}") from exc
        if not isinstance(payload, list):
            raise DataStoreError(f"Expected a list of rows from {self.endpoint}")
        return payload

    def _to_records(self, rows: list[dict]) -> list[FactRecord]:
        try:
            return [FactRecord.from_row(row) for row in rows]
        except (KeyError, TypeError, ValueError) as exc:
            raise DataStoreError(f"Malformed fact row: {exc}") from exc

    def list_facts(
        self,
        category: str | None = None,
        order_by: VoteColumn = VoteColumn.INTERESTING,
    ) -> list[FactRecord]:
        params = {"select": "*", "order": f"{order_by.value}.desc"}
        if category is not None:
            params["category"] = f"eq.{category}"
        return self._to_records(self._request("GET", params=params))

    def get_fact(self, fact_id: int) -> Optional[FactRecord]:
        rows = self._request("GET", params={"select": "*", "id": f"eq.{fact_id}"})
        records = self._to_records(rows)
        return records[0] if records else None

    def create_fact(self, text: str, source: str, category: str) -> FactRecord:
        # id, createdIn and the vote counters are filled in by the table defaults.
        rows = self._request(
            "POST",
            params={"select": "*"},
            json=[{"text": text, "source": source, "category": category}],
            prefer="return=representation",
        )
        records = self._to_records(rows)
        if not records:
            raise DataStoreError("Insert returned no row")
        return records[0]

    def increment_vote(
        self, fact_id: int, column: VoteColumn, current: int | None = None
    ) -> Optional[FactRecord]:
        if current is None:
            existing = self.get_fact(fact_id)
            if existing is None:
                return None
            current = existing.votes(column)
        rows = self._request(
            "PATCH",
            params={"id": f"eq.{fact_id}", "select": "*"},
            json={column.value: current + 1},
            prefer="return=representation",
        )
        records = self._to_records(rows)
        return records[0] if records else None
