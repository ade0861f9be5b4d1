"""
Local mirror of the fact list.

The store is the source of truth. After every mutation the board swaps in
the row the store sent back instead of patching its own copy, so ids, years
and counters always match what the server assigned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from til.categories import ALL_CATEGORIES, normalize_filter
from til.db import DataStoreError, DbClient
from til.facts import FactRecord, VoteColumn, validate_new_fact

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "There was an error loading the facts."


@dataclass
class SubmitResult:
    fact: Optional[FactRecord] = None
    errors: list[str] = field(default_factory=list)
    store_error: Optional[DataStoreError] = None

    @property
    def ok(self) -> bool:
        return self.fact is not None


class FactBoard:
    def __init__(
        self,
        db: DbClient,
        order_by: VoteColumn = VoteColumn.INTERESTING,
    ):
        self.db = db
        self.order_by = order_by
        self.facts: list[FactRecord] = []
        self.current_category: str = ALL_CATEGORIES
        self.alert: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.facts)

    @property
    def is_empty(self) -> bool:
        return not self.facts

    def select_category(self, name: str | None) -> list[FactRecord]:
        """
        Switch the filter and reload from the store.

        Raises ValueError for an unknown category. A store failure keeps the
        previous list and sets ``alert``.
        """
        category = normalize_filter(name)
        self.current_category = category or ALL_CATEGORIES
        return self.reload()

    def reload(self) -> list[FactRecord]:
        category = None if self.current_category == ALL_CATEGORIES else self.current_category
        try:
            self.facts = self.db.list_facts(category=category, order_by=self.order_by)
            self.alert = None
        except DataStoreError:
            logger.exception("Failed to load facts for %s", self.current_category)
            self.alert = LOAD_ERROR_MESSAGE
        return self.facts

    def submit(self, text: str, source: str, category: str) -> SubmitResult:
        errors = validate_new_fact(text, source, category)
        if errors:
            return SubmitResult(errors=errors)
        try:
            fact = self.db.create_fact(text=text, source=source, category=category)
        except DataStoreError as exc:
            logger.warning("Failed to insert fact: %s", exc)
            return SubmitResult(store_error=exc)
        self.facts.insert(0, fact)
        return SubmitResult(fact=fact)

    def find(self, fact_id: int) -> Optional[FactRecord]:
        for fact in self.facts:
            if fact.id == fact_id:
                return fact
        return None

    def vote(
        self, fact_id: int, column: VoteColumn | str, current: int | None = None
    ) -> Optional[FactRecord]:
        """
        Increment one counter in the store and mirror the returned row.

        The new value is computed from the counter the voter last saw:
        ``current`` when given, otherwise this board's copy of the row.
        Concurrent votes therefore resolve as last write wins. Returns None
        and leaves the list alone when the store fails or has no such fact.
        """
        column = VoteColumn.parse(column)
        if current is None:
            local = self.find(fact_id)
            current = local.votes(column) if local else None
        try:
            updated = self.db.increment_vote(fact_id, column, current=current)
        except DataStoreError as exc:
            logger.warning("Failed to vote %s on fact %s: %s", column.value, fact_id, exc)
            return None
        if updated is None:
            return None
        self.facts = [updated if fact.id == updated.id else fact for fact in self.facts]
        return updated
