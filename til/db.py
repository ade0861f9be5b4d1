"""
Data store abstraction for facts: a SQL implementation and an in-memory one.

The hosted Supabase table lives in ``til.supabase``; all three satisfy the
same ``DbClient`` protocol.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

from sqlalchemy import Column, Integer, String, create_engine, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from til.facts import FactRecord, VoteColumn, vote_attribute


class DataStoreError(RuntimeError):
    """Raised by every backend when the store cannot serve a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DbClient(Protocol):
    """Interface for fact storage."""

    def list_facts(
        self,
        category: str | None = None,
        order_by: VoteColumn = VoteColumn.INTERESTING,
    ) -> list[FactRecord]:
        ...

    def get_fact(self, fact_id: int) -> Optional[FactRecord]:
        ...

    def create_fact(self, text: str, source: str, category: str) -> FactRecord:
        ...

    def increment_vote(
        self, fact_id: int, column: VoteColumn, current: int | None = None
    ) -> Optional[FactRecord]:
        ...


def current_year() -> int:
    return datetime.now(timezone.utc).year


DEMO_FACTS: tuple[dict, ...] = (
    {
        "text": "React is being developed by Meta (formerly facebook)",
        "source": "https://opensource.fb.com/",
        "category": "technology",
        "votesInteresting": 24,
        "votesMindblowing": 9,
        "votesFalse": 4,
        "createdIn": 2021,
    },
    {
        "text": (
            "Millennial dads spend 3 times as much time with their kids than "
            "their fathers spent with them. In 1982, 43% of fathers had never "
            "changed a diaper. Today, that number is down to 3%"
        ),
        "source": (
            "https://www.mother.ly/parenting/"
            "millennial-dads-spend-more-time-with-their-kids"
        ),
        "category": "society",
        "votesInteresting": 11,
        "votesMindblowing": 2,
        "votesFalse": 0,
        "createdIn": 2019,
    },
    {
        "text": "Lisbon is the capital of Portugal",
        "source": "https://en.wikipedia.org/wiki/Lisbon",
        "category": "society",
        "votesInteresting": 8,
        "votesMindblowing": 3,
        "votesFalse": 1,
        "createdIn": 2015,
    },
)


def _sorted_facts(
    facts: list[FactRecord], order_by: VoteColumn
) -> list[FactRecord]:
    # Stable sort keeps insertion order between equal vote counts.
    return sorted(facts, key=lambda fact: fact.votes(order_by), reverse=True)


class InMemoryDbClient:
    """Simple in-memory store for development and tests."""

    def __init__(self, seed_demo_facts: bool = False):
        self.facts: Dict[int, FactRecord] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        if seed_demo_facts:
            self.seed(DEMO_FACTS)

    def seed(self, rows) -> None:
        with self._lock:
            for row in rows:
                record = FactRecord.from_row({"id": self._next_id, **row})
                self.facts[record.id] = record
                self._next_id += 1

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.facts.clear()
            self._next_id = 1

    def list_facts(
        self,
        category: str | None = None,
        order_by: VoteColumn = VoteColumn.INTERESTING,
    ) -> list[FactRecord]:
        with self._lock:
            facts = [
                FactRecord(**vars(fact))
                for fact in self.facts.values()
                if category is None or fact.category == category
            ]
        return _sorted_facts(facts, order_by)

    def get_fact(self, fact_id: int) -> Optional[FactRecord]:
        with self._lock:
            fact = self.facts.get(fact_id)
            return FactRecord(**vars(fact)) if fact else None

    def create_fact(self, text: str, source: str, category: str) -> FactRecord:
        with self._lock:
            record = FactRecord(
                id=self._next_id,
                text=text,
                source=source,
                category=category,
                created_in=current_year(),
            )
            self.facts[record.id] = record
            self._next_id += 1
            return FactRecord(**vars(record))

    def increment_vote(
        self, fact_id: int, column: VoteColumn, current: int | None = None
    ) -> Optional[FactRecord]:
        attribute = vote_attribute(column)
        with self._lock:
            fact = self.facts.get(fact_id)
            if not fact:
                return None
            base = getattr(fact, attribute) if current is None else current
            setattr(fact, attribute, base + 1)
            return FactRecord(**vars(fact))


class SqlDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _to_record(self, row: "FactRow") -> FactRecord:
        return FactRecord(
            id=row.id,
            text=row.text,
            source=row.source,
            category=row.category,
            votes_interesting=row.votes_interesting,
            votes_mindblowing=row.votes_mindblowing,
            votes_false=row.votes_false,
            created_in=row.created_in,
        )

    def list_facts(
        self,
        category: str | None = None,
        order_by: VoteColumn = VoteColumn.INTERESTING,
    ) -> list[FactRecord]:
        order_column = getattr(FactRow, vote_attribute(order_by))
        stmt = select(FactRow).order_by(order_column.desc(), FactRow.id.asc())
        if category is not None:
            stmt = stmt.where(FactRow.category == category)
        try:
            with self.Session() as session:
                rows = session.execute(stmt).scalars().all()
                return [self._to_record(row) for row in rows]
        except SQLAlchemyError as exc:
            raise DataStoreError(f"Failed to list facts: {exc}") from exc

    def get_fact(self, fact_id: int) -> Optional[FactRecord]:
        try:
            with self.Session() as session:
                row = session.get(FactRow, fact_id)
                return self._to_record(row) if row else None
        except SQLAlchemyError as exc:
            raise DataStoreError(f"Failed to load fact {fact_id}: {exc}") from exc

    def create_fact(self, text: str, source: str, category: str) -> FactRecord:
        try:
            with self.Session() as session:
                row = FactRow(
                    text=text,
                    source=source,
                    category=category,
                    votes_interesting=0,
                    votes_mindblowing=0,
                    votes_false=0,
                    created_in=current_year(),
                )
                session.add(row)
                session.commit()
                session.refresh(row)
                return self._to_record(row)
        except SQLAlchemyError as exc:
            raise DataStoreError(f"Failed to insert fact: {exc}") from exc

    def increment_vote(
        self, fact_id: int, column: VoteColumn, current: int | None = None
    ) -> Optional[FactRecord]:
        attribute = vote_attribute(column)
        target = getattr(FactRow, attribute)
        value = target + 1 if current is None else current + 1
        try:
            with self.Session() as session:
                result = session.execute(
                    update(FactRow)
                    .where(FactRow.id == fact_id)
                    .values({target: value})
                    .execution_options(synchronize_session=False)
                )
                session.commit()
                if not result.rowcount:
                    return None
                row = session.get(FactRow, fact_id, populate_existing=True)
                return self._to_record(row) if row else None
        except SQLAlchemyError as exc:
            raise DataStoreError(
                f"Failed to update {column.value} on fact {fact_id}: {exc}"
            ) from exc


Base = declarative_base()


class FactRow(Base):
    __tablename__ = "facts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    text = Column(String(200), nullable=False)
    source = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    votes_interesting = Column("votesInteresting", Integer, nullable=False, default=0)
    votes_mindblowing = Column("votesMindblowing", Integer, nullable=False, default=0)
    votes_false = Column("votesFalse", Integer, nullable=False, default=0)
    created_in = Column("createdIn", Integer, nullable=False)
