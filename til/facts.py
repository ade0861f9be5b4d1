"""
The Fact record, vote columns and new-fact validation.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import urlsplit

from pydantic import HttpUrl, TypeAdapter, ValidationError

from til.categories import CATEGORY_NAMES, is_category

MAX_TEXT_LENGTH = 200
ALLOWED_URL_SCHEMES = ("http", "https")

_http_url = TypeAdapter(HttpUrl)
# Characters that cannot appear in a host name, on top of what HttpUrl refuses.
_FORBIDDEN_HOST_CHARACTERS = re.compile(r"[\s\x00-\x1f\x7f\"<>\\^`{|}%#/?@]")


class VoteColumn(str, enum.Enum):
    INTERESTING = "votesInteresting"
    MINDBLOWING = "votesMindblowing"
    FALSE = "votesFalse"

    @property
    def short_name(self) -> str:
        return self.value[len("votes"):].lower()

    @classmethod
    def parse(cls, value: "str | VoteColumn") -> "VoteColumn":
        """Accept either the column name (``votesFalse``) or its short name (``false``)."""
        if isinstance(value, VoteColumn):
            return value
        lowered = str(value).strip().lower()
        for column in cls:
            if lowered in (column.value.lower(), column.short_name):
                return column
        raise ValueError(f"Unknown vote column: {value}")


@dataclass
class FactRecord:
    id: int
    text: str
    source: str
    category: str
    votes_interesting: int = 0
    votes_mindblowing: int = 0
    votes_false: int = 0
    created_in: int | None = None

    @property
    def is_disputed(self) -> bool:
        return self.votes_interesting + self.votes_mindblowing < self.votes_false

    def votes(self, column: VoteColumn) -> int:
        return getattr(self, _ATTRIBUTES[column])

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "source": self.source,
            "category": self.category,
            "votesInteresting": self.votes_interesting,
            "votesMindblowing": self.votes_mindblowing,
            "votesFalse": self.votes_false,
            "createdIn": self.created_in,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "FactRecord":
        """Build a record from a row using the table's column names."""
        return cls(
            id=int(row["id"]),
            text=row["text"],
            source=row["source"],
            category=row["category"],
            votes_interesting=int(row.get("votesInteresting") or 0),
            votes_mindblowing=int(row.get("votesMindblowing") or 0),
            votes_false=int(row.get("votesFalse") or 0),
            created_in=(
                int(row["createdIn"]) if row.get("createdIn") is not None else None
            ),
        )


_ATTRIBUTES = {
    VoteColumn.INTERESTING: "votes_interesting",
    VoteColumn.MINDBLOWING: "votes_mindblowing",
    VoteColumn.FALSE: "votes_false",
}


def vote_attribute(column: VoteColumn) -> str:
    return _ATTRIBUTES[column]


def is_valid_http_url(value: str | None) -> bool:
    """Return True when ``value`` parses as an absolute http(s) URL with a host."""
    if not value or not isinstance(value, str):
        return False
    value = value.strip()
    try:
        url = _http_url.validate_python(value)
        host = urlsplit(value).hostname
    except (ValidationError, ValueError):
        return False
    if url.scheme not in ALLOWED_URL_SCHEMES or not host:
        return False
    return not _FORBIDDEN_HOST_CHARACTERS.search(host)


def remaining_characters(text: str | None) -> int:
    return MAX_TEXT_LENGTH - len(text or "")


def validate_new_fact(
    text: str | None, source: str | None, category: str | None
) -> list[str]:
    """
    Check a submission before it is sent to the store.

    Returns a list of problems; an empty list means the fact can be posted.
    """
    errors: list[str] = []
    if not text or not text.strip():
        errors.append("Fact text is required.")
    elif len(text) > MAX_TEXT_LENGTH:
        errors.append(
            f"Fact text must be at most {MAX_TEXT_LENGTH} characters "
            f"({len(text)} given)."
        )
    if not is_valid_http_url(source):
        errors.append("Source must be a valid http or https URL.")
    if not category:
        errors.append("Choose a category.")
    elif not is_category(category):
        errors.append(
            f"Unknown category {category!r}; expected one of "
            f"{', '.join(CATEGORY_NAMES)}."
        )
    return errors
