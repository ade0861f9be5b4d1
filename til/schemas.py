"""
Pydantic schemas for the JSON API.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from til.facts import (
    MAX_TEXT_LENGTH,
    FactRecord,
    VoteColumn,
    is_valid_http_url,
)

CategoryName = Literal[
    "technology",
    "science",
    "finance",
    "society",
    "entertainment",
    "health",
    "history",
    "news",
]


class CategoryResponse(BaseModel):
    name: str
    color: str


class ListCategoriesResponse(BaseModel):
    categories: list[CategoryResponse]


class NewFactRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=MAX_TEXT_LENGTH)
    source: str
    category: CategoryName

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Fact text is required")
        return value

    @field_validator("source")
    @classmethod
    def source_is_http_url(cls, value: str) -> str:
        if not is_valid_http_url(value):
            raise ValueError("Source must be a valid http or https URL")
        return value


class VoteRequest(BaseModel):
    column: VoteColumn

    @field_validator("column", mode="before")
    @classmethod
    def parse_column(cls, value):
        return VoteColumn.parse(value)


class FactResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    text: str
    source: str
    category: str
    votes_interesting: int = Field(alias="votesInteresting")
    votes_mindblowing: int = Field(alias="votesMindblowing")
    votes_false: int = Field(alias="votesFalse")
    created_in: Optional[int] = Field(default=None, alias="createdIn")
    disputed: bool

    @classmethod
    def from_record(cls, fact: FactRecord) -> "FactResponse":
        return cls(**fact.as_dict(), disputed=fact.is_disputed)


class ListFactsResponse(BaseModel):
    facts: list[FactResponse]
    count: int
    category: str


class HealthResponse(BaseModel):
    status: Literal["ok"]
    store: str
