"""
JSON API routes.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from til.categories import ALL_CATEGORIES, CATEGORIES, normalize_filter
from til.db import DbClient
from til.dependencies import get_db_client
from til.facts import VoteColumn
from til.schemas import (
    CategoryResponse,
    FactResponse,
    HealthResponse,
    ListCategoriesResponse,
    ListFactsResponse,
    NewFactRequest,
    VoteRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health(db: DbClient = Depends(get_db_client)):
    return HealthResponse(status="ok", store=db.__class__.__name__)


@router.get("/categories", response_model=ListCategoriesResponse)
def list_categories():
    return ListCategoriesResponse(
        categories=[CategoryResponse(**category.as_dict()) for category in CATEGORIES]
    )


@router.get("/facts", response_model=ListFactsResponse)
def list_facts(
    category: str | None = Query(None, description="Category name or 'all'"),
    order_by: str = Query(VoteColumn.INTERESTING.value),
    db: DbClient = Depends(get_db_client),
):
    try:
        category_filter = normalize_filter(category)
        column = VoteColumn.parse(order_by)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    facts = db.list_facts(category=category_filter, order_by=column)
    return ListFactsResponse(
        facts=[FactResponse.from_record(fact) for fact in facts],
        count=len(facts),
        category=category_filter or ALL_CATEGORIES,
    )


@router.get("/facts/{fact_id}", response_model=FactResponse)
def get_fact(fact_id: int, db: DbClient = Depends(get_db_client)):
    fact = db.get_fact(fact_id)
    if not fact:
        raise HTTPException(status_code=404, detail="Fact not found")
    return FactResponse.from_record(fact)


@router.post(
    "/facts", response_model=FactResponse, status_code=status.HTTP_201_CREATED
)
def create_fact(payload: NewFactRequest, db: DbClient = Depends(get_db_client)):
    """
    Insert a fact. The response is the stored row, with the id, year and
    zeroed counters assigned by the store.
    """
    fact = db.create_fact(
        text=payload.text, source=payload.source, category=payload.category
    )
    logger.info("Created fact %s in %s", fact.id, fact.category)
    return FactResponse.from_record(fact)


@router.post("/facts/{fact_id}/vote", response_model=FactResponse)
def vote(fact_id: int, payload: VoteRequest, db: DbClient = Depends(get_db_client)):
    fact = db.increment_vote(fact_id, payload.column)
    if not fact:
        raise HTTPException(status_code=404, detail="Fact not found")
    return FactResponse.from_record(fact)
