"""
Server-rendered pages: the fact list, the category sidebar, the share form
and the vote buttons.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, HTTPException, Query
from fastapi.responses import HTMLResponse, RedirectResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape

from til.board import LOAD_ERROR_MESSAGE, FactBoard
from til.categories import ALL_CATEGORIES, CATEGORIES, category_color
from til.config import get_settings
from til.db import DbClient
from til.dependencies import get_db_client
from til.facts import (
    MAX_TEXT_LENGTH,
    VoteColumn,
    is_valid_http_url,
    remaining_characters,
)

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

VOTE_BUTTONS = (
    (VoteColumn.INTERESTING, "\U0001f44d"),
    (VoteColumn.MINDBLOWING, "\U0001f92f"),
    (VoteColumn.FALSE, "\u26d4"),
)

env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
env.filters["category_color"] = category_color
# Stored rows may carry any source string; only http(s) URLs become links.
env.tests["http_url"] = is_valid_http_url

router = APIRouter()


def list_url(category: str | None = None, show_form: bool = False) -> str:
    params = {}
    if category and category != ALL_CATEGORIES:
        params["category"] = category
    if show_form:
        params["form"] = "1"
    return "/" + (f"?{urlencode(params)}" if params else "")


def render_page(
    board: FactBoard,
    *,
    show_form: bool = False,
    form: Optional[dict] = None,
    errors: Optional[list[str]] = None,
    status_code: int = 200,
) -> HTMLResponse:
    form = form or {"text": "", "source": "", "category": ""}
    html = env.get_template("index.html").render(
        title=get_settings().app_title,
        categories=CATEGORIES,
        board=board,
        show_form=show_form,
        form=form,
        errors=errors or [],
        remaining=remaining_characters(form.get("text")),
        max_length=MAX_TEXT_LENGTH,
        vote_buttons=VOTE_BUTTONS,
        list_url=list_url,
    )
    return HTMLResponse(content=html, status_code=status_code)


@router.get("/", response_class=HTMLResponse)
def index(
    category: str = Query(ALL_CATEGORIES),
    form: bool = Query(False),
    db: DbClient = Depends(get_db_client),
):
    board = FactBoard(db)
    try:
        board.select_category(category)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown category: {category}")
    return render_page(board, show_form=form)


@router.post("/share", response_class=HTMLResponse)
def share(
    text: str = Form(""),
    source: str = Form(""),
    category: str = Form(""),
    current_category: str = Form(ALL_CATEGORIES),
    db: DbClient = Depends(get_db_client),
):
    board = FactBoard(db)
    result = board.submit(text=text, source=source, category=category)
    if result.ok:
        return RedirectResponse(
            list_url(current_category, show_form=True), status_code=303
        )

    try:
        board.select_category(current_category)
    except ValueError:
        board.select_category(ALL_CATEGORIES)
    values = {"text": text, "source": source, "category": category}
    if result.errors:
        return render_page(
            board, show_form=True, form=values, errors=result.errors, status_code=400
        )
    board.alert = LOAD_ERROR_MESSAGE
    return render_page(board, show_form=True, form=values, status_code=502)


@router.post("/facts/{fact_id}/vote/{column}")
def vote(
    fact_id: int,
    column: str,
    current_category: str = Form(ALL_CATEGORIES),
    current: int | None = Form(None, ge=0),
    db: DbClient = Depends(get_db_client),
):
    """
    Record a vote. ``current`` is the count shown on the button, so the
    store is set to that value plus one.
    """
    try:
        vote_column = VoteColumn.parse(column)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown vote column: {column}")
    board = FactBoard(db)
    if board.vote(fact_id, vote_column, current=current) is None:
        logger.info("Vote %s on fact %s was not applied", vote_column.value, fact_id)
    return RedirectResponse(list_url(current_category), status_code=303)
