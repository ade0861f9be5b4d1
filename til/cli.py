"""
Command-line access to the fact store.
"""

from __future__ import annotations

import argparse
import logging
import sys

from til.board import FactBoard
from til.categories import ALL_CATEGORIES, CATEGORY_NAMES
from til.config import get_settings
from til.db import DataStoreError
from til.dependencies import get_db_client
from til.facts import FactRecord, VoteColumn

logger = logging.getLogger(__name__)


def format_fact(fact: FactRecord) -> str:
    marker = "[DISPUTED] " if fact.is_disputed else ""
    return (
        f"#{fact.id} [{fact.category}] {marker}{fact.text}\n"
        f"    {fact.source}\n"
        f"    interesting={fact.votes_interesting} "
        f"mindblowing={fact.votes_mindblowing} false={fact.votes_false}"
        f" year={fact.created_in}"
    )


def cmd_list(args: argparse.Namespace) -> int:
    board = FactBoard(get_db_client(), order_by=VoteColumn.parse(args.order_by))
    board.select_category(args.category)
    if board.alert:
        print(board.alert, file=sys.stderr)
        return 1
    if board.is_empty:
        print("No facts for this category yet. Create the first one!")
        return 0
    for fact in board.facts:
        print(format_fact(fact))
    print(f"There are {board.count} facts in the database. Add your own!")
    return 0


def cmd_share(args: argparse.Namespace) -> int:
    board = FactBoard(get_db_client())
    result = board.submit(args.text, args.source, args.category)
    if result.errors:
        for error in result.errors:
            print(error, file=sys.stderr)
        return 2
    if result.store_error:
        print(f"Could not save the fact: {result.store_error}", file=sys.stderr)
        return 1
    print(format_fact(result.fact))
    return 0


def cmd_vote(args: argparse.Namespace) -> int:
    db = get_db_client()
    try:
        fact = db.increment_vote(args.fact_id, VoteColumn.parse(args.column))
    except DataStoreError as exc:
        print(f"Could not record the vote: {exc}", file=sys.stderr)
        return 1
    if fact is None:
        print(f"Fact {args.fact_id} not found", file=sys.stderr)
        return 1
    print(format_fact(fact))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("til.app:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="til", description="Today I Learned")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List facts")
    list_parser.add_argument(
        "-c",
        "--category",
        default=ALL_CATEGORIES,
        choices=(ALL_CATEGORIES, *CATEGORY_NAMES),
    )
    list_parser.add_argument(
        "-o",
        "--order-by",
        default="interesting",
        choices=[column.short_name for column in VoteColumn],
        help="Vote column to sort by, highest first",
    )
    list_parser.set_defaults(func=cmd_list)

    share_parser = subparsers.add_parser("share", help="Share a new fact")
    share_parser.add_argument("text")
    share_parser.add_argument("source", help="http or https URL")
    share_parser.add_argument("category", choices=CATEGORY_NAMES)
    share_parser.set_defaults(func=cmd_share)

    vote_parser = subparsers.add_parser("vote", help="Vote on a fact")
    vote_parser.add_argument("fact_id", type=int)
    vote_parser.add_argument(
        "column", choices=[column.short_name for column in VoteColumn]
    )
    vote_parser.set_defaults(func=cmd_vote)

    serve_parser = subparsers.add_parser("serve", help="Run the web app")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true")
    serve_parser.set_defaults(func=cmd_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(levelname)s:%(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
