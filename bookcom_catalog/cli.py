#!/usr/bin/env python3
"""
Maintenance commands for the Bookcom catalog database.

Usage:
    bookcom-catalog [--db ./bookcom.db] init-db
    bookcom-catalog [--db ./bookcom.db] bulk-add --user 7 --file books.json

``books.json`` holds a JSON list of book objects with ``title``,
``count_chapters``, ``public_year`` and ``status``.  The resolved books
(created or reused, duplicates skipped) are printed as JSON.
"""

import argparse
import json
import os
import sys
from typing import List, Optional

from .app.core.config import settings
from .app.core.db import get_database_path, init_db
from .app.core.exceptions import CatalogError
from .app.main import create_catalog


def _db_arg(args: argparse.Namespace) -> Optional[str]:
    # Paths given on the command line are relative to the working directory
    return os.path.abspath(args.db) if args.db else None


def _init_db(args: argparse.Namespace) -> int:
    path = get_database_path(_db_arg(args) or settings.database_url)
    init_db(path)
    print(f"[+] Database ready: {path}")
    return 0


def _bulk_add(args: argparse.Namespace) -> int:
    try:
        with open(args.file, encoding="utf-8") as fh:
            candidates = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        print(f"[!] Cannot read {args.file}: {exc}", file=sys.stderr)
        return 1
    if not isinstance(candidates, list):
        print("[!] The file must contain a JSON list of books", file=sys.stderr)
        return 1

    catalog = create_catalog(database_path=_db_arg(args))
    try:
        books = catalog.users.add_books_bulk(args.user, candidates)
    except CatalogError as exc:
        print(f"[!] {exc}", file=sys.stderr)
        return 2
    print(json.dumps([book.model_dump(mode="json") for book in books], indent=2, ensure_ascii=False))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="bookcom-catalog", description="Bookcom catalog maintenance.")
    ap.add_argument("--db", help="Path to SQLite DB file (defaults to DATABASE_URL)")
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the database and apply migrations")

    bulk = sub.add_parser("bulk-add", help="Attach books from a JSON file to a user")
    bulk.add_argument("--user", type=int, required=True, help="Target user id")
    bulk.add_argument("--file", required=True, help="JSON file with a list of books")

    args = ap.parse_args(argv)
    handlers = {"init-db": _init_db, "bulk-add": _bulk_add}
    return handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
