"""Tests for the maintenance CLI."""

import json
import sqlite3

from bookcom_catalog.app.core.config import Settings
from bookcom_catalog.app.main import create_catalog
from bookcom_catalog.app.schemas.user import UserCreate
from bookcom_catalog.cli import main

DUNE = {"title": "Dune", "count_chapters": 18, "public_year": 1965, "status": "COMPLETED"}


def make_user(db):
    catalog = create_catalog(settings=Settings(), database_path=db)
    return catalog.users.create_user(
        UserCreate(name="Frank", email="frank@example.com", password="secret1")
    )


def test_init_db(tmp_path, capsys):
    db = str(tmp_path / "cli.db")

    assert main(["--db", db, "init-db"]) == 0
    assert "Database ready" in capsys.readouterr().out
    with sqlite3.connect(db) as conn:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
    assert {"users", "books", "book_authors", "comments"} <= tables


def test_bulk_add_prints_resolved_books(tmp_path, capsys):
    db = str(tmp_path / "cli.db")
    user = make_user(db)
    books_file = tmp_path / "books.json"
    books_file.write_text(json.dumps([DUNE, DUNE, dict(DUNE, title="Dune Messiah")]), encoding="utf-8")

    code = main(["--db", db, "bulk-add", "--user", str(user.id), "--file", str(books_file)])

    assert code == 0
    printed = json.loads(capsys.readouterr().out)
    assert [book["title"] for book in printed] == ["Dune", "Dune Messiah"]
    assert all(book["author_ids"] == [user.id] for book in printed)
    assert printed[0]["status"] == "COMPLETED"


def test_bulk_add_unknown_user(tmp_path, capsys):
    db = str(tmp_path / "cli.db")
    books_file = tmp_path / "books.json"
    books_file.write_text(json.dumps([DUNE]), encoding="utf-8")

    assert main(["--db", db, "bulk-add", "--user", "404", "--file", str(books_file)]) == 2
    assert "User with id 404 not found" in capsys.readouterr().err


def test_bulk_add_rejects_non_list(tmp_path, capsys):
    books_file = tmp_path / "books.json"
    books_file.write_text(json.dumps(DUNE), encoding="utf-8")

    assert main(["--db", str(tmp_path / "cli.db"), "bulk-add", "--user", "1", "--file", str(books_file)]) == 1
    assert "JSON list" in capsys.readouterr().err
