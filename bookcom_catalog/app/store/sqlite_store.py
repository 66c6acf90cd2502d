"""
SQLite implementation of the catalog stores.

Each store opens a connection per operation, the same way the rest of
the ``core.db`` helpers do, so instances are safe to share between
threads.  All queries use parameterised statements.  Errors reported by
SQLite are re-raised as ``PersistenceError`` with the original error
chained.

``transaction`` groups several store calls into one commit: while it is
open, every store on the same database file used from the same thread
runs on its cursor, and nothing is written unless the whole block
succeeds.

Authorship links live in ``book_authors``.  Saving a book rewrites the
links of that book from ``Book.author_ids``; saving a user rewrites the
links of that user from ``User.books`` and persists any of those books
that have not been saved yet.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import ContextManager, Dict, Iterator, List, Optional

from ..core.db import get_cursor, get_database_path
from ..core.exceptions import PersistenceError
from ..models import Book, BookStatus, Comment, User

logger = logging.getLogger(__name__)

_local = threading.local()


def _open_transactions() -> Dict[str, sqlite3.Cursor]:
    if not hasattr(_local, "cursors"):
        _local.cursors = {}
    return _local.cursors


@contextmanager
def transaction(database_path: Optional[str] = None) -> Iterator[sqlite3.Cursor]:
    """Run the store calls made inside the block in a single transaction.

    Commits when the block exits normally and rolls back when it raises.
    A nested ``transaction`` on the same database joins the outer one.
    """
    path = get_database_path(database_path)
    cursors = _open_transactions()
    if path in cursors:
        yield cursors[path]
        return
    try:
        with get_cursor(path) as cursor:
            cursors[path] = cursor
            try:
                yield cursor
            finally:
                del cursors[path]
    except sqlite3.Error as exc:
        logger.error("Database error: %s", exc)
        raise PersistenceError(str(exc)) from exc


class _SQLiteStore:
    def __init__(self, database_path: Optional[str] = None) -> None:
        self._database_path = database_path

    def transaction(self) -> ContextManager[sqlite3.Cursor]:
        return transaction(self._database_path)

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        active = _open_transactions().get(get_database_path(self._database_path))
        try:
            if active is not None:
                yield active
            else:
                with get_cursor(self._database_path) as cursor:
                    yield cursor
        except sqlite3.Error as exc:
            logger.error("Database error: %s", exc)
            raise PersistenceError(str(exc)) from exc


def _load_book(cursor: sqlite3.Cursor, row: sqlite3.Row) -> Book:
    author_rows = cursor.execute(
        "SELECT user_id FROM book_authors WHERE book_id = ?", (row["id"],)
    ).fetchall()
    comment_rows = cursor.execute(
        "SELECT id FROM comments WHERE book_id = ? ORDER BY id", (row["id"],)
    ).fetchall()
    return Book(
        id=row["id"],
        title=row["title"],
        count_chapters=row["count_chapters"],
        public_year=row["public_year"],
        status=BookStatus(row["status"]),
        author_ids={r["user_id"] for r in author_rows},
        comment_ids=[r["id"] for r in comment_rows],
    )


def _write_book(cursor: sqlite3.Cursor, book: Book) -> None:
    """Insert or update the ``books`` row and assign ``book.id`` when new."""
    cursor.execute(
        """
        INSERT INTO books (id, title, count_chapters, public_year, status)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            title = excluded.title,
            count_chapters = excluded.count_chapters,
            public_year = excluded.public_year,
            status = excluded.status
        """,
        (book.id, book.title, book.count_chapters, book.public_year, BookStatus(book.status).value),
    )
    if book.id is None:
        book.id = cursor.lastrowid


class SQLiteBookStore(_SQLiteStore):
    """Book persistence backed by the ``books`` and ``book_authors`` tables."""

    def find_by_id(self, entity_id: int) -> Optional[Book]:
        with self._cursor() as cursor:
            row = cursor.execute("SELECT * FROM books WHERE id = ?", (entity_id,)).fetchone()
            return _load_book(cursor, row) if row else None

    def save(self, entity: Book) -> Book:
        with self._cursor() as cursor:
            _write_book(cursor, entity)
            cursor.execute("DELETE FROM book_authors WHERE book_id = ?", (entity.id,))
            cursor.executemany(
                "INSERT OR IGNORE INTO book_authors (book_id, user_id) VALUES (?, ?)",
                [(entity.id, user_id) for user_id in sorted(entity.author_ids)],
            )
        logger.debug("Saved book %s", entity.id)
        return entity

    def delete(self, entity_id: int) -> None:
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM books WHERE id = ?", (entity_id,))

    def exists_by_id(self, entity_id: int) -> bool:
        with self._cursor() as cursor:
            row = cursor.execute("SELECT 1 FROM books WHERE id = ?", (entity_id,)).fetchone()
            return row is not None

    def find_by_natural_key(
        self, title: str, count_chapters: int, public_year: int, status: BookStatus
    ) -> Optional[Book]:
        with self._cursor() as cursor:
            row = cursor.execute(
                """
                SELECT * FROM books
                WHERE title = ? AND count_chapters = ? AND public_year = ? AND status = ?
                ORDER BY id LIMIT 1
                """,
                (title, count_chapters, public_year, BookStatus(status).value),
            ).fetchone()
            return _load_book(cursor, row) if row else None

    def find_all(self) -> List[Book]:
        return self._select("SELECT * FROM books ORDER BY id", ())

    def find_by_title(self, title: str) -> List[Book]:
        return self._select("SELECT * FROM books WHERE title = ? ORDER BY id", (title,))

    def find_by_status(self, status: BookStatus) -> List[Book]:
        return self._select(
            "SELECT * FROM books WHERE status = ? ORDER BY id", (BookStatus(status).value,)
        )

    def find_by_public_year(self, public_year: int) -> List[Book]:
        return self._select(
            "SELECT * FROM books WHERE public_year = ? ORDER BY id", (public_year,)
        )

    def find_by_author(self, user_id: int) -> List[Book]:
        return self._select(
            """
            SELECT b.* FROM books b
            JOIN book_authors ba ON ba.book_id = b.id
            WHERE ba.user_id = ?
            ORDER BY b.id
            """,
            (user_id,),
        )

    def _select(self, query: str, params: tuple) -> List[Book]:
        with self._cursor() as cursor:
            rows = cursor.execute(query, params).fetchall()
            return [_load_book(cursor, row) for row in rows]


class SQLiteUserStore(_SQLiteStore):
    """User persistence; also owns the user side of authorship links."""

    def find_by_id(self, entity_id: int) -> Optional[User]:
        with self._cursor() as cursor:
            row = cursor.execute("SELECT * FROM users WHERE id = ?", (entity_id,)).fetchone()
            return self._load_user(cursor, row) if row else None

    def save(self, entity: User) -> User:
        with self._cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO users (id, name, email, password)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    email = excluded.email,
                    password = excluded.password
                """,
                (entity.id, entity.name, entity.email, entity.password),
            )
            if entity.id is None:
                entity.id = cursor.lastrowid
            for book in entity.books:
                if book.id is None:
                    _write_book(cursor, book)
                book.author_ids.add(entity.id)
            book_ids = [book.id for book in entity.books]
            placeholders = ", ".join("?" for _ in book_ids)
            if book_ids:
                cursor.execute(
                    f"DELETE FROM book_authors WHERE user_id = ? AND book_id NOT IN ({placeholders})",
                    (entity.id, *book_ids),
                )
            else:
                cursor.execute("DELETE FROM book_authors WHERE user_id = ?", (entity.id,))
            cursor.executemany(
                "INSERT OR IGNORE INTO book_authors (book_id, user_id) VALUES (?, ?)",
                [(book_id, entity.id) for book_id in book_ids],
            )
        logger.debug("Saved user %s with %d books", entity.id, len(entity.books))
        return entity

    def delete(self, entity_id: int) -> None:
        # Links and comments go with the row (ON DELETE CASCADE)
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM users WHERE id = ?", (entity_id,))

    def exists_by_id(self, entity_id: int) -> bool:
        with self._cursor() as cursor:
            row = cursor.execute("SELECT 1 FROM users WHERE id = ?", (entity_id,)).fetchone()
            return row is not None

    def find_all(self) -> List[User]:
        return self._select("SELECT * FROM users ORDER BY id", ())

    def find_by_name_containing(self, name: str) -> List[User]:
        return self._select(
            "SELECT * FROM users WHERE name LIKE ? ORDER BY id", (f"%{name}%",)
        )

    def find_by_email(self, email: str) -> Optional[User]:
        users = self._select("SELECT * FROM users WHERE email = ?", (email,))
        return users[0] if users else None

    def _select(self, query: str, params: tuple) -> List[User]:
        with self._cursor() as cursor:
            rows = cursor.execute(query, params).fetchall()
            return [self._load_user(cursor, row) for row in rows]

    @staticmethod
    def _load_user(cursor: sqlite3.Cursor, row: sqlite3.Row) -> User:
        book_rows = cursor.execute(
            """
            SELECT b.* FROM books b
            JOIN book_authors ba ON ba.book_id = b.id
            WHERE ba.user_id = ?
            ORDER BY b.id
            """,
            (row["id"],),
        ).fetchall()
        comment_rows = cursor.execute(
            "SELECT id FROM comments WHERE user_id = ? ORDER BY id", (row["id"],)
        ).fetchall()
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            password=row["password"],
            books=[_load_book(cursor, book_row) for book_row in book_rows],
            comment_ids=[r["id"] for r in comment_rows],
        )


class SQLiteCommentStore(_SQLiteStore):
    def find_by_id(self, entity_id: int) -> Optional[Comment]:
        with self._cursor() as cursor:
            row = cursor.execute("SELECT * FROM comments WHERE id = ?", (entity_id,)).fetchone()
            return self._row_to_comment(row) if row else None

    def save(self, entity: Comment) -> Comment:
        if entity.created_at is None:
            entity.created_at = datetime.now()
        with self._cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO comments (id, text, created_at, book_id, user_id)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    text = excluded.text,
                    book_id = excluded.book_id,
                    user_id = excluded.user_id
                """,
                (
                    entity.id,
                    entity.text,
                    entity.created_at.isoformat(sep=" "),
                    entity.book_id,
                    entity.user_id,
                ),
            )
            if entity.id is None:
                entity.id = cursor.lastrowid
        return entity

    def delete(self, entity_id: int) -> None:
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM comments WHERE id = ?", (entity_id,))

    def exists_by_id(self, entity_id: int) -> bool:
        with self._cursor() as cursor:
            row = cursor.execute("SELECT 1 FROM comments WHERE id = ?", (entity_id,)).fetchone()
            return row is not None

    def find_by_book(self, book_id: int) -> List[Comment]:
        return self._select("SELECT * FROM comments WHERE book_id = ? ORDER BY id", (book_id,))

    def find_by_user(self, user_id: int) -> List[Comment]:
        return self._select("SELECT * FROM comments WHERE user_id = ? ORDER BY id", (user_id,))

    def _select(self, query: str, params: tuple) -> List[Comment]:
        with self._cursor() as cursor:
            rows = cursor.execute(query, params).fetchall()
            return [self._row_to_comment(row) for row in rows]

    @staticmethod
    def _row_to_comment(row: sqlite3.Row) -> Comment:
        created_at = row["created_at"]
        return Comment(
            id=row["id"],
            text=row["text"],
            book_id=row["book_id"],
            user_id=row["user_id"],
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )
