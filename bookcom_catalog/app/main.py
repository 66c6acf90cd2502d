"""
Main entrypoint for the Bookcom catalog.

``create_catalog`` assembles the catalog: it sets up logging, applies
database migrations, builds the stores, one ``CacheContainer`` and the
cache-aside accessors on top of them, and finally the services.  There
is no module-level instance; the caller owns the returned ``Catalog``
for the lifetime of the process::

    catalog = create_catalog()
    catalog.users.add_books_bulk(7, [{"title": "Dune", ...}])
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .cache.accessor import CacheAsideAccessor
from .cache.container import CacheContainer
from .core.config import Settings, settings as default_settings
from .core.db import get_database_path, init_db
from .core.logging_config import setup_logging
from .models import Book, Comment, User
from .services.book_service import BookService
from .services.bulk_merge import BulkAuthorshipMerger
from .services.comment_service import CommentService
from .services.user_service import UserService
from .store.sqlite_store import SQLiteBookStore, SQLiteCommentStore, SQLiteUserStore

logger = logging.getLogger(__name__)


@dataclass
class Catalog:
    """Everything a caller needs, built once per process."""

    caches: CacheContainer
    books: BookService
    users: UserService
    comments: CommentService
    merger: BulkAuthorshipMerger


def create_catalog(
    settings: Optional[Settings] = None,
    database_path: Optional[str] = None,
) -> Catalog:
    """Create and wire a catalog.

    Parameters
    ----------
    settings : Optional[Settings]
        Settings to use; defaults to the module-level ``settings``
        read from the environment.
    database_path : Optional[str]
        Overrides ``settings.database_url``.

    Returns
    -------
    Catalog
        Services sharing one set of caches and stores.
    """
    settings = settings or default_settings
    # Initialise logging before anything else so the steps below can log
    setup_logging(settings.log_level, settings.log_file)

    db_path = get_database_path(database_path or settings.database_url)
    init_db(db_path)

    caches = CacheContainer.from_settings(settings)
    book_store = SQLiteBookStore(db_path)
    book_accessor: CacheAsideAccessor[Book] = CacheAsideAccessor(book_store, caches.books)
    user_accessor: CacheAsideAccessor[User] = CacheAsideAccessor(
        SQLiteUserStore(db_path), caches.users
    )
    comment_accessor: CacheAsideAccessor[Comment] = CacheAsideAccessor(
        SQLiteCommentStore(db_path), caches.comments
    )

    merger = BulkAuthorshipMerger(book_store, user_accessor, transaction=book_store.transaction)
    catalog = Catalog(
        caches=caches,
        books=BookService(book_accessor, user_accessor, comment_accessor),
        users=UserService(user_accessor, book_accessor, comment_accessor, merger),
        comments=CommentService(comment_accessor, book_accessor, user_accessor),
        merger=merger,
    )
    logger.info("%s ready (database %s)", settings.project_name, db_path)
    return catalog
