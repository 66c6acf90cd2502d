"""
Bulk authorship merge.

``BulkAuthorshipMerger.merge`` attaches a list of candidate books to a
user while avoiding duplicate book rows and duplicate authorship links.
Candidates are processed strictly in input order, so a candidate can be
recognised as a duplicate of one accepted earlier in the same call.

Each candidate is classified into one of three outcomes:

``Skip``
    No write.  Either the user already has a book with the same natural
    key (``SkipReason.DUPLICATE``), or the store holds such a book but it
    belongs to other authors (``SkipReason.CONFLICT``).  The latter
    protects other authors' books from being claimed on a title
    collision.
``Reuse``
    The store holds a matching book the user already co-authors; the
    stored row is reused as is.
``Create``
    Nothing matches; the candidate is persisted as a new book.

Reused and created books are linked to the user and the user is saved
once at the end.  The lookups, the book saves and the user save run in
one store transaction when the merger is given a ``transaction``
factory, so a failure leaves no book rows behind and a retry of the
same call resolves exactly as the first attempt would have.  The user
cache entry is refreshed only after that transaction has committed.

The merge is not serialised against concurrent merges for the same
user: two calls racing on the final user save may overwrite each
other's links.  Callers that need exclusivity must provide it.
"""

import logging
from contextlib import nullcontext
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ContextManager, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from ..cache.accessor import CacheAsideAccessor
from ..core.exceptions import InvalidBookDataError, UserNotFoundError
from ..models import Book, User
from ..schemas.book import BookCreate
from ..store.base import BookStore

logger = logging.getLogger(__name__)

Candidate = Union[BookCreate, Mapping[str, Any]]


class SkipReason(str, Enum):
    DUPLICATE = "duplicate"  # the user already has this book
    CONFLICT = "conflict"  # the book exists under other authors


@dataclass(frozen=True)
class Skip:
    candidate: BookCreate
    reason: SkipReason
    existing: Optional[Book] = None


@dataclass(frozen=True)
class Reuse:
    candidate: BookCreate
    book: Book


@dataclass(frozen=True)
class Create:
    candidate: BookCreate


Resolution = Union[Skip, Reuse, Create]


@dataclass
class MergeReport:
    """Outcome of a bulk merge.

    ``books`` holds the reused and created books in processing order;
    ``outcomes`` holds one resolution per candidate.
    """

    user: Optional[User] = None
    books: List[Book] = field(default_factory=list)
    outcomes: List[Resolution] = field(default_factory=list)

    @property
    def skipped(self) -> List[Skip]:
        return [o for o in self.outcomes if isinstance(o, Skip)]

    @property
    def conflicts(self) -> List[Skip]:
        return [o for o in self.skipped if o.reason is SkipReason.CONFLICT]


def validate_candidates(candidates: Iterable[Candidate]) -> List[BookCreate]:
    """Validate every candidate up front.

    The first invalid candidate aborts the whole call with
    ``InvalidBookDataError`` naming the offending field, before any
    store access happens.
    """
    validated = []
    for index, candidate in enumerate(candidates):
        data = candidate.model_dump() if isinstance(candidate, BookCreate) else candidate
        try:
            validated.append(BookCreate.model_validate(data))
        except ValidationError as exc:
            error = exc.errors()[0]
            loc = error.get("loc") or ("candidate",)
            raise InvalidBookDataError(str(loc[0]), error["msg"], index=index) from exc
    return validated


class BulkAuthorshipMerger:
    def __init__(
        self,
        books: BookStore,
        users: CacheAsideAccessor[User],
        transaction: Optional[Callable[[], ContextManager[Any]]] = None,
    ) -> None:
        self._books = books
        self._users = users
        # Without a transaction factory every store call commits on its own
        self._transaction = transaction or nullcontext

    def merge(self, user_id: int, candidates: Optional[Iterable[Candidate]]) -> MergeReport:
        candidates = list(candidates or [])
        if not candidates:
            return MergeReport()

        validated = validate_candidates(candidates)

        logger.debug("Merging %d books into user %s", len(validated), user_id)
        report = MergeReport()
        with self._transaction():
            # Load from the store, not the cache: the user's book list decides duplicates
            user = self._users.store.find_by_id(user_id)
            if user is None:
                logger.warning("User %s not found", user_id)
                raise UserNotFoundError(user_id)

            for candidate in validated:
                resolution = self._classify(user, candidate)
                report.outcomes.append(resolution)
                if isinstance(resolution, Skip):
                    logger.info(
                        "Skipped book %r for user %s (%s)",
                        candidate.title,
                        user_id,
                        resolution.reason.value,
                    )
                    continue
                if isinstance(resolution, Reuse):
                    book = resolution.book
                else:
                    book = self._books.save(
                        Book(
                            title=candidate.title,
                            count_chapters=candidate.count_chapters,
                            public_year=candidate.public_year,
                            status=candidate.status,
                        )
                    )
                    logger.debug("Created book %s %r", book.id, book.title)
                user.add_book(book)
                report.books.append(book)
                logger.info("Linked book %s to user %s", book.id, user_id)

            saved = self._users.store.save(user)

        # Only a committed user may enter the cache
        self._users.refresh(saved)
        report.user = saved
        logger.debug(
            "Merge for user %s done: %d linked, %d skipped",
            user_id,
            len(report.books),
            len(report.skipped),
        )
        return report

    def _classify(self, user: User, candidate: BookCreate) -> Resolution:
        key = (candidate.title, candidate.count_chapters, candidate.public_year, candidate.status)
        for book in user.books:
            if book.natural_key == key:
                return Skip(candidate, SkipReason.DUPLICATE, existing=book)

        existing = self._books.find_by_natural_key(*key)
        if existing is None:
            return Create(candidate)
        if user.id not in existing.author_ids:
            return Skip(candidate, SkipReason.CONFLICT, existing=existing)
        return Reuse(candidate, existing)
