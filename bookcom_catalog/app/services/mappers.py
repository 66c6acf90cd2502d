"""Conversion of domain entities into read schemas."""

from ..models import Book, Comment, User
from ..schemas.book import BookRead
from ..schemas.comment import CommentRead
from ..schemas.user import UserRead


def to_book_read(book: Book) -> BookRead:
    return BookRead(
        id=book.id,
        title=book.title,
        count_chapters=book.count_chapters,
        public_year=book.public_year,
        status=book.status,
        author_ids=sorted(book.author_ids),
        comment_ids=list(book.comment_ids),
    )


def to_user_read(user: User) -> UserRead:
    # No password
    return UserRead(
        id=user.id,
        name=user.name,
        email=user.email,
        book_ids=[book.id for book in user.books if book.id is not None],
        comment_ids=list(user.comment_ids),
    )


def to_comment_read(comment: Comment) -> CommentRead:
    return CommentRead.model_validate(comment)
