"""
Data access for the catalogue.

``BookStore`` wraps a SQLAlchemy session with the handful of operations
the routes need: a filtered, paginated read with its total count, point
lookup by primary key, and create / update / delete. Payloads are
validated with ``BookFields`` before anything touches the session, so a
``BookValidationError`` always means nothing was written.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.orm import Session

from ..errors import BookValidationError
from ..models import BookDraft, BookFields, field_errors
from ..storage import Book


logger = logging.getLogger(__name__)

_MAX_OFFSET = 2 ** 63 - 1

SEARCH_COLUMNS = (Book.title, Book.author, Book.genre, cast(Book.year, String))


def _search_clause(search: str):
    # Matched as typed, surrounding spaces included
    term = search.lower()
    return or_(
        *(func.lower(col).contains(term, autoescape=True) for col in SEARCH_COLUMNS)
    )


def _validate(fields: Mapping[str, Any]) -> BookFields:
    try:
        return BookFields.model_validate(dict(fields))
    except ValidationError as exc:
        raise BookValidationError(field_errors(exc)) from exc


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


class BookStore:
    def __init__(self, session: Session):
        self.session = session

    def find_and_count_all(
        self, offset: int = 0, limit: int = 10, search: Optional[str] = None
    ) -> Tuple[int, List[Book]]:
        """Return the number of matching books and one window of them.

        Parameters
        ----------
        offset : int
            Rows to skip, after filtering.
        limit : int
            Maximum rows to return.
        search : Optional[str]
            Case-insensitive substring matched against title, author,
            genre and year. Empty or ``None`` means no filter.

        Returns
        -------
        Tuple[int, List[Book]]
            The total number of matching books (before pagination) and
            the books in the requested window, ordered by id.
        """
        stmt = select(Book)
        if search:
            stmt = stmt.where(_search_clause(search))

        count = self.session.scalar(
            select(func.count()).select_from(stmt.subquery())
        ) or 0
        rows = self.session.scalars(
            stmt.order_by(Book.id).offset(min(max(0, offset), _MAX_OFFSET)).limit(limit)
        ).all()
        return count, list(rows)

    def find_by_pk(self, book_id: Any) -> Optional[Book]:
        """Look a book up by id. Anything that is not an integer finds nothing."""
        try:
            pk = int(str(book_id).strip())
        except ValueError:
            return None
        if not -(2 ** 63) <= pk < 2 ** 63:
            return None
        return self.session.get(Book, pk)

    def create(self, fields: Mapping[str, Any]) -> Book:
        data = _validate(fields)
        book = Book(**data.model_dump())
        self.session.add(book)
        self.session.commit()
        self.session.refresh(book)
        logger.info("Created book %s", book.id, extra={"book_id": book.id})
        return book

    def build(self, fields: Mapping[str, Any], book_id: Optional[int] = None) -> BookDraft:
        """Make an unsaved draft from raw form values, keeping them as typed."""
        return BookDraft(
            id=book_id,
            title=_as_text(fields.get("title")),
            author=_as_text(fields.get("author")),
            genre=_as_text(fields.get("genre")),
            year=_as_text(fields.get("year")),
        )

    def update(self, book: Book, fields: Mapping[str, Any]) -> Book:
        data = _validate(fields)
        for name, value in data.model_dump().items():
            setattr(book, name, value)
        self.session.commit()
        self.session.refresh(book)
        logger.info("Updated book %s", book.id, extra={"book_id": book.id})
        return book

    def destroy(self, book: Book) -> None:
        book_id = book.id
        self.session.delete(book)
        self.session.commit()
        logger.info("Deleted book %s", book_id, extra={"book_id": book_id})
