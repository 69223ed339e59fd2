# bookshelf/errors.py
"""
Exceptions raised by the catalogue and rendered by the error handlers in
``bookshelf.main``.

``BookValidationError`` is the only one a route is expected to recover
from itself: it carries the per-field messages that get shown next to the
form. Everything else ends up on one of the two error pages.
"""

from typing import List, Optional

from .models import FieldError


NOT_FOUND_MESSAGE = "Oops! It seems the page could not be found..."
SERVER_ERROR_MESSAGE = "Oops! It looks like something went wrong on the server."


class CatalogError(Exception):
    """Base class for errors that know their HTTP status."""

    status_code = 500

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BookNotFoundError(CatalogError):
    status_code = 404

    def __init__(self, book_id: object = None):
        super().__init__(NOT_FOUND_MESSAGE)
        self.book_id = book_id


class BookValidationError(CatalogError):
    """A create or update payload broke one or more field rules."""

    status_code = 422

    def __init__(self, errors: List[FieldError]):
        super().__init__("; ".join(e.message for e in errors))
        self.errors = errors
