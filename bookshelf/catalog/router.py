"""
Route definitions for the catalogue pages.

Endpoints:
- GET  /                   : redirect to /books
- GET  /books              : paginated list, filtered by the client's search
- POST /books              : set or clear the client's search, redirect
- GET  /books/new          : empty creation form
- POST /books/new          : create, or show the form again with errors
- GET  /books/{book_id}    : edit form
- POST /books/{book_id}    : update, or show the form again with errors
- POST /books/{book_id}/delete : delete

Lookups that find nothing raise ``BookNotFoundError``; the app-level
error handlers turn that into the "page not found" page.
"""

from __future__ import annotations

import re
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Form, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from ..errors import BookNotFoundError, BookValidationError
from ..models import BookDraft
from ..storage import Book, get_session
from ..views import templates
from .schemas import PAGE_SIZE, BookPage
from .store import BookStore


# Session key holding the client's current search filter
SEARCH_KEY = "search"

# Leading integer, read the way a browser-side parseInt would
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

router = APIRouter(tags=["catalog"])


def get_store(session: Session = Depends(get_session)) -> BookStore:
    return BookStore(session)


def book_form(
    title: str = Form(default=""),
    author: str = Form(default=""),
    genre: str = Form(default=""),
    year: str = Form(default=""),
) -> Dict[str, str]:
    return {"title": title, "author": author, "genre": genre, "year": year}


def parse_page(raw: Optional[str]) -> int:
    """Zero-based page number from the query string; 0 when absent or garbled."""
    m = _LEADING_INT.match(raw or "")
    return int(m.group(1)) if m else 0


def _to_books() -> RedirectResponse:
    return RedirectResponse("/books", status_code=status.HTTP_302_FOUND)


def _find_or_404(store: BookStore, book_id: str) -> Book:
    book = store.find_by_pk(book_id)
    if book is None:
        raise BookNotFoundError(book_id)
    return book


@router.get("/")
def home() -> RedirectResponse:
    return _to_books()


@router.get("/books", response_class=HTMLResponse)
def list_books(
    request: Request,
    page: Optional[str] = Query(default=None),
    store: BookStore = Depends(get_store),
):
    page_no = parse_page(page)
    if page_no < 0:
        return _to_books()

    search = request.session.get(SEARCH_KEY, "")
    count, rows = store.find_and_count_all(
        offset=page_no * PAGE_SIZE, limit=PAGE_SIZE, search=search
    )
    result = BookPage(page=page_no, count=count, books=rows)
    # Out-of-range pages go back to the first page
    if not result.in_range:
        return _to_books()

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "books": result.books,
            "title": "Books",
            "pagination": result.pagination,
            "page_count": result.page_count,
            "page": result.page,
            "count": result.count,
            "search": search,
        },
    )


@router.post("/books")
def search_books(request: Request, search: str = Form(default="")) -> RedirectResponse:
    if search:
        request.session[SEARCH_KEY] = search
    else:
        request.session.pop(SEARCH_KEY, None)
    return _to_books()


@router.get("/books/new", response_class=HTMLResponse)
def new_book_form(request: Request):
    return templates.TemplateResponse(
        request, "new-book.html", {"book": BookDraft(), "title": "New Book"}
    )


@router.post("/books/new", response_class=HTMLResponse)
def create_book(
    request: Request,
    fields: Dict[str, str] = Depends(book_form),
    store: BookStore = Depends(get_store),
):
    try:
        store.create(fields)
    except BookValidationError as exc:
        book = store.build(fields)
        return templates.TemplateResponse(
            request,
            "new-book.html",
            {"book": book, "errors": exc.errors, "title": "New Book"},
        )
    return _to_books()


@router.get("/books/{book_id}", response_class=HTMLResponse)
def edit_book_form(
    request: Request, book_id: str, store: BookStore = Depends(get_store)
):
    book = _find_or_404(store, book_id)
    return templates.TemplateResponse(
        request, "update-book.html", {"book": book, "title": book.title}
    )


@router.post("/books/{book_id}", response_class=HTMLResponse)
def update_book(
    request: Request,
    book_id: str,
    fields: Dict[str, str] = Depends(book_form),
    store: BookStore = Depends(get_store),
):
    book = _find_or_404(store, book_id)
    try:
        store.update(book, fields)
    except BookValidationError as exc:
        draft = store.build(fields, book_id=book.id)
        return templates.TemplateResponse(
            request,
            "update-book.html",
            {
                "book": draft,
                "errors": exc.errors,
                "title": draft.title.strip() or book.title,
            },
        )
    return _to_books()


@router.post("/books/{book_id}/delete")
def delete_book(book_id: str, store: BookStore = Depends(get_store)) -> RedirectResponse:
    book = _find_or_404(store, book_id)
    store.destroy(book)
    return _to_books()
