"""
Catalog package: the book list, search, and the create / edit / delete
pages.

``router`` holds the route handlers, ``store`` the database access behind
them and ``schemas`` the pagination model the list view is built from.
"""

from .router import router as catalog_router  # noqa: F401
