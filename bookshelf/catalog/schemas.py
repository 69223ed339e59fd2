"""
Pydantic schema definitions for the catalog module.

``BookPage`` bundles one window of books with the pagination figures the
list template needs to draw its page links.
"""

import math
from typing import Any, List

from pydantic import BaseModel, Field


PAGE_SIZE = 10


class BookPage(BaseModel):
    """One page of the (optionally filtered) book list.

    ``pagination`` is ``count / page_size`` as a plain float and is the
    upper bound a ``page`` number is checked against. ``page_count`` is
    that value rounded up, i.e. how many page links to show.
    """

    page: int
    page_size: int = PAGE_SIZE
    count: int
    books: List[Any] = Field(default_factory=list)

    @property
    def pagination(self) -> float:
        return self.count / self.page_size

    @property
    def page_count(self) -> int:
        return math.ceil(self.pagination)

    @property
    def in_range(self) -> bool:
        return 0 <= self.page <= self.pagination
