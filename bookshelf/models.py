# bookshelf/models.py
from typing import Any, Optional

from pydantic import BaseModel, ValidationError, field_validator
from pydantic_core import PydanticCustomError


class FieldError(BaseModel):
    field: str
    message: str


def _blank_to_none(v: Any) -> Any:
    if v is None:
        return None
    if isinstance(v, str) and not v.strip():
        return None
    return v


class BookFields(BaseModel):
    """Validated payload for creating or updating a book.

    Form posts arrive as strings, so blanks are folded to ``None`` for the
    optional columns and ``year`` is parsed here rather than by the
    database.
    """

    title: str
    author: str
    genre: Optional[str] = None
    year: Optional[int] = None

    @field_validator("title", "author", mode="before")
    @classmethod
    def required_text(cls, v: Any, info) -> str:
        if v is None or not str(v).strip():
            raise PydanticCustomError(
                "required",
                'Please provide a value for "{field}"',
                {"field": info.field_name},
            )
        return str(v).strip()

    @field_validator("genre", mode="before")
    @classmethod
    def optional_text(cls, v: Any) -> Optional[str]:
        v = _blank_to_none(v)
        return None if v is None else str(v).strip()

    @field_validator("year", mode="before")
    @classmethod
    def integer_year(cls, v: Any) -> Optional[int]:
        v = _blank_to_none(v)
        if v is None:
            return None
        if isinstance(v, bool):
            raise PydanticCustomError("year", "Please provide a valid year")
        try:
            year = v if isinstance(v, int) else int(str(v).strip())
        except ValueError:
            raise PydanticCustomError("year", "Please provide a valid year")
        if not -9999 <= year <= 9999:
            raise PydanticCustomError("year", "Please provide a valid year")
        return year


def field_errors(exc: ValidationError) -> list:
    """Flatten a pydantic ``ValidationError`` into ``FieldError`` entries."""
    return [
        FieldError(
            field=str(err["loc"][0]) if err["loc"] else "",
            message=err["msg"],
        )
        for err in exc.errors()
    ]


class BookDraft(BaseModel):
    """An unsaved book, shaped like a stored one.

    Holds exactly what the user typed so a rejected form can be shown
    again. Never written to the database.
    """

    id: Optional[int] = None
    title: str = ""
    author: str = ""
    genre: str = ""
    year: str = ""
