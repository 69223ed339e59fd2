# bookshelf/storage.py
"""
Relational storage for the catalogue.

``Book`` is the SQLAlchemy model behind the ``books`` table. ``Database``
owns the engine and hands out one session per request through
``session()``; any SQLAlchemy error inside that block rolls the session
back before propagating.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import DateTime, Integer, String, create_engine, event, func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker


logger = logging.getLogger(__name__)


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _register_sqlite_functions(dbapi_conn, connection_record) -> None:
    # SQLite's built-in lower() only folds ASCII letters
    dbapi_conn.create_function("lower", 1, _unicode_lower)


class Base(DeclarativeBase):
    pass


class Book(Base):
    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    genre: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<Book id={self.id} title={self.title!r}>"


class Database:
    """Engine plus session factory for one database URL."""

    def __init__(self, database_url: str, echo: bool = False):
        connect_args = {}
        if database_url.startswith("sqlite"):
            # Sessions are opened on FastAPI's threadpool, not the import thread
            connect_args["check_same_thread"] = False
        self.engine = create_engine(database_url, echo=echo, connect_args=connect_args)
        if database_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _register_sqlite_functions)
        self._session_factory = sessionmaker(self.engine, expire_on_commit=False)

    def connect(self) -> bool:
        """Check the connection and create missing tables.

        A failure is logged rather than raised so the app still starts;
        requests that need the database will then fail on their own.
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Connection has been established successfully.")
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            logger.error("Unable to connect to the database: %s", exc)
            return False
        return True

    @contextmanager
    def session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


def get_session(request: Request) -> Iterator[Session]:
    """FastAPI dependency: a session bound to the app's database."""
    database: Database = request.app.state.database
    with database.session() as session:
        yield session
