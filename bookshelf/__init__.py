"""Bookshelf: a small server-rendered book catalogue."""

__version__ = "1.0.0"
