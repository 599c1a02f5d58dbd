from __future__ import annotations

from enum import Enum


class BookField(str, Enum):
    """Book attributes that can be searched and sorted on."""
    TITLE = "title"
    AUTHOR = "author"
    CATEGORY = "category"


class Book:
    """A single catalog entry."""

    def __init__(self, book_id: int, title: str, author: str, category: str, issued: bool = False) -> None:
        self.id = book_id
        self.title = title
        self.author = author
        self.category = category
        self.issued = issued

    def mark_as_issued(self) -> None:
        self.issued = True

    def mark_as_returned(self) -> None:
        self.issued = False

    @property
    def status(self) -> str:
        return "Issued" if self.issued else "Available"

    def get(self, field: BookField) -> str:
        return getattr(self, BookField(field).value)

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} ({self.category}, ID: {self.id})"

    def __repr__(self) -> str:
        return f"Book(id={self.id!r}, title={self.title!r}, issued={self.issued!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "category": self.category,
            "issued": self.issued,
        }

