from __future__ import annotations

from typing import Iterable, List, Optional


class Member:
    """A registered library member and the books they currently hold."""

    def __init__(self, member_id: int, name: str, email: str, issued_books: Optional[Iterable[int]] = None) -> None:
        self.id = member_id
        self.name = name
        self.email = email
        self._issued_books: List[int] = []
        for book_id in issued_books or []:
            self.add_issued_book(book_id)

    @property
    def issued_books(self) -> List[int]:
        """Issued book IDs in the order they were issued."""
        return list(self._issued_books)

    def add_issued_book(self, book_id: int) -> None:
        if book_id not in self._issued_books:
            self._issued_books.append(book_id)

    def return_issued_book(self, book_id: int) -> bool:
        """Drop a book ID; returns False if the member did not hold it."""
        if book_id in self._issued_books:
            self._issued_books.remove(book_id)
            return True
        return False

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.name} <{self.email}> (ID: {self.id})"

    def __repr__(self) -> str:
        return f"Member(id={self.id!r}, name={self.name!r}, issued_books={self._issued_books!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Member):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "issued_books": self.issued_books,
        }

