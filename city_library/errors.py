class LibraryError(Exception):
    """Base class for all catalog errors."""


class MalformedRecordError(LibraryError, ValueError):
    """A persisted line could not be decoded."""

    def __init__(self, line: str, reason: str) -> None:
        super().__init__(f"{reason}: {line!r}")
        self.line = line
        self.reason = reason


class NotFoundError(LibraryError, LookupError):
    pass


class BookNotFoundError(NotFoundError):
    def __init__(self, book_id: int) -> None:
        super().__init__(f"Book {book_id} not found.")
        self.book_id = book_id


class MemberNotFoundError(NotFoundError):
    def __init__(self, member_id: int) -> None:
        super().__init__(f"Member {member_id} not found.")
        self.member_id = member_id


class AlreadyIssuedError(LibraryError):
    def __init__(self, book_id: int) -> None:
        super().__init__(f"Book {book_id} is already issued.")
        self.book_id = book_id


class InvalidInputError(LibraryError, ValueError):
    pass
