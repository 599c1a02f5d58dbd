import logging
from typing import Callable, Dict, Iterable, List, Optional, Set, Union

from city_library import codec
from city_library.book import Book, BookField
from city_library.config import settings
from city_library.errors import AlreadyIssuedError, BookNotFoundError, MemberNotFoundError
from city_library.member import Member
from city_library.validators import EmailValidator, TextValidator, parse_field

logger = logging.getLogger(__name__)


class Library:
    """Manages the collection of books and members and keeps the data files in sync."""

    def __init__(self, books_file: Optional[str] = None, members_file: Optional[str] = None) -> None:
        self.books_file = books_file or settings.books_file
        self.members_file = members_file or settings.members_file

        self.books: Dict[int, Book] = {}
        self.members: Dict[int, Member] = {}
        self.next_book_id = settings.first_book_id
        self.next_member_id = settings.first_member_id
        self.load()

    # ------------------------- Core operations ------------------------- #
    def add_book(self, title: str, author: str, category: str) -> int:
        """Add a book under the next free ID and return that ID."""
        book = Book(
            book_id=self.next_book_id,
            title=TextValidator.require(title, "Title"),
            author=TextValidator.require(author, "Author"),
            category=TextValidator.require(category, "Category"),
        )
        self.books[book.id] = book
        self.next_book_id += 1
        logger.info(f"Added book {book.id}: {book.title!r}")
        self.save()
        return book.id

    def add_member(self, name: str, email: str) -> int:
        """Register a member under the next free ID and return that ID."""
        member = Member(
            member_id=self.next_member_id,
            name=TextValidator.require(name, "Name"),
            email=EmailValidator.require(email),
        )
        self.members[member.id] = member
        self.next_member_id += 1
        logger.info(f"Added member {member.id}: {member.name!r}")
        self.save()
        return member.id

    def issue_book(self, book_id: int, member_id: int) -> None:
        book = self._get_book(book_id)
        member = self._get_member(member_id)
        if book.issued:
            raise AlreadyIssuedError(book_id)

        book.mark_as_issued()
        member.add_issued_book(book_id)
        logger.info(f"Issued book {book_id} to member {member_id}")
        self.save()

    def return_book(self, book_id: int, member_id: int) -> None:
        """Mark a book as available and drop it from the member's list.

        No check is made that the book was issued, or issued to this member.
        """
        book = self._get_book(book_id)
        member = self._get_member(member_id)

        book.mark_as_returned()
        if not member.return_issued_book(book_id):
            logger.debug(f"Member {member_id} did not hold book {book_id}")
        logger.info(f"Returned book {book_id} from member {member_id}")
        self.save()

    def search_books(self, field: Union[BookField, str], term: str) -> List[Book]:
        """Case-insensitive substring search on title, author or category."""
        field = parse_field(field)
        needle = TextValidator.clean(term).lower()
        return [book for book in self.list_books() if needle in book.get(field).lower()]

    def sort_books(self, field: Union[BookField, str]) -> List[Book]:
        field = parse_field(field)
        return sorted(self.list_books(), key=lambda book: book.get(field))

    def get_statistics(self) -> Dict[str, int]:
        total_books = len(self.books)
        issued_count = sum(1 for book in self.books.values() if book.issued)
        return {
            "total_books": total_books,
            "issued_count": issued_count,
            "available_count": total_books - issued_count,
            "total_members": len(self.members),
        }

    # ------------------------- Lookups ------------------------- #
    def list_books(self) -> List[Book]:
        return [self.books[book_id] for book_id in sorted(self.books)]

    def list_members(self) -> List[Member]:
        return [self.members[member_id] for member_id in sorted(self.members)]

    def find_book(self, book_id: int) -> Optional[Book]:
        return self.books.get(book_id)

    def find_member(self, member_id: int) -> Optional[Member]:
        return self.members.get(member_id)

    def _get_book(self, book_id: int) -> Book:
        book = self.find_book(book_id)
        if book is None:
            raise BookNotFoundError(book_id)
        return book

    def _get_member(self, member_id: int) -> Member:
        member = self.find_member(member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        return member

    # ------------------------- Persistence ------------------------- #
    def load(self) -> None:
        """Replace in-memory state with the contents of both data files.

        A file that exists but cannot be read is left untouched by later saves.
        """
        self.unreadable_files: Set[str] = set()
        try:
            self.books, self.next_book_id = codec.load_books(self.books_file, settings.first_book_id)
        except OSError as e:
            logger.error(f"Error reading books file {self.books_file}: {e}")
            self.books, self.next_book_id = {}, settings.first_book_id
            self.unreadable_files.add(self.books_file)
        try:
            self.members, self.next_member_id = codec.load_members(self.members_file, settings.first_member_id)
        except OSError as e:
            logger.error(f"Error reading members file {self.members_file}: {e}")
            self.members, self.next_member_id = {}, settings.first_member_id
            self.unreadable_files.add(self.members_file)

    def save(self) -> bool:
        """Rewrite both data files. Returns False if either was not written."""
        books_ok = self._save_file(self.books_file, codec.save_books, self.books.values(), "books")
        members_ok = self._save_file(self.members_file, codec.save_members, self.members.values(), "members")
        return books_ok and members_ok

    def _save_file(self, path: str, save: Callable, records: Iterable, kind: str) -> bool:
        if path in self.unreadable_files:
            logger.error(f"Not saving {kind} to {path}: the file could not be read at startup")
            return False
        try:
            save(path, records)
        except OSError as e:
            logger.error(f"Error saving {kind} to {path}: {e}")
            return False
        return True

    def close(self) -> None:
        """Final save at shutdown."""
        self.save()
