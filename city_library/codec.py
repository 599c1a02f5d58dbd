"""Flat-file persistence for books and members.

Each record is stored on its own line with pipe-separated fields::

    books.txt    id|title|author|category|issued
    members.txt  id|name|email|book_id,book_id,...

Decoding is lenient at the file level: a line that cannot be decoded is
logged and skipped so that one corrupt record never prevents the rest of the
catalog from loading. Saving always rewrites the whole file.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, Tuple, TypeVar, Union

from city_library.book import Book
from city_library.errors import MalformedRecordError
from city_library.member import Member

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "|"
BOOK_LIST_SEPARATOR = ","
BOOK_FIELD_COUNT = 5
MEMBER_FIELD_COUNT = 3

PathLike = Union[str, Path]
R = TypeVar("R", Book, Member)


# ------------------------- Single records ------------------------- #
def encode_book(book: Book) -> str:
    return FIELD_SEPARATOR.join(
        [str(book.id), book.title, book.author, book.category, "true" if book.issued else "false"]
    )


def decode_book(line: str) -> Book:
    parts = line.split(FIELD_SEPARATOR)
    if len(parts) < BOOK_FIELD_COUNT:
        raise MalformedRecordError(line, f"expected {BOOK_FIELD_COUNT} fields, got {len(parts)}")
    book_id = _parse_id(parts[0], line)
    return Book(
        book_id=book_id,
        title=parts[1],
        author=parts[2],
        category=parts[3],
        issued=parts[4].strip().lower() == "true",
    )


def encode_member(member: Member) -> str:
    book_ids = BOOK_LIST_SEPARATOR.join(str(b) for b in member.issued_books)
    return FIELD_SEPARATOR.join([str(member.id), member.name, member.email, book_ids])


def decode_member(line: str) -> Member:
    parts = line.split(FIELD_SEPARATOR)
    if len(parts) < MEMBER_FIELD_COUNT:
        raise MalformedRecordError(line, f"expected at least {MEMBER_FIELD_COUNT} fields, got {len(parts)}")
    member = Member(member_id=_parse_id(parts[0], line), name=parts[1], email=parts[2])
    if len(parts) > MEMBER_FIELD_COUNT and parts[3].strip():
        for raw in parts[3].split(BOOK_LIST_SEPARATOR):
            raw = raw.strip()
            if not raw:
                continue
            try:
                member.add_issued_book(int(raw))
            except ValueError:
                logger.warning(f"Skipping invalid book ID {raw!r} for member {member.id}")
    return member


def _parse_id(raw: str, line: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise MalformedRecordError(line, f"non-numeric ID {raw!r}") from None


# ------------------------- Whole files ------------------------- #
def load_books(path: PathLike, first_id: int = 101) -> Tuple[Dict[int, Book], int]:
    """Load books from ``path``.

    Returns the books keyed by ID and the next free book ID, which is one past
    the highest ID seen and never lower than ``first_id``.
    Raises ``OSError`` if the file exists but cannot be read.
    """
    books = _load_records(path, decode_book, "book")
    return books, _next_id(books, first_id)


def load_members(path: PathLike, first_id: int = 1001) -> Tuple[Dict[int, Member], int]:
    """Load members from ``path``; see :func:`load_books`."""
    members = _load_records(path, decode_member, "member")
    return members, _next_id(members, first_id)


def save_books(path: PathLike, books: Iterable[Book]) -> int:
    return _save_records(path, books, encode_book)


def save_members(path: PathLike, members: Iterable[Member]) -> int:
    return _save_records(path, members, encode_member)


def _load_records(path: PathLike, decode: Callable[[str], R], kind: str) -> Dict[int, R]:
    """Decode every line of ``path`` into records keyed by ID.

    Raises ``OSError`` if the file exists but cannot be read.
    """
    file_path = Path(path)
    records: Dict[int, R] = {}
    if not file_path.exists():
        logger.info(f"{kind.capitalize()}s file {file_path} not found. Starting empty.")
        return records

    with open(file_path, "rb") as f:
        for line_no, raw in enumerate(f, 1):
            line = _decode_line(raw, f"{file_path}:{line_no}")
            if not line.strip():
                continue
            try:
                record = decode(line)
            except MalformedRecordError as e:
                logger.warning(f"Skipping invalid {kind} record at {file_path}:{line_no}: {e}")
                continue
            if record.id in records:
                logger.warning(f"Duplicate {kind} ID {record.id} at {file_path}:{line_no}; keeping the later record")
            records[record.id] = record

    logger.info(f"Loaded {len(records)} {kind}(s) from {file_path}")
    return records


def _decode_line(raw: bytes, where: str) -> str:
    # Undecodable bytes become U+FFFD so the rest of the record survives
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning(f"Replacing undecodable bytes at {where}: {e}")
        text = raw.decode("utf-8", errors="replace")
    return text.rstrip("\r\n")


def _save_records(path: PathLike, records: Iterable[R], encode: Callable[[R], str]) -> int:
    """Overwrite ``path`` with one line per record, ordered by ID.

    Raises ``OSError`` if the file cannot be written.
    """
    file_path = Path(path)
    ordered = sorted(records, key=lambda r: r.id)
    if file_path.parent and not file_path.parent.exists():
        file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding="utf-8", newline="\n") as f:
        for record in ordered:
            f.write(encode(record))
            f.write("\n")
    logger.debug(f"Wrote {len(ordered)} record(s) to {file_path}")
    return len(ordered)


def _next_id(records: Dict[int, R], first_id: int) -> int:
    if not records:
        return first_id
    return max(first_id, max(records) + 1)
