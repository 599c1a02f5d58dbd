import pytest

from city_library.config import settings
from city_library.library import Library
from city_library.main import LibraryManager


@pytest.fixture
def data_files(tmp_path, monkeypatch):
    # Unique data files per test, picked up by Library() and the CLI
    books_file = tmp_path / "books.txt"
    members_file = tmp_path / "members.txt"
    monkeypatch.setattr(settings, "books_file", str(books_file))
    monkeypatch.setattr(settings, "members_file", str(members_file))
    LibraryManager.reset()
    yield books_file, members_file
    LibraryManager.reset()


@pytest.fixture
def lib(data_files):
    lib = Library()
    yield lib
    lib.close()
