import json

import pytest
from typer.testing import CliRunner

from city_library import ui_helpers
from city_library.main import LibraryManager, app

runner = CliRunner()


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    monkeypatch.setenv(ui_helpers.OUTPUT_MODE_ENV, "plain")


def test_list_no_books(data_files):
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "No books in library." in result.stdout


def test_add_book_success(data_files):
    books_file, _ = data_files
    result = runner.invoke(app, ["add-book", "Dune", "Frank Herbert", "Sci-Fi"])
    assert result.exit_code == 0
    assert "Book added successfully with ID: 101" in result.stdout
    assert books_file.read_text(encoding="utf-8") == "101|Dune|Frank Herbert|Sci-Fi|false\n"


def test_add_book_empty_title(data_files):
    result = runner.invoke(app, ["add-book", "", "Frank Herbert", "Sci-Fi"])
    assert result.exit_code == 1
    assert "Error: Title cannot be empty!" in result.stdout


def test_add_member_invalid_email(data_files):
    result = runner.invoke(app, ["add-member", "Ada", "not-an-email"])
    assert result.exit_code == 1
    assert "Error: Invalid email format!" in result.stdout


def test_issue_and_return(data_files):
    runner.invoke(app, ["add-book", "Dune", "Frank Herbert", "Sci-Fi"])
    runner.invoke(app, ["add-member", "Ada", "ada@example.com"])

    result = runner.invoke(app, ["issue", "101", "1001"])
    assert result.exit_code == 0
    assert "Book 101 issued to member 1001." in result.stdout

    result = runner.invoke(app, ["issue", "101", "1001"])
    assert result.exit_code == 1
    assert "Book 101 is already issued." in result.stdout

    result = runner.invoke(app, ["members"])
    assert "1001 - Ada <ada@example.com> issued: 101" in result.stdout

    result = runner.invoke(app, ["return", "101", "1001"])
    assert result.exit_code == 0
    assert "Book 101 returned by member 1001." in result.stdout
    assert LibraryManager.get_instance().find_book(101).issued is False


def test_issue_unknown_book(data_files):
    runner.invoke(app, ["add-member", "Ada", "ada@example.com"])
    result = runner.invoke(app, ["issue", "555", "1001"])
    assert result.exit_code == 1
    assert "Book 555 not found." in result.stdout


def test_search_and_sort(data_files):
    runner.invoke(app, ["add-book", "Harry Potter", "J.K. Rowling", "Fantasy"])
    runner.invoke(app, ["add-book", "The Hobbit", "J.R.R. Tolkien", "Fantasy"])

    result = runner.invoke(app, ["search", "title", "har"])
    assert result.exit_code == 0
    assert "101 - Harry Potter by J.K. Rowling [Fantasy] (Available)" in result.stdout
    assert "The Hobbit" not in result.stdout

    result = runner.invoke(app, ["sort", "author"])
    lines = [line for line in result.stdout.splitlines() if line]
    assert lines[0].startswith("101 - Harry Potter")
    assert lines[1].startswith("102 - The Hobbit")


def test_search_rejects_unknown_field(data_files):
    result = runner.invoke(app, ["search", "isbn", "123"])
    assert result.exit_code != 0


def test_stats_json_output(data_files):
    runner.invoke(app, ["add-book", "Dune", "Frank Herbert", "Sci-Fi"])
    result = runner.invoke(app, ["--output", "json", "stats"])
    assert result.exit_code == 0
    assert json.loads(result.stdout.strip().splitlines()[-1]) == {
        "total_books": 1, "issued_count": 0, "available_count": 1, "total_members": 0,
    }


def test_stats_plain_output(data_files):
    result = runner.invoke(app, ["stats"])
    assert result.exit_code == 0
    assert "Total Books: 0" in result.stdout
    assert "Total Members: 0" in result.stdout


def test_menu_add_book_then_exit(data_files, monkeypatch):
    from city_library import main

    answers = iter(["1", "Dune", "Frank Herbert", "Sci-Fi", "3", "8"])
    ids = iter([101, 4242])
    monkeypatch.setattr(main.Prompt, "ask", lambda *args, **kwargs: next(answers))
    monkeypatch.setattr(main.IntPrompt, "ask", lambda *args, **kwargs: next(ids))

    main.run_menu()

    books_file, members_file = data_files
    assert books_file.read_text(encoding="utf-8") == "101|Dune|Frank Herbert|Sci-Fi|false\n"
    # The failed issue (unknown member) is reported and the menu keeps going
    assert members_file.read_text(encoding="utf-8") == ""


def test_menu_search_and_stats_use_rich_output(data_files, monkeypatch, capsys):
    from city_library import main

    lib = LibraryManager.get_instance()
    lib.add_book("Harry Potter", "J.K. Rowling", "Fantasy")
    lib.add_book("The Hobbit", "J.R.R. Tolkien", "Fantasy")

    answers = iter(["5", "title", "hob", "7", "8"])
    monkeypatch.setattr(main.Prompt, "ask", lambda *args, **kwargs: next(answers))

    main.run_menu()

    out = capsys.readouterr().out
    assert "The Hobbit" in out
    assert "Harry Potter" not in out
    assert "Library Statistics" in out
    assert "Books Available:" in out


def test_menu_interrupt_still_saves(data_files, monkeypatch):
    from city_library import main

    def interrupt(*args, **kwargs):
        raise KeyboardInterrupt

    closed = []
    lib = LibraryManager.get_instance()
    monkeypatch.setattr(lib, "close", lambda: closed.append(True))
    monkeypatch.setattr(main.Prompt, "ask", interrupt)

    main.run_menu()

    assert closed == [True]


def test_menu_end_of_input_still_saves(data_files, monkeypatch):
    from city_library import main

    answers = iter(["1", "Dune"])

    def prompt(*args, **kwargs):
        try:
            return next(answers)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr(main.Prompt, "ask", prompt)

    main.run_menu()

    books_file, members_file = data_files
    assert members_file.exists()
    assert books_file.read_text(encoding="utf-8") == ""


def test_list_and_members_json_output(data_files):
    runner.invoke(app, ["add-book", "Dune", "Frank Herbert", "Sci-Fi"])
    runner.invoke(app, ["add-member", "Ada", "ada@example.com"])
    runner.invoke(app, ["issue", "101", "1001"])

    result = runner.invoke(app, ["-o", "json", "list"])
    assert json.loads(result.stdout.strip()) == [
        {"id": 101, "title": "Dune", "author": "Frank Herbert", "category": "Sci-Fi", "issued": True},
    ]
    result = runner.invoke(app, ["-o", "json", "members"])
    assert json.loads(result.stdout.strip()) == [
        {"id": 1001, "name": "Ada", "email": "ada@example.com", "issued_books": [101]},
    ]
