import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Settings:
    # Storage
    books_file: str = os.getenv("LIBRARY_BOOKS_FILE", "books.txt")
    members_file: str = os.getenv("LIBRARY_MEMBERS_FILE", "members.txt")

    # ID counters
    first_book_id: int = int(os.getenv("LIBRARY_FIRST_BOOK_ID", "101"))
    first_member_id: int = int(os.getenv("LIBRARY_FIRST_MEMBER_ID", "1001"))

    # Application
    app_name: str = os.getenv("APP_NAME", "City Library")
    log_level: str = os.getenv("LOG_LEVEL", "WARNING").upper()


settings = Settings()
