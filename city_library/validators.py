from typing import Optional

from city_library.book import BookField
from city_library.errors import InvalidInputError

# Characters that would break the one-record-per-line storage format
RESERVED_CHARS = ("|", "\n", "\r")


class TextValidator:
    """Validation and cleanup for free-text record fields."""

    @staticmethod
    def clean(text: Optional[str]) -> str:
        if text is None:
            return ""
        return text.strip()

    @staticmethod
    def require(text: Optional[str], label: str) -> str:
        """Return the stripped value or raise if it is empty or unstorable."""
        cleaned = TextValidator.clean(text)
        if not cleaned:
            raise InvalidInputError(f"{label} cannot be empty!")
        for ch in RESERVED_CHARS:
            if ch in cleaned:
                raise InvalidInputError(f"{label} cannot contain {ch!r}.")
        return cleaned


class EmailValidator:
    @staticmethod
    def require(email: Optional[str]) -> str:
        cleaned = TextValidator.clean(email)
        # basic check only
        if "@" not in cleaned:
            raise InvalidInputError("Invalid email format!")
        return TextValidator.require(cleaned, "Email")


def parse_field(field) -> BookField:
    """Accept a BookField or its name ("title", "author", "category")."""
    if isinstance(field, BookField):
        return field
    try:
        return BookField(TextValidator.clean(str(field)).lower())
    except ValueError:
        choices = ", ".join(f.value for f in BookField)
        raise InvalidInputError(f"Unknown field {field!r}. Use one of: {choices}.") from None
