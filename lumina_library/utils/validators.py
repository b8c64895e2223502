from typing import Optional


class TextValidator:
    """Form input checks for the add-book form."""

    @staticmethod
    def is_blank(text: Optional[str]) -> bool:
        return text is None or not text.strip()

    @staticmethod
    def validate_title(title: Optional[str]) -> bool:
        return not TextValidator.is_blank(title)

    @staticmethod
    def validate_author(author: Optional[str]) -> bool:
        return not TextValidator.is_blank(author)

    @staticmethod
    def validate_entry(title: Optional[str], author: Optional[str]) -> bool:
        """Both fields must be non-empty after trimming."""
        return TextValidator.validate_title(title) and TextValidator.validate_author(author)
