from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .errors import ValidationError

ALL_CATEGORIES = "all"


def normalize_category(category: str) -> str:
    return (category or "").strip().lower()


def category_label(category: str) -> str:
    if not category:
        return category
    return category[0].upper() + category[1:]


@dataclass(frozen=True)
class Quote:
    text: str
    category: str  # always lowercase

    @classmethod
    def create(cls, text: str, category: str) -> "Quote":
        text = (text or "").strip()
        category = normalize_category(category)
        if not text or not category:
            raise ValidationError("Please fill in both the quote and category.")
        if category == ALL_CATEGORIES:
            raise ValidationError(f'"{ALL_CATEGORIES}" is reserved, please choose another category.')
        return cls(text=text, category=category)

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Quote"]:
        """Build a quote from a decoded JSON object, or None when it is not one."""
        if not isinstance(data, dict):
            return None
        text = data.get("text")
        category = data.get("category")
        if not isinstance(text, str) or not isinstance(category, str):
            return None
        try:
            return cls.create(text, category)
        except ValidationError:
            return None

    @property
    def key(self) -> Tuple[str, str]:
        return (self.text, self.category)

    def to_dict(self) -> Dict[str, str]:
        return {"text": self.text, "category": self.category}


@dataclass
class ImportResult:
    added: int
    skipped: int = 0


@dataclass
class SyncResult:
    added: int
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
