from typing import List, Tuple

from .models import ALL_CATEGORIES, category_label, normalize_category
from .quote_store import QuoteStore

Option = Tuple[str, str]


class CategoryIndex:
    """Distinct categories of a store, and the option lists built from them.

    Call refresh() after every store mutation.
    """

    def __init__(self, store: QuoteStore) -> None:
        self.store = store
        self.categories: List[str] = []
        self.random_options: List[Option] = []
        self.filter_options: List[Option] = []
        self.refresh()

    def refresh(self) -> None:
        self.categories = self.store.categories()
        self.random_options = self._build_options()
        self.filter_options = self._build_options()

    def _build_options(self) -> List[Option]:
        options = [(ALL_CATEGORIES, "All")]
        options.extend((c, category_label(c)) for c in self.categories)
        return options

    def contains(self, category: str) -> bool:
        category = normalize_category(category)
        return category == ALL_CATEGORIES or category in self.categories
