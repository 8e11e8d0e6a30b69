import json
import logging
from typing import Iterable, List, Set, Tuple

from .errors import FormatError
from .models import ALL_CATEGORIES, ImportResult, Quote, normalize_category
from .storage import MemoryStorage

QUOTES_KEY = "quotes"

SEED_QUOTES: Tuple[Quote, ...] = (
    Quote("The best way to predict the future is to invent it.", "inspiration"),
    Quote("Do not be afraid to give up the good to go for the great.", "motivation"),
    Quote("Success usually comes to those who are too busy to be looking for it.", "success"),
)


class QuoteStore:
    def __init__(self, storage: MemoryStorage) -> None:
        self.storage = storage
        self._quotes: List[Quote] = []
        self._keys: Set[Tuple[str, str]] = set()

    def load(self) -> bool:
        """Read the persisted quotes.

        Returns False when nothing usable was stored and the seed set was used.
        """
        raw = self.storage.get(QUOTES_KEY)
        quotes: List[Quote] = []
        if raw is not None:
            try:
                data = json.loads(raw)
            except ValueError as e:
                logging.warning("Stored quotes are corrupt, using seed quotes: %s", e)
                data = None
            if isinstance(data, list):
                for item in data:
                    quote = Quote.from_dict(item)
                    if quote is not None:
                        quotes.append(quote)
            elif data is not None:
                logging.warning("Stored quotes are not a list, using seed quotes.")

        if not quotes:
            self._replace(SEED_QUOTES)
            self.save()
            return False
        self._replace(quotes)
        return True

    def _replace(self, quotes: Iterable[Quote]) -> None:
        self._quotes = list(quotes)
        self._keys = {q.key for q in self._quotes}

    def _write(self, quotes: Iterable[Quote]) -> None:
        self.storage.set(QUOTES_KEY, json.dumps([q.to_dict() for q in quotes], ensure_ascii=False))

    def _commit(self, quotes: List[Quote]) -> None:
        # StorageError from the write leaves memory untouched
        self._write(quotes)
        self._replace(quotes)

    def save(self) -> None:
        self._write(self._quotes)

    def add(self, text: str, category: str) -> Quote:
        quote = Quote.create(text, category)
        self._commit(self._quotes + [quote])
        return quote

    def merge(self, candidates: Iterable[Quote]) -> int:
        quotes = list(self._quotes)
        keys = set(self._keys)
        for quote in candidates:
            if quote.key in keys:
                continue
            quotes.append(quote)
            keys.add(quote.key)
        added = len(quotes) - len(self._quotes)
        if added > 0:
            self._commit(quotes)
        return added

    def clear(self) -> None:
        self.storage.remove(QUOTES_KEY)
        self._replace(())

    def all(self) -> Tuple[Quote, ...]:
        return tuple(self._quotes)

    def by_category(self, category: str) -> Tuple[Quote, ...]:
        category = normalize_category(category)
        if category == ALL_CATEGORIES:
            return self.all()
        return tuple(q for q in self._quotes if q.category == category)

    def categories(self) -> List[str]:
        return sorted({q.category for q in self._quotes})

    def __len__(self) -> int:
        return len(self._quotes)

    def export(self) -> bytes:
        return json.dumps([q.to_dict() for q in self._quotes], ensure_ascii=False, indent=2).encode("utf-8")

    def import_bytes(self, data: bytes) -> ImportResult:
        try:
            decoded = json.loads(data)
        except ValueError as e:
            raise FormatError(f"Invalid JSON: {e}") from e
        if not isinstance(decoded, list):
            raise FormatError("Expected a JSON array of quotes.")

        candidates: List[Quote] = []
        skipped = 0
        for item in decoded:
            quote = Quote.from_dict(item)
            if quote is None:
                skipped += 1
                continue
            candidates.append(quote)
        added = self.merge(candidates)
        if skipped:
            logging.info("Skipped %d invalid entries during import", skipped)
        return ImportResult(added=added, skipped=skipped)
