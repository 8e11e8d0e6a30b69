import json
import logging
import random
from typing import Optional

from .categories import CategoryIndex
from .errors import FormatError, StorageError, ValidationError
from .models import ALL_CATEGORIES, ImportResult, Quote, SyncResult, normalize_category
from .notifier import Notifier
from .quote_store import QuoteStore
from .renderer import ListView, RandomView, render_list, render_random
from .storage import MemoryStorage
from .sync_agent import SyncAgent
from .transfer import DEFAULT_EXPORT_PATH, export_to_file, import_from_file

SELECTED_CATEGORY_KEY = "selectedCategory"
LAST_QUOTE_KEY = "lastQuote"


class QuoteApp:
    """Top-level controller: owns the store and hands it to every other component.

    Every operation ends in a notification; storage failures never escape.
    """

    def __init__(
        self,
        storage: MemoryStorage,
        session_storage: Optional[MemoryStorage] = None,
        notifier: Optional[Notifier] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.storage = storage
        self.session_storage = session_storage if session_storage is not None else MemoryStorage()
        self.notifier = notifier if notifier is not None else Notifier()
        self.rng = rng if rng is not None else random.Random()
        self.store = QuoteStore(storage)
        self.index = CategoryIndex(self.store)
        self.sync_agent: Optional[SyncAgent] = None
        self.selected_category = ALL_CATEGORIES
        self.last_quote: Optional[Quote] = None
        self.list_view: Optional[ListView] = None

    def attach_sync_agent(self, agent: SyncAgent) -> None:
        agent.on_change = self.refresh
        self.sync_agent = agent

    def start(self) -> Optional[RandomView]:
        """Load everything persisted.

        Returns the last viewed quote of this session as a view, or None.
        """
        try:
            if not self.store.load():
                self.notifier.notify("No saved quotes found, loaded the default quotes.", level="warning")
        except StorageError as e:
            self.notifier.notify(f"Could not save quotes: {e.message}", level="error")
        self.index.refresh()
        self.selected_category = self._restore_selected_category()
        self.last_quote = self._restore_last_quote()
        if self.last_quote is None:
            return None
        return RandomView(category=self.last_quote.category, quote=self.last_quote)

    def _restore_selected_category(self) -> str:
        saved = self.storage.get(SELECTED_CATEGORY_KEY)
        if saved and self.index.contains(saved):
            return normalize_category(saved)
        return ALL_CATEGORIES

    def _restore_last_quote(self) -> Optional[Quote]:
        raw = self.session_storage.get(LAST_QUOTE_KEY)
        if raw is None:
            return None
        try:
            return Quote.from_dict(json.loads(raw))
        except ValueError:
            logging.warning("Ignoring malformed last viewed quote")
            return None

    def refresh(self) -> None:
        self.index.refresh()
        if not self.index.contains(self.selected_category):
            self.select_category(ALL_CATEGORIES)
        self.list_view = render_list(self.store, self.selected_category)

    def select_category(self, category: Optional[str]) -> str:
        if category is None:
            return self.selected_category
        category = normalize_category(category)
        if not self.index.contains(category):
            logging.info("Unknown category %r, showing all quotes", category)
            category = ALL_CATEGORIES
        self.selected_category = category
        try:
            self.storage.set(SELECTED_CATEGORY_KEY, category)
        except StorageError as e:
            self.notifier.notify(f"Could not save selected category: {e.message}", level="warning")
        return category

    def show_random(self, category: Optional[str] = None) -> RandomView:
        view = render_random(self.store, self.select_category(category), self.rng)
        if view.quote is not None:
            self.last_quote = view.quote
            try:
                self.session_storage.set(LAST_QUOTE_KEY, json.dumps(view.quote.to_dict(), ensure_ascii=False))
            except StorageError as e:
                logging.warning("Could not remember last viewed quote: %s", e.message)
        return view

    def show_list(self, category: Optional[str] = None) -> ListView:
        self.list_view = render_list(self.store, self.select_category(category))
        return self.list_view

    def add_quote(self, text: str, category: str, push: bool = False) -> Optional[Quote]:
        try:
            quote = self.store.add(text, category)
        except ValidationError as e:
            self.notifier.notify(e.message, level="error")
            return None
        except StorageError as e:
            self.notifier.notify(f"Could not save quotes: {e.message}", level="error")
            return None
        self.refresh()
        self.notifier.notify("Quote added!", level="success")
        if push:
            if self.sync_agent is None:
                self.notifier.notify("No server configured, quote kept locally.", level="warning")
            else:
                self.sync_agent.push(quote)
        return quote

    def export_quotes(self, path: str = DEFAULT_EXPORT_PATH) -> bool:
        try:
            count = export_to_file(self.store, path)
        except StorageError as e:
            self.notifier.notify(f"Export failed: {e.message}", level="error")
            return False
        self.notifier.notify(f"Exported {count} quotes to {path}.", level="success")
        return True

    def import_quotes(self, path: str) -> Optional[ImportResult]:
        try:
            result = import_from_file(self.store, path)
        except FormatError as e:
            self.notifier.notify(f"Import failed: {e.message}", level="error")
            return None
        except StorageError as e:
            self.notifier.notify(f"Import failed, could not save quotes: {e.message}", level="error")
            return None
        if result.added:
            self.refresh()
        self.notifier.notify(f"Imported {result.added} new quotes.", level="success")
        return result

    def sync(self) -> SyncResult:
        if self.sync_agent is None:
            self.notifier.notify("Sync failed: no server configured", level="error")
            return SyncResult(added=0, error="no server configured")
        return self.sync_agent.sync_once()
