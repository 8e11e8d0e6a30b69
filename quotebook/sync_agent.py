import enum
import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

from .errors import NetworkError, StorageError
from .models import Quote, SyncResult
from .notifier import Notifier
from .quote_store import QuoteStore
from .remote_client import RemoteClient, clean_title

SERVER_CATEGORY = "server"
DEFAULT_MAX_RECORDS = 5
DEFAULT_SYNC_INTERVAL = 30.0


class SyncState(enum.Enum):
    IDLE = "idle"
    SYNCING = "syncing"


def map_remote_records(records: Iterable[Dict[str, Any]], max_records: int = DEFAULT_MAX_RECORDS) -> List[Quote]:
    quotes: List[Quote] = []
    for record in records:
        if len(quotes) >= max_records:
            break
        text = clean_title(record.get("title"))
        if not text:
            continue
        quotes.append(Quote(text=text, category=SERVER_CATEGORY))
    return quotes


class SyncAgent:
    def __init__(
        self,
        store: QuoteStore,
        client: RemoteClient,
        notifier: Notifier,
        on_change: Optional[Callable[[], None]] = None,
        max_records: int = DEFAULT_MAX_RECORDS,
    ) -> None:
        self.store = store
        self.client = client
        self.notifier = notifier
        self.on_change = on_change
        self.max_records = max_records
        self.state = SyncState.IDLE

    def sync_once(self) -> SyncResult:
        self.state = SyncState.SYNCING
        try:
            self.notifier.notify("Syncing with server...")
            return self._sync()
        finally:
            self.state = SyncState.IDLE

    def _sync(self) -> SyncResult:
        try:
            records = self.client.fetch_records()
            added = self.store.merge(map_remote_records(records, self.max_records))
        except (NetworkError, StorageError) as e:
            self.notifier.notify(f"Sync failed: {e.message}", level="error")
            return SyncResult(added=0, error=e.message)

        if added > 0:
            if self.on_change is not None:
                self.on_change()
            self.notifier.notify(f"Synced {added} new quotes from server.", level="success")
        else:
            self.notifier.notify("Quotes are up to date.")
        return SyncResult(added=added)

    def push(self, quote: Quote) -> bool:
        payload = {"title": quote.text, "body": quote.category, "userId": 1}
        try:
            self.client.submit_record(payload)
        except NetworkError as e:
            self.notifier.notify(f"Could not push quote to server: {e.message}", level="warning")
            return False
        self.notifier.notify("Quote pushed to server.", level="success")
        return True


class RepeatingTask:
    """Runs action once right away and then every interval seconds.

    sleep is injectable so callers can drive ticks without waiting.
    """

    def __init__(
        self,
        interval: float,
        action: Callable[[], Any],
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.action = action
        self.sleep = sleep
        self.ticks = 0
        self._stopped = False

    def stop(self) -> None:
        self._stopped = True

    def run(self, max_ticks: Optional[int] = None) -> int:
        self._stopped = False
        self.ticks = 0
        if max_ticks is not None and max_ticks <= 0:
            return 0
        while not self._stopped:
            self.action()
            self.ticks += 1
            if max_ticks is not None and self.ticks >= max_ticks:
                break
            if self._stopped:
                break
            self.sleep(self.interval)
        logging.info("Repeating task stopped after %d ticks", self.ticks)
        return self.ticks
