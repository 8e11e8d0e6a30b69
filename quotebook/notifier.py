import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

_LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass
class Notification:
    level: str
    message: str


class Notifier:
    """Collects short-lived status messages for the user and mirrors them to the log."""

    def __init__(self, sink: Optional[Callable[[Notification], None]] = None) -> None:
        self.sink = sink
        self._pending: List[Notification] = []

    def notify(self, message: str, level: str = "info") -> Notification:
        note = Notification(level=level, message=message)
        logging.log(_LEVELS.get(level, logging.INFO), "%s", message)
        self._pending.append(note)
        if self.sink is not None:
            self.sink(note)
        return note

    def drain(self) -> List[Notification]:
        pending, self._pending = self._pending, []
        return pending

    @property
    def pending(self) -> List[Notification]:
        return list(self._pending)
