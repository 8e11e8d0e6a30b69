import contextlib
import logging
import os

from .errors import FormatError, StorageError
from .models import ImportResult
from .quote_store import QuoteStore

DEFAULT_EXPORT_PATH = "quotes.json"


def export_to_file(store: QuoteStore, path: str = DEFAULT_EXPORT_PATH) -> int:
    """Write every quote to path as a pretty-printed JSON array. Returns the count written."""
    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = path + ".tmp"
    try:
        os.makedirs(directory, exist_ok=True)
        with open(tmp_path, "wb") as f:
            f.write(store.export())
        os.replace(tmp_path, path)
    except OSError as e:
        with contextlib.suppress(OSError):
            os.remove(tmp_path)
        raise StorageError(f"Could not write {path}: {e}") from e
    logging.info("Exported %d quotes to %s", len(store), path)
    return len(store)


def import_from_file(store: QuoteStore, path: str) -> ImportResult:
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise FormatError(f"Could not read {path}: {e}") from e
    result = store.import_bytes(data)
    logging.info("Imported %d new quotes from %s (%d skipped)", result.added, path, result.skipped)
    return result
