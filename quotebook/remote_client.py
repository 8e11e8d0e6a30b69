import logging
from typing import Any, Dict, List, Optional

import requests
from bs4 import BeautifulSoup
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .errors import NetworkError

DEFAULT_REMOTE_URL = "https://jsonplaceholder.typicode.com/posts"
DEFAULT_TIMEOUT = 20

DEFAULT_HEADERS = {
    "User-Agent": "quotebook/0.1 (+https://pypi.org/project/quotebook/)",
    "Accept": "application/json",
    "Content-Type": "application/json; charset=UTF-8",
}


def create_session() -> requests.Session:
    session = requests.Session()
    session.headers.update(DEFAULT_HEADERS)
    retry = Retry(
        total=3,
        connect=3,
        read=3,
        backoff_factor=1.0,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=frozenset(["GET"]),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def clean_title(raw: Any) -> str:
    """Plain text of a remote title: markup stripped, whitespace collapsed."""
    if not isinstance(raw, str) or not raw.strip():
        return ""
    text = BeautifulSoup(raw, "html.parser").get_text()
    return " ".join(text.split())


class RemoteClient:
    def __init__(
        self,
        url: str = DEFAULT_REMOTE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        dry_run: bool = False,
    ) -> None:
        self.url = url
        self.session = session if session is not None else create_session()
        self.timeout = timeout
        self.dry_run = dry_run

    def fetch_records(self) -> List[Dict[str, Any]]:
        logging.info("Fetching remote quotes: %s", self.url)
        try:
            resp = self.session.get(self.url, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(f"GET {self.url} failed: {e}") from e
        if not resp.ok:
            raise NetworkError(f"GET {self.url} returned {resp.status_code}", status_code=resp.status_code)
        try:
            data = resp.json()
        except ValueError as e:
            raise NetworkError(f"GET {self.url} returned invalid JSON: {e}") from e
        if not isinstance(data, list):
            raise NetworkError(f"GET {self.url} did not return a list")
        return [item for item in data if isinstance(item, dict)]

    def submit_record(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if self.dry_run:
            logging.info("[DRY_RUN] Would POST to %s: %s", self.url, payload)
            return {}
        try:
            resp = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(f"POST {self.url} failed: {e}") from e
        if not resp.ok:
            logging.error("POST %s failed: %s %s", self.url, resp.status_code, resp.text)
            raise NetworkError(f"POST {self.url} returned {resp.status_code}", status_code=resp.status_code)
        if not resp.content:
            return {}
        try:
            data = resp.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
