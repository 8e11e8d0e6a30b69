import random

import pytest
import requests

from quotebook.app import QuoteApp
from quotebook.notifier import Notifier
from quotebook.remote_client import RemoteClient
from quotebook.storage import MemoryStorage
from quotebook.sync_agent import SyncAgent


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def make_app(storage, notifier):
    def _make(session=None, seed=7):
        app = QuoteApp(storage, session_storage=MemoryStorage(), notifier=notifier, rng=random.Random(seed))
        if session is not None:
            client = RemoteClient("https://example.test/posts", session=session)
            app.attach_sync_agent(SyncAgent(app.store, client, notifier))
        app.start()
        return app

    return _make


@pytest.fixture
def connection_error():
    return requests.ConnectionError("connection refused")
