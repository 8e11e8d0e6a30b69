import json

import pytest

from quotebook.models import Quote
from quotebook.notifier import Notifier
from quotebook.quote_store import QUOTES_KEY, QuoteStore
from quotebook.remote_client import RemoteClient
from quotebook.storage import MemoryStorage
from quotebook.sync_agent import RepeatingTask, SyncAgent, SyncState, map_remote_records

from fakes import FailingStorage, FakeResponse, FakeSession, remote_posts


def make_agent(session, quotes=None):
    storage = MemoryStorage()
    storage.set(QUOTES_KEY, json.dumps(quotes or [{"text": "A", "category": "x"}]))
    store = QuoteStore(storage)
    store.load()
    notifier = Notifier()
    agent = SyncAgent(store, RemoteClient("https://example.test/posts", session=session), notifier)
    return agent, store, notifier


def test_map_remote_records_limits_and_skips_blank_titles():
    records = remote_posts("one", "", "two", "three") + [{"id": 9}]
    quotes = map_remote_records(records, max_records=2)
    assert quotes == [Quote("one", "server"), Quote("two", "server")]


def test_sync_merges_new_records_and_notifies():
    session = FakeSession(get=[FakeResponse(payload=remote_posts("first", "second"))])
    agent, store, notifier = make_agent(session)
    changes = []
    agent.on_change = lambda: changes.append(True)

    result = agent.sync_once()

    assert result.ok and result.added == 2
    assert "server" in store.categories()
    assert changes == [True]
    messages = [n.message for n in notifier.drain()]
    assert messages == ["Syncing with server...", "Synced 2 new quotes from server."]
    assert agent.state is SyncState.IDLE


def test_sync_twice_is_idempotent():
    session = FakeSession(get=[FakeResponse(payload=remote_posts("first", "second"))])
    agent, store, notifier = make_agent(session)
    agent.sync_once()
    snapshot = store.all()
    result = agent.sync_once()
    assert result.added == 0
    assert store.all() == snapshot
    assert notifier.pending[-1].message == "Quotes are up to date."


def test_sync_failure_leaves_store_unchanged(connection_error):
    session = FakeSession(get=[connection_error])
    agent, store, notifier = make_agent(session)
    before = store.all()
    result = agent.sync_once()
    assert not result.ok
    assert store.all() == before
    assert notifier.pending[-1].level == "error"
    assert notifier.pending[-1].message.startswith("Sync failed:")
    assert agent.state is SyncState.IDLE


def test_push_success_and_failure():
    session = FakeSession(post=[FakeResponse(status_code=201, payload={"id": 1}), FakeResponse(status_code=500)])
    agent, _, notifier = make_agent(session)
    quote = Quote("hi", "x")
    assert agent.push(quote) is True
    assert session.calls[-1] == ("POST", "https://example.test/posts", {"title": "hi", "body": "x", "userId": 1})
    assert agent.push(quote) is False
    assert notifier.pending[-1].level == "warning"


def test_repeating_task_ticks_immediately_then_each_interval():
    calls, sleeps = [], []
    task = RepeatingTask(30, lambda: calls.append(len(calls)), sleep=sleeps.append)
    assert task.run(max_ticks=3) == 3
    assert calls == [0, 1, 2]
    assert sleeps == [30, 30]


def test_repeating_task_stop_from_action():
    sleeps = []
    task = RepeatingTask(5, lambda: task.stop() if task.ticks == 1 else None, sleep=sleeps.append)
    assert task.run() == 2
    assert sleeps == [5]


def test_repeating_task_rejects_bad_interval():
    with pytest.raises(ValueError):
        RepeatingTask(0, lambda: None)


def test_agent_reports_syncing_until_run_completes():
    session = FakeSession(get=[FakeResponse(payload=remote_posts("first"))])
    agent, _, notifier = make_agent(session)
    seen = []
    agent.on_change = lambda: seen.append(agent.state)
    notifier.sink = lambda note: seen.append(agent.state)

    agent.sync_once()

    assert seen == [SyncState.SYNCING] * 3
    assert agent.state is SyncState.IDLE


def test_sync_storage_failure_is_reported_and_store_unchanged():
    session = FakeSession(get=[FakeResponse(payload=remote_posts("first", "second"))])
    storage = FailingStorage()
    store = QuoteStore(storage)
    store.load()
    notifier = Notifier()
    agent = SyncAgent(store, RemoteClient("https://example.test/posts", session=session), notifier)
    before = store.all()
    storage.fail = True

    result = agent.sync_once()

    assert result.error == "disk full"
    assert store.all() == before
    assert notifier.pending[-1].message == "Sync failed: disk full"
    assert agent.state is SyncState.IDLE


def test_repeating_task_zero_ticks_runs_nothing():
    calls = []
    task = RepeatingTask(1, lambda: calls.append(1), sleep=lambda _: None)
    assert task.run(max_ticks=0) == 0
    assert calls == []
