import io
import json
import random
from collections import Counter

from quotebook.categories import CategoryIndex
from quotebook.models import Quote
from quotebook.quote_store import QUOTES_KEY, QuoteStore
from quotebook.renderer import (
    EMPTY_LIST_MESSAGE,
    NO_RANDOM_QUOTE_MESSAGE,
    TextView,
    format_quote,
    pick_random,
    render_list,
    render_random,
)
from quotebook.storage import MemoryStorage


def make_store(quotes):
    storage = MemoryStorage()
    storage.set(QUOTES_KEY, json.dumps(quotes))
    store = QuoteStore(storage)
    store.load()
    return store


def test_category_index_options_start_with_all():
    store = make_store([{"text": "A", "category": "zen"}, {"text": "B", "category": "art"}])
    index = CategoryIndex(store)
    assert index.categories == ["art", "zen"]
    assert index.random_options == [("all", "All"), ("art", "Art"), ("zen", "Zen")]
    assert index.filter_options == index.random_options
    assert index.random_options is not index.filter_options


def test_category_index_refresh_picks_up_new_category():
    store = make_store([{"text": "A", "category": "zen"}])
    index = CategoryIndex(store)
    assert not index.contains("server")
    store.merge([Quote("B", "server")])
    index.refresh()
    assert index.contains("Server")
    assert index.contains("all")


def test_pick_random_stays_in_range_and_reaches_every_quote():
    quotes = [Quote(str(i), "x") for i in range(4)]
    rng = random.Random(1)
    seen = Counter(pick_random(quotes, rng) for _ in range(400))
    assert set(seen) == set(quotes)


def test_render_random_empty_category_shows_message():
    store = make_store([{"text": "A", "category": "zen"}])
    view = render_random(store, "missing", random.Random(0))
    assert view.quote is None
    assert view.message == NO_RANDOM_QUOTE_MESSAGE


def test_render_random_respects_filter():
    store = make_store([{"text": "A", "category": "zen"}, {"text": "B", "category": "art"}])
    rng = random.Random(0)
    for _ in range(20):
        assert render_random(store, "Art", rng).quote == Quote("B", "art")


def test_render_list_keeps_order_and_handles_empty():
    store = make_store([{"text": "A", "category": "zen"}, {"text": "B", "category": "art"}, {"text": "C", "category": "zen"}])
    view = render_list(store, "zen")
    assert [q.text for q in view.quotes] == ["A", "C"]
    assert view.message is None
    empty = render_list(store, "missing")
    assert empty.quotes == ()
    assert empty.message == EMPTY_LIST_MESSAGE


def test_text_view_output():
    store = make_store([{"text": "A", "category": "zen"}])
    out = io.StringIO()
    view = TextView(out)
    view.show_list(render_list(store, "all"))
    view.show_list(render_list(store, "missing"))
    assert out.getvalue() == f"{format_quote(Quote('A', 'zen'))}\n{EMPTY_LIST_MESSAGE}\n"
    assert format_quote(Quote("A", "zen")) == "“A” — zen"
