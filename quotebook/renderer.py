import random
from dataclasses import dataclass, field
from typing import Optional, Sequence, TextIO, Tuple

from .models import Quote, normalize_category
from .quote_store import QuoteStore

NO_RANDOM_QUOTE_MESSAGE = "No quotes available for this category."
EMPTY_LIST_MESSAGE = "No quotes found for this category."


@dataclass
class RandomView:
    category: str
    quote: Optional[Quote] = None
    message: Optional[str] = None


@dataclass
class ListView:
    category: str
    quotes: Tuple[Quote, ...] = field(default_factory=tuple)
    message: Optional[str] = None


def pick_random(quotes: Sequence[Quote], rng: random.Random) -> Quote:
    return quotes[rng.randrange(len(quotes))]


def render_random(store: QuoteStore, category: str, rng: random.Random) -> RandomView:
    category = normalize_category(category)
    quotes = store.by_category(category)
    if not quotes:
        return RandomView(category=category, message=NO_RANDOM_QUOTE_MESSAGE)
    return RandomView(category=category, quote=pick_random(quotes, rng))


def render_list(store: QuoteStore, category: str) -> ListView:
    category = normalize_category(category)
    quotes = store.by_category(category)
    if not quotes:
        return ListView(category=category, message=EMPTY_LIST_MESSAGE)
    return ListView(category=category, quotes=quotes)


def format_quote(quote: Quote) -> str:
    return f"“{quote.text}” — {quote.category}"


class TextView:
    """Writes render models to a text stream."""

    def __init__(self, out: TextIO) -> None:
        self.out = out

    def show_random(self, view: RandomView) -> None:
        if view.quote is None:
            self.out.write(f"{view.message}\n")
            return
        self.out.write(format_quote(view.quote) + "\n")

    def show_list(self, view: ListView) -> None:
        if not view.quotes:
            self.out.write(f"{view.message}\n")
            return
        for quote in view.quotes:
            self.out.write(format_quote(quote) + "\n")

    def show_options(self, options: Sequence[Tuple[str, str]]) -> None:
        for value, label in options:
            self.out.write(f"{value}\t{label}\n")

    def show_notification(self, message: str) -> None:
        self.out.write(f"* {message}\n")
