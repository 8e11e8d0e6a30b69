import argparse
import logging
import os
import sys
import time
from typing import Callable, List, Optional

import requests

from .app import QuoteApp
from .config import Settings
from .errors import QuotebookError
from .notifier import Notifier
from .remote_client import RemoteClient
from .renderer import TextView
from .storage import FileStorage
from .sync_agent import RepeatingTask, SyncAgent
from .transfer import DEFAULT_EXPORT_PATH


def _positive(cast):
    def parse(raw: str):
        try:
            value = cast(raw)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid number: {raw!r}")
        if value <= 0:
            raise argparse.ArgumentTypeError(f"must be greater than 0: {raw!r}")
        return value

    return parse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="quotebook", description="Keep, filter and sync a list of quotes.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("random", help="show a random quote")
    p.add_argument("--category", default=None)

    p = sub.add_parser("list", help="list quotes")
    p.add_argument("--category", default=None)

    p = sub.add_parser("add", help="add a quote")
    p.add_argument("text")
    p.add_argument("category")
    p.add_argument("--push", action="store_true", help="also send the quote to the server")

    sub.add_parser("categories", help="list categories")

    p = sub.add_parser("export", help="write all quotes to a JSON file")
    p.add_argument("path", nargs="?", default=DEFAULT_EXPORT_PATH)

    p = sub.add_parser("import", help="merge quotes from a JSON file")
    p.add_argument("path")

    sub.add_parser("sync", help="fetch new quotes from the server once")

    p = sub.add_parser("watch", help="sync now and then on a fixed interval")
    p.add_argument("--interval", type=_positive(float), default=None, help="seconds between syncs")
    p.add_argument("--ticks", type=_positive(int), default=None, help="stop after this many syncs")
    return parser


def build_app(settings: Settings, view: TextView, session: Optional[requests.Session] = None) -> QuoteApp:
    notifier = Notifier(sink=lambda note: view.show_notification(note.message))
    app = QuoteApp(FileStorage(settings.data_path), notifier=notifier)
    client = RemoteClient(settings.remote_url, session=session, timeout=settings.http_timeout, dry_run=settings.dry_run)
    app.attach_sync_agent(SyncAgent(app.store, client, notifier, max_records=settings.sync_max_records))
    restored = app.start()
    if restored is not None:
        view.show_random(restored)
    return app


def run(
    args: argparse.Namespace,
    app: QuoteApp,
    view: TextView,
    settings: Settings,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    if args.command == "random":
        view.show_random(app.show_random(args.category))
        return True
    if args.command == "list":
        view.show_list(app.show_list(args.category))
        return True
    if args.command == "add":
        return app.add_quote(args.text, args.category, push=args.push) is not None
    if args.command == "categories":
        view.show_options(app.index.filter_options)
        return True
    if args.command == "export":
        return app.export_quotes(args.path)
    if args.command == "import":
        return app.import_quotes(args.path) is not None
    if args.command == "sync":
        return app.sync().ok
    if args.command == "watch":
        interval = args.interval if args.interval is not None else settings.sync_interval
        task = RepeatingTask(interval, app.sync, sleep=sleep)
        try:
            task.run(max_ticks=args.ticks)
        except KeyboardInterrupt:
            task.stop()
        return True
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    view = TextView(sys.stdout)
    try:
        app = build_app(settings, view)
        ok = run(args, app, view, settings)
    except QuotebookError as e:
        logging.error("%s", e.message)
        return 1
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
