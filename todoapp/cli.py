"""
Command line front end for the item store.

Usage:
  todoapp [--file items.json] add [-name "Buy milk"] [-description 2%] [-status todo]
  todoapp list
  todoapp get -id <id>
  todoapp update -id <id> [-name "Buy milk"] [-description ...] [-status done]
  todoapp delete -id <id>
  todoapp serve [--host 127.0.0.1] [--port 8080]
  todoapp repl
"""
from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from typing import Iterable, Sequence, TextIO

import uvicorn

from todoapp.app import create_app
from todoapp.core.config import Settings, get_settings
from todoapp.core.logging import bind_trace_id, new_trace_id, setup_logging
from todoapp.domain.items import Item, ItemError, validate_payload
from todoapp.repositories.item_store import ItemStore
from todoapp.repl import format_item, run_repl

logger = logging.getLogger(__name__)


def _add_item_fields(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-name", "--name", default="", help="item name")
    parser.add_argument("-description", "--description", default="", help="item description")
    parser.add_argument("-status", "--status", default="", help="item status")


def _add_id(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-id", "--id", dest="item_id", required=True, help="item id")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="todoapp", description="Manage to-do items stored in a JSON file")
    ap.add_argument("--file", help="backing file (default: TODO_ITEMS_FILE or items.json)")
    ap.add_argument("--log-level", help="logging level (default: TODO_LOG_LEVEL or INFO)")
    sub = ap.add_subparsers(dest="command", metavar="command")
    sub.required = True

    _add_item_fields(sub.add_parser("add", help="create an item"))
    sub.add_parser("list", help="print every item")
    _add_id(sub.add_parser("get", help="print one item"))
    update = sub.add_parser("update", help="replace an item's fields")
    _add_id(update)
    _add_item_fields(update)
    _add_id(sub.add_parser("delete", help="remove an item"))

    serve = sub.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", help="bind address")
    serve.add_argument("--port", type=int, help="bind port")
    sub.add_parser("repl", help="interactive menu")
    return ap


def print_items(items: Iterable[Item], out: TextIO) -> None:
    for item in items:
        print(format_item(item), file=out)


def _payload(args: argparse.Namespace) -> Item:
    return validate_payload({"name": args.name, "description": args.description, "status": args.status})


def run_command(args: argparse.Namespace, store: ItemStore, out: TextIO) -> None:
    if args.command == "add":
        store.create(_payload(args))
        logger.info("item added")
        print_items(store.read_all(), out)
    elif args.command == "list":
        print_items(store.read_all(), out)
    elif args.command == "get":
        print(format_item(store.read(args.item_id)), file=out)
    elif args.command == "update":
        store.update(args.item_id, _payload(args))
        logger.info("item updated")
        print_items(store.read_all(), out)
    elif args.command == "delete":
        store.delete(args.item_id)
        logger.info("item deleted")
        print_items(store.read_all(), out)
    else:
        raise ValueError(f"unknown command: {args.command}")


def _serve(args: argparse.Namespace, settings: Settings) -> None:
    host = args.host or settings.host
    port = args.port or settings.port
    logger.info("serving %s on %s:%s", settings.items_file, host, port)
    uvicorn.run(create_app(settings=settings), host=host, port=port, log_level=settings.log_level.lower())


def main(argv: Sequence[str] | None = None, *, stdin: TextIO | None = None, stdout: TextIO | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    if args.file:
        settings = dataclasses.replace(settings, items_file=args.file)
    if args.log_level:
        settings = dataclasses.replace(settings, log_level=args.log_level.upper())
    setup_logging(settings.log_level)
    out = stdout or sys.stdout

    if args.command == "serve":
        _serve(args, settings)
        return 0

    with bind_trace_id(new_trace_id()):
        with ItemStore(settings.items_file, queue_size=settings.queue_size) as store:
            if args.command == "repl":
                run_repl(store, stdin=stdin or sys.stdin, stdout=out)
                return 0
            try:
                run_command(args, store, out)
            except ItemError as exc:
                logger.error("%s command: %s", args.command, exc.message)
                return 1
    return 0


def run() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    run()
