"""Interactive menu over a single ItemStore."""

from __future__ import annotations

import logging
from typing import Callable, TextIO

from todoapp.core.logging import bind_trace_id, get_trace_id, new_trace_id
from todoapp.domain.items import Item, ItemError, validate_payload
from todoapp.repositories.item_store import ItemStore

logger = logging.getLogger(__name__)

MENU = (
    "Options",
    "1. Create",
    "2. Print all",
    "3. Print one",
    "4. Update",
    "5. Delete",
    "6. Exit",
)
CHOICE_PROMPT = "Enter choice (1, 2, 3, 4, 5, 6): "


def format_item(item: Item) -> str:
    return f"{item.id}: {item}"


class _Session:
    def __init__(self, store: ItemStore, stdin: TextIO, stdout: TextIO) -> None:
        self.store = store
        self.stdin = stdin
        self.stdout = stdout

    def ask(self, prompt: str) -> str:
        self.stdout.write(prompt)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            raise EOFError
        return line.rstrip("\r\n")

    def say(self, text: str) -> None:
        print(text, file=self.stdout)

    def _fields(self, label: str = "") -> Item:
        name = self.ask(f"Enter {label}item name: ")
        description = self.ask(f"Enter {label}item description: ")
        status = self.ask(f"Enter {label}item status: ")
        return validate_payload({"name": name, "description": description, "status": status})

    def create(self) -> None:
        item = self.store.create(self._fields())
        logger.info("item added: %s", item.id)
        self.say(format_item(item))

    def print_all(self) -> None:
        for item in self.store.read_all():
            self.say(format_item(item))

    def print_one(self) -> None:
        item_id = self.ask("Enter item id: ").strip()
        self.say(format_item(self.store.read(item_id)))

    def update(self) -> None:
        item_id = self.ask("Enter item id: ").strip()
        item = self.store.update(item_id, self._fields("new "))
        logger.info("item updated: %s", item.id)

    def delete(self) -> None:
        item_id = self.ask("Enter item id: ").strip()
        self.store.delete(item_id)
        logger.info("item deleted: %s", item_id)


def run_repl(store: ItemStore, *, stdin: TextIO, stdout: TextIO) -> None:
    """Loop over the menu until ``6`` or end of input."""
    session = _Session(store, stdin, stdout)
    actions: dict[str, Callable[[], None]] = {
        "1": session.create,
        "2": session.print_all,
        "3": session.print_one,
        "4": session.update,
        "5": session.delete,
    }
    with bind_trace_id(get_trace_id() or new_trace_id()):
        for line in MENU:
            session.say(line)
        while True:
            try:
                choice = session.ask(CHOICE_PROMPT).strip()
                if choice == "6":
                    break
                action = actions.get(choice)
                if action is None:
                    session.say(f"Invalid choice: {choice}")
                    continue
                action()
            except ItemError as exc:
                logger.error(exc.message)
            except EOFError:
                session.say("")
                break
        session.say("Goodbye!")
