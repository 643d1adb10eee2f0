"""
Serialized, file-backed item store.

Every public call is packaged as a request and handed to a single worker
thread through a bounded queue; the caller then blocks on a Future. The
worker runs one request at a time, so a reload -> mutate -> save sequence is
never interleaved with another one and two saves never race.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from todoapp.core.config import get_settings
from todoapp.core.logging import bind_trace_id, get_trace_id
from todoapp.domain.items import Item, NotFoundError, new_item_id
from todoapp.repositories import json_storage

logger = logging.getLogger(__name__)

_STOP = object()


@dataclass
class _Request:
    name: str
    operation: Callable[[], Any]
    trace_id: Optional[str]
    future: Future = field(default_factory=Future)


class ItemStore:
    """CRUD over the item collection persisted at ``path``."""

    def __init__(self, path: str | os.PathLike | None = None, *, queue_size: int | None = None) -> None:
        settings = get_settings()
        self.path = Path(path or settings.items_file)
        self._items: dict[str, Item] = {}
        self._requests: queue.Queue = queue.Queue(maxsize=queue_size or settings.queue_size)
        self._state_lock = threading.Lock()
        self._closed = False
        self._worker = threading.Thread(target=self._run, name=f"item-store:{self.path.name}", daemon=True)
        self._worker.start()

    # -------------------------- public API --------------------------
    def create(self, item: Item | Mapping[str, Any]) -> Item:
        return self._submit("create", self._create, _as_item(item))

    def read_all(self) -> list[Item]:
        return self._submit("read_all", self._read_all)

    def read(self, item_id: str) -> Item:
        return self._submit("read", self._read, item_id)

    def update(self, item_id: str, item: Item | Mapping[str, Any]) -> Item:
        return self._submit("update", self._update, item_id, _as_item(item))

    def delete(self, item_id: str) -> None:
        self._submit("delete", self._delete, item_id)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Finish pending requests and stop the worker. Safe to call twice."""
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
            self._requests.put(_STOP)
        if threading.current_thread() is not self._worker:
            self._worker.join()

    def __enter__(self) -> "ItemStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -------------------------- queue --------------------------
    def _submit(self, name: str, fn: Callable[..., Any], *args: Any) -> Any:
        request = _Request(name=name, operation=lambda: fn(*args), trace_id=get_trace_id())
        with self._state_lock:
            if self._closed:
                raise RuntimeError("item store is closed")
            self._requests.put(request)
        return request.future.result()

    def _run(self) -> None:
        while True:
            request = self._requests.get()
            try:
                if request is _STOP:
                    return
                self._execute(request)
            finally:
                self._requests.task_done()

    def _execute(self, request: _Request) -> None:
        if not request.future.set_running_or_notify_cancel():
            return
        with bind_trace_id(request.trace_id):
            logger.debug("store %s: %s", self.path, request.name)
            try:
                result = request.operation()
            except Exception as exc:
                logger.debug("store %s failed: %s", request.name, exc)
                request.future.set_exception(exc)
            else:
                request.future.set_result(result)

    # -------------------------- worker-side operations --------------------------
    def _reload(self) -> None:
        loaded = json_storage.load(self.path)
        if loaded is None:
            logger.info("backing file %s not found; starting with an empty collection", self.path)
            json_storage.save(self.path, {})
            self._items = {}
            return
        items, needs_rewrite = loaded
        if needs_rewrite:
            logger.info("rewriting legacy array file %s as an id-keyed object", self.path)
            json_storage.save(self.path, items)
        self._items = items

    def _commit(self, items: dict[str, Item]) -> None:
        # in-memory state only moves forward once the file holds it
        json_storage.save(self.path, items)
        self._items = items

    def _create(self, item: Item) -> Item:
        self._reload()
        item_id = new_item_id()
        while item_id in self._items:
            item_id = new_item_id()
        stored = item.with_id(item_id)
        items = dict(self._items)
        items[item_id] = stored
        self._commit(items)
        logger.info("item created: %s", item_id)
        return stored

    def _read_all(self) -> list[Item]:
        self._reload()
        return list(self._items.values())

    def _read(self, item_id: str) -> Item:
        self._reload()
        try:
            return self._items[item_id]
        except KeyError:
            raise NotFoundError(item_id) from None

    def _update(self, item_id: str, item: Item) -> Item:
        self._reload()
        if item_id not in self._items:
            raise NotFoundError(item_id)
        stored = item.with_id(item_id)
        items = dict(self._items)
        items[item_id] = stored
        self._commit(items)
        logger.info("item updated: %s", item_id)
        return stored

    def _delete(self, item_id: str) -> None:
        self._reload()
        if item_id not in self._items:
            raise NotFoundError(item_id)
        items = dict(self._items)
        del items[item_id]
        self._commit(items)
        logger.info("item deleted: %s", item_id)


def _as_item(item: Item | Mapping[str, Any]) -> Item:
    if isinstance(item, Item):
        return item
    return Item.from_dict(item)
