"""Domain types for to-do items: the record itself, id generation and payload checks."""
from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, replace
from typing import Any, Mapping

ITEM_FIELDS = ("name", "description", "status")


class ItemError(Exception):
    """Base class for item workflow failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ItemError):
    """Raised when a payload does not describe a valid item."""

    status_code = 400


class NotFoundError(ItemError):
    """Raised when no item exists for the requested id."""

    status_code = 404

    def __init__(self, item_id: str):
        super().__init__(f"item not found: {item_id}")
        self.item_id = item_id


class StorageError(ItemError):
    """Raised when the backing file cannot be opened, read, decoded or written."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


def new_item_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Item:
    id: str = ""
    name: str = ""
    description: str = ""
    status: str = ""

    def __str__(self) -> str:
        return f"Name: {self.name}, Description: {self.description}, Status: {self.status}"

    def with_id(self, item_id: str) -> "Item":
        return replace(self, id=item_id)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, record: Any, item_id: str | None = None) -> "Item":
        """
        Build an Item from a decoded JSON record.

        Missing fields default to an empty string; a non-string value for a
        known field is rejected. ``item_id`` wins over the record's own id.
        """
        if not isinstance(record, Mapping):
            raise ValidationError(f"item record must be an object, got {type(record).__name__}")
        values = {}
        for field in ("id",) + ITEM_FIELDS:
            value = record.get(field, "")
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise ValidationError(f"field '{field}' must be a string")
            values[field] = value
        if item_id is not None:
            values["id"] = item_id
        return cls(**values)


def validate_payload(payload: Any) -> Item:
    """
    Check a create/update payload and return an id-less Item.

    Unknown keys are ignored and any id is dropped; blank fields are allowed.
    """
    return Item.from_dict(payload, item_id="")
