"""
JSON file persistence for the item collection.

The backing file holds one object keyed by item id. Older files stored a bare
array of records without ids; those are still readable and get flagged so the
store can rewrite them in object form.
"""

from __future__ import annotations

from pathlib import Path
import json
import os
import stat
import tempfile

from todoapp.domain.items import Item, StorageError, ValidationError, new_item_id

DEFAULT_FILENAME = "items.json"


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


_UMASK = _current_umask()


def _file_mode(data_file: Path) -> int:
    """Permission bits for the replacement: keep the existing file's, else 0666 minus umask."""
    try:
        return stat.S_IMODE(data_file.stat().st_mode)
    except FileNotFoundError:
        return 0o666 & ~_UMASK


def load(path: str | os.PathLike) -> tuple[dict[str, Item], bool] | None:
    """
    Read the collection from ``path``.

    Returns None when the file does not exist, else ``(items, needs_rewrite)``.
    """
    data_file = Path(path)
    try:
        with data_file.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise StorageError(f"open {data_file}: {exc}", path=str(data_file)) from exc
    except ValueError as exc:
        raise StorageError(f"decode {data_file}: {exc}", path=str(data_file)) from exc

    try:
        if isinstance(raw, dict):
            items = {key: Item.from_dict(record, item_id=key) for key, record in raw.items()}
            return items, False
        if isinstance(raw, list):
            items = {}
            for record in raw:
                item = Item.from_dict(record)
                item_id = item.id
                if not item_id or item_id in items:
                    item_id = new_item_id()
                items[item_id] = item.with_id(item_id)
            return items, True
    except ValidationError as exc:
        raise StorageError(f"decode {data_file}: {exc.message}", path=str(data_file)) from exc
    raise StorageError(
        f"decode {data_file}: expected an object or an array, got {type(raw).__name__}",
        path=str(data_file),
    )


def save(path: str | os.PathLike, items: dict[str, Item]) -> None:
    """Write the whole collection next to ``path`` and swap it in atomically."""
    data_file = Path(path)
    payload = {item_id: item.to_dict() for item_id, item in items.items()}
    tmp_name = None
    try:
        data_file.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=data_file.parent, prefix=f".{data_file.name}.", suffix=".tmp")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2, sort_keys=True)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, _file_mode(data_file))
        os.replace(tmp_name, data_file)
        tmp_name = None
    except OSError as exc:
        raise StorageError(f"save {data_file}: {exc}", path=str(data_file)) from exc
    finally:
        if tmp_name is not None:
            try:
                os.remove(tmp_name)
            except OSError:
                pass
