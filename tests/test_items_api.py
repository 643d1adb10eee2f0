"""
HTTP surface exercised through FastAPI's TestClient with an injected store.
"""
from __future__ import annotations

import logging
import sys
import uuid
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from todoapp.app import create_app  # noqa: E402
from todoapp.core import config as core_config  # noqa: E402
from todoapp.core.logging import TRACE_ID_HEADER  # noqa: E402
from todoapp.repositories.item_store import ItemStore  # noqa: E402


@pytest.fixture()
def items_file(tmp_path, monkeypatch):
    data_file = tmp_path / "items.json"
    monkeypatch.setenv("TODO_ITEMS_FILE", str(data_file))
    core_config.get_settings.cache_clear()
    yield data_file
    core_config.get_settings.cache_clear()


@pytest.fixture()
def client(items_file):
    store = ItemStore(items_file)
    try:
        yield TestClient(create_app(store))
    finally:
        store.close()


def _create(client, **fields):
    payload = {"name": "Buy milk", "description": "2%", "status": "todo"}
    payload.update(fields)
    resp = client.post("/items", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_returns_201_with_generated_id(client):
    body = _create(client)
    assert body["id"]
    assert body["name"] == "Buy milk"
    assert body["description"] == "2%"
    assert body["status"] == "todo"


def test_list_and_get(client):
    a = _create(client, name="a")
    b = _create(client, name="b")

    resp = client.get("/items")
    assert resp.status_code == 200
    assert sorted(item["id"] for item in resp.json()) == sorted([a["id"], b["id"]])

    resp = client.get(f"/items/{a['id']}")
    assert resp.status_code == 200
    assert resp.json() == a


def test_get_missing_returns_error_body(client):
    resp = client.get("/items/does-not-exist")
    assert resp.status_code == 404
    body = resp.json()
    assert body["status_code"] == 404
    assert "does-not-exist" in body["error"]


def test_update_replaces_fields(client):
    created = _create(client)
    resp = client.put(
        f"/items/{created['id']}",
        json={"id": "ignored", "name": "Buy oat milk", "description": "", "status": "done"},
    )
    assert resp.status_code == 200
    assert resp.json() == {"id": created["id"], "name": "Buy oat milk", "description": "", "status": "done"}
    assert client.get(f"/items/{created['id']}").json()["status"] == "done"


def test_update_missing_returns_404(client):
    resp = client.put("/items/nope", json={"name": "x"})
    assert resp.status_code == 404
    assert resp.json()["status_code"] == 404


def test_delete_returns_204_then_404(client):
    created = _create(client)
    resp = client.delete(f"/items/{created['id']}")
    assert resp.status_code == 204
    assert resp.content == b""

    resp = client.delete(f"/items/{created['id']}")
    assert resp.status_code == 404
    assert client.get("/items").json() == []


@pytest.mark.parametrize(
    "kwargs",
    [
        {"json": {"name": 5}},
        {"json": ["not", "an", "object"]},
        {"content": b"{not json", "headers": {"Content-Type": "application/json"}},
    ],
)
def test_invalid_payload_returns_400(client, kwargs):
    resp = client.post("/items", **kwargs)
    assert resp.status_code == 400
    body = resp.json()
    assert body["status_code"] == 400
    assert body["error"]
    assert client.get("/items").json() == []


def test_invalid_update_payload_returns_400(client):
    created = _create(client)
    resp = client.put(f"/items/{created['id']}", json={"name": ["not", "a", "string"]})
    assert resp.status_code == 400
    assert client.get(f"/items/{created['id']}").json() == created


def test_storage_failure_returns_500_and_logs_once(client, items_file, caplog):
    items_file.write_text("[1, 2", encoding="utf-8")
    with caplog.at_level(logging.DEBUG, logger="todoapp"):
        resp = client.get("/items")
    assert resp.status_code == 500
    assert resp.json()["status_code"] == 500
    assert len([r for r in caplog.records if r.levelno >= logging.ERROR]) == 1


def test_unknown_route_uses_error_body(client):
    resp = client.get("/nowhere")
    assert resp.status_code == 404
    assert resp.json() == {"status_code": 404, "error": "Not Found"}


def test_trace_id_is_echoed_when_valid(client):
    trace_id = str(uuid.uuid4())
    resp = client.get("/items", headers={TRACE_ID_HEADER: trace_id})
    assert resp.headers[TRACE_ID_HEADER] == trace_id


def test_trace_id_is_replaced_when_invalid(client):
    resp = client.get("/items", headers={TRACE_ID_HEADER: "not-a-uuid"})
    echoed = resp.headers[TRACE_ID_HEADER]
    assert echoed != "not-a-uuid"
    uuid.UUID(echoed)


def test_index_page_lists_items(client):
    _create(client, name="Water plants", status="todo")
    resp = client.get("/")
    assert resp.status_code == 200
    assert "text/html" in resp.headers["content-type"]
    assert "Water plants" in resp.text


def test_index_page_when_empty(client):
    resp = client.get("/")
    assert "Nothing to do." in resp.text


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": True}


def test_create_app_without_store_uses_configured_file(items_file):
    with TestClient(create_app()) as client:
        created = _create(client, name="from settings")
    assert created["id"] in items_file.read_text(encoding="utf-8")


def test_blank_fields_are_accepted(client):
    resp = client.post("/items", json={"description": "no name", "status": "todo"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["name"] == ""
    assert client.get(f"/items/{body['id']}").json() == body
