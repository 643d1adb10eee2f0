from __future__ import annotations

from fastapi import APIRouter, Body, Request, Response

from todoapp.domain.items import validate_payload
from todoapp.repositories.item_store import ItemStore

router = APIRouter(prefix="/items", tags=["items"])


def _get_store(request: Request) -> ItemStore:
    store = getattr(getattr(request.app, "state", None), "item_store", None)
    if not store:
        raise RuntimeError("ItemStore not configured")
    return store


@router.post("", status_code=201)
def create_item(request: Request, payload: dict = Body(...)):
    item = validate_payload(payload)
    return _get_store(request).create(item).to_dict()


@router.get("")
def list_items(request: Request):
    return [item.to_dict() for item in _get_store(request).read_all()]


@router.get("/{item_id}")
def get_item(item_id: str, request: Request):
    return _get_store(request).read(item_id).to_dict()


@router.put("/{item_id}")
def update_item(item_id: str, request: Request, payload: dict = Body(...)):
    item = validate_payload(payload)
    return _get_store(request).update(item_id, item).to_dict()


@router.delete("/{item_id}", status_code=204)
def delete_item(item_id: str, request: Request):
    _get_store(request).delete(item_id)
    return Response(status_code=204)
