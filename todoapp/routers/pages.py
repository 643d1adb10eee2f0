from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from todoapp.routers.items import _get_store

router = APIRouter(prefix="", tags=["pages"])


def _templates(request: Request) -> Jinja2Templates:
    tpl = getattr(getattr(request.app, "state", None), "templates", None)
    if tpl:
        return tpl
    raise RuntimeError("Templates not configured")


@router.get("/", response_class=HTMLResponse)
def index(request: Request):
    items = sorted(_get_store(request).read_all(), key=lambda item: (item.status, item.name.lower(), item.id))
    return _templates(request).TemplateResponse(request, "items.html", {"items": items})


@router.get("/healthz")
def healthz():
    return {"ok": True}
