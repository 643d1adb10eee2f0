from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from todoapp.core.config import Settings, get_settings
from todoapp.core.logging import TRACE_ID_HEADER, bind_trace_id, coerce_trace_id
from todoapp.domain.items import ItemError
from todoapp.repositories.item_store import ItemStore
from todoapp.routers import items as items_router
from todoapp.routers import pages as pages_router

logger = logging.getLogger(__name__)

BASE = os.path.dirname(__file__)


class TraceIdMiddleware(BaseHTTPMiddleware):
    """Bind a trace id to the request (reusing a valid incoming one) and echo it back."""

    async def dispatch(self, request, call_next):
        trace_id = coerce_trace_id(request.headers.get(TRACE_ID_HEADER))
        with bind_trace_id(trace_id):
            response = await call_next(request)
        response.headers[TRACE_ID_HEADER] = trace_id
        return response


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"status_code": status_code, "error": message}, status_code=status_code)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "invalid request"


async def _item_error_handler(request: Request, exc: ItemError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s: %s", request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _validation_message(exc)
    logger.warning("%s %s: %s", request.method, request.url.path, message)
    return error_response(400, message)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


def create_app(store: ItemStore | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Build the HTTP application around ``store``.

    When no store is given one is opened on the configured items file and
    closed again on shutdown; an injected store stays owned by the caller.
    """
    settings = settings or get_settings()
    owns_store = store is None
    item_store = store or ItemStore(settings.items_file, queue_size=settings.queue_size)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            if owns_store:
                item_store.close()

    app = FastAPI(title="To-do Items API", lifespan=lifespan)
    app.state.item_store = item_store
    app.state.settings = settings
    app.state.templates = Jinja2Templates(directory=os.path.join(BASE, "templates"))

    app.add_middleware(TraceIdMiddleware)
    app.add_exception_handler(ItemError, _item_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)

    app.include_router(items_router.router)
    app.include_router(pages_router.router)
    return app
