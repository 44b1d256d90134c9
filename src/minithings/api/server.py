# src/minithings/api/server.py

"""
HTTP boundary: REST-over-JSON routes mapped onto the task and logbook stores.

Handlers are plain `def` functions (the stores do blocking file I/O), so
FastAPI runs them in its threadpool. Store errors become JSON responses:
- TaskValidationError -> 400
- TaskNotFoundError   -> 404
- anything else       -> 500 (logged with traceback)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..core.state import AppState
from ..tasks.task_models import TaskNotFoundError, TaskValidationError, as_text

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"

router = APIRouter(prefix="/api")


# ---- dependencies ----


def get_state(request: Request) -> AppState:
    return request.app.state.app_state


async def json_body(request: Request) -> dict[str, Any]:
    """Lenient body reader: empty body -> {}, otherwise a JSON object is required."""
    raw = (await request.body()).decode("utf-8", errors="replace").strip()
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        raise TaskValidationError("Invalid JSON body.") from None
    if not isinstance(body, dict):
        raise TaskValidationError("Invalid JSON body.")
    return body


# Fixed paths under /tasks that would otherwise fall through to /tasks/{task_id}.
_RESERVED_TASK_PATHS = {"completed": "DELETE", "reorder": "POST"}


def _reject_reserved(task_id: str) -> None:
    allowed = _RESERVED_TASK_PATHS.get(task_id)
    if allowed is not None:
        raise StarletteHTTPException(405, "Method Not Allowed", headers={"Allow": allowed})


def _tasks_payload(state: AppState) -> list[dict[str, Any]]:
    return [t.to_dict() for t in state.task_store.list_tasks()]


# ---- routes ----


@router.get("/health")
def health() -> dict[str, Any]:
    return {"ok": True}


@router.get("/tasks")
def list_tasks(state: AppState = Depends(get_state)) -> dict[str, Any]:
    return {"tasks": _tasks_payload(state)}


@router.post("/tasks", status_code=201)
def create_task(
    body: dict[str, Any] = Depends(json_body),
    state: AppState = Depends(get_state),
) -> dict[str, Any]:
    task = state.task_store.create_task(body)
    return {"task": task.to_dict()}


# Declared before /tasks/{task_id} so "completed" is not taken as an id.
@router.delete("/tasks/completed")
def delete_completed_tasks(state: AppState = Depends(get_state)) -> dict[str, Any]:
    deleted = state.task_store.delete_completed()
    return {"deletedCount": len(deleted), "tasks": _tasks_payload(state)}


@router.post("/tasks/reorder")
def reorder_tasks(
    body: dict[str, Any] = Depends(json_body),
    state: AppState = Depends(get_state),
) -> dict[str, Any]:
    tasks = state.task_store.reorder(body.get("taskIds"))
    return {"tasks": [t.to_dict() for t in tasks]}


@router.put("/tasks/{task_id}")
def update_task(
    task_id: str,
    body: dict[str, Any] = Depends(json_body),
    state: AppState = Depends(get_state),
) -> dict[str, Any]:
    _reject_reserved(task_id)
    task = state.task_store.update_task(task_id, body)
    return {"task": task.to_dict()}


@router.delete("/tasks/{task_id}")
def delete_task(task_id: str, state: AppState = Depends(get_state)) -> dict[str, Any]:
    _reject_reserved(task_id)
    state.task_store.delete_task(task_id)
    return {"ok": True}


@router.post("/tags/delete")
def delete_tag_everywhere(
    body: dict[str, Any] = Depends(json_body),
    state: AppState = Depends(get_state),
) -> dict[str, Any]:
    tag = as_text(body.get("tag")).strip()
    changed_count = state.task_store.delete_tag_everywhere(tag)
    return {"deletedTag": tag, "changedCount": changed_count, "tasks": _tasks_payload(state)}


@router.get("/logbook")
def list_logbook(state: AppState = Depends(get_state)) -> dict[str, Any]:
    return {"entries": [e.to_dict() for e in state.logbook.read_all()]}


@router.delete("/logbook")
def clear_logbook(state: AppState = Depends(get_state)) -> dict[str, Any]:
    state.logbook.clear()
    return {"ok": True, "entries": []}


# ---- error mapping ----


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    # Set here too: the catch-all 500 handler runs outside the http middleware.
    return JSONResponse(
        status_code=status_code,
        content={"error": message},
        headers={**(headers or {}), "Cache-Control": "no-store"},
    )


async def _on_validation_error(request: Request, exc: TaskValidationError) -> JSONResponse:
    return _error(400, str(exc))


async def _on_not_found(request: Request, exc: TaskNotFoundError) -> JSONResponse:
    return _error(404, str(exc))


async def _on_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def _on_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, str(exc) or "Internal server error.")


def create_app(state: AppState) -> FastAPI:
    """Build the FastAPI app bound to `state` (stores + settings)."""
    settings = state.settings
    app = FastAPI(title=str(getattr(settings, "app_name", "minithings")), version=__version__)
    app.state.app_state = state

    @app.middleware("http")
    async def _no_store(request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store"
        return response

    app.add_exception_handler(TaskValidationError, _on_validation_error)
    app.add_exception_handler(TaskNotFoundError, _on_not_found)
    app.add_exception_handler(StarletteHTTPException, _on_http_error)
    app.add_exception_handler(Exception, _on_unexpected_error)

    app.include_router(router)

    if getattr(settings, "serve_ui", False) and STATIC_DIR.is_dir():
        app.mount("/", StaticFiles(directory=str(STATIC_DIR), html=True), name="ui")

    return app
