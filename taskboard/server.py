"""
Taskboard Server — HTTP Interface for the Task Store
======================================================
FastAPI application that routes HTTP requests to an owned TaskStore
and serializes results as JSON.

Launch:
    python -m taskboard start       # Via CLI
    python -m taskboard.server      # Direct

Endpoints:
    GET    /tasks                   → List tasks (?status=all|active|done)
    POST   /tasks                   → Create a task, body {"title": "..."}
    GET    /tasks/{id}              → One task
    POST   /tasks/{id}/toggle       → Flip the completion flag
    DELETE /tasks/{id}              → Delete a task
    GET    /health                  → Liveness + task count

Legacy endpoints (ServerConfig.legacy_routes):
    GET/POST/DELETE /api/todos   (POST {"action": "toggle", "id": n} toggles,
                                  DELETE {"id": n} deletes)
    POST /api/todos/toggle/{id}, POST /api/todos/{id}/toggle
    DELETE /api/todos/delete/{id}, DELETE /api/todos/{id}

Every OPTIONS request gets 200; with wildcard origins every response
carries the permissive CORS headers.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from taskboard import __version__
from taskboard.config import ServerConfig
from taskboard.errors import InvalidRequestError, TaskboardError, TaskNotFoundError
from taskboard.store import TaskStore
from taskboard.witness import TaskWitness

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type"]


# ─────────────────────────────────────────────────────────────
#  Request Models
# ─────────────────────────────────────────────────────────────

class TaskCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1)


# ─────────────────────────────────────────────────────────────
#  Dependencies
# ─────────────────────────────────────────────────────────────

def get_store(request: Request) -> TaskStore:
    return request.app.state.store


def get_config(request: Request) -> ServerConfig:
    return request.app.state.config


# ─────────────────────────────────────────────────────────────
#  Routes
# ─────────────────────────────────────────────────────────────

router = APIRouter()


@router.get("/tasks")
def list_tasks(status: str = "all", store: TaskStore = Depends(get_store)):
    """Return all tasks matching the status filter."""
    try:
        tasks = store.list(status)
    except ValueError as e:
        raise InvalidRequestError(str(e))
    return JSONResponse([t.to_dict() for t in tasks])


@router.post("/tasks", status_code=201)
def create_task(
    payload: TaskCreate,
    store: TaskStore = Depends(get_store),
    config: ServerConfig = Depends(get_config),
):
    """Create a task from {"title": "..."}."""
    if len(payload.title) > config.max_title_length:
        raise InvalidRequestError(
            f"Title exceeds {config.max_title_length} characters"
        )
    task = store.add(payload.title)
    return JSONResponse(task.to_dict(), status_code=201)


@router.get("/tasks/{task_id}")
def get_task(task_id: int, store: TaskStore = Depends(get_store)):
    task = store.get(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    return JSONResponse(task.to_dict())


@router.post("/tasks/{task_id}/toggle")
def toggle_task(task_id: int, store: TaskStore = Depends(get_store)):
    """Flip a task's completion flag and return the updated task."""
    task = store.toggle_task(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    return JSONResponse(task.to_dict())


@router.delete("/tasks/{task_id}")
def delete_task(task_id: int, store: TaskStore = Depends(get_store)):
    if not store.delete(task_id):
        raise TaskNotFoundError(task_id)
    return JSONResponse({"success": True, "id": task_id})


@router.get("/health")
def health(store: TaskStore = Depends(get_store)):
    return JSONResponse({"status": "ok", "tasks": len(store)})


class LegacyTodoRequest(BaseModel):
    """Body of the old POST /api/todos: a create, or {"action": "toggle", "id": n}."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = None
    id: Optional[int] = None
    action: Optional[str] = None


class LegacyDeleteRequest(BaseModel):
    id: int


def _legacy_post(
    payload: LegacyTodoRequest,
    store: TaskStore = Depends(get_store),
    config: ServerConfig = Depends(get_config),
):
    if payload.action == "toggle":
        if payload.id is None:
            raise InvalidRequestError("Invalid request: body.id: Field required for toggle")
        return toggle_task(payload.id, store)
    if not payload.title:
        raise InvalidRequestError("Invalid request: body.title: Field required")
    # The old API answered creates with 200, not 201.
    response = create_task(TaskCreate(title=payload.title), store, config)
    response.status_code = 200
    return response


def _legacy_delete(payload: LegacyDeleteRequest, store: TaskStore = Depends(get_store)):
    return delete_task(payload.id, store)


legacy_router = APIRouter(prefix="/api/todos")
legacy_router.add_api_route("", list_tasks, methods=["GET"])
legacy_router.add_api_route("", _legacy_post, methods=["POST"])
legacy_router.add_api_route("", _legacy_delete, methods=["DELETE"])
legacy_router.add_api_route("/toggle/{task_id}", toggle_task, methods=["POST"])
legacy_router.add_api_route("/delete/{task_id}", delete_task, methods=["DELETE"])
legacy_router.add_api_route("/{task_id}/toggle", toggle_task, methods=["POST"])
legacy_router.add_api_route("/{task_id}", delete_task, methods=["DELETE"])


# ─────────────────────────────────────────────────────────────
#  CORS
# ─────────────────────────────────────────────────────────────

def _permissive_cors(config: ServerConfig):
    """Answer bare OPTIONS with 200 and stamp wildcard CORS headers on
    every response, Origin header or not.

    Real preflights (Origin + Access-Control-Request-Method) still go to
    CORSMiddleware, which honours a restricted cors_origins list.
    """
    wildcard = "*" in config.cors_origins
    headers = {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": ", ".join(CORS_METHODS),
        "Access-Control-Allow-Headers": ", ".join(CORS_HEADERS),
    }

    async def middleware(request: Request, call_next):
        if request.method == "OPTIONS" and "access-control-request-method" not in request.headers:
            response = Response(status_code=200)
        else:
            response = await call_next(request)
        if wildcard:
            for name, value in headers.items():
                response.headers.setdefault(name, value)
        return response

    return middleware


# ─────────────────────────────────────────────────────────────
#  Error Handlers
# ─────────────────────────────────────────────────────────────

def _witness(request: Request) -> TaskWitness:
    return request.app.state.witness


async def _handle_taskboard_error(request: Request, exc: TaskboardError):
    _witness(request).log_error(exc.status_code, exc.message, request.url.path)
    return JSONResponse({"detail": exc.message}, status_code=exc.status_code)


async def _handle_validation_error(request: Request, exc: RequestValidationError):
    """Malformed JSON and bad path/body values are 400s, not 422s."""
    message = _describe_validation_error(exc)
    _witness(request).log_error(400, message, request.url.path)
    return JSONResponse({"detail": message}, status_code=400)


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Malformed JSON body"
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"Invalid request: {loc}: {first.get('msg', 'invalid value')}"


# ─────────────────────────────────────────────────────────────
#  App Factory
# ─────────────────────────────────────────────────────────────

def create_app(
    store: Optional[TaskStore] = None,
    config: Optional[ServerConfig] = None,
    witness: Optional[TaskWitness] = None,
) -> FastAPI:
    """Build a Taskboard app around an owned store.

    The store lives on app.state and reaches handlers through the
    get_store dependency; there is no module-level task state.

    A passed-in store keeps its own witness if it has one, and that
    witness also logs request errors. A store without a witness gets
    the app's.
    """
    config = config or ServerConfig()
    if witness is None:
        if store is not None and store.witness is not None:
            witness = store.witness
        else:
            witness = TaskWitness()
    if store is None:
        store = TaskStore(witness=witness)
    elif store.witness is None:
        store.witness = witness

    app = FastAPI(title="Taskboard", version=__version__)
    app.state.store = store
    app.state.config = config
    app.state.witness = witness

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )
    # Registered after CORSMiddleware, so it wraps it.
    app.middleware("http")(_permissive_cors(config))
    app.add_exception_handler(TaskboardError, _handle_taskboard_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)

    app.include_router(router)
    if config.legacy_routes:
        app.include_router(legacy_router)
    return app


def run_server(config: Optional[ServerConfig] = None):
    """Launch the Taskboard server with uvicorn."""
    import uvicorn

    config = config or ServerConfig.from_env()
    app = create_app(config=config)

    print(f"\n◬ ─── Taskboard ───")
    print(f"  http://{config.host}:{config.port}/tasks")
    print(f"  Press Ctrl+C to stop\n")

    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    run_server()
