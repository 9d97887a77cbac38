"""FastAPI web application for coallytasks."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coallytasks import __version__
from coallytasks.api.middleware import register_middleware
from coallytasks.api.schemas import (
    ProjectInfo,
    TaskDetailResponse,
    TaskResponse,
    TokenResponse,
    UserResponse,
)
from coallytasks.auth.dependencies import get_current_user_id
from coallytasks.config import Settings, load_settings
from coallytasks.database.database import build_engine, build_session_factory, get_db, init_db
from coallytasks.database.repository import TaskRepository
from coallytasks.database.user_repository import UserRepository
from coallytasks.errors import AppError, InternalError, UpdateFailed, ValidationError
from coallytasks.models.task import Task
from coallytasks.models.user import User
from coallytasks.services.auth_service import AuthService
from coallytasks.services.task_service import TaskService
from coallytasks.validation import Violation

logger = logging.getLogger(__name__)

router = APIRouter()

MALFORMED_BODY_MESSAGE = "El cuerpo de la solicitud no es JSON válido."


# Service providers

def get_auth_service(request: Request, db: Session = Depends(get_db)) -> AuthService:
    return AuthService(UserRepository(db), request.app.state.settings)


def get_task_service(db: Session = Depends(get_db)) -> TaskService:
    return TaskService(TaskRepository(db))



async def _read_json(request: Request) -> Any:
    """Parsed request body, or None when there is no body.

    Raises:
        ValueError: If the body is not valid JSON
    """
    raw = await request.body()
    if not raw:
        return None
    return await request.json()


async def task_create_payload(request: Request, user_id: str = Depends(get_current_user_id)) -> Any:
    """Body of ``POST /tasks``, read only after the bearer token is accepted."""
    try:
        return await _read_json(request)
    except ValueError:
        raise ValidationError([Violation("body", MALFORMED_BODY_MESSAGE)])


async def task_update_payload(request: Request, user_id: str = Depends(get_current_user_id)) -> Any:
    """Body of ``PATCH /tasks/{id}``, read only after the bearer token is accepted."""
    try:
        return await _read_json(request)
    except ValueError as e:
        raise UpdateFailed(f"{MALFORMED_BODY_MESSAGE} {e}")


def _parse_completed(completed: Optional[str]) -> Optional[bool]:
    """Query-string filter: only the literal ``true`` means completed."""
    if completed is None:
        return None
    return completed == "true"


# Public endpoints

@router.get("/", response_model=List[ProjectInfo])
def root(request: Request):
    """Project name."""
    return [{"name": request.app.state.settings.app_name}]


@router.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@router.post("/register", response_model=UserResponse, status_code=201, tags=["auth"])
def register(
    payload: Optional[Dict[str, Any]] = Body(None),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """Register a new user with name, email and password."""
    return auth.register(payload or {})


@router.post("/login", response_model=TokenResponse, tags=["auth"])
def login(
    payload: Optional[Dict[str, Any]] = Body(None),
    auth: AuthService = Depends(get_auth_service),
):
    """Exchange email and password for a bearer token valid for one hour."""
    return {"token": auth.login(payload or {})}


# Task endpoints (bearer token required)

@router.get("/tasks", response_model=List[TaskResponse], tags=["tasks"])
def list_tasks(
    user_id: str = Depends(get_current_user_id),
    completed: Optional[str] = None,
    service: TaskService = Depends(get_task_service),
) -> List[Task]:
    """List the caller's tasks, optionally filtered by ``completed=true|false``."""
    return service.list(user_id, completed=_parse_completed(completed))


@router.post("/tasks", response_model=Task, status_code=201, tags=["tasks"])
def create_task(
    user_id: str = Depends(get_current_user_id),
    payload: Any = Depends(task_create_payload),
    service: TaskService = Depends(get_task_service),
) -> Task:
    """Create a task owned by the caller. ``title`` is required."""
    return service.create(user_id, payload if payload is not None else {})


@router.get("/tasks/{task_id}", response_model=TaskDetailResponse, tags=["tasks"])
def get_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
) -> Task:
    """Fetch one task by id."""
    return service.get_by_id(task_id)


@router.patch("/tasks/{task_id}", response_model=Task, tags=["tasks"])
def update_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    payload: Any = Depends(task_update_payload),
    service: TaskService = Depends(get_task_service),
) -> Task:
    """Change any of title, description and completed on one of the caller's tasks."""
    return service.update(user_id, task_id, payload if payload is not None else {})


@router.delete("/tasks/{task_id}", response_model=Task, tags=["tasks"])
def delete_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
) -> Task:
    """Delete one of the caller's tasks and return it."""
    return service.delete(user_id, task_id)


# Error handlers

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Body that is not a JSON object, or a malformed query/path value.
    violations = []
    for err in exc.errors():
        if err.get("type") == "json_invalid":
            # loc is ("body", <character offset>)
            violations.append(Violation("body", MALFORMED_BODY_MESSAGE))
            continue
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        violations.append(Violation(".".join(loc) or "body", err.get("msg", "Invalid value")))
    return await app_error_handler(request, ValidationError(violations))


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Database error on {request.method} {request.url.path}: {type(exc).__name__}: {exc}")
    return await app_error_handler(request, InternalError(str(exc)))


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Startup configuration; read from the environment when omitted
        engine: Pre-built SQLAlchemy engine (tests pass an in-memory one)

    Raises:
        ConfigurationError: If settings are omitted and the environment lacks JWT_SECRET
    """
    if settings is None:
        settings = load_settings()
    if engine is None:
        engine = build_engine(settings)

    init_db(engine, settings)

    app = FastAPI(
        title="coallytasks API",
        description="Task management with JWT authentication",
        version=__version__,
        docs_url="/api-docs",
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_middleware(app)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)

    app.include_router(router)
    logger.info(f"Application ready (database: {engine.url.render_as_string(hide_password=True)})")
    return app
