"""
api/main.py -- FastAPI application entry point for the forum backend.

Run with:      uvicorn asgi:app --reload

Middleware stack:
  1. CORSMiddleware -- adds CORS headers for allowed browser origins
  2. log_requests   -- one access-log line per request with latency

Lifespan builds the object graph once and parks it on app.state:
  UserStore + ForumStore  (persistence)
  AuthorizationGuard      (shared by every guarded service)
  UserService, AnswerService, QuestionService, ProfileService
Shutdown disposes both stores.

Error handling: services raise ForumError subclasses; forum_error_handler
renders them in the ErrorResponse envelope with the status the error class
carries. Routes never build error responses for domain failures themselves.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.answer import router as answer_router
from api.routes.v1.profile import router as profile_router
from api.routes.v1.question import router as question_router
from api.routes.v1.user import router as user_router
from auth.guard import AuthorizationGuard
from auth.service import UserService
from auth.store import UserStore
from core.config import get_settings
from core.errors import ForumError
from forum.services import AnswerService, ProfileService, QuestionService
from forum.store import ForumStore

__version__ = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("forum.api")


def wire_services(app: FastAPI, user_store: UserStore, forum_store: ForumStore) -> None:
    """Attach stores, the shared guard, and the services to app.state.

    Used by the lifespan below and by the test lifespan in tests/conftest.py,
    so both run the same object graph.
    """
    guard = AuthorizationGuard(user_store)
    app.state.user_store = user_store
    app.state.forum_store = forum_store
    app.state.guard = guard
    app.state.user_service = UserService(user_store)
    app.state.answer_service = AnswerService(guard, forum_store)
    app.state.question_service = QuestionService(guard, forum_store)
    app.state.profile_service = ProfileService(guard, user_store)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the stores on startup, dispose them on shutdown."""
    settings = get_settings()
    logger.info("Forum API starting up")
    wire_services(app, UserStore(settings.database_url), ForumStore(settings.database_url))
    logger.info("Stores initialized")

    yield

    app.state.forum_store.close()
    app.state.user_store.close()
    logger.info("Forum API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Forum API",
    description="Questions, answers, and user accounts behind a token-based authorization gate.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["access-token"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(user_router, prefix="/api/v1", tags=["User"])
app.include_router(profile_router, prefix="/api/v1", tags=["Profile"])
app.include_router(question_router, prefix="/api/v1", tags=["Question"])
app.include_router(answer_router, prefix="/api/v1", tags=["Answer"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


@app.exception_handler(ForumError)
async def forum_error_handler(request: Request, exc: ForumError) -> JSONResponse:
    """Render an expected domain failure with its own status and code."""
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.code)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=ErrorDetail(code=exc.code, message=exc.message)).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or path params fail validation."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=str(exc.errors()),
            )
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    When detail is already a structured dict, use it directly as the error
    field rather than stringifying it.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state. No authentication.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return liveness, version, and a database round-trip check."""
    components = {"app": "ok"}
    try:
        request.app.state.user_store.has_users()
        components["database"] = "ok"
    except SQLAlchemyError:
        logger.exception("Health check database probe failed")
        components["database"] = "error"
    status = "healthy" if components["database"] == "ok" else "degraded"
    return HealthResponse(status=status, version=__version__, components=components)
