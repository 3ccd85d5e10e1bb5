# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

from db import get_db_service
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .routes import conditions, health, leads
from .schemas.error import ErrorResponse, RequirementErrorResponse
from .services.condition import DocumentRequiredError
from .services.persistence import PersistenceError, PersistenceTimeoutError
from .services.stage_rules import StatusChangeBlockedError

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup/shutdown lifecycle."""
    logger.info("Starting %s", settings.APP_NAME)
    yield
    await get_db_service().dispose()


app = FastAPI(
    title="Lead Pipeline API",
    description="Mortgage lead pipeline: stage gating, transitions, financials and conditions",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

_HTTP_STATUS_TITLES: dict[int, str] = {
    400: "Bad Request",
    404: "Not Found",
    409: "Conflict",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", str(uuid.uuid4()))


def _build_error(
    status_code: int,
    detail: str,
    request_id: str,
    model: type[ErrorResponse] = ErrorResponse,
    **extra,
) -> ErrorResponse:
    return model(
        type="about:blank",
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        request_id=request_id,
        **extra,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    body = _build_error(exc.status_code, str(exc.detail), _request_id(request))
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to RFC 7807 Problem Details."""
    body = _build_error(422, str(exc.errors()), _request_id(request))
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(DocumentRequiredError)
async def document_required_handler(request: Request, exc: DocumentRequiredError):
    body = _build_error(
        409,
        str(exc),
        _request_id(request),
        RequirementErrorResponse,
        missing_fields=["document_id"],
        action_label="Attach Document",
    )
    return JSONResponse(status_code=409, content=body.model_dump())


@app.exception_handler(StatusChangeBlockedError)
async def status_change_blocked_handler(request: Request, exc: StatusChangeBlockedError):
    body = _build_error(
        409,
        str(exc),
        _request_id(request),
        RequirementErrorResponse,
        missing_fields=exc.missing_fields,
        action_label=exc.rule.action_label,
    )
    return JSONResponse(status_code=409, content=body.model_dump())


@app.exception_handler(PersistenceTimeoutError)
async def persistence_timeout_handler(request: Request, exc: PersistenceTimeoutError):
    body = _build_error(504, "The change may or may not have been saved.", _request_id(request))
    return JSONResponse(status_code=504, content=body.model_dump())


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    body = _build_error(503, "The change could not be saved.", _request_id(request))
    return JSONResponse(status_code=503, content=body.model_dump())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    request_id = _request_id(request)
    logger.exception("Unhandled exception (request_id=%s)", request_id)
    body = _build_error(500, "An unexpected error occurred.", request_id)
    return JSONResponse(status_code=500, content=body.model_dump())


# Include routers
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(leads.router, prefix="/api/leads", tags=["leads"])
app.include_router(conditions.router, prefix="/api/conditions", tags=["conditions"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": f"Welcome to {settings.APP_NAME}"}
