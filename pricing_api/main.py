# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .core.config import settings
from .routes import health, matrices, pricing, public
from .schemas.error import MATRIX_NOT_FOUND_TYPE, ErrorResponse, FieldError
from .services.matrix_store import MatrixNotFoundError

logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Broker Portal Pricing API",
    description="DSCR loan pricing and eligibility against lender rate matrices",
    version=__version__,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
)


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", str(uuid.uuid4()))


def _problem(body: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=body.status,
        content=body.model_dump(exclude_none=True),
        media_type="application/problem+json",
    )


def _field_errors(exc: RequestValidationError) -> list[FieldError]:
    """Flatten pydantic error locations, dropping the ``body``/``query`` root."""
    field_errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        field_errors.append(FieldError(field=".".join(loc) or "body", message=err["msg"]))
    return field_errors


@app.exception_handler(MatrixNotFoundError)
async def matrix_not_found_handler(request: Request, exc: MatrixNotFoundError):
    """No active matrix for the requested lender and loan program."""
    body = ErrorResponse.for_status(
        404, str(exc), instance=request.url.path, request_id=_request_id(request)
    )
    return _problem(body.model_copy(update={"type": MATRIX_NOT_FOUND_TYPE}))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    body = ErrorResponse.for_status(
        exc.status_code,
        str(exc.detail),
        instance=request.url.path,
        request_id=_request_id(request),
    )
    return _problem(body)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Reject a malformed loan scenario or query with per-field messages."""
    field_errors = _field_errors(exc)
    body = ErrorResponse.for_status(
        422,
        f"{len(field_errors)} field(s) failed validation",
        instance=request.url.path,
        request_id=_request_id(request),
        errors=field_errors,
    )
    return _problem(body)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    request_id = _request_id(request)
    logger.exception("Unhandled exception on %s (request_id=%s)", request.url.path, request_id)
    body = ErrorResponse.for_status(
        500,
        "The pricing service hit an unexpected error.",
        instance=request.url.path,
        request_id=request_id,
    )
    return _problem(body)


# Include routers
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(public.router, prefix="/api/public", tags=["public"])
app.include_router(pricing.router, prefix="/api", tags=["pricing"])
app.include_router(matrices.router, prefix="/api", tags=["matrices"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": f"Welcome to {settings.APP_NAME}"}
