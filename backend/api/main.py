"""FastAPI application for the Staff Timesheet service."""
import os
import sys
import time as _startup_time_module
import traceback
from contextlib import asynccontextmanager
from dotenv import load_dotenv

_APP_START_TIME = _startup_time_module.time()

# Load .env file if present
load_dotenv(os.path.join(os.path.dirname(__file__), '..', '.env'))

# Add parent dir to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.middleware.gzip import GZipMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from slowapi import _rate_limit_exceeded_handler  # noqa: E402
from slowapi.errors import RateLimitExceeded  # noqa: E402
from sqlalchemy.exc import IntegrityError  # noqa: E402
from starlette.exceptions import HTTPException as StarletteHTTPException  # noqa: E402

from tslib.database import dispose_engines  # noqa: E402
from tslib.errors import ApiError  # noqa: E402
from tslib.schema import create_schema  # noqa: E402

from . import config  # noqa: E402
from .dependencies import _logger, get_db, limiter  # noqa: E402

# ── Config ──────────────────────────────────────────────────────
DATABASE_URL = config.database_url()

_API_VERSION = "1.0.0"

_OPENAPI_TAGS = [
    {"name": "Health", "description": "Service banner and health checks"},
    {"name": "Staff", "description": "Staff members and their accounts"},
    {"name": "Departments", "description": "Departments and their members"},
    {"name": "Clients", "description": "Clients and their projects"},
    {"name": "Projects", "description": "Projects, staff breakdowns and timesheets"},
    {"name": "Timesheets", "description": "Timesheet entries, hours summaries and export"},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    if DATABASE_URL:
        try:
            db = get_db()
            if config.AUTO_INIT_DB:
                create_schema(db.engine)
                _logger.info("Database schema ensured")
            db.ping()
            _logger.info("Database connected successfully")
        except Exception as _exc:
            _logger.error("Database connection failed at startup: %s", _exc)
    else:
        _logger.warning("No database configured; set DATABASE_URL or the DB_* variables")
    _logger.info("Timesheet API started (env=%s, port=%d)", config.ENVIRONMENT, config.PORT)
    yield
    dispose_engines()
    _logger.info("Timesheet API shutting down, database pool closed")


app = FastAPI(
    lifespan=lifespan,
    title="Staff Timesheet API",
    description=(
        "REST API for staff timesheets.\n\n"
        "Staff log work entries against clients and projects; hours are derived from "
        "check-in and check-out times and can be summarised per staff member, "
        "department, project or client.\n\n"
        "Every response uses the envelope `{status, data, count?, message?}`."
    ),
    version=_API_VERSION,
    openapi_tags=_OPENAPI_TAGS,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials='*' not in config.CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def security_headers_middleware(request: Request, call_next):
    """Add security headers to all responses."""
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["X-XSS-Protection"] = "1; mode=block"
    response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
    response.headers["Cross-Origin-Opener-Policy"] = "same-origin"
    response.headers["Cross-Origin-Resource-Policy"] = "same-origin"
    if not config.IS_DEVELOPMENT:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """Log every request as structured JSON with timing info and request-ID."""
    import time as _t
    import uuid as _uuid
    import json as _json_mod
    # Generate a short unique request ID for correlating log entries
    req_id = _uuid.uuid4().hex[:8]
    start = _t.time()
    response = await call_next(request)
    duration_ms = round((_t.time() - start) * 1000)
    entry = {
        "req_id": req_id,
        "method": request.method,
        "path": request.url.path,
        "status": response.status_code,
        "duration_ms": duration_ms,
        "ip": request.client.host if request.client else '-',
    }
    _logger.info(_json_mod.dumps(entry, ensure_ascii=False))
    response.headers["X-Request-ID"] = req_id
    return response


# ── Error envelope ──────────────────────────────────────────────

def _error_response(status_code: int, message: str, errors=None, exc: Exception = None) -> JSONResponse:
    content = {"status": "error", "statusCode": status_code, "message": message}
    if errors:
        content["errors"] = errors
    if exc is not None and config.IS_DEVELOPMENT:
        content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    if not exc.is_operational:
        _logger.error("Non-operational error: %s %s | %s", request.method, request.url.path, exc.message)
    return _error_response(exc.status_code, exc.message, exc=exc)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Translate pydantic validation errors into the field/message list."""
    _TYPE_MSGS = {
        "missing": "Field is required",
        "int_parsing": "Must be an integer",
        "int_type": "Must be an integer",
        "greater_than": "Must be a positive integer",
        "greater_than_equal": "Must be a positive integer",
        "string_type": "Must be a string",
        "string_too_short": "Value is too short",
        "string_too_long": "Value is too long",
        "json_invalid": "Request body is not valid JSON",
    }
    errors = []
    for e in exc.errors():
        field = ".".join(str(loc) for loc in e.get("loc", []) if loc not in ("body", "query", "path"))
        etype = e.get("type", "")
        msg = _TYPE_MSGS.get(etype, e.get("msg", "Invalid value"))
        errors.append({"field": field or "body", "message": msg})
    return _error_response(400, "Validation failed", errors=errors)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return _error_response(404, f"Route not found: {request.method} {request.url.path}")
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    _logger.warning("Integrity violation: %s %s | %s", request.method, request.url.path, exc.orig)
    return _error_response(409, "Request conflicts with existing data", exc=exc)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch unhandled exceptions, log with details, return sanitized 500."""
    _logger.error(
        "Unhandled exception: %s %s | %s | %s",
        request.method, request.url.path,
        type(exc).__name__,
        traceback.format_exc().splitlines()[-1],
    )
    return _error_response(500, "Internal Server Error", exc=exc)


# ── Include routers ─────────────────────────────────────────────
from .routers import health, staff, departments, clients, projects, timesheets  # noqa: E402

app.include_router(health.router)
app.include_router(staff.router)
app.include_router(departments.router)
app.include_router(clients.router)
app.include_router(projects.router)
app.include_router(timesheets.router)


def run():
    """Console entry point: serve the app with uvicorn."""
    import uvicorn
    uvicorn.run("api.main:app", host="0.0.0.0", port=config.PORT, reload=config.IS_DEVELOPMENT)


if __name__ == "__main__":
    run()
