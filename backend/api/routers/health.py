"""Service banner and health-check router."""
import time as _t
from datetime import datetime as _dt, timezone as _tz

from fastapi import APIRouter

from ..dependencies import get_db, envelope, _logger

router = APIRouter()


def _now_iso() -> str:
    return _dt.now(_tz.utc).isoformat()


@router.get("/", tags=["Health"], summary="Service banner", description="Service name, version and endpoint map.")
def root():
    from ..main import _API_VERSION
    return envelope(
        {
            "service": "Staff Timesheet API",
            "version": _API_VERSION,
            "endpoints": {
                "health": "/health",
                "staff": "/api/staff",
                "departments": "/api/departments",
                "clients": "/api/clients",
                "projects": "/api/projects",
                "timesheets": "/api/timesheets",
            },
        },
        message="Staff Timesheet API is running",
    )


@router.get("/health", tags=["Health"], summary="Health check")
def health():
    """Process liveness only; does not touch the database."""
    return envelope({"status": "healthy", "timestamp": _now_iso()})


@router.get(
    "/health/detailed",
    tags=["Health"],
    summary="Detailed health check",
    description="Adds uptime, database status and database ping time.",
)
def health_detailed():
    from ..main import _APP_START_TIME
    db_status = "connected"
    records = None
    started = _t.perf_counter()
    try:
        db = get_db()
        db.ping()
        ping_ms = round((_t.perf_counter() - started) * 1000, 2)
        records = db.get_stats()
    except Exception as exc:
        _logger.warning("Health check database ping failed: %s", exc)
        db_status = "disconnected"
        ping_ms = None
    return envelope({
        "status": "healthy" if db_status == "connected" else "degraded",
        "timestamp": _now_iso(),
        "uptime_seconds": round(_t.time() - _APP_START_TIME, 1),
        "database": {"status": db_status, "response_time_ms": ping_ms, "records": records},
    })
