"""
SBRI Risk API

REST API serving company profiles, filings, judgments and a risk score
derived from the latest accounts and sector failure rates.

Run with: uvicorn sbri_api.main:app --port 8001 --reload
"""
import os
import sqlite3
import time as _time_module
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.gzip import GZipMiddleware

# Configure structured logging FIRST (before any logger calls)
from .middleware.structlog_config import configure as configure_logging
configure_logging()

import structlog
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from . import dependencies
from .cache import app_cache
from .limiter import limiter
from .middleware import RequestLoggingMiddleware, register_error_handlers
from .routers import companies_router, sectors_router
from .schema import missing_tables

logger = structlog.get_logger("sbri.api")

# Track server start time for uptime reporting
_server_start_time = _time_module.time()

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


def _startup_checks():
    """Verify store state at startup. Problems are logged, never fatal."""
    checks = []

    if not dependencies.verify_database_exists():
        logger.error("startup_check_failed", check="database_exists", path=str(dependencies.DB_PATH))
        checks.append("DATABASE MISSING")
    else:
        try:
            with dependencies.get_db() as conn:
                missing = missing_tables(conn)
                if missing:
                    checks.append(f"missing tables: {', '.join(missing)}")
                else:
                    # Inverted cut-points would make "medium" unreachable
                    cursor = conn.execute(
                        """
                        SELECT sic_code, region, high, medium FROM risk_thresholds
                        WHERE high IS NOT NULL AND medium IS NOT NULL AND high < medium
                        """
                    )
                    for row in cursor.fetchall():
                        checks.append(
                            f"thresholds inverted for {row['sic_code']}/{row['region'] or '*'}: "
                            f"high={row['high']} medium={row['medium']}"
                        )
                    count = conn.execute("SELECT COUNT(*) FROM profiles").fetchone()[0]
                    logger.info("startup_check", profile_count=count)
        except sqlite3.Error as e:
            checks.append(f"database error: {e}")

    if checks:
        for c in checks:
            logger.warning("startup_check_warning", issue=c)
    else:
        logger.info("startup_checks_passed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    _startup_checks()
    yield
    app_cache.invalidate()
    logger.info("shutting_down")


# API metadata
API_TITLE = "SBRI Risk API"
API_DESCRIPTION = """
Company risk profiles for small business lending.

### Core Endpoints

- **Companies** - Profile, latest accounts, filings, director changes, CCJs, insolvency notices
- **Scored** - Risk score (0-100), level and reasons for a company
- **Sectors** - Average margin and failure rate per SIC code and region
"""
API_VERSION = "1.0.0"

_docs_enabled = os.environ.get("ENABLE_DOCS", "true").lower() == "true"
app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs" if _docs_enabled else None,
    redoc_url="/redoc" if _docs_enabled else None,
    lifespan=lifespan,
)

# Register global error handlers
register_error_handlers(app)

# Rate limiting: per-route limits via decorator, default limit via middleware.
# /health and /metrics are exempt.
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Request logging middleware (must be added before CORS/GZip so it wraps them)
app.add_middleware(RequestLoggingMiddleware)

cors_origins = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", ",".join(DEFAULT_CORS_ORIGINS)).split(",")
    if origin.strip()
]
if "*" in cors_origins:
    logger.warning("cors_wildcard_rejected", fallback=DEFAULT_CORS_ORIGINS)
    cors_origins = DEFAULT_CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Accept-Language"],
)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    if request.headers.get("x-forwarded-proto") == "https":
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


# GZip compression for responses > 1KB
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.include_router(companies_router, prefix="/api/v1")
app.include_router(sectors_router, prefix="/api/v1")


@app.get("/", tags=["root"])
async def root():
    """API root - returns basic info and links."""
    return {
        "name": API_TITLE,
        "version": API_VERSION,
        "docs": "/docs",
        "endpoints": {
            "companies_search": "/api/v1/companies/search?name={name}",
            "company": "/api/v1/companies/{company_number}",
            "company_full": "/api/v1/companies/{company_number}/full",
            "company_scored": "/api/v1/companies/{company_number}/scored",
            "company_filings": "/api/v1/companies/{company_number}/filings",
            "company_director_changes": "/api/v1/companies/{company_number}/director-changes",
            "company_ccjs": "/api/v1/companies/{company_number}/ccjs",
            "company_insolvency": "/api/v1/companies/{company_number}/insolvency",
            "company_sector_benchmark": "/api/v1/companies/{company_number}/sector-benchmark",
            "sector": "/api/v1/sectors/{sic_code}",
        },
    }


@app.get("/health", tags=["root"])
@limiter.exempt
def health_check():
    """Health check with database status and uptime. 503 when the store is unreachable."""
    uptime_seconds = round(_time_module.time() - _server_start_time)

    db_info = {"status": "not found"}
    db_reachable = False
    if dependencies.verify_database_exists():
        try:
            with dependencies.get_db() as conn:
                profile_count = conn.execute("SELECT COUNT(*) FROM profiles").fetchone()[0]
            db_info = {"status": "connected", "profile_count": profile_count}
            db_reachable = True
        except sqlite3.Error as e:
            logger.warning("health_database_error", error=str(e))
            db_info = {"status": "error"}

    overall_status = "healthy" if db_reachable else "unavailable"
    return JSONResponse(
        status_code=200 if db_reachable else 503,
        content={
            "status": overall_status,
            "version": API_VERSION,
            "database": db_info,
            "uptime_seconds": uptime_seconds,
        },
    )


@app.get("/metrics", tags=["root"])
@limiter.exempt
async def metrics():
    """Application metrics for monitoring."""
    return {
        "uptime_seconds": round(_time_module.time() - _server_start_time),
        "cache": app_cache.stats(),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
