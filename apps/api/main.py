"""
Intake API - FastAPI application entry point.
"""
from __future__ import annotations

import logging
import os
import sys
import time
import uuid

# Add project root to path
sys.path.append(os.getcwd())

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from packages.db.database import init_db


def _parse_csv_env(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    return [value.strip() for value in raw.split(",") if value.strip()]


def _parse_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("intake")

app = FastAPI(
    title="Providerloop Intake API",
    description="Patient identity extraction and chain automation for practice intake",
    version="0.1.0",
)

cors_allow_origins = _parse_csv_env(
    "CORS_ALLOW_ORIGINS",
    [
        "http://localhost:5000",
        "http://127.0.0.1:5000",
    ],
)
cors_allow_credentials = _parse_bool_env("CORS_ALLOW_CREDENTIALS", True)
audit_logging_enabled = _parse_bool_env("AUDIT_LOGGING", True)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allow_origins,
    allow_credentials=cors_allow_credentials,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-User-Id", "X-Request-Id"],
)


@app.middleware("http")
async def request_audit_middleware(request: Request, call_next):
    started = time.perf_counter()
    request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex
    user_id = request.headers.get("X-User-Id", "anonymous")

    response = await call_next(request)
    response.headers["X-Request-Id"] = request_id

    if audit_logging_enabled:
        duration_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "request_audit request_id=%s method=%s path=%s status=%s duration_ms=%s user_id=%s",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            user_id,
        )

    return response


@app.on_event("startup")
def startup():
    """Initialize database tables on startup."""
    logger.info("Initializing database...")
    init_db()
    logger.info("Database initialized")


# Register routes
from apps.api.routes.automation import router as automation_router  # noqa: E402
from apps.api.routes.identity import router as identity_router  # noqa: E402

app.include_router(identity_router)
app.include_router(automation_router)


@app.get("/health")
def health():
    return {"status": "ok", "version": "0.1.0"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("apps.api.main:app", host="0.0.0.0", port=8000, reload=True)
