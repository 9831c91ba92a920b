"""
Unmask API Server - relationship analytics over imported message history.
"""
# ruff: noqa: S104
# S104: Development server binding (guarded by __name__ check)

import logging
import sqlite3

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.admin_router import admin_router
from api.agents_router import agents_router
from api.events_router import events_router
from api.insights_router import insights_router
from api.messages_router import messages_router
from api.response_models import Envelope, error_body
from lib import config
from lib import db as db_module
from lib.agents import AgentError
from lib.observability import (
    AccessLogMiddleware,
    CorrelationIdMiddleware,
    HealthChecker,
    HealthStatus,
    configure_logging,
)

logger = logging.getLogger(__name__)

DB_UNAVAILABLE = "Database not available"

app = FastAPI(
    title="Unmask API",
    description="Relationship intelligence over your message history",
    version="1.0.0",
)

# CORS - configurable via CORS_ORIGINS env var
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(AccessLogMiddleware)
# Added last so it wraps everything and the access log carries the request id
app.add_middleware(CorrelationIdMiddleware)

app.include_router(messages_router)
app.include_router(events_router)
app.include_router(insights_router)
app.include_router(agents_router)
app.include_router(admin_router)


# ==== Startup ====


@app.on_event("startup")
async def run_db_migrations_on_startup():
    """Configure logging and converge the schema."""
    configure_logging(level=config.LOG_LEVEL, json_format=config.LOG_JSON, log_file=config.LOG_FILE)
    logger.info("=== Unmask Startup ===")
    try:
        result = db_module.run_startup_migrations()
        if result.get("tables_created"):
            logger.info("Created tables: %s", result["tables_created"])
    except db_module.StorageUnavailable as e:
        logger.warning("DB startup check failed: %s", e)


# ==== Error envelope ====


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, str):
        content = error_body(exc.detail)
    else:
        content = error_body("Request failed", detail=jsonable_encoder(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content=error_body("Invalid request", details=jsonable_encoder(exc.errors())),
    )


@app.exception_handler(db_module.StorageUnavailable)
async def storage_unavailable_handler(request: Request, exc: db_module.StorageUnavailable):
    logger.error("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content=error_body(DB_UNAVAILABLE))


@app.exception_handler(sqlite3.OperationalError)
async def sqlite_operational_handler(request: Request, exc: sqlite3.OperationalError):
    logger.error("%s %s: database query failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content=error_body(DB_UNAVAILABLE))


@app.exception_handler(AgentError)
async def agent_error_handler(request: Request, exc: AgentError):
    logger.warning("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=502, content=error_body("Agent service unavailable"))


# ==== Health ====


@app.get("/api/health", response_model=Envelope, tags=["health"])
def health():
    """Liveness plus component checks. 503 when any component is unhealthy."""
    report = HealthChecker().run_all()
    healthy = report.status != HealthStatus.UNHEALTHY
    content = {"success": healthy, "data": report.to_dict()}
    if not healthy:
        content["error"] = "Service unhealthy"
    return JSONResponse(status_code=200 if healthy else 503, content=content)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8420)
