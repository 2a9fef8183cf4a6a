from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from alembic import command
from alembic.config import Config
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import ConflictError, InvalidReferenceError
from .middleware import SecurityHeadersMiddleware
from .routers import (
    admin,
    auth,
    categories,
    contacts,
    portfolio,
    posts,
    subscribers,
    system,
    tags,
    users,
)
from .seed import ensure_seed_data
from .settings import get_settings

settings = get_settings()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


def _alembic_config() -> Config:
    base_dir = Path(__file__).resolve().parent.parent
    cfg = Config(str(base_dir / "alembic.ini"))
    cfg.set_main_option("script_location", str(base_dir / "alembic"))
    cfg.attributes["configure_logger"] = False
    return cfg


def run_migrations() -> None:
    logger.info("Running Alembic migrations...")
    try:
        command.upgrade(_alembic_config(), "head")
        logger.info("run_migrations: Completed successfully.")
    except Exception as e:
        logger.error(f"run_migrations: Error occurred: {e}", exc_info=True)
        raise


def run_startup_tasks() -> None:
    if settings.auto_migrate:
        run_migrations()
    else:
        logger.info("AUTO_MIGRATE disabled, skipping migrations.")
    ensure_seed_data(settings)
    logger.info("Startup tasks completed.")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application...")
    # Server won't accept requests until these complete
    run_startup_tasks()
    logger.info("TMNG landing API ready")
    yield
    logger.info("Shutting down application...")


app = FastAPI(
    title="TMNG Landing API",
    version="1.0.0",
    description="Blog, portfolio, contact and newsletter API",
    lifespan=lifespan,
)


# ============================================================================
# ERROR ENVELOPE
# ============================================================================


def _error(
    status_code: int,
    message: str,
    errors: dict[str, list[str]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body: dict = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        # Drop the "body"/"query"/"path" prefix
        field = ".".join(loc[1:]) if len(loc) > 1 else (loc[0] if loc else "request")
        errors.setdefault(field, []).append(err.get("msg", "Invalid value"))
    return _error(status.HTTP_400_BAD_REQUEST, "Validation failed", errors)


@app.exception_handler(ConflictError)
async def conflict_exception_handler(request: Request, exc: ConflictError) -> JSONResponse:
    return _error(status.HTTP_409_CONFLICT, exc.message, {exc.field: [exc.message]})


@app.exception_handler(InvalidReferenceError)
async def invalid_reference_handler(request: Request, exc: InvalidReferenceError) -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, exc.message, {exc.field: [exc.message]})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    message = "Internal server error" if settings.is_production else str(exc) or exc.__class__.__name__
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


# ============================================================================
# MIDDLEWARE & ROUTERS
# ============================================================================

if "*" in settings.cors_origins:
    logger.warning(
        "CORS is configured to allow all origins. "
        "This is insecure for production. Set CORS_ORIGINS to specific domains."
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Requested-With"],
    max_age=600,  # Cache preflight requests for 10 minutes
)

app.add_middleware(SecurityHeadersMiddleware, environment=settings.environment)


app.include_router(system.router)
app.include_router(auth.router)
app.include_router(posts.router)
app.include_router(categories.router)
app.include_router(tags.router)
app.include_router(portfolio.router)
app.include_router(contacts.router)
app.include_router(subscribers.router)

app.include_router(admin.router)
app.include_router(posts.admin_router)
app.include_router(categories.admin_router)
app.include_router(tags.admin_router)
app.include_router(portfolio.admin_router)
app.include_router(users.router)
app.include_router(contacts.admin_router)
app.include_router(subscribers.admin_router)
