import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from creator_crm.api.router import api_router
from creator_crm.config import settings
from creator_crm.core.observability import (
    error_response,
    global_exception_handler,
    request_logging_middleware,
)
from creator_crm.services.errors import (
    DuplicateSubmitError,
    IdentityRequiredError,
    InvoiceNumberConflictError,
    RecordNotFoundError,
)

api_prefix = (
    settings.api_prefix
    if settings.api_prefix.startswith("/")
    else f"/{settings.api_prefix}"
    if settings.api_prefix
    else ""
)

logger = logging.getLogger("creator_crm")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

app = FastAPI(
    title=settings.app_name,
    docs_url="/docs" if settings.docs_enabled else None,
    redoc_url="/redoc" if settings.docs_enabled else None,
    openapi_url=(f"{api_prefix}/openapi.json" if api_prefix else "/openapi.json")
    if settings.docs_enabled
    else None,
)

# Expose logger for middleware without creating circular imports.
app.state.logger = logger

app.add_exception_handler(Exception, global_exception_handler)


@app.exception_handler(RecordNotFoundError)
async def record_not_found_handler(request: Request, exc: RecordNotFoundError):
    return error_response(request, status_code=404, detail=str(exc), code="NOT_FOUND")


@app.exception_handler(DuplicateSubmitError)
async def duplicate_submit_handler(request: Request, exc: DuplicateSubmitError):
    logger.info("duplicate_submit_rejected", extra={"busy_key": exc.busy_key})
    return error_response(
        request, status_code=409, detail="Action already in progress", code="DUPLICATE_SUBMIT"
    )


@app.exception_handler(InvoiceNumberConflictError)
async def invoice_number_conflict_handler(request: Request, exc: InvoiceNumberConflictError):
    logger.info(
        "invoice_number_conflict",
        extra={"invoice_number": exc.invoice_number, "reason": exc.reason},
    )
    return error_response(
        request,
        status_code=409,
        detail=f"Invoice number {exc.invoice_number} is already in use",
        code=exc.reason.upper(),
    )


@app.exception_handler(IdentityRequiredError)
async def identity_required_handler(request: Request, exc: IdentityRequiredError):
    return error_response(request, status_code=401, detail="Not authenticated", code="UNAUTHENTICATED")


# Request-level logging + request correlation id.
app.middleware("http")(request_logging_middleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=api_prefix)


def _run_migrations_if_configured() -> None:
    if not bool(getattr(settings, "run_migrations_on_start", False)):
        return

    # Avoid running migrations during tests.
    if (settings.environment or "").lower() == "test":
        return

    # Import lazily to keep import graph light for non-migration startups.
    from alembic import command
    from alembic.config import Config
    from sqlalchemy import create_engine, text

    backend_root = Path(__file__).resolve().parents[1]
    alembic_cfg = Config(str(backend_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(backend_root / "alembic"))

    try:
        db_engine = create_engine(settings.database_url, future=True)
        with db_engine.connect() as connection:
            dialect = str(connection.dialect.name or "").lower()

            # Best-effort: avoid concurrent migrations across multiple instances.
            lock_acquired = True
            if dialect == "postgresql":
                try:
                    lock_acquired = bool(
                        connection.execute(
                            text("select pg_try_advisory_lock(:k)"), {"k": 50417723}
                        ).scalar()
                    )
                except Exception as e:
                    logger.warning("migrations_lock_failed", extra={"error": str(e)})
                    lock_acquired = True

            if not lock_acquired:
                logger.info("migrations_skipped_lock_not_acquired")
                return

            try:
                alembic_cfg.attributes["connection"] = connection
                command.upgrade(alembic_cfg, "head")
                logger.info("migrations_applied")
            finally:
                if dialect == "postgresql":
                    connection.execute(text("select pg_advisory_unlock(:k)"), {"k": 50417723})
                    connection.commit()
    except Exception as e:
        # Don't crash the API if migrations fail; surface the issue via logs.
        logger.error("migrations_failed error=%s", str(e))


@app.on_event("startup")
def on_startup() -> None:
    _run_migrations_if_configured()
    logger.info(
        "app_started",
        extra={"environment": settings.environment, "version": settings.build_version},
    )
