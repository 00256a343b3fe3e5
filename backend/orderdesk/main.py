# backend/orderdesk/main.py
"""
HTTP surface of the order service.

    POST /submit   accept a storefront order (JSON or form post)
    GET  /status   uptime + whether the ledger is enabled
    GET  /health   liveness incl. database connectivity

Integration handles (storage, mailer, optional ledger) are built once in
create_app() and kept on app.state; the workflow receives them explicitly.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from orderdesk.config import Settings
from orderdesk.errors import PersistenceError, ValidationError
from orderdesk.logging_config import configure_logging
from orderdesk.notifications import Mailer, NotificationFanout, create_ledger
from orderdesk.storage import InMemoryStorage, SQLAlchemyStorage, Storage
from orderdesk.utils.time_utils import iso_sast
from orderdesk.validation import REQUIRED_FIELDS
from orderdesk.workflow import SubmissionWorkflow

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


# ---------- Pydantic models ----------
class SubmitResponse(BaseModel):
    success: bool = True
    message: str
    orderId: str
    googleSheetsUpdated: bool
    emailSent: bool


class ErrorResponse(BaseModel):
    success: bool = False
    message: str


class StatusResponse(BaseModel):
    uptime: float
    message: str
    environment: str
    googleSheets: bool


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str
    googleSheets: bool
    mongo: str  # "connected" | "disconnected"


# Distinguishes "build from settings" from an explicit None (ledger disabled).
_FROM_SETTINGS: Any = object()


def build_storage(settings: Settings) -> Storage:
    """
    Select the storage backend from settings.storage_backend.

    "inmemory" -> InMemoryStorage; anything else -> SQLAlchemyStorage.
    Construction failures propagate: the service cannot start without storage.
    """
    backend = (settings.storage_backend or "sqlalchemy").lower()
    if backend == "inmemory":
        logger.warning("Using in-memory storage; orders are lost on restart")
        return InMemoryStorage()
    if backend != "sqlalchemy":
        logger.warning("Unknown STORAGE_BACKEND %r, falling back to sqlalchemy", backend)
    try:
        return SQLAlchemyStorage(settings.database_url, use_alembic=settings.use_alembic)
    except Exception:
        logger.exception("Database connection error")
        raise


async def _read_submission(request: Request) -> Dict[str, Any]:
    """Read a submission from a JSON body or a storefront form post."""
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        data: Dict[str, Any] = {key: form.get(key) for key in REQUIRED_FIELDS + ("pep_code",)}
        data["products"] = list(form.getlist("products")) or list(form.getlist("products[]"))
        return data
    try:
        return await request.json()
    except ValueError:
        raise ValidationError("Request body must be a JSON object.")


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[Storage] = None,
    mailer: Optional[Mailer] = None,
    ledger: Any = _FROM_SETTINGS,
    setup_logging: bool = True,
) -> FastAPI:
    """
    Build the FastAPI application and its dependencies.

    Args:
        settings: configuration; read from the environment when omitted
        storage: storage backend; selected from settings when omitted
        mailer: mail transport; built from settings when omitted
        ledger: SheetsLedger, or None to disable; built from settings when omitted
        setup_logging: install the JSON log handlers
    """
    settings = settings or Settings.from_env()
    if setup_logging:
        configure_logging(settings.log_level, settings.log_file)

    storage = storage if storage is not None else build_storage(settings)
    mailer = mailer if mailer is not None else Mailer.from_settings(settings)
    if ledger is _FROM_SETTINGS:
        ledger = create_ledger(settings)

    fanout = NotificationFanout(mailer=mailer, ledger=ledger, totals_provider=storage.product_totals)
    workflow = SubmissionWorkflow(storage=storage, fanout=fanout)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Server running on http://%s:%s in %s mode", settings.host, settings.port, settings.environment
        )
        logger.info("Google Sheets API: %s", "ENABLED" if fanout.ledger_enabled else "DISABLED")
        # Mail problems are reported here but never block startup.
        await asyncio.to_thread(mailer.verify)
        try:
            yield
        finally:
            storage.close()
            logger.info("Storage closed")

    app = FastAPI(title="Orderdesk storefront order service", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.storage = storage
    app.state.mailer = mailer
    app.state.ledger = ledger
    app.state.workflow = workflow
    app.state.started_at = time.monotonic()

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s %s", request.method, request.url.path, response.status_code,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )
        return response

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"success": False, "message": str(exc)})

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        return JSONResponse(status_code=500, content={"success": False, "message": str(exc)})

    # ---------- API Endpoints ----------
    @app.post(
        "/submit",
        response_model=SubmitResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
        summary="Submit a storefront order",
    )
    async def submit(request: Request):
        """
        Validate and persist the order, then notify the ledger and the operator.
        Succeeds once the order is saved, even if notifications fail.
        """
        raw = await _read_submission(request)
        result = await request.app.state.workflow.submit(raw)
        return SubmitResponse(
            message="Order processed successfully.",
            orderId=result.order.id,
            googleSheetsUpdated=result.fanout.ledger_updated,
            emailSent=result.fanout.email_sent,
        )

    @app.get("/status", response_model=StatusResponse, summary="Service uptime and ledger availability")
    async def status(request: Request):
        state = request.app.state
        return {
            "uptime": round(time.monotonic() - state.started_at, 3),
            "message": "Order service is running",
            "environment": state.settings.environment,
            "googleSheets": state.ledger is not None,
        }

    @app.get("/health", response_model=HealthResponse, summary="Health check incl. database connectivity")
    async def health(request: Request):
        state = request.app.state
        connected = await asyncio.to_thread(state.storage.ping)
        return {
            "status": "OK",
            "timestamp": iso_sast(),
            "environment": state.settings.environment,
            "googleSheets": state.ledger is not None,
            "mongo": "connected" if connected else "disconnected",
        }

    return app
