"""
FastAPI routes for SMS ingestion and budget summary.
Thin HTTP layer over the ingestion and budget services.
"""
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse

from core.config import get_settings
from core.exceptions import SmsLedgerException
from core.logger import setup_logger
from ledger.catalog import CatalogRepository
from ledger.store import ActualHttpLedgerStore, LedgerStore
from llm.client import get_client
from services.budget_service import BudgetService
from services.ingest_service import IngestService

logger = setup_logger(__name__)

# Service instances, created on first use
_store: Optional[LedgerStore] = None
_catalog: Optional[CatalogRepository] = None


def get_store() -> LedgerStore:
    global _store
    if _store is None:
        _store = ActualHttpLedgerStore()
    return _store


def get_catalog() -> CatalogRepository:
    global _catalog
    if _catalog is None:
        settings = get_settings()
        _catalog = CatalogRepository(
            get_store(),
            data_dir=settings.actual_data_dir,
            server_url=settings.actual_server_url,
            password=settings.actual_password,
            budget_id=settings.actual_budget_id,
            file_password=settings.actual_file_password,
        )
    return _catalog


def get_ingest_service() -> IngestService:
    return IngestService(get_catalog(), get_client(), get_store())


def get_budget_service() -> BudgetService:
    return BudgetService(get_catalog(), get_store())


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if _store is not None:
        try:
            _store.shutdown()
        except Exception as e:
            logger.warning(f"Ledger shutdown failed: {e}")


app = FastAPI(
    title="SMS Ledger Ingestion",
    description="Extract bank SMS transactions and import them into Actual Budget",
    version="1.0.0",
    lifespan=lifespan,
)


def error_response(status_code: int, message: str, details: Optional[Dict[str, Any]] = None) -> JSONResponse:
    content: Dict[str, Any] = {"ok": False, "error": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


class Unauthorized(Exception):
    pass


@app.exception_handler(Unauthorized)
async def unauthorized_handler(request: Request, exc: Unauthorized):
    return error_response(401, "unauthorized")


def require_auth(
    x_api_token: Optional[str] = Header(default=None),
    authorization: Optional[str] = Header(default=None),
) -> None:
    """
    Check the shared API token when one is configured.

    Accepts either `x-api-token: <token>` or `Authorization: Bearer <token>`.
    """
    expected = get_settings().api_token
    if not expected:
        return
    token = x_api_token
    if not token and authorization:
        token = authorization.replace("Bearer ", "", 1)
    if token != expected:
        raise Unauthorized()


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"ok": True}


@app.post("/ingest", dependencies=[Depends(require_auth)])
async def ingest(request: Request, service: IngestService = Depends(get_ingest_service)):
    """
    Parse one SMS and import it when it is a completed transaction.

    Returns:
        {ok, ignored, parsed} or {ok, ignored, parsed, imported}
    """
    try:
        body = await request.json()
    except ValueError:
        body = None
    sms = body.get("sms") if isinstance(body, dict) else None
    if not sms or not isinstance(sms, str):
        return error_response(400, "missing sms string")

    try:
        outcome = await service.ingest(sms)
    except SmsLedgerException as e:
        logger.error(f"Ingestion failed: {e.message}")
        return error_response(500, e.message, e.details)
    except Exception as e:
        logger.error(f"Ingestion failed with unexpected error: {e}", exc_info=True)
        return error_response(500, str(e))

    return {"ok": True, **outcome.to_dict()}


@app.get("/budget", dependencies=[Depends(require_auth)])
async def budget(service: BudgetService = Depends(get_budget_service)):
    """Current month budget summary."""
    try:
        summary = await service.current_month()
    except SmsLedgerException as e:
        logger.error(f"Budget summary failed: {e.message}")
        return error_response(500, e.message, e.details)
    except Exception as e:
        logger.error(f"Budget summary failed with unexpected error: {e}", exc_info=True)
        return error_response(500, str(e))

    return {"ok": True, **summary}
