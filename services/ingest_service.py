"""
SMS ingestion service.
Orchestrates extraction, catalog matching, transaction building and ledger import.
"""
import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from core.config import Settings, get_settings
from core.logger import setup_logger
from core.matching import match_account, match_category
from core.normalize import build_transaction
from core.schema import ExtractedTransaction
from ledger.catalog import CatalogRepository
from ledger.store import LedgerStore
from llm.client import OllamaClientWrapper
from llm.extract import extract_transaction

logger = setup_logger(__name__)


@dataclass
class IngestResult:
    """Outcome of processing one SMS."""
    parsed: ExtractedTransaction
    ignored: bool
    final_date: Optional[str] = None
    tx: Optional[Dict[str, Any]] = None
    result: Any = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the ingestion response shape."""
        body = {
            "ignored": self.ignored,
            "parsed": self.parsed.to_output(),
        }
        if not self.ignored:
            body["imported"] = {
                "finalDate": self.final_date,
                "tx": self.tx,
                "result": self.result,
            }
        return body


class IngestService:
    """Service for turning one bank SMS into at most one ledger import."""

    def __init__(
        self,
        catalog: CatalogRepository,
        client: OllamaClientWrapper,
        store: LedgerStore,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize ingestion service."""
        self.settings = settings or get_settings()
        self.catalog = catalog
        self.client = client
        self.store = store
        self.clock = clock

    async def ingest(self, sms: str) -> IngestResult:
        """
        Process one SMS end to end.

        Args:
            sms: Raw SMS text

        Returns:
            IngestResult; ignored when the model reports no completed transaction

        Raises:
            SmsLedgerException: Any stage failure, unchanged
        """
        loop = asyncio.get_event_loop()

        catalog = await self.catalog.get()

        parsed = await loop.run_in_executor(None, extract_transaction, self.client, sms, catalog)
        if not parsed.is_transaction:
            logger.info("SMS is not a completed transaction, ignoring")
            return IngestResult(parsed=parsed, ignored=True)

        account = match_account(parsed.account_label, sms, catalog.accounts)
        logger.info(f"Matched account: \"{parsed.account_label}\" -> {account.name} ({account.id})")

        category = match_category(parsed.category_label, catalog.categories)
        if parsed.category_label and category:
            logger.info(f"Matched category: \"{parsed.category_label}\" -> {category.name}")

        tx = build_transaction(
            sms,
            parsed,
            account,
            category,
            notes_prefix=self.settings.import_notes_prefix,
            tz=self.settings.timezone,
            now=self.clock() if self.clock else None,
        )
        record = tx.to_import_record(self.settings.import_id_prefix)

        result = await loop.run_in_executor(None, self.store.import_transactions, account.id, [record])
        logger.info(f"Imported transaction {record['imported_id']} into account {account.id}")

        return IngestResult(
            parsed=parsed,
            ignored=False,
            final_date=tx.date,
            tx=record,
            result=result,
        )
