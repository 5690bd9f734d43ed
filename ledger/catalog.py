"""
In-memory catalog of active accounts and visible categories.

Lifecycle: UNINITIALIZED -> READY on the first successful load; any load
failure shuts the ledger store down, clears the catalog and moves to FAILED,
which the next get() treats like UNINITIALIZED. Concurrent cold-start
callers share a single load attempt.
"""
import asyncio
from enum import Enum
from pathlib import Path
from typing import Optional

from core.exceptions import LedgerError
from core.logger import setup_logger
from core.schema import Account, Catalog, Category
from ledger.store import LedgerStore

logger = setup_logger(__name__)


class CatalogState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"


class CatalogRepository:
    """Lazily loaded, wholesale-invalidated view of the ledger catalog."""

    def __init__(
        self,
        store: LedgerStore,
        data_dir: str,
        server_url: str,
        password: str,
        budget_id: str,
        file_password: Optional[str] = None,
    ):
        self.store = store
        self.data_dir = data_dir
        self.server_url = server_url
        self.password = password
        self.budget_id = budget_id
        self.file_password = file_password

        self.state = CatalogState.UNINITIALIZED
        self.last_error: Optional[BaseException] = None
        self._catalog: Optional[Catalog] = None
        self._lock = asyncio.Lock()
        self._load_attempts = 0

    @property
    def is_ready(self) -> bool:
        return self.state == CatalogState.READY and self._catalog is not None

    async def get(self) -> Catalog:
        """
        Return the catalog, loading it first if needed.

        Returns:
            Current Catalog

        Raises:
            LedgerError: If loading fails (or any store error, unchanged)
        """
        if self.is_ready:
            return self._catalog

        attempt = self._load_attempts
        async with self._lock:
            # Another caller may have finished loading while we waited
            if self.is_ready:
                return self._catalog
            # Callers queued behind a failed attempt share its error
            if self.state == CatalogState.FAILED and self._load_attempts != attempt:
                raise self.last_error
            return await self._load()

    async def refresh(self) -> Catalog:
        """Discard the current catalog and load it again."""
        async with self._lock:
            self.invalidate()
            return await self._load()

    def invalidate(self) -> None:
        """Drop the cached catalog so the next get() reloads."""
        self._catalog = None
        self.state = CatalogState.UNINITIALIZED

    async def _load(self) -> Catalog:
        self._load_attempts += 1
        loop = asyncio.get_event_loop()
        try:
            catalog = await loop.run_in_executor(None, self._load_sync)
        except Exception as e:
            logger.error(f"Catalog initialization failed: {e}")
            await loop.run_in_executor(None, self._safe_shutdown)
            self._catalog = None
            self.state = CatalogState.FAILED
            self.last_error = e
            raise

        self._catalog = catalog
        self.state = CatalogState.READY
        self.last_error = None
        logger.info(
            f"Catalog ready: {len(catalog.accounts)} accounts, "
            f"{len(catalog.categories)} categories"
        )
        return catalog

    def _load_sync(self) -> Catalog:
        Path(self.data_dir).mkdir(parents=True, exist_ok=True)

        self.store.init(self.data_dir, self.server_url, self.password)
        self.store.download_budget(self.budget_id, self.file_password)

        accounts = [Account.model_validate(a) for a in self.store.get_accounts()]
        active = [a for a in accounts if not a.closed]
        if not active:
            raise LedgerError(
                "No active accounts found in Actual Budget",
                details={"total_accounts": len(accounts)}
            )

        categories = [Category.model_validate(c) for c in self.store.get_categories()]
        visible = [c for c in categories if not c.hidden and c.name]

        return Catalog(accounts=active, categories=visible)

    def _safe_shutdown(self) -> None:
        try:
            self.store.shutdown()
        except Exception as e:
            logger.warning(f"Ledger shutdown after failed initialization also failed: {e}")
