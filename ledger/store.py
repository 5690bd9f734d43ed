"""
Ledger store interface and an Actual Budget HTTP adapter.
The adapter talks to an actual-http-api bridge using direct REST calls.
"""
import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests

from core.exceptions import LedgerError
from core.logger import setup_logger

logger = setup_logger(__name__)


class LedgerStore(ABC):
    """Operations the ingestion pipeline needs from the ledger."""

    @abstractmethod
    def init(self, data_dir: str, server_url: str, password: str) -> None:
        """Connect to the ledger server. Must succeed before any other call."""

    @abstractmethod
    def download_budget(self, budget_id: str, file_password: Optional[str] = None) -> None:
        """Open a budget file for subsequent calls."""

    @abstractmethod
    def get_accounts(self) -> List[Dict[str, Any]]:
        """All accounts, including closed ones."""

    @abstractmethod
    def get_categories(self) -> List[Dict[str, Any]]:
        """All categories, including hidden ones."""

    @abstractmethod
    def import_transactions(self, account_id: str, transactions: List[Dict[str, Any]]) -> Any:
        """Import records, deduplicated by their imported_id."""

    @abstractmethod
    def get_budget_month(self, month: str) -> Dict[str, Any]:
        """Budget aggregate for a YYYY-MM month."""

    @abstractmethod
    def shutdown(self) -> None:
        """Release resources. Safe to call more than once."""


class ActualHttpLedgerStore(LedgerStore):
    """Actual Budget access through the actual-http-api REST bridge."""

    def __init__(self, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self._session_factory = (lambda: session) if session is not None else requests.Session
        self.session: Optional[requests.Session] = None
        self.server_url: Optional[str] = None
        self.data_dir: Optional[str] = None
        self.budget_id: Optional[str] = None

    def _require_session(self) -> requests.Session:
        if self.session is None:
            raise LedgerError("Ledger store is not initialized")
        return self.session

    def _budget_path(self, suffix: str) -> str:
        if not self.budget_id:
            raise LedgerError("No budget downloaded")
        return f"{self.server_url}/v1/budgets/{self.budget_id}{suffix}"

    def _request(self, method: str, url: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        session = self._require_session()
        try:
            response = session.request(
                method,
                url,
                data=json.dumps(payload) if payload is not None else None,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Ledger request failed: {method} {url}: {e}")
            raise LedgerError(
                f"Failed to reach ledger server: {e}",
                details={"url": url, "error": str(e)}
            )

        if not response.ok:
            logger.error(f"Ledger returned HTTP {response.status_code} for {method} {url}")
            raise LedgerError(
                f"Ledger error {response.status_code}: {response.text}",
                details={"url": url, "status_code": response.status_code, "response_text": response.text}
            )

        try:
            body = response.json()
        except ValueError as e:
            raise LedgerError(
                f"Ledger returned invalid JSON: {e}",
                details={"url": url, "response_text": response.text[:500]}
            )
        return body.get("data", body) if isinstance(body, dict) else body

    def init(self, data_dir: str, server_url: str, password: str) -> None:
        self.data_dir = data_dir
        self.server_url = server_url.rstrip("/")
        if self.session is not None:
            self.session.close()
        self.session = self._session_factory()
        self.session.headers.update({
            "Content-Type": "application/json",
            "x-api-key": password,
        })
        logger.info(f"Ledger store initialized for {self.server_url}")

    def download_budget(self, budget_id: str, file_password: Optional[str] = None) -> None:
        session = self._require_session()
        self.budget_id = budget_id
        if file_password:
            session.headers["budget-encryption-password"] = file_password
        # Listing accounts proves the budget is reachable and decryptable
        self._request("GET", self._budget_path("/accounts"))
        logger.info(f"Budget {budget_id} opened")

    def get_accounts(self) -> List[Dict[str, Any]]:
        return self._request("GET", self._budget_path("/accounts"))

    def get_categories(self) -> List[Dict[str, Any]]:
        return self._request("GET", self._budget_path("/categories"))

    def import_transactions(self, account_id: str, transactions: List[Dict[str, Any]]) -> Any:
        return self._request(
            "POST",
            self._budget_path(f"/accounts/{account_id}/transactions/import"),
            payload={"transactions": transactions}
        )

    def get_budget_month(self, month: str) -> Dict[str, Any]:
        return self._request("GET", self._budget_path(f"/months/{month}"))

    def shutdown(self) -> None:
        if self.session is None:
            return
        self.session.close()
        self.session = None
        self.budget_id = None
        logger.info("Ledger store shut down")
