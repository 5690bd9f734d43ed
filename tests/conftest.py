"""
Shared fixtures and fakes.

Required settings are provided through the environment for every test so
modules that call get_settings() never read a developer's real .env.
"""
import json
from typing import Any, Dict, List, Optional

import pytest

from core.config import reset_settings


REQUIRED_ENV = {
    "OLLAMA_URL": "http://ollama.test:11434",
    "ACTUAL_SERVER_URL": "http://actual.test:5007",
    "ACTUAL_PASSWORD": "secret",
    "ACTUAL_BUDGET_ID": "budget-1",
}

OPTIONAL_ENV = (
    "APP_NAME", "HOST", "PORT", "LOG_LEVEL", "API_TOKEN", "OLLAMA_MODEL",
    "OLLAMA_TIMEOUT", "OLLAMA_MAX_ATTEMPTS", "LOG_OLLAMA_RAW", "ACTUAL_FILE_PASSWORD",
    "IMPORT_NOTES_PREFIX", "IMPORT_ID_PREFIX", "TIMEZONE",
)


@pytest.fixture(autouse=True)
def _settings_env(monkeypatch, tmp_path):
    """Provide required env vars and a fresh settings singleton per test."""
    for key, value in REQUIRED_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv("ACTUAL_DATADIR", str(tmp_path / "actual-data"))
    for key in OPTIONAL_ENV:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield
    reset_settings()


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, text: str = ""):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Records requests and replays queued responses."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []
        self.headers: Dict[str, str] = {}
        self.closed = False

    def _next(self, **call):
        self.calls.append(call)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url, headers=None, data=None, timeout=None):
        return self._next(method="POST", url=url, data=data)

    def request(self, method, url, data=None, timeout=None):
        return self._next(method=method, url=url, data=data)

    def close(self):
        self.closed = True


class FakeLedgerStore:
    """In-memory ledger store that deduplicates imports by imported_id."""

    def __init__(self, accounts=None, categories=None, fail_on: Optional[str] = None):
        self.accounts = accounts if accounts is not None else [
            {"id": "a1", "name": "HSBC ****0001", "closed": False},
            {"id": "a2", "name": "ICICI ****2979", "closed": False},
            {"id": "a3", "name": "Old Savings 5555", "closed": True},
        ]
        self.categories = categories if categories is not None else [
            {"id": "c1", "name": "Shopping", "hidden": False},
            {"id": "c2", "name": "Food & Dining", "hidden": False},
            {"id": "c3", "name": "Secret", "hidden": True},
            {"id": "c4", "name": "", "hidden": False},
        ]
        self.fail_on = fail_on
        self.init_calls = 0
        self.shutdown_calls = 0
        self.imported: Dict[str, Dict[str, Any]] = {}
        self.import_calls: List[Any] = []
        self.months: Dict[str, Dict[str, Any]] = {}

    def _maybe_fail(self, op):
        if self.fail_on == op:
            raise RuntimeError(f"{op} failed")

    def init(self, data_dir, server_url, password):
        self.init_calls += 1
        self._maybe_fail("init")

    def download_budget(self, budget_id, file_password=None):
        self._maybe_fail("download_budget")

    def get_accounts(self):
        self._maybe_fail("get_accounts")
        return self.accounts

    def get_categories(self):
        self._maybe_fail("get_categories")
        return self.categories

    def import_transactions(self, account_id, transactions):
        self._maybe_fail("import_transactions")
        self.import_calls.append((account_id, transactions))
        added, updated = [], []
        for tx in transactions:
            if tx["imported_id"] in self.imported:
                updated.append(tx["imported_id"])
            else:
                self.imported[tx["imported_id"]] = tx
                added.append(tx["imported_id"])
        return {"added": added, "updated": updated, "errors": []}

    def get_budget_month(self, month):
        return self.months.get(month, {})

    def shutdown(self):
        self.shutdown_calls += 1


class FakeChatClient:
    """Returns canned model text instead of calling Ollama."""

    def __init__(self, content: str = "", error: Optional[Exception] = None):
        self.content = content
        self.error = error
        self.prompts: List[str] = []

    def chat(self, prompt, response_schema=None, temperature=0.0):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.content


@pytest.fixture
def fake_store():
    return FakeLedgerStore()
