"""
Ollama chat client using direct REST API calls.
Assembles model text from single-object or NDJSON streamed responses.
"""
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import requests
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from core.config import Settings, get_settings
from core.exceptions import ConfigurationError, GatewayError
from core.logger import setup_logger

logger = setup_logger(__name__)

RAW_LOG_LIMIT = 2000


class ResponseFormat(str, Enum):
    """Shape of an inference response body."""
    SINGLE = "single"
    STREAM = "stream"


@dataclass
class ChatResponse:
    """Inference response after format detection."""
    format: ResponseFormat
    document: Optional[Any] = None
    fragments: List[Dict[str, Any]] = field(default_factory=list)


def detect_response_format(body: str) -> ChatResponse:
    """
    Classify a response body as one JSON document or a stream of fragments.

    Args:
        body: Raw response text

    Returns:
        ChatResponse carrying either the document or the parsed fragments
    """
    try:
        return ChatResponse(format=ResponseFormat.SINGLE, document=json.loads(body))
    except json.JSONDecodeError:
        pass

    fragments = []
    for line in body.split("\n"):
        if not line.strip():
            continue
        try:
            chunk = json.loads(line)
        except json.JSONDecodeError:
            logger.debug(f"Skipping unparseable stream line: {line[:100]}")
            continue
        if isinstance(chunk, dict):
            fragments.append(chunk)
    return ChatResponse(format=ResponseFormat.STREAM, fragments=fragments)


def _message_content(obj: Dict[str, Any]) -> Any:
    message = obj.get("message")
    if isinstance(message, dict):
        return message.get("content")
    return None


def assemble_content(response: ChatResponse) -> str:
    """
    Assemble model text from a detected response.

    Args:
        response: Output of detect_response_format

    Returns:
        Assembled content text

    Raises:
        GatewayError: If no content can be assembled
    """
    if response.format == ResponseFormat.SINGLE:
        document = response.document
        if not isinstance(document, dict):
            raise GatewayError(
                "Ollama returned a non-object response",
                details={"type": type(document).__name__}
            )
        content = _message_content(document)
        if isinstance(content, str):
            return content
        if isinstance(content, (dict, list)):
            return json.dumps(content)
        raise GatewayError(
            "Ollama response has no message content",
            details={"keys": list(document.keys()), "error": document.get("error")}
        )

    assembled = ""
    for chunk in response.fragments:
        part = _message_content(chunk)
        if isinstance(part, str):
            assembled += part
        if chunk.get("done") is True:
            break

    if not assembled:
        raise GatewayError(
            "Failed to assemble model output from NDJSON stream",
            details={"fragments": len(response.fragments)}
        )
    return assembled


def create_response_schema() -> Dict[str, Any]:
    """
    JSON schema hint for the extraction output.

    Returns:
        JSON schema dictionary
    """
    return {
        "type": "object",
        "properties": {
            "amount": {"type": ["number", "null"]},
            "description": {"type": ["string", "null"]},
            "date": {"type": ["string", "null"]},
            "account": {"type": ["string", "null"]},
            "category": {"type": ["string", "null"]},
        },
        "required": ["amount", "description", "date", "account", "category"],
    }


class OllamaClientWrapper:
    """Wrapper for the Ollama chat REST API."""

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        """Initialize REST API client."""
        settings = settings or get_settings()
        if not settings.ollama_url:
            raise ConfigurationError(
                "OLLAMA_URL environment variable not set",
                details={"required_key": "OLLAMA_URL"}
            )

        self.chat_url = f"{settings.ollama_url.rstrip('/')}/api/chat"
        self.model = settings.ollama_model
        self.timeout = settings.ollama_timeout
        self.max_attempts = settings.ollama_max_attempts
        self.log_raw = settings.log_ollama_raw
        self.retry_wait = wait_exponential(multiplier=1, min=2, max=10)
        self.session = session or requests.Session()

        logger.info(f"Initialized Ollama client with model: {self.model}, url: {self.chat_url}")

    def _post(self, payload: Dict[str, Any]) -> requests.Response:
        return self.session.post(
            self.chat_url,
            headers={"Content-Type": "application/json"},
            data=json.dumps(payload),
            timeout=self.timeout
        )

    def chat(
        self,
        prompt: str,
        response_schema: Optional[Dict[str, Any]] = None,
        temperature: float = 0.0,
    ) -> str:
        """
        Send a single-message chat request and return the assembled text.

        Args:
            prompt: Rendered user prompt
            response_schema: JSON schema passed as the format hint
            temperature: Sampling temperature

        Returns:
            Assembled model content

        Raises:
            GatewayError: On transport failure, non-success status or empty content
        """
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "options": {"temperature": temperature},
            "format": response_schema or create_response_schema(),
            "stream": False,
        }

        retryer = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.retry_wait,
            retry=retry_if_exception_type((requests.exceptions.ConnectionError, requests.exceptions.Timeout)),
            reraise=True
        )

        try:
            response = retryer(self._post, payload)
        except requests.exceptions.Timeout as e:
            logger.error(f"Ollama request timeout after {self.timeout}s: {e}")
            raise GatewayError(
                f"Ollama request timeout after {self.timeout}s",
                details={"url": self.chat_url, "timeout": self.timeout}
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Ollama request failed: {e}")
            raise GatewayError(
                f"Failed to connect to Ollama: {e}",
                details={"url": self.chat_url, "error": str(e)}
            )

        body = response.text
        if not response.ok:
            logger.error(f"Ollama returned HTTP {response.status_code}")
            raise GatewayError(
                f"Ollama error {response.status_code}: {body}",
                details={"status_code": response.status_code, "response_text": body}
            )

        detected = detect_response_format(body)
        if detected.format == ResponseFormat.STREAM and self.log_raw:
            logger.info(f"Ollama NDJSON raw body (first {RAW_LOG_LIMIT} chars):\n{body[:RAW_LOG_LIMIT]}")

        return assemble_content(detected)


# Singleton client instance
_client: Optional[OllamaClientWrapper] = None


def get_client() -> OllamaClientWrapper:
    """
    Get or create Ollama client singleton.

    Returns:
        Ollama client wrapper instance
    """
    global _client
    if _client is None:
        _client = OllamaClientWrapper()
    return _client
