"""
Unit tests for custom exceptions.
"""
from core.exceptions import (
    SmsLedgerException,
    GatewayError,
    ExtractionError,
    ValidationError,
    MatchError,
    LedgerError,
    ConfigurationError,
)


def test_base_exception():
    """Test base exception class."""
    exc = SmsLedgerException("Test error", details={"key": "value"})
    assert str(exc) == "Test error"
    assert exc.message == "Test error"
    assert exc.details == {"key": "value"}


def test_exception_hierarchy():
    """Test exception inheritance."""
    assert issubclass(GatewayError, SmsLedgerException)
    assert issubclass(ExtractionError, SmsLedgerException)
    assert issubclass(ValidationError, SmsLedgerException)
    assert issubclass(MatchError, SmsLedgerException)
    assert issubclass(LedgerError, SmsLedgerException)
    assert issubclass(ConfigurationError, SmsLedgerException)


def test_exception_with_details():
    """Test exception with details dictionary."""
    details = {"label": "HDFC", "candidates": ["HSBC ****0001"]}
    exc = MatchError("No match", details=details)
    assert exc.message == "No match"
    assert exc.details["label"] == "HDFC"
    assert exc.details["candidates"] == ["HSBC ****0001"]


def test_exception_without_details():
    """Test exception without details."""
    exc = GatewayError("Ollama unreachable")
    assert exc.message == "Ollama unreachable"
    assert exc.details == {}
