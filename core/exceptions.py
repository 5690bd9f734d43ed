"""
Custom exceptions for the SMS ingestion pipeline.
"""
from typing import Any, Dict, Optional


class SmsLedgerException(Exception):
    """Base exception for all SMS ledger ingestion errors."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception.
        
        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class GatewayError(SmsLedgerException):
    """Raised when the inference service fails or returns no usable content."""
    pass


class ExtractionError(SmsLedgerException):
    """Raised when no JSON object can be recovered from model output."""
    pass


class ValidationError(SmsLedgerException):
    """Raised when model output violates the extraction schema."""
    pass


class MatchError(SmsLedgerException):
    """Raised when an account label cannot be resolved against the catalog."""
    pass


class LedgerError(SmsLedgerException):
    """Raised when the ledger store call fails."""
    pass


class ConfigurationError(SmsLedgerException):
    """Raised when configuration is invalid."""
    pass
