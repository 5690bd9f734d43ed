"""
Core processing modules for SMS transaction ingestion.

This package contains:
- config: Application configuration and settings
- exceptions: Custom exception classes
- logger: Logging configuration
- matching: Account and category label resolution
- normalize: Ledger-ready transaction building
- parsing: JSON recovery from model text
- schema: Pydantic models and extraction validation
"""
