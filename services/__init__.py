"""
Service layer for business logic.

This package contains the SMS ingestion pipeline and the
monthly budget summary.
"""
