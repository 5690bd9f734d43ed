"""
Ledger store access.

This package contains:
- catalog: Cached account/category catalog with explicit lifecycle
- store: Ledger store interface and Actual Budget HTTP adapter
"""
