"""
Ledger Module

World State substrate for the vote contract.

This module provides:
- Ordered key/value World State interface with range scans
- In-memory and SQLite-backed World State implementations
- Transaction contexts with commit/rollback semantics
"""

__version__ = "0.1.0"
