"""
Contract Module

Vote contract over the ledger World State.

This module provides:
- Vote schema and canonical, key-order independent encoding
- Existence-guarded register/read/update/delete operations
- Full-range scan, bulk delete and per-candidate tally
- Named transaction registry for host dispatch
"""

__version__ = "0.1.0"
