"""
Admin Module

Configuration, CLI and reporting around the vote contract.

This module provides:
- YAML-based ledger configuration
- CLI exposing every contract transaction
- Bulk vote loading from YAML files
- Markdown/HTML tally reports with bar charts
"""

__version__ = "0.1.0"
