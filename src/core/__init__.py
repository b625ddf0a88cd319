"""
Core module for cross-cutting concerns.

This module provides:
- Structured logging configuration
- Request tracing middleware
- Common utilities
"""

from core.logging import configure_logging, get_logger
from core.utils import format_amount, parse_amount

__all__ = [
    "configure_logging",
    "get_logger",
    "format_amount",
    "parse_amount",
]
