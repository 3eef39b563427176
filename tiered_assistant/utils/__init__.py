"""
Utility modules for logging, console I/O and helper functions.
"""

from .logger import setup_logger, get_logger
from .helpers import async_retry, strip_ansi, sanitize_text, extract_domain

__all__ = ["setup_logger", "get_logger", "async_retry", "strip_ansi", "sanitize_text", "extract_domain"]
