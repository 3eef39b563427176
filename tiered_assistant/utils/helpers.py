"""
Helper utilities for the Tiered Assistant.

Contains common utility functions used across the application.
"""

import asyncio
import re
from functools import wraps
from typing import Callable, TypeVar
from urllib.parse import urlparse

from rich.text import Text

T = TypeVar("T")


def async_retry(
    max_retries: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: tuple = (Exception,)
) -> Callable:
    """
    Decorator for async functions with retry logic.

    Args:
        max_retries: Maximum number of retry attempts (0 = single attempt)
        delay: Initial delay between retries in seconds
        backoff: Multiplier for delay after each retry
        exceptions: Tuple of exceptions to catch and retry

    Returns:
        Decorated function with retry logic
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            current_delay = delay
            last_exception = None

            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e
                    if attempt < max_retries:
                        await asyncio.sleep(current_delay)
                        current_delay *= backoff

            raise last_exception

        return wrapper
    return decorator


def strip_ansi(text: str) -> str:
    """
    Remove terminal color and escape sequences from text.

    Args:
        text: Possibly styled text

    Returns:
        Plain text
    """
    if not text:
        return ""
    # A bare carriage return ends a line instead of overwriting it
    return "\n".join(Text.from_ansi(line).plain for line in text.splitlines())


def sanitize_text(text: str) -> str:
    """
    Sanitize text returned by external lookups.

    Args:
        text: Input text to sanitize

    Returns:
        Sanitized text string
    """
    if not text:
        return ""

    # Remove null bytes
    text = text.replace("\x00", "")

    # Normalize whitespace
    text = re.sub(r"\s+", " ", text)

    # Remove control characters
    text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]", "", text)

    return text.strip()


def extract_domain(url: str) -> str:
    """
    Extract the domain from a URL.

    Args:
        url: Full URL string

    Returns:
        Domain string (e.g., "reuters.com")
    """
    try:
        parsed = urlparse(url)
        domain = parsed.netloc.lower()

        # Remove www. prefix
        if domain.startswith("www."):
            domain = domain[4:]

        return domain
    except ValueError:
        return ""


def truncate_text(text: str, max_length: int = 500, suffix: str = "...") -> str:
    """
    Truncate text to maximum length, preserving word boundaries.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to append if truncated

    Returns:
        Truncated text string
    """
    if len(text) <= max_length:
        return text

    truncated = text[:max_length - len(suffix)]

    # Find last space to avoid cutting words
    last_space = truncated.rfind(" ")
    if last_space > max_length // 2:
        truncated = truncated[:last_space]

    return truncated + suffix
