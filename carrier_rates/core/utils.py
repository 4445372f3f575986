"""
Core Utilities

Shared helpers used across the package: log setup and log-safe
rendering of carrier responses.
"""
import logging
import re
from typing import Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Patterns to redact before a carrier payload reaches the logs
_REDACTIONS = [
    (r'(Bearer|Basic)\s+[A-Za-z0-9\-._~+/]+=*', r'\1 [REDACTED]'),
    (r'("access_token"\s*:\s*")[^"]*(")', r'\1[REDACTED]\2'),
    (r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b', '[EMAIL]'),
]


def configure_logging(level: Union[str, int] = "INFO") -> None:
    """Configure root logging for scripts and services embedding the package."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


def sanitize_for_logging(text: str, max_length: int = 500) -> str:
    """
    Remove credentials and contact details from text for safe logging.

    Args:
        text: Text that may contain tokens or PII
        max_length: Maximum length of result

    Returns:
        Sanitized text safe for logging
    """
    if not text:
        return ""

    sanitized = text[:max_length]
    for pattern, replacement in _REDACTIONS:
        sanitized = re.sub(pattern, replacement, sanitized)

    return sanitized
