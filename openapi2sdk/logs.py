"""Logging helpers."""

import logging
from typing import Dict, Mapping

_REDACTED = "***REDACTED***"
_SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key"}


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def redact_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Copy of ``headers`` with credential values masked, for log output."""
    return {
        key: _REDACTED if key.lower() in _SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }
