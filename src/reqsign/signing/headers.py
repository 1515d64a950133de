"""Header field names shared by signers and validators."""

from __future__ import annotations

__all__ = [
    "HEADER_ACCESS_KEY",
    "HEADER_CONTENT_TYPE",
    "HEADER_SIGNATURE",
    "HEADER_TIMESTAMP",
    "DEFAULT_CONTENT_TYPE",
]

HEADER_TIMESTAMP = "X-Timestamp"
HEADER_SIGNATURE = "X-Signature"
HEADER_ACCESS_KEY = "X-Access-Key"

HEADER_CONTENT_TYPE = "Content-Type"
DEFAULT_CONTENT_TYPE = "application/x-www-form-urlencoded"
