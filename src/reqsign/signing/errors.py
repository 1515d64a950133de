"""Typed errors raised while signing or validating HTTP messages."""

from __future__ import annotations

__all__ = [
    "SignatureError",
    "ExtractionError",
    "ContentTypeParseError",
    "UnsupportedContentTypeError",
    "FormParseError",
    "BodyReadError",
    "MissingTimestampError",
    "TimestampParseError",
    "ExpiredSignatureError",
    "MissingHeaderError",
    "AccessKeyMismatchError",
    "SignatureMismatchError",
]


class SignatureError(Exception):
    """Base class for every signing/validation failure."""

    error_code = "SIGNATURE_ERROR"


class ExtractionError(SignatureError):
    """The message's parameters or body could not be extracted."""


class ContentTypeParseError(ExtractionError):
    error_code = "CONTENT_TYPE_INVALID"

    def __init__(self, content_type: str, reason: str = "") -> None:
        self.content_type = content_type
        detail = f": {reason}" if reason else ""
        super().__init__(f"failed to parse content type {content_type!r}{detail}")


class UnsupportedContentTypeError(ExtractionError):
    error_code = "CONTENT_TYPE_UNSUPPORTED"

    def __init__(self, content_type: str) -> None:
        self.content_type = content_type
        super().__init__(f"unsupported content type: {content_type}")


class FormParseError(ExtractionError):
    error_code = "FORM_INVALID"


class BodyReadError(ExtractionError):
    error_code = "BODY_UNREADABLE"


class MissingTimestampError(SignatureError):
    error_code = "TIMESTAMP_MISSING"


class TimestampParseError(SignatureError):
    error_code = "TIMESTAMP_INVALID"

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"timestamp is not a decimal integer: {value!r}")


class ExpiredSignatureError(SignatureError):
    error_code = "SIGNATURE_EXPIRED"

    def __init__(self, age_seconds: int, window_seconds: int) -> None:
        self.age_seconds = age_seconds
        self.window_seconds = window_seconds
        super().__init__(f"timestamp expired: {age_seconds}s old, window is {window_seconds}s")


class MissingHeaderError(SignatureError):
    error_code = "HEADER_MISSING"

    def __init__(self, header: str) -> None:
        self.header = header
        super().__init__(f"{header} missing in response header")


class AccessKeyMismatchError(SignatureError):
    error_code = "ACCESS_KEY_INVALID"


class SignatureMismatchError(SignatureError):
    error_code = "SIGNATURE_INVALID"
