"""SHA-256 request/response signing and verification.

The signed text is ``path + canonical(params, body) + timestamp + secret``
with no separators, hashed with SHA-256 and sent as lowercase hex next to
the timestamp and the access key identifier.
"""

from __future__ import annotations

import hashlib
import hmac
import re
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from reqsign.logging import get_logger
from reqsign.signing.canonical import canonicalise
from reqsign.signing.credential import Credential
from reqsign.signing.errors import (
    AccessKeyMismatchError,
    ExpiredSignatureError,
    MissingHeaderError,
    MissingTimestampError,
    SignatureError,
    SignatureMismatchError,
    TimestampParseError,
)
from reqsign.signing.headers import HEADER_ACCESS_KEY, HEADER_SIGNATURE, HEADER_TIMESTAMP
from reqsign.signing.message import SignableMessage, as_message, decode_body, extract

if TYPE_CHECKING:
    from reqsign.settings import Settings

__all__ = [
    "SignatureBuilder",
    "SignatureResult",
    "build_signature",
    "current_timestamp",
    "hash_text",
    "parse_timestamp",
]

logger = get_logger(__name__)

# Same inputs and range as a signed 64-bit decimal parse
_TIMESTAMP_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN, _INT64_MAX = -(2**63), 2**63 - 1


@dataclass(frozen=True)
class SignatureResult:
    """Outcome of one signing operation. Never persisted."""

    final_text: str = field(repr=False)
    timestamp: str
    signature: str
    access_key_id: str

    def as_headers(self) -> dict[str, str]:
        return {
            HEADER_ACCESS_KEY: self.access_key_id,
            HEADER_TIMESTAMP: self.timestamp,
            HEADER_SIGNATURE: self.signature,
        }


def hash_text(text: str) -> str:
    """Lowercase hex SHA-256 of ``text``, byte-exact for surrogate-escaped bodies."""
    return hashlib.sha256(text.encode("utf-8", errors="surrogateescape")).hexdigest()


def current_timestamp(clock: Callable[[], float] = time.time) -> str:
    return str(int(clock()))


def parse_timestamp(value: str) -> int:
    if not _TIMESTAMP_RE.fullmatch(value):
        raise TimestampParseError(value)
    sign = -1 if value[0] == "-" else 1
    digits = value.lstrip("+-").lstrip("0") or "0"
    if len(digits) > 19:
        raise TimestampParseError(value)
    timestamp = sign * int(digits)
    if not _INT64_MIN <= timestamp <= _INT64_MAX:
        raise TimestampParseError(value)
    return timestamp


def build_signature(
    path: str,
    params: Mapping[str, str],
    body: str,
    timestamp: str,
    credential: Credential,
) -> SignatureResult:
    """Pure signing primitive shared by every sign/validate operation."""
    final_text = f"{path}{canonicalise(params, body)}{timestamp}{credential.secret_key}"
    return SignatureResult(
        final_text=final_text,
        timestamp=timestamp,
        signature=hash_text(final_text),
        access_key_id=credential.access_key_id,
    )


def _digests_equal(computed: str, supplied: str) -> bool:
    return hmac.compare_digest(
        computed.encode("ascii"),
        supplied.encode("utf-8", errors="surrogateescape"),
    )


class SignatureBuilder:
    """Signs outgoing messages and validates incoming ones for one credential.

    Stateless apart from the credential, so a single instance may be
    shared across threads.
    """

    def __init__(self, credential: Credential, *, clock: Callable[[], float] = time.time) -> None:
        self.credential = credential
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> SignatureBuilder:
        return cls(Credential.from_settings(settings))

    # ── signing ────────────────────────────────────────────────

    def sign_request(self, request: Any) -> SignatureResult:
        """Sign a request in place, setting the access key, timestamp and signature headers.

        A timestamp header already present on the request is reused.
        Extraction errors propagate unchanged and leave the headers untouched.
        """
        message = as_message(request)
        timestamp = message.get_header(HEADER_TIMESTAMP) or current_timestamp(self._clock)
        result = self._sign_message(message, timestamp)

        for name, value in result.as_headers().items():
            message.set_header(name, value)

        logger.debug("request_signed", path=message.path, timestamp=timestamp)
        return result

    def sign_response_body(self, path: str, body: bytes | str) -> SignatureResult:
        """Sign a response body for the request ``path``. Mutates nothing.

        Query parameters are not covered. The caller attaches
        ``result.as_headers()`` to the outgoing response.
        """
        text = decode_body(body) if isinstance(body, bytes) else body
        result = build_signature(path, {}, text, current_timestamp(self._clock), self.credential)
        logger.debug("response_signed", path=path, timestamp=result.timestamp)
        return result

    # ── validation ─────────────────────────────────────────────

    def validate_request(self, request: Any) -> None:
        """Raise the first failed check: timestamp presence, freshness, then signature."""
        message = as_message(request)
        try:
            self._check_request(message)
        except SignatureError as exc:
            logger.warning(
                "request_signature_rejected",
                error_code=exc.error_code,
                path=message.path,
                timestamp=message.get_header(HEADER_TIMESTAMP),
                reason=str(exc),
            )
            raise

    def validate_response(self, response: Any) -> None:
        """Raise the first failed check: header presence, access key, then signature.

        Responses are not subject to the expiry window.
        """
        message = as_message(response)
        try:
            self._check_response(message)
        except SignatureError as exc:
            logger.warning(
                "response_signature_rejected",
                error_code=exc.error_code,
                path=message.path,
                timestamp=message.get_header(HEADER_TIMESTAMP),
                reason=str(exc),
            )
            raise

    # ── internals ──────────────────────────────────────────────

    def _sign_message(self, message: SignableMessage, timestamp: str) -> SignatureResult:
        body, params = extract(message)
        return build_signature(message.path, params, body, timestamp, self.credential)

    def _check_request(self, message: SignableMessage) -> None:
        raw_timestamp = message.get_header(HEADER_TIMESTAMP)
        if not raw_timestamp:
            raise MissingTimestampError("timestamp missing in request header")
        timestamp = parse_timestamp(raw_timestamp)

        # Future timestamps are accepted; only the age is bounded.
        window = self.credential.expiry_window_seconds
        if self.credential.enforces_expiry:
            age = int(self._clock()) - timestamp
            if age > window:
                raise ExpiredSignatureError(age, window)

        result = self._sign_message(message, raw_timestamp)
        supplied = message.get_header(HEADER_SIGNATURE)
        if not supplied:
            raise SignatureMismatchError("signature missing in request header")
        if not _digests_equal(result.signature, supplied):
            raise SignatureMismatchError("signature validation failed")

    def _check_response(self, message: SignableMessage) -> None:
        body = decode_body(message.read_body())

        timestamp = message.get_header(HEADER_TIMESTAMP)
        if not timestamp:
            raise MissingHeaderError("timestamp")
        supplied = message.get_header(HEADER_SIGNATURE)
        if not supplied:
            raise MissingHeaderError("signature")
        access_key_id = message.get_header(HEADER_ACCESS_KEY)
        if not access_key_id:
            raise MissingHeaderError("access key")

        if access_key_id != self.credential.access_key_id:
            raise AccessKeyMismatchError("access key validation failed")

        result = build_signature(message.path, {}, body, timestamp, self.credential)
        if not _digests_equal(result.signature, supplied):
            raise SignatureMismatchError("signature validation failed")
