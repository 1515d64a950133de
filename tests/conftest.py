"""Shared fixtures for unit tests."""

from __future__ import annotations

import httpx
import pytest

from reqsign.signing.builder import SignatureBuilder
from reqsign.signing.credential import Credential

NOW = 1_700_000_000


@pytest.fixture()
def credential() -> Credential:
    return Credential(access_key_id="ak", secret_key="sk", expiry_window_seconds=3600)


@pytest.fixture()
def builder(credential: Credential) -> SignatureBuilder:
    """Signer/validator whose clock is frozen at NOW."""
    return SignatureBuilder(credential, clock=lambda: float(NOW))


@pytest.fixture()
def form_request() -> httpx.Request:
    """POST with a query string and an untyped (form by default) body."""
    return httpx.Request(
        "POST",
        "https://api.open-platform.com/v1/photos/generate?data=a",
        content=b"a=b&d=c",
    )
