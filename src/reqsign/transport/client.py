"""httpx authentication hook that signs requests and checks signed responses."""

from __future__ import annotations

from collections.abc import Generator
from typing import TYPE_CHECKING

import httpx

from reqsign.signing.builder import SignatureBuilder

if TYPE_CHECKING:
    from reqsign.settings import Settings

__all__ = ["SignatureAuth"]


class SignatureAuth(httpx.Auth):
    """Attach the access key, timestamp and signature headers to every request.

    Usable with both ``httpx.Client`` and ``httpx.AsyncClient``. When
    ``verify_responses`` is set, each response must carry a valid body
    signature or ``send()`` raises the corresponding ``SignatureError``.
    """

    requires_request_body = True

    def __init__(self, builder: SignatureBuilder, *, verify_responses: bool = True) -> None:
        self.builder = builder
        self.verify_responses = verify_responses
        self.requires_response_body = verify_responses

    @classmethod
    def from_settings(cls, settings: Settings) -> SignatureAuth:
        return cls(
            SignatureBuilder.from_settings(settings),
            verify_responses=settings.verify_responses,
        )

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        self.builder.sign_request(request)
        response = yield request
        if self.verify_responses:
            self.builder.validate_response(response)
