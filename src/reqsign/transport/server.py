"""FastAPI/Starlette wiring: request guard, response signing and error mapping."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse

from reqsign.logging import configure_logging_from_settings
from reqsign.signing.errors import ExtractionError, SignatureError, UnsupportedContentTypeError
from reqsign.signing.message import StarletteRequestMessage, request_path

if TYPE_CHECKING:
    from starlette.types import ASGIApp

    from reqsign.settings import Settings
    from reqsign.signing.builder import SignatureBuilder

__all__ = [
    "ResponseSigningMiddleware",
    "SignatureGuard",
    "install_signature_auth",
    "signature_error_handler",
    "signature_error_payload",
    "status_for_error",
]


class SignatureGuard:
    """FastAPI dependency rejecting requests without a valid, fresh signature.

    Usage::

        guard = SignatureGuard(builder)

        @app.post("/v1/photos/generate", dependencies=[Depends(guard)])
        async def generate(...): ...

    The body is awaited once; Starlette caches it for the handler.
    """

    def __init__(self, builder: SignatureBuilder) -> None:
        self.builder = builder

    async def __call__(self, request: Request) -> None:
        body = await request.body()
        self.builder.validate_request(StarletteRequestMessage(request, body))


class ResponseSigningMiddleware(BaseHTTPMiddleware):
    """Buffer every response body, sign it and attach the signature headers."""

    def __init__(self, app: ASGIApp, builder: SignatureBuilder) -> None:
        super().__init__(app)
        self.builder = builder

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        body = b"".join([chunk async for chunk in response.body_iterator])  # type: ignore[attr-defined]

        result = self.builder.sign_response_body(request_path(request), body)
        for name, value in result.as_headers().items():
            response.headers[name] = value

        async def _replay() -> AsyncIterator[bytes]:
            yield body

        response.body_iterator = _replay()  # type: ignore[attr-defined]
        return response


def status_for_error(exc: SignatureError) -> int:
    if isinstance(exc, UnsupportedContentTypeError):
        return 415
    if isinstance(exc, ExtractionError):
        return 400
    return 401


def signature_error_payload(exc: SignatureError) -> dict[str, Any]:
    return {"error_code": exc.error_code, "message": str(exc)}


async def signature_error_handler(request: Request, exc: SignatureError) -> JSONResponse:
    return JSONResponse(status_code=status_for_error(exc), content=signature_error_payload(exc))


def install_signature_auth(
    app: FastAPI,
    builder: SignatureBuilder,
    *,
    sign_responses: bool = True,
    settings: Settings | None = None,
) -> SignatureGuard:
    """Register the error handler (and optionally response signing) on ``app``.

    When ``settings`` is given, logging is configured from it as well.
    Returns the guard to attach to protected routes with ``Depends``.
    """
    if settings is not None:
        configure_logging_from_settings(settings)
    app.add_exception_handler(SignatureError, signature_error_handler)  # type: ignore[arg-type]
    if sign_responses:
        app.add_middleware(ResponseSigningMiddleware, builder=builder)
    return SignatureGuard(builder)
