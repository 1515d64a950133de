"""Structured logging configuration with secret redaction."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from reqsign.settings import Settings

__all__ = [
    "REDACTED_KEYS",
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "redact_secrets",
]

# Event keys that may carry key material or the signing input
REDACTED_KEYS = frozenset({"secret_key", "final_text", "signing_input"})


def redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Drop secret-bearing keys from every log entry."""
    for key in REDACTED_KEYS & event_dict.keys():
        del event_dict[key]
    return event_dict


def configure_logging(*, json_output: bool = True, level: str = "INFO") -> None:
    """Configure structlog for signers and validators.

    Args:
        json_output: True for JSON (production), False for console (dev).
        level: Log level string.
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        redact_secrets,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging_from_settings(settings: Settings) -> None:
    """Apply ``REQSIGN_LOG_LEVEL`` and ``REQSIGN_JSON_LOGS``."""
    configure_logging(json_output=settings.json_logs, level=settings.log_level)


def get_logger(*args: Any, **kwargs: Any) -> structlog.BoundLogger:
    """Get a bound logger with optional initial context."""
    return structlog.get_logger(*args, **kwargs)  # type: ignore[no-any-return]
