"""Canonical parameter/body serialisation for request signing."""

from __future__ import annotations

from collections.abc import Mapping

__all__ = ["canonicalise"]


def canonicalise(params: Mapping[str, str], body: str = "") -> str:
    """Produce the canonical signing text: sorted ``key=value`` pairs, then the body.

    Args:
        params: Single-valued parameters (query and/or form). May be empty.
        body: Raw body text, empty when the body was decoded into ``params``.

    Returns:
        Pairs concatenated in ascending key order with no delimiter between
        them, followed immediately by ``body``. Nothing is URL-encoded.
    """
    return "".join(f"{key}={params[key]}" for key in sorted(params)) + body
