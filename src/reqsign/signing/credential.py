"""Shared-secret credential held by a signer or validator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reqsign.settings import Settings

__all__ = ["Credential"]


@dataclass(frozen=True)
class Credential:
    """Immutable key material. ``expiry_window_seconds <= 0`` disables expiry checks."""

    access_key_id: str
    secret_key: str = field(repr=False)
    expiry_window_seconds: int = 0

    @property
    def enforces_expiry(self) -> bool:
        return self.expiry_window_seconds > 0

    @classmethod
    def from_settings(cls, settings: Settings) -> Credential:
        """Build a credential from settings, refusing empty keys (fail-closed)."""
        if not settings.access_key_id or not settings.secret_key:
            raise ValueError("REQSIGN_ACCESS_KEY_ID and REQSIGN_SECRET_KEY must both be set")
        return cls(
            access_key_id=settings.access_key_id,
            secret_key=settings.secret_key,
            expiry_window_seconds=settings.expiry_window_seconds,
        )
