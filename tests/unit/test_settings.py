"""Tests for environment-driven settings and credential construction."""

from __future__ import annotations

import pytest

from reqsign.settings import Settings
from reqsign.signing.builder import SignatureBuilder
from reqsign.signing.credential import Credential


def test_defaults() -> None:
    settings = Settings()
    assert settings.expiry_window_seconds == 3600
    assert settings.verify_responses is True


def test_reads_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REQSIGN_ACCESS_KEY_ID", "env-ak")
    monkeypatch.setenv("REQSIGN_SECRET_KEY", "env-sk")
    monkeypatch.setenv("REQSIGN_EXPIRY_WINDOW_SECONDS", "0")

    builder = SignatureBuilder.from_settings(Settings())

    assert builder.credential == Credential("env-ak", "env-sk", 0)
    assert not builder.credential.enforces_expiry


@pytest.mark.parametrize(("ak", "sk"), [("", "sk"), ("ak", ""), ("", "")])
def test_empty_keys_fail_closed(ak: str, sk: str) -> None:
    with pytest.raises(ValueError, match="must both be set"):
        Credential.from_settings(Settings(access_key_id=ak, secret_key=sk))
