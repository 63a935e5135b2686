"""Mini README: Tests for environment-driven settings."""

from __future__ import annotations

from grantships.configuration import GrantShipsSettings


def test_settings_read_prefixed_environment(monkeypatch) -> None:
    """Settings come from GRANTSHIPS_ variables; a blank key means no key."""

    monkeypatch.setenv("GRANTSHIPS_FEE_PERCENT", "7")
    monkeypatch.setenv("GRANTSHIPS_CHAIN_BACKEND", "simulated")
    monkeypatch.setenv("GRANTSHIPS_TREASURY_PRIVATE_KEY", "   ")

    settings = GrantShipsSettings()

    assert settings.fee_percent == 7
    assert settings.chain_backend == "simulated"
    assert settings.treasury_private_key is None
    assert not settings.payouts_enabled


def test_private_key_enables_payouts() -> None:
    """A private key enables payouts and never appears in repr."""

    settings = GrantShipsSettings(treasury_private_key="0x" + "11" * 32)

    assert settings.payouts_enabled
    assert "11" not in repr(settings.treasury_private_key)
