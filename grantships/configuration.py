"""Mini README: Centralised configuration for Grant Ships.

Structure:
    * GrantShipsSettings - pydantic-settings model read from ``GRANTSHIPS_*``.
    * get_settings - cached accessor shared by the CLI and the web factory.

Usage:
    ``get_settings()`` validates environment variables (and an optional
    ``.env`` file) once per process. The treasury private key is optional;
    without it the platform still accepts funding and decisions but refuses
    to distribute.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GrantShipsSettings(BaseSettings):
    """Runtime configuration for the Grant Ships service."""

    model_config = SettingsConfigDict(
        env_prefix="GRANTSHIPS_",
        env_file=".env",
        case_sensitive=False,
    )

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the HTTP service to bind to.",
    )
    interface_port: int = Field(
        3000,
        description="Port the HTTP service exposes.",
        ge=1,
        le=65535,
    )
    network_name: str = Field("Base", description="Display name of the settlement chain.")
    chain_backend: str = Field(
        "rpc",
        description="Chain gateway identifier: 'rpc' for a JSON-RPC node, 'simulated' for demos.",
    )
    rpc_url: str = Field(
        "https://mainnet.base.org",
        description="JSON-RPC endpoint used to verify funding and submit payouts.",
    )
    rpc_timeout_seconds: float = Field(30.0, gt=0)
    treasury_address: str = Field(
        "0xccD7200024A8B5708d381168ec2dB0DC587af83F",
        description="Address that must receive funding transactions.",
    )
    treasury_private_key: Optional[SecretStr] = Field(
        None,
        description="Signing key for payouts. Leave unset to disable distribution.",
    )
    fee_percent: int = Field(5, ge=0, le=100, description="Platform fee retained per payout.")
    default_duration_days: int = Field(30, gt=0)
    allowlist_enabled: bool = Field(True)
    allowlist_url: str = Field("https://www.owockibot.xyz/api/whitelist")
    allowlist_ttl_seconds: float = Field(300.0, gt=0)

    @field_validator("treasury_private_key", mode="before")
    @classmethod
    def _strip_key(cls, value: Optional[str]) -> Optional[str]:
        """Treat blank keys as missing so payouts stay disabled."""

        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @property
    def payouts_enabled(self) -> bool:
        return self.treasury_private_key is not None


@lru_cache()
def get_settings() -> GrantShipsSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return GrantShipsSettings()
