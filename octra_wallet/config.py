from __future__ import annotations

"""
Configuration loader for the wallet and the relay.

- Reads environment variables (optionally from `.env`): via pydantic-settings.
- Exposes cached `get_settings()` / `get_relay_settings()` accessors.

Wallet environment variables:
    WALLET_RPC (str, default "https://octra.network"): endpoint base URL
    WALLET_ADDRESS (str): the account address
    WALLET_PRIVATE_KEY (base64, secret): 32-byte Ed25519 seed
    WALLET_USE_PROXY (bool, default False): route calls through the relay
    WALLET_PROXY_URL (str): relay base URL (required with USE_PROXY)
    WALLET_TIMEOUT (float, default 10): per-call timeout, seconds
    WALLET_NONCE_FAIL_OPEN (bool, default True): treat a failed nonce fetch as 0
    WALLET_LOG_LEVEL (str, default "WARNING")
    WALLET_LOG_FORMAT ("console" | "json", default "console")

Relay environment variables:
    RELAY_UPSTREAM_URL (str, default "https://octra.network")
    RELAY_TIMEOUT (float, default 30)
    RELAY_HOST / RELAY_PORT (default 127.0.0.1:8787)
    RELAY_LOG_LEVEL (str, default "INFO")
    RELAY_LOG_FORMAT ("console" | "json", default "json")
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .rpc.http import DEFAULT_RPC_URL, EndpointConfig
from .types import Account

LogFormat = Literal["console", "json"]


def _strip_slash(v: str) -> str:
    return v.strip().rstrip("/")


class WalletSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WALLET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    rpc: str = Field(default=DEFAULT_RPC_URL, description="Remote endpoint base URL.")
    address: str = Field(default="", description="Account address (oct...).")
    private_key: SecretStr = Field(default=SecretStr(""), description="Base64 Ed25519 seed.")
    use_proxy: bool = False
    proxy_url: str = ""
    timeout: float = Field(default=10.0, gt=0)
    nonce_fail_open: bool = True
    log_level: str = "WARNING"
    log_format: LogFormat = "console"

    @field_validator("rpc", "proxy_url")
    @classmethod
    def _normalize_url(cls, v: str) -> str:
        return _strip_slash(v)

    @field_validator("address")
    @classmethod
    def _strip_address(cls, v: str) -> str:
        return v.strip()

    @model_validator(mode="after")
    def _check_proxy(self) -> "WalletSettings":
        if self.use_proxy and not self.proxy_url:
            raise ValueError("WALLET_PROXY_URL is required when WALLET_USE_PROXY is on")
        return self

    def account(self) -> Account:
        """Build the frozen Account; raises InvalidAddress / InvalidSeed."""
        return Account.from_b64(self.address, self.private_key.get_secret_value())

    def endpoint_config(self) -> EndpointConfig:
        return EndpointConfig(
            rpc_url=self.rpc,
            use_proxy=self.use_proxy,
            proxy_url=self.proxy_url,
            timeout_s=self.timeout,
        )


class RelaySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    upstream_url: str = DEFAULT_RPC_URL
    timeout: float = Field(default=30.0, gt=0)
    host: str = "127.0.0.1"
    port: int = Field(default=8787, ge=1, le=65535)
    log_level: str = "INFO"
    log_format: LogFormat = "json"

    @field_validator("upstream_url")
    @classmethod
    def _normalize_url(cls, v: str) -> str:
        return _strip_slash(v)


@lru_cache(maxsize=1)
def get_settings() -> WalletSettings:
    return WalletSettings()


@lru_cache(maxsize=1)
def get_relay_settings() -> RelaySettings:
    return RelaySettings()


__all__ = [
    "WalletSettings",
    "RelaySettings",
    "get_settings",
    "get_relay_settings",
]
