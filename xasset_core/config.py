"""
TOML-based configuration for the XAsset client.

Loads settings from a TOML file and/or environment variables.
Environment variables take precedence over file values.

Usage:
    from xasset_core.config import load_config
    cfg = load_config("xasset.toml")
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib  # type: ignore[import]
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[import,no-redef]

from xasset_core.errors import InvalidInput
from xasset_core.obfuscator import ObfuscationSecret


@dataclass
class CredentialsConfig:
    """
    Caller credentials.

    ``secret_access_key`` doubles as the field-obfuscation secret; it is
    never used as an account signing key.  ``access_key_id`` is carried
    for a transport layer that authorizes HTTP requests; the bundled
    client does not sign requests and never reads it.
    """
    app_id: int = 0
    access_key_id: str = ""     # reserved for request authorization
    secret_access_key: str = field(default="", repr=False)

    def obfuscation_secret(self) -> ObfuscationSecret:
        if not self.secret_access_key:
            raise InvalidInput("credentials.secret_access_key is not configured")
        return ObfuscationSecret(self.secret_access_key)


@dataclass
class EndpointConfig:
    """Remote service location and client timeouts."""
    host: str = "http://127.0.0.1:8360"
    timeout_seconds: float = 10.0
    user_agent: str = "xasset-sdk-python"


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    format: str = "human"   # "human" or "json"
    file: str | None = None


@dataclass
class XassetConfig:
    """Top-level configuration container."""
    credentials: CredentialsConfig = field(default_factory=CredentialsConfig)
    endpoint: EndpointConfig = field(default_factory=EndpointConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _merge(dc: Any, raw: dict[str, Any]) -> None:
    """Merge a raw dict into a dataclass instance (in-place)."""
    for key, value in raw.items():
        key_under = key.replace("-", "_")
        if hasattr(dc, key_under):
            setattr(dc, key_under, value)


def load_config(path: str | None = None) -> XassetConfig:
    """
    Load configuration from a TOML file, then overlay environment variables.

    Env-var mapping:
        XASSET_APP_ID             -> credentials.app_id
        XASSET_ACCESS_KEY_ID      -> credentials.access_key_id
        XASSET_SECRET_ACCESS_KEY  -> credentials.secret_access_key
        XASSET_ENDPOINT           -> endpoint.host
        XASSET_TIMEOUT            -> endpoint.timeout_seconds
        XASSET_LOG_LEVEL          -> logging.level
        XASSET_LOG_FMT            -> logging.format
    """
    cfg = XassetConfig()

    # ── TOML file ────────────────────────────────────────────────
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p, "rb") as f:
                data = tomllib.load(f)
            for section_name, section_dc in [
                ("credentials", cfg.credentials),
                ("endpoint", cfg.endpoint),
                ("logging", cfg.logging),
            ]:
                if section_name in data:
                    _merge(section_dc, data[section_name])

    # ── Environment variable overrides ───────────────────────────
    if v := os.environ.get("XASSET_APP_ID"):
        cfg.credentials.app_id = int(v)
    if v := os.environ.get("XASSET_ACCESS_KEY_ID"):
        cfg.credentials.access_key_id = v
    if v := os.environ.get("XASSET_SECRET_ACCESS_KEY"):
        cfg.credentials.secret_access_key = v
    if v := os.environ.get("XASSET_ENDPOINT"):
        cfg.endpoint.host = v
    if v := os.environ.get("XASSET_TIMEOUT"):
        cfg.endpoint.timeout_seconds = float(v)
    if v := os.environ.get("XASSET_LOG_LEVEL"):
        cfg.logging.level = v.upper()
    if v := os.environ.get("XASSET_LOG_FMT"):
        cfg.logging.format = v

    return cfg
