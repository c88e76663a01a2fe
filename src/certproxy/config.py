"""Central configuration, resolved once at startup."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field

from certproxy.constants import (
    AUDIT_LOG_PATH,
    CERT_BASE_DIR,
    CRON_LOG_PATH,
    ENV_FILE,
    RESOLVER_TIMEOUT_SECS,
)
from certproxy.errors import ParamError


def _env_path(key: str, default: Path) -> Path:
    value = os.environ.get(key, "").strip()
    return Path(value) if value else default


def _env_flag(key: str, default: bool = True) -> bool:
    value = os.environ.get(key, "").strip().lower()
    if not value:
        return default
    return value not in {"0", "false", "no", "off"}


def _env_seconds(key: str, default: float) -> float:
    value = os.environ.get(key, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ParamError(f"{key} must be a number of seconds, got {value!r}") from None


class CertproxyConfig(BaseModel):
    """Runtime configuration for certproxy itself (not per-command parameters)."""

    audit_log_path: Path = Field(default_factory=lambda: _env_path("CERTPROXY_AUDIT_LOG", AUDIT_LOG_PATH))
    audit_enabled: bool = Field(default_factory=lambda: _env_flag("CERTPROXY_AUDIT"))
    cert_base_dir: Path = Field(default_factory=lambda: _env_path("CERTPROXY_CERT_BASE", CERT_BASE_DIR))
    env_file: Path = Field(default_factory=lambda: _env_path("CERTPROXY_ENV_FILE", ENV_FILE))
    cron_log_path: Path = Field(default_factory=lambda: _env_path("CERTPROXY_CRON_LOG", CRON_LOG_PATH))
    resolver_timeout: float = Field(
        default_factory=lambda: _env_seconds("CERTPROXY_RESOLVER_TIMEOUT", RESOLVER_TIMEOUT_SECS)
    )


@lru_cache(maxsize=1)
def get_config() -> CertproxyConfig:
    """Return the global CertproxyConfig (resolved once, cached)."""
    return CertproxyConfig()
