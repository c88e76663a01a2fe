"""Tests for CertproxyConfig."""

from __future__ import annotations

from pathlib import Path

import pytest

from certproxy.config import CertproxyConfig, get_config
from certproxy.constants import AUDIT_LOG_PATH, CERT_BASE_DIR, CRON_LOG_PATH, RESOLVER_TIMEOUT_SECS
from certproxy.errors import ParamError


class TestCertproxyConfig:
    def test_defaults(self, monkeypatch):
        for key in ("CERTPROXY_AUDIT_LOG", "CERTPROXY_CERT_BASE", "CERTPROXY_ENV_FILE"):
            monkeypatch.delenv(key, raising=False)
        cfg = CertproxyConfig()
        assert cfg.audit_log_path == AUDIT_LOG_PATH
        assert cfg.cert_base_dir == CERT_BASE_DIR
        assert cfg.cron_log_path == CRON_LOG_PATH
        assert cfg.resolver_timeout == RESOLVER_TIMEOUT_SECS
        assert cfg.audit_enabled is True

    def test_from_env(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("CERTPROXY_AUDIT_LOG", str(tmp_path / "a.jsonl"))
        monkeypatch.setenv("CERTPROXY_CERT_BASE", str(tmp_path / "certs"))
        monkeypatch.setenv("CERTPROXY_ENV_FILE", str(tmp_path / "x.env"))
        monkeypatch.setenv("CERTPROXY_RESOLVER_TIMEOUT", "2.5")
        monkeypatch.setenv("CERTPROXY_AUDIT", "off")
        cfg = CertproxyConfig()
        assert cfg.audit_log_path == tmp_path / "a.jsonl"
        assert cfg.cert_base_dir == tmp_path / "certs"
        assert cfg.env_file == tmp_path / "x.env"
        assert cfg.resolver_timeout == 2.5
        assert cfg.audit_enabled is False

    def test_blank_env_uses_default(self, monkeypatch):
        monkeypatch.setenv("CERTPROXY_CERT_BASE", "  ")
        assert CertproxyConfig().cert_base_dir == CERT_BASE_DIR

    def test_blank_timeout_uses_default(self, monkeypatch):
        monkeypatch.setenv("CERTPROXY_RESOLVER_TIMEOUT", " ")
        assert CertproxyConfig().resolver_timeout == RESOLVER_TIMEOUT_SECS

    def test_non_numeric_timeout(self, monkeypatch):
        monkeypatch.setenv("CERTPROXY_RESOLVER_TIMEOUT", "soon")
        with pytest.raises(ParamError, match="CERTPROXY_RESOLVER_TIMEOUT"):
            CertproxyConfig()

    def test_cached(self):
        assert get_config() is get_config()
