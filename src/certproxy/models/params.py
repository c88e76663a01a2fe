"""Resolved parameter records for each command."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlsplit

from pydantic import BaseModel, SecretStr

from certproxy.constants import CRON_MARKER


class IssueCertParams(BaseModel):
    """Everything `issue-cert` needs once all parameters are resolved."""

    cf_token: SecretStr
    cf_account_id: str
    cf_zone_id: str
    domain: str
    wildcard_domain: str
    acme_bin: Path
    acme_home: Path
    cert_dir: Path
    cert_output_path: Path | None = None
    key_output_path: Path | None = None
    nginx_bin: Path

    @property
    def cache_dir(self) -> Path:
        """acme.sh working directory for an ECC certificate."""
        return self.acme_home / f"{self.domain}_ecc"

    @property
    def cert_source(self) -> Path:
        return self.cache_dir / "fullchain.cer"

    @property
    def key_source(self) -> Path:
        return self.cache_dir / f"{self.domain}.key"

    @property
    def cert_destination(self) -> Path:
        if self.cert_output_path is not None:
            return self.cert_output_path
        return self.cert_dir / f"{self.domain}.cer"

    @property
    def key_destination(self) -> Path:
        if self.key_output_path is not None:
            return self.key_output_path
        return self.cert_dir / f"{self.domain}.key"

    def acme_env(self) -> dict[str, str]:
        """Cloudflare credentials in the variable names the dns_cf hook reads."""
        return {
            "CF_Token": self.cf_token.get_secret_value(),
            "CF_Account_ID": self.cf_account_id,
            "CF_Zone_ID": self.cf_zone_id,
        }


class NginxDefaultParams(BaseModel):
    cert_path: Path
    key_path: Path
    output_path: Path


class ProxyParams(BaseModel):
    proxy_domain: str
    backend_url: str
    resolver: str
    cert_path: Path
    key_path: Path
    output_dir: Path

    @property
    def config_name(self) -> str:
        return f"{self.proxy_domain.replace('.', '-')}.conf"

    @property
    def output_path(self) -> Path:
        return self.output_dir / self.config_name

    @property
    def backend_host(self) -> str:
        """Host (without port) of the backend, sent as Host header and SNI name."""
        return urlsplit(self.backend_url).hostname or ""


class SetupParams(BaseModel):
    nginx_bin: Path
    acme_bin: Path
    cron_schedule: str
    env_file: Path
    cron_log_path: Path
    certproxy_bin: str = "certproxy"

    @property
    def cron_line(self) -> str:
        """Crontab entry re-running issuance with credentials taken from the env file.

        Binaries are passed as resolved at setup; cron's PATH is minimal.
        """
        return (
            f"{self.cron_schedule} {self.certproxy_bin} --env-file {self.env_file} issue-cert "
            f"--acme-bin {self.acme_bin} --nginx-bin {self.nginx_bin} "
            f">> {self.cron_log_path} 2>&1 {CRON_MARKER}"
        )
