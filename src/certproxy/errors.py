"""Custom exceptions for certproxy."""

from __future__ import annotations


class CertproxyError(Exception):
    """Base exception for all certproxy operations."""

    def __init__(self, message: str, *, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


class ParamError(CertproxyError):
    """A parameter is invalid or inconsistent with another one."""


class MissingParameterError(ParamError):
    """A required parameter could not be resolved."""


class CommandError(CertproxyError):
    """An external command could not be started or exited non-zero."""


class AcmeError(CommandError):
    """acme.sh failed to issue a certificate."""


class NginxConfigError(CommandError):
    """NGINX configuration validation or reload failed."""


class CronError(CommandError):
    """Reading or writing the crontab failed."""
