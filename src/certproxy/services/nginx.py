"""NGINX config validation and reload."""

from __future__ import annotations

from pathlib import Path

from certproxy.errors import NginxConfigError
from certproxy.services import process


def validate_config(nginx_bin: Path) -> None:
    """Run nginx -t. Raises NginxConfigError on failure."""
    result = process.run([str(nginx_bin), "-t"], check=False)
    if result.returncode != 0:
        raise NginxConfigError(
            f"NGINX config test failed:\n{result.stderr}",
            exit_code=result.returncode,
        )


def reload(nginx_bin: Path) -> None:
    """Validate config, then reload NGINX."""
    validate_config(nginx_bin)
    result = process.run([str(nginx_bin), "-s", "reload"], check=False)
    if result.returncode != 0:
        raise NginxConfigError(
            f"NGINX reload failed:\n{result.stderr}",
            exit_code=result.returncode,
        )
