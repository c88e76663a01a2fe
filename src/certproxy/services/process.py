"""Subprocess wrappers for the external tools (acme.sh, nginx, crontab, apt-get)."""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Mapping
from pathlib import Path

from certproxy.errors import CommandError


def run(
    cmd: list[str],
    *,
    env: Mapping[str, str] | None = None,
    check: bool = True,
    capture: bool = True,
    input: str | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run ``cmd``; raise CommandError when it cannot start or (with check) exits non-zero."""
    try:
        result = subprocess.run(
            cmd,
            env=dict(env) if env is not None else None,
            capture_output=capture,
            text=True,
            input=input,
            check=False,
        )
    except OSError as exc:
        raise CommandError(f"Failed to run {cmd[0]}: {exc}", exit_code=127) from exc
    if check and result.returncode != 0:
        raise CommandError(
            f"Command failed: {' '.join(cmd)}\nstderr: {result.stderr or ''}".rstrip(),
            exit_code=result.returncode,
        )
    return result


def which(binary: Path | str) -> bool:
    """True if ``binary`` is an executable path or is found on PATH."""
    return shutil.which(str(binary)) is not None
