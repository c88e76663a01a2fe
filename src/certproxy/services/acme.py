"""acme.sh certificate issuance over the Cloudflare DNS-01 challenge."""

from __future__ import annotations

import os

from certproxy.constants import ACME_DNS_HOOK, ACME_INSTALL_URL, ACME_KEYLENGTH
from certproxy.errors import AcmeError, CommandError
from certproxy.models import IssueCertParams
from certproxy.services import process


def build_issue_command(params: IssueCertParams) -> list[str]:
    """argv for a forced ECC issuance of the domain and its wildcard."""
    return [
        str(params.acme_bin),
        "--issue",
        "--force",
        "--home", str(params.acme_home),
        "-d", params.domain,
        "-d", params.wildcard_domain,
        "--dns", ACME_DNS_HOOK,
        "--keylength", ACME_KEYLENGTH,
    ]


def issue_cert(params: IssueCertParams) -> None:
    """Run acme.sh with the Cloudflare credentials in its environment only.

    Output is streamed to the terminal. A non-zero exit raises AcmeError
    carrying acme.sh's exit code.
    """
    env = {**os.environ, **params.acme_env()}
    try:
        result = process.run(build_issue_command(params), env=env, check=False, capture=False)
    except CommandError as exc:
        raise AcmeError(str(exc), exit_code=exc.exit_code) from exc
    if result.returncode != 0:
        raise AcmeError(
            f"Certificate issuance failed for {params.domain} (acme.sh exit code {result.returncode})",
            exit_code=result.returncode,
        )


def install_command(email: str) -> list[str]:
    return ["sh", "-c", f"curl -fsSL {ACME_INSTALL_URL} | sh -s email={email}"]


def install(email: str) -> None:
    """Install acme.sh with its upstream installer."""
    try:
        process.run(install_command(email), capture=False)
    except CommandError as exc:
        raise AcmeError(f"acme.sh installation failed: {exc}", exit_code=exc.exit_code) from exc
