"""Certificate issuance command."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from pydantic import SecretStr
from rich.console import Console
from rich.markup import escape

from certproxy.audit import audit
from certproxy.config import CertproxyConfig, get_config
from certproxy.constants import ACME_BIN, ACME_HOME, CERT_DIR_NAME, NGINX_BIN
from certproxy.models import IssueCertParams
from certproxy.services import acme, files, nginx
from certproxy.services.params import ParamResolver

console = Console()


def resolve_params(
    resolver: ParamResolver,
    cfg: CertproxyConfig,
    *,
    cf_token: str | None = None,
    cf_account_id: str | None = None,
    cf_zone_id: str | None = None,
    domain: str | None = None,
    wildcard_domain: str | None = None,
    acme_bin: Path | None = None,
    acme_home: Path | None = None,
    cert_dir: Path | None = None,
    cert_dir_name: str | None = None,
    cert_output_path: Path | None = None,
    key_output_path: Path | None = None,
    nginx_bin: Path | None = None,
    reload_nginx: bool = True,
) -> IssueCertParams:
    # Checked first so an inconsistent pair fails before any prompt.
    cert_output_path, key_output_path = resolver.resolve_path_pair(
        cert_output_path, "CERT_OUTPUT_PATH", key_output_path, "KEY_OUTPUT_PATH"
    )

    token = resolver.resolve_value(cf_token, "CF_TOKEN", "Cloudflare token", sensitive=True, flag="--cf-token")
    account_id = resolver.resolve_value(
        cf_account_id, "CF_ACCOUNT_ID", "Cloudflare account ID", flag="--cf-account-id"
    )
    zone_id = resolver.resolve_value(cf_zone_id, "CF_ZONE_ID", "Cloudflare zone ID", flag="--cf-zone-id")
    domain = resolver.resolve_value(domain, "DOMAIN", "Primary domain (e.g., example.com)", flag="--domain")
    wildcard = resolver.resolve_optional_value(
        wildcard_domain, "WILDCARD_DOMAIN", "Wildcard domain (e.g., *.example.com)"
    ) or f"*.{domain}"

    acme_bin = resolver.resolve_path(acme_bin, "ACME_BIN", ACME_BIN, "acme.sh path")
    acme_home = resolver.resolve_path(acme_home, "ACME_HOME", ACME_HOME, "acme home directory")

    if cert_output_path is not None:
        resolved_cert_dir = cert_output_path.parent
    else:
        resolved_cert_dir = resolver.resolve_cert_dir(
            resolver.resolve_optional_path(cert_dir, "CERT_DIR"),
            cert_dir_name,
            ["CERT_DIR_NAME"],
            CERT_DIR_NAME,
            cfg.cert_base_dir,
        )

    if reload_nginx:
        nginx_bin = resolver.resolve_path(nginx_bin, "NGINX_BIN", NGINX_BIN, "nginx binary")
    else:
        nginx_bin = resolver.resolve_optional_path(nginx_bin, "NGINX_BIN") or NGINX_BIN

    return IssueCertParams(
        cf_token=SecretStr(token),
        cf_account_id=account_id,
        cf_zone_id=zone_id,
        domain=domain,
        wildcard_domain=wildcard,
        acme_bin=acme_bin,
        acme_home=acme_home,
        cert_dir=resolved_cert_dir,
        cert_output_path=cert_output_path,
        key_output_path=key_output_path,
        nginx_bin=nginx_bin,
    )


def issue_cert(
    ctx: typer.Context,
    cf_token: Optional[str] = typer.Option(None, help="Cloudflare API token (prefer CF_TOKEN)"),
    cf_account_id: Optional[str] = typer.Option(None, help="Cloudflare account ID"),
    cf_zone_id: Optional[str] = typer.Option(None, help="Cloudflare zone ID"),
    domain: Optional[str] = typer.Option(None, help="Primary domain (e.g., example.com)"),
    wildcard_domain: Optional[str] = typer.Option(None, help="Wildcard domain (default: *.<domain>)"),
    acme_bin: Optional[Path] = typer.Option(None, help="acme.sh path"),
    acme_home: Optional[Path] = typer.Option(None, help="acme.sh home directory"),
    cert_dir: Optional[Path] = typer.Option(None, help="Certificate directory (absolute path)"),
    cert_dir_name: Optional[str] = typer.Option(None, help="Certificate directory name under the cert base"),
    cert_output_path: Optional[Path] = typer.Option(None, help="Certificate output path (needs --key-output-path)"),
    key_output_path: Optional[Path] = typer.Option(None, help="Key output path (needs --cert-output-path)"),
    nginx_bin: Optional[Path] = typer.Option(None, help="nginx binary"),
    reload_nginx: bool = typer.Option(True, "--reload-nginx/--no-reload-nginx", help="Reload nginx after issuance"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Simulate actions without changes"),
) -> None:
    """Issue a domain + wildcard certificate with acme.sh and install it for NGINX."""
    resolver: ParamResolver = ctx.obj
    params = resolve_params(
        resolver,
        get_config(),
        cf_token=cf_token,
        cf_account_id=cf_account_id,
        cf_zone_id=cf_zone_id,
        domain=domain,
        wildcard_domain=wildcard_domain,
        acme_bin=acme_bin,
        acme_home=acme_home,
        cert_dir=cert_dir,
        cert_dir_name=cert_dir_name,
        cert_output_path=cert_output_path,
        key_output_path=key_output_path,
        nginx_bin=nginx_bin,
        reload_nginx=reload_nginx,
    )

    with audit(
        "cert.issue",
        target=params.domain,
        dry_run=dry_run,
        wildcard_domain=params.wildcard_domain,
        cert_path=str(params.cert_destination),
        key_path=str(params.key_destination),
        reload_nginx=reload_nginx,
    ):
        console.print("[bold][1/4][/bold] Clearing acme.sh cache")
        if files.remove_tree(params.cache_dir, dry_run=dry_run) and not dry_run:
            console.print(f"  Removed: {escape(str(params.cache_dir))}")

        console.print(
            f"[bold][2/4][/bold] Issuing certificate for "
            f"{escape(params.domain)}, {escape(params.wildcard_domain)}"
        )
        if dry_run:
            files.notice(f"Would run: {' '.join(acme.build_issue_command(params))}")
        else:
            acme.issue_cert(params)

        console.print("[bold][3/4][/bold] Installing certificate and key")
        for parent in dict.fromkeys([params.cert_destination.parent, params.key_destination.parent]):
            files.ensure_dir(parent, dry_run=dry_run)
        files.copy_file(params.cert_source, params.cert_destination, label="cert", dry_run=dry_run)
        files.copy_file(params.key_source, params.key_destination, label="key", dry_run=dry_run)

        if reload_nginx:
            console.print("[bold][4/4][/bold] Validating and reloading NGINX")
            if dry_run:
                files.notice(f"Would run {params.nginx_bin} -t and {params.nginx_bin} -s reload")
            else:
                nginx.reload(params.nginx_bin)
        else:
            console.print("[bold][4/4][/bold] Skipping NGINX reload (--no-reload-nginx)")

        if not dry_run:
            console.print(
                f"\n[green bold]Done![/green bold] {escape(str(params.cert_destination))}, "
                f"{escape(str(params.key_destination))}"
            )
