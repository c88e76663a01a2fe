"""Default (catch-all) NGINX server command."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax

from certproxy.audit import audit
from certproxy.config import CertproxyConfig, get_config
from certproxy.constants import CERT_DIR_NAME, NGINX_BIN, NGINX_DEFAULT_OUTPUT
from certproxy.models import NginxDefaultParams
from certproxy.services import files, nginx, renderer
from certproxy.services.params import ParamResolver

console = Console()


def resolve_params(
    resolver: ParamResolver,
    cfg: CertproxyConfig,
    *,
    cert_path: Path | None = None,
    key_path: Path | None = None,
    cert_dir: Path | None = None,
    cert_dir_name: str | None = None,
    domain: str | None = None,
    output_path: Path | None = None,
) -> NginxDefaultParams:
    cert_path, key_path = resolver.resolve_nginx_cert_pair(
        cert_path,
        key_path,
        cert_dir=cert_dir,
        cert_dir_name=cert_dir_name,
        domain=lambda: resolver.resolve_value(
            domain, "DOMAIN", "Primary domain (e.g., example.com)", flag="--domain"
        ),
        base_dir=cfg.cert_base_dir,
        default_dir_name=CERT_DIR_NAME,
    )
    output_path = resolver.resolve_path(
        output_path, "NGINX_DEFAULT_OUTPUT", NGINX_DEFAULT_OUTPUT, "nginx default output path"
    )
    return NginxDefaultParams(cert_path=cert_path, key_path=key_path, output_path=output_path)


def write_nginx_default(
    ctx: typer.Context,
    cert_path: Optional[Path] = typer.Option(None, help="Certificate path (absolute, needs --key-path)"),
    key_path: Optional[Path] = typer.Option(None, help="Key path (absolute, needs --cert-path)"),
    cert_dir: Optional[Path] = typer.Option(None, help="Certificate directory (absolute path)"),
    cert_dir_name: Optional[str] = typer.Option(None, help="Certificate directory name under the cert base"),
    domain: Optional[str] = typer.Option(None, help="Primary domain (used for default cert/key names)"),
    output_path: Optional[Path] = typer.Option(None, help="Output path for the default config"),
    nginx_bin: Optional[Path] = typer.Option(None, help="nginx binary"),
    reload_nginx: bool = typer.Option(False, "--reload-nginx", help="Validate and reload nginx after writing"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Simulate actions without changes"),
) -> None:
    """Write the default NGINX server that answers 444 to unknown hosts."""
    resolver: ParamResolver = ctx.obj
    params = resolve_params(
        resolver,
        get_config(),
        cert_path=cert_path,
        key_path=key_path,
        cert_dir=cert_dir,
        cert_dir_name=cert_dir_name,
        domain=domain,
        output_path=output_path,
    )
    nginx_bin = resolver.resolve_optional_path(nginx_bin, "NGINX_BIN") or NGINX_BIN

    with audit(
        "nginx.write-default",
        target=str(params.output_path),
        dry_run=dry_run,
        cert_path=str(params.cert_path),
        key_path=str(params.key_path),
    ):
        content = renderer.render_default(params)
        files.ensure_dir(params.output_path.parent, dry_run=dry_run)
        files.write_text(params.output_path, content, label="nginx default config", dry_run=dry_run)
        if dry_run:
            console.print(Syntax(content, "nginx", theme="monokai"))

        if reload_nginx:
            if dry_run:
                files.notice(f"Would run {nginx_bin} -t and {nginx_bin} -s reload")
            else:
                nginx.reload(nginx_bin)

        if not dry_run:
            console.print(f"[green]Default config written to {escape(str(params.output_path))}[/green]")
