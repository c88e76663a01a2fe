"""Reverse-proxy NGINX config command."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

import typer
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax

from certproxy.audit import audit
from certproxy.config import CertproxyConfig, get_config
from certproxy.constants import CERT_DIR_NAME, DEFAULT_RESOLVER, NGINX_BIN, PROXY_OUTPUT_DIR
from certproxy.errors import ParamError
from certproxy.models import ProxyParams
from certproxy.services import files, nginx, renderer
from certproxy.services.params import ParamResolver

console = Console()

_HOSTNAME_LABEL = re.compile(r"[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?")


def validate_proxy_domain(domain: str) -> str:
    """Accept a plain hostname; it names the config file and fills server_name."""
    labels = domain.split(".")
    if len(domain) > 253 or not all(_HOSTNAME_LABEL.fullmatch(label) for label in labels):
        raise ParamError(f"Proxy domain must be a hostname (e.g., proxy.example.com), got {domain!r}")
    return domain


def validate_backend_url(url: str) -> str:
    parts = urlsplit(url)
    if parts.scheme not in {"http", "https"} or not parts.hostname:
        raise ParamError(f"Backend URL must be an http:// or https:// URL, got {url!r}")
    return url


def resolve_params(
    resolver: ParamResolver,
    cfg: CertproxyConfig,
    *,
    proxy_domain: str | None = None,
    backend_url: str | None = None,
    resolvers: list[str] | None = None,
    cert_path: Path | None = None,
    key_path: Path | None = None,
    domain: str | None = None,
    cert_dir: Path | None = None,
    cert_dir_name: str | None = None,
    output_dir: Path | None = None,
) -> ProxyParams:
    proxy_domain = validate_proxy_domain(
        resolver.resolve_value(
            proxy_domain, "PROXY_DOMAIN", "Proxy domain (e.g., proxy.example.com)", flag="--proxy-domain"
        )
    )
    backend_url = validate_backend_url(
        resolver.resolve_value(
            backend_url,
            "BACKEND_URL",
            "Backend URL (e.g., https://emby.example.com:443)",
            flag="--backend-url",
        )
    )
    resolver_list = resolver.resolve_resolvers(resolvers, "RESOLVER", DEFAULT_RESOLVER)

    # The certificate domain defaults to the proxied domain itself.
    cert_path, key_path = resolver.resolve_nginx_cert_pair(
        cert_path,
        key_path,
        cert_dir=cert_dir,
        cert_dir_name=cert_dir_name,
        domain=lambda: domain or resolver.lookup("DOMAIN") or proxy_domain,
        base_dir=cfg.cert_base_dir,
        default_dir_name=CERT_DIR_NAME,
    )
    output_dir = resolver.resolve_path(output_dir, "PROXY_OUTPUT_DIR", PROXY_OUTPUT_DIR, "proxy config output dir")
    return ProxyParams(
        proxy_domain=proxy_domain,
        backend_url=backend_url,
        resolver=resolver_list,
        cert_path=cert_path,
        key_path=key_path,
        output_dir=output_dir,
    )


def write_proxy_config(
    ctx: typer.Context,
    proxy_domain: Optional[str] = typer.Option(None, help="Domain served by the proxy"),
    backend_url: Optional[str] = typer.Option(None, help="Backend URL (e.g., https://emby.example.com:443)"),
    resolver_values: Optional[list[str]] = typer.Option(
        None, "--resolver", help="DNS resolver address (repeatable)"
    ),
    cert_path: Optional[Path] = typer.Option(None, help="Certificate path (absolute, needs --key-path)"),
    key_path: Optional[Path] = typer.Option(None, help="Key path (absolute, needs --cert-path)"),
    domain: Optional[str] = typer.Option(None, help="Certificate domain (default: DOMAIN, then the proxy domain)"),
    cert_dir: Optional[Path] = typer.Option(None, help="Certificate directory (absolute path)"),
    cert_dir_name: Optional[str] = typer.Option(None, help="Certificate directory name under the cert base"),
    output_dir: Optional[Path] = typer.Option(None, help="Proxy config output directory"),
    nginx_bin: Optional[Path] = typer.Option(None, help="nginx binary"),
    reload_nginx: bool = typer.Option(False, "--reload-nginx", help="Validate and reload nginx after writing"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Simulate actions without changes"),
) -> None:
    """Write an HTTPS reverse-proxy config for one domain."""
    resolver: ParamResolver = ctx.obj
    params = resolve_params(
        resolver,
        get_config(),
        proxy_domain=proxy_domain,
        backend_url=backend_url,
        resolvers=resolver_values,
        cert_path=cert_path,
        key_path=key_path,
        domain=domain,
        cert_dir=cert_dir,
        cert_dir_name=cert_dir_name,
        output_dir=output_dir,
    )
    nginx_bin = resolver.resolve_optional_path(nginx_bin, "NGINX_BIN") or NGINX_BIN

    with audit(
        "proxy.write",
        target=params.proxy_domain,
        dry_run=dry_run,
        backend_url=params.backend_url,
        output_path=str(params.output_path),
    ):
        content = renderer.render_proxy(params)
        files.ensure_dir(params.output_dir, dry_run=dry_run)
        files.write_text(params.output_path, content, label="proxy config", dry_run=dry_run)
        if dry_run:
            console.print(Syntax(content, "nginx", theme="monokai"))

        if reload_nginx:
            if dry_run:
                files.notice(f"Would run {nginx_bin} -t and {nginx_bin} -s reload")
            else:
                nginx.reload(nginx_bin)

        if not dry_run:
            console.print(
                f"[green]Proxy config written to {escape(str(params.output_path))}[/green] "
                f"({params.proxy_domain} -> {escape(params.backend_url)})"
            )
