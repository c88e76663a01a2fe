"""Host setup: nginx, acme.sh and the renewal cron entry."""

from __future__ import annotations

import os
import shutil
import stat
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from certproxy.audit import audit
from certproxy.config import CertproxyConfig, get_config
from certproxy.constants import ACME_BIN, CRON_MARKER, CRON_SCHEDULE, NGINX_BIN
from certproxy.models import SetupParams
from certproxy.services import acme, cron, files, process
from certproxy.services.params import ParamResolver

console = Console()


def _sudo(cmd: list[str]) -> list[str]:
    """Prefix sudo when not running as root."""
    if os.geteuid() != 0:
        return ["sudo"] + cmd
    return cmd


def resolve_params(
    resolver: ParamResolver,
    cfg: CertproxyConfig,
    *,
    nginx_bin: Path | None = None,
    acme_bin: Path | None = None,
    cron_schedule: str | None = None,
) -> SetupParams:
    return SetupParams(
        nginx_bin=resolver.resolve_optional_path(nginx_bin, "NGINX_BIN") or NGINX_BIN,
        acme_bin=resolver.resolve_optional_path(acme_bin, "ACME_BIN") or ACME_BIN,
        cron_schedule=cron_schedule or resolver.lookup("CRON_SCHEDULE") or CRON_SCHEDULE,
        env_file=cfg.env_file,
        cron_log_path=cfg.cron_log_path,
        certproxy_bin=shutil.which("certproxy") or "certproxy",
    )


def _install_nginx(params: SetupParams, *, dry_run: bool) -> None:
    if process.which(params.nginx_bin):
        console.print(f"  nginx already installed ({escape(str(params.nginx_bin))})")
        return
    for cmd in (_sudo(["apt-get", "update", "-y"]), _sudo(["apt-get", "install", "-y", "nginx"])):
        if dry_run:
            files.notice(f"Would run: {' '.join(cmd)}")
        else:
            process.run(cmd, capture=False)


def _install_acme(resolver: ParamResolver, params: SetupParams, email: str | None, *, dry_run: bool) -> None:
    if params.acme_bin.exists():
        console.print(f"  acme.sh already installed ({escape(str(params.acme_bin))})")
        return
    email = resolver.resolve_value(email, "ACME_EMAIL", "Account email for acme.sh", flag="--acme-email")
    if dry_run:
        files.notice(f"Would run: {' '.join(acme.install_command(email))}")
    else:
        acme.install(email)


def _check_env_file(path: Path) -> None:
    if not path.exists():
        console.print(
            f"  [yellow]{escape(str(path))} does not exist.[/yellow] Create it with CF_TOKEN, "
            "CF_ACCOUNT_ID, CF_ZONE_ID and DOMAIN (KEY=VALUE lines) and chmod 600."
        )
        return
    if path.stat().st_mode & (stat.S_IRWXG | stat.S_IRWXO):
        console.print(f"  [yellow]{escape(str(path))} is readable by other users; run chmod 600.[/yellow]")


def _install_cron(params: SetupParams, *, dry_run: bool) -> None:
    located = shutil.which(str(params.nginx_bin))
    if located:
        params = params.model_copy(update={"nginx_bin": Path(located)})
    if dry_run:
        files.notice(f"Would install cron entry: {params.cron_line}")
    else:
        replaced = cron.install_cron_line(params.cron_line, CRON_MARKER)
        console.print("  Cron job updated." if replaced else "  Cron job added.")
    _check_env_file(params.env_file)


def setup(
    ctx: typer.Context,
    install_nginx: bool = typer.Option(True, "--install-nginx/--no-install-nginx", help="Install nginx when missing"),
    install_acme: bool = typer.Option(True, "--install-acme/--no-install-acme", help="Install acme.sh when missing"),
    install_cron: bool = typer.Option(True, "--install-cron/--no-install-cron", help="Install the renewal cron entry"),
    acme_email: Optional[str] = typer.Option(None, help="Account email for the acme.sh installer"),
    cron_schedule: Optional[str] = typer.Option(None, help="Cron schedule for renewal (default: monthly)"),
    nginx_bin: Optional[Path] = typer.Option(None, help="nginx binary"),
    acme_bin: Optional[Path] = typer.Option(None, help="acme.sh path"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Simulate actions without changes"),
) -> None:
    """Install nginx and acme.sh when missing, and schedule certificate renewal."""
    resolver: ParamResolver = ctx.obj
    params = resolve_params(
        resolver,
        get_config(),
        nginx_bin=nginx_bin,
        acme_bin=acme_bin,
        cron_schedule=cron_schedule,
    )

    with audit(
        "setup",
        dry_run=dry_run,
        install_nginx=install_nginx,
        install_acme=install_acme,
        install_cron=install_cron,
    ):
        if install_nginx:
            console.print("[bold][1/3][/bold] Installing nginx")
            _install_nginx(params, dry_run=dry_run)
        else:
            console.print("[bold][1/3][/bold] Skipping nginx (--no-install-nginx)")

        if install_acme:
            console.print("[bold][2/3][/bold] Installing acme.sh")
            _install_acme(resolver, params, acme_email, dry_run=dry_run)
        else:
            console.print("[bold][2/3][/bold] Skipping acme.sh (--no-install-acme)")

        if install_cron:
            console.print("[bold][3/3][/bold] Installing renewal cron entry")
            _install_cron(params, dry_run=dry_run)
        else:
            console.print("[bold][3/3][/bold] Skipping cron (--no-install-cron)")

        if not dry_run:
            console.print("\n[green bold]Setup complete![/green bold]")
