"""Root Typer application for the certproxy CLI."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from certproxy.commands import issue_cert, nginx_default, print_params, proxy_config, setup
from certproxy.config import get_config
from certproxy.errors import CertproxyError, ParamError
from certproxy.services.params import ParamResolver, load_env_file, parse_key_val

app = typer.Typer(
    name="certproxy",
    help="Issue TLS certificates with acme.sh and generate NGINX reverse-proxy configs.",
    no_args_is_help=True,
)
err_console = Console(stderr=True)


@app.callback()
def root(
    ctx: typer.Context,
    env: Optional[list[str]] = typer.Option(
        None, "--env", metavar="KEY=VALUE", help="Provide environment overrides as KEY=VALUE (repeatable)"
    ),
    env_file: Optional[Path] = typer.Option(None, "--env-file", help="Load KEY=VALUE overrides from a file"),
) -> None:
    overrides: dict[str, str] = {}
    try:
        if env_file is not None:
            overrides.update(load_env_file(env_file))
        for item in env or []:
            key, value = parse_key_val(item)
            overrides[key] = value
    except ParamError as exc:
        raise typer.BadParameter(str(exc), param_hint="--env / --env-file") from exc

    ctx.obj = ParamResolver(
        overrides,
        interactive=sys.stdin.isatty(),
        resolver_timeout=get_config().resolver_timeout,
    )


app.command(name="print-params")(print_params.print_params)
app.command(name="issue-cert")(issue_cert.issue_cert)
app.command(name="write-nginx-default")(nginx_default.write_nginx_default)
app.command(name="write-proxy-config")(proxy_config.write_proxy_config)
app.command(name="setup")(setup.setup)


def main() -> None:
    """Console entry point: report CertproxyError and exit with its code."""
    try:
        app()
    except CertproxyError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise SystemExit(exc.exit_code) from None


if __name__ == "__main__":
    main()
