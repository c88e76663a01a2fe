"""Jinja2-based NGINX config renderer."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from certproxy.models import NginxDefaultParams, ProxyParams

_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=select_autoescape([]),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_default(params: NginxDefaultParams) -> str:
    """Render the catch-all server that drops requests for unknown hosts."""
    template = _get_env().get_template("nginx_default.conf.j2")
    return template.render(params=params)


def render_proxy(params: ProxyParams) -> str:
    """Render an HTTP redirect plus a TLS reverse-proxy server for one domain."""
    template = _get_env().get_template("nginx_proxy.conf.j2")
    return template.render(proxy=params)
