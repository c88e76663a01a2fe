"""Parameter resolution: CLI argument > override > environment > prompt > default."""

from __future__ import annotations

import os
import select
import sys
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from certproxy.constants import (
    DEFAULT_RESOLVER,
    RESOLVER_ALIYUN,
    RESOLVER_CLOUDFLARE,
    RESOLVER_GOOGLE,
    RESOLVER_TENCENT,
    RESOLVER_TIMEOUT_SECS,
)
from certproxy.errors import MissingParameterError, ParamError

console = Console()

PromptFunc = Callable[[str, bool, Optional[str]], str]
ReadLineFunc = Callable[[float], Optional[str]]

RESOLVER_CHOICES: dict[str, tuple[str, str | None]] = {
    "1": ("Cloudflare", RESOLVER_CLOUDFLARE),
    "2": ("Tencent", RESOLVER_TENCENT),
    "3": ("Aliyun", RESOLVER_ALIYUN),
    "4": ("Google", RESOLVER_GOOGLE),
    "5": ("Custom", None),
}


def parse_key_val(text: str) -> tuple[str, str]:
    """Split a KEY=VALUE pair at the first '='. The value is kept verbatim."""
    key, _, value = text.partition("=")
    key = key.strip()
    if not key:
        raise ParamError("--env expects KEY=VALUE")
    return key, value


def load_env_file(path: Path) -> dict[str, str]:
    """Read simple KEY=VALUE lines; blank lines and # comments are skipped."""
    if not path.exists():
        raise ParamError(f"Env file not found: {path}")
    env: dict[str, str] = {}
    for lineno, raw in enumerate(path.read_text().splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if "=" not in line:
            raise ParamError(f"{path}:{lineno}: expected KEY=VALUE")
        key, value = parse_key_val(line)
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
            value = value[1:-1]
        env[key] = value
    return env


def _prompt(label: str, sensitive: bool, default: str | None) -> str:
    if sensitive:
        return typer.prompt(label, hide_input=True, default="", show_default=False)
    if default is not None:
        return typer.prompt(label, default=default)
    return typer.prompt(label, default="", show_default=False)


def _read_line_with_timeout(timeout: float) -> str | None:
    """Read one line from stdin, or return None when nothing arrives in time.

    stdin is polled rather than read from a helper thread, so nothing is left
    waiting on it once the menu gives up and the next prompt gets the next line.
    """
    try:
        ready, _, _ = select.select([sys.stdin], [], [], timeout)
    except (OSError, ValueError):
        # in-memory stdin has no descriptor to poll
        return sys.stdin.readline()
    if not ready:
        return None
    return sys.stdin.readline()


def _describe(flag: str | None, env_keys: Iterable[str]) -> str:
    names = ([flag] if flag else []) + list(env_keys)
    return " or ".join(names)


class ParamResolver:
    """Looks a parameter up in CLI value, overrides, process env, then asks the user.

    ``overrides`` holds ``--env`` / ``--env-file`` values and shadows the process
    environment. When ``interactive`` is false, prompts are never shown: optional
    values fall back to their defaults and required values raise.
    """

    def __init__(
        self,
        overrides: Mapping[str, str] | None = None,
        *,
        environ: Mapping[str, str] | None = None,
        interactive: bool = True,
        prompt: PromptFunc = _prompt,
        read_line: ReadLineFunc = _read_line_with_timeout,
        resolver_timeout: float = RESOLVER_TIMEOUT_SECS,
    ):
        self.overrides = dict(overrides or {})
        self.environ = os.environ if environ is None else environ
        self.interactive = interactive
        self._prompt = prompt
        self._read_line = read_line
        self.resolver_timeout = resolver_timeout

    # -- lookups -------------------------------------------------------------

    def lookup(self, env_key: str) -> str | None:
        """Non-blank value for ``env_key`` from overrides, then the process env."""
        for source in (self.overrides, self.environ):
            value = source.get(env_key)
            if value is not None and value.strip():
                return value
        return None

    def resolve_from_envs(self, env_keys: Iterable[str]) -> str | None:
        for key in env_keys:
            value = self.lookup(key)
            if value is not None:
                return value
        return None

    def ask(self, label: str, *, sensitive: bool = False, default: str | None = None) -> str:
        if not self.interactive:
            return ""
        return self._prompt(label, sensitive, default).strip()

    # -- typed resolvers -----------------------------------------------------

    def resolve_value(
        self,
        cli_value: str | None,
        env_key: str,
        label: str,
        *,
        sensitive: bool = False,
        flag: str | None = None,
    ) -> str:
        """Required string; an empty answer at the prompt is an error."""
        if cli_value is not None:
            return cli_value
        value = self.lookup(env_key)
        if value is not None:
            return value
        answer = self.ask(label, sensitive=sensitive)
        if not answer:
            raise MissingParameterError(f"{label} is required ({_describe(flag, [env_key])})")
        return answer

    def resolve_optional_value(
        self,
        cli_value: str | None,
        env_key: str,
        label: str,
        *,
        sensitive: bool = False,
    ) -> str | None:
        if cli_value is not None:
            return cli_value
        value = self.lookup(env_key)
        if value is not None:
            return value
        return self.ask(label, sensitive=sensitive) or None

    def resolve_path(self, cli_value: Path | None, env_key: str, default: Path | str, label: str) -> Path:
        if cli_value is not None:
            return cli_value
        value = self.lookup(env_key)
        if value is not None:
            return Path(value)
        answer = self.ask(label, default=str(default))
        return Path(answer) if answer else Path(default)

    def resolve_optional_path(self, cli_value: Path | None, env_key: str) -> Path | None:
        """Path from CLI or env only; never prompts."""
        if cli_value is not None:
            return cli_value
        value = self.lookup(env_key)
        return Path(value) if value is not None else None

    def resolve_name_with_default(
        self,
        cli_value: str | None,
        env_keys: Iterable[str],
        default: str,
        label: str,
    ) -> str:
        if cli_value is not None:
            return cli_value
        value = self.resolve_from_envs(env_keys)
        if value is not None:
            return value
        return self.ask(label, default=default) or default

    def resolve_cert_dir(
        self,
        cert_dir: Path | None,
        cert_dir_name: str | None,
        env_keys: Iterable[str],
        default_name: str,
        base_dir: Path,
    ) -> Path:
        """An explicit directory wins; otherwise ``base_dir / <name>``."""
        if cert_dir is not None:
            return cert_dir
        name = self.resolve_name_with_default(
            cert_dir_name, env_keys, default_name, "Certificate directory name"
        )
        return base_dir / name

    def resolve_path_pair(
        self,
        cert_value: Path | None,
        cert_env: str,
        key_value: Path | None,
        key_env: str,
    ) -> tuple[Path | None, Path | None]:
        """Resolve a cert/key path pair; both or neither must be set."""
        cert_path = self.resolve_optional_path(cert_value, cert_env)
        key_path = self.resolve_optional_path(key_value, key_env)
        if (cert_path is None) != (key_path is None):
            raise ParamError(f"Both {cert_env} and {key_env} must be set together")
        return cert_path, key_path

    def resolve_nginx_cert_pair(
        self,
        cert_path: Path | None,
        key_path: Path | None,
        *,
        cert_dir: Path | None,
        cert_dir_name: str | None,
        domain: Callable[[], str],
        base_dir: Path,
        default_dir_name: str,
    ) -> tuple[Path, Path]:
        """Explicit NGINX cert/key pair, else ``<cert dir>/<domain>.cer`` and ``.key``.

        ``domain`` is only called when the pair has to be derived.
        """
        cert_path, key_path = self.resolve_path_pair(cert_path, "NGINX_CERT_PATH", key_path, "NGINX_KEY_PATH")
        if cert_path is not None and key_path is not None:
            return cert_path, key_path
        name = domain()
        directory = self.resolve_cert_dir(
            self.resolve_optional_path(cert_dir, "CERT_DIR"),
            cert_dir_name,
            ["NGINX_CERT_DIR_NAME", "CERT_DIR_NAME"],
            default_dir_name,
            base_dir,
        )
        return directory / f"{name}.cer", directory / f"{name}.key"

    def resolve_resolvers(
        self,
        cli_values: Iterable[str] | None,
        env_key: str = "RESOLVER",
        default: str = DEFAULT_RESOLVER,
    ) -> str:
        values = [v for v in (cli_values or []) if v.strip()]
        if values:
            return " ".join(values)
        value = self.lookup(env_key)
        if value is not None:
            return value
        if not self.interactive:
            return default
        return self.select_resolver(default)

    def select_resolver(self, default: str = DEFAULT_RESOLVER) -> str:
        """Timed menu; no answer, an empty answer or an unknown choice yields ``default``."""
        console.print("Select DNS resolver (default: Cloudflare):")
        for key, (name, _) in RESOLVER_CHOICES.items():
            console.print(f"  {key}) {name}")
        console.print(f"Enter choice [1-5] within {self.resolver_timeout:g}s: ", end="", markup=False)

        choice = (self._read_line(self.resolver_timeout) or "").strip()
        if choice not in RESOLVER_CHOICES:
            return default
        _, resolver = RESOLVER_CHOICES[choice]
        if resolver is not None:
            return resolver
        custom = self.ask("Custom resolver (space-separated)")
        return custom or default
