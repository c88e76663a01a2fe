"""Shared test fixtures."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any, Callable

import pytest

from certproxy.config import CertproxyConfig, get_config
from certproxy.models import PARAM_TABLE
from certproxy.services.params import ParamResolver

PARAM_ENV_KEYS = {spec.env for spec in PARAM_TABLE if spec.env} | {
    "CERT_DIR_NAME",
    "NGINX_CERT_DIR_NAME",
    "CERTPROXY_AUDIT",
    "CERTPROXY_CRON_LOG",
    "CERTPROXY_RESOLVER_TIMEOUT",
}


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Clear parameter env vars and point certproxy's own paths at tmp_path."""
    for key in PARAM_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CERTPROXY_AUDIT_LOG", str(tmp_path / "log" / "audit.jsonl"))
    monkeypatch.setenv("CERTPROXY_CERT_BASE", str(tmp_path / "ca"))
    monkeypatch.setenv("CERTPROXY_ENV_FILE", str(tmp_path / "certproxy.env"))
    monkeypatch.setenv("CERTPROXY_ACTOR", "tester")
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def tmp_config(tmp_path: Path) -> CertproxyConfig:
    return CertproxyConfig(
        audit_log_path=tmp_path / "log" / "audit.jsonl",
        cert_base_dir=tmp_path / "ca",
        env_file=tmp_path / "certproxy.env",
        cron_log_path=tmp_path / "log" / "renew.log",
    )


class ScriptedPrompt:
    """Stands in for the interactive prompt; returns queued answers, then ''."""

    def __init__(self, *answers: str):
        self.answers = list(answers)
        self.calls: list[tuple[str, bool, str | None]] = []

    def __call__(self, label: str, sensitive: bool, default: str | None) -> str:
        self.calls.append((label, sensitive, default))
        return self.answers.pop(0) if self.answers else ""


@pytest.fixture
def make_resolver() -> Callable[..., ParamResolver]:
    def _make(
        overrides: dict[str, str] | None = None,
        environ: dict[str, str] | None = None,
        answers: tuple[str, ...] = (),
        read_line: Callable[[float], str | None] = lambda timeout: None,
        interactive: bool = True,
    ) -> ParamResolver:
        return ParamResolver(
            overrides,
            environ=environ or {},
            interactive=interactive,
            prompt=ScriptedPrompt(*answers),
            read_line=read_line,
            resolver_timeout=0.01,
        )

    return _make


class FakeRun:
    """Records subprocess.run calls; per-binary handlers decide the outcome."""

    def __init__(self):
        self.calls: list[tuple[list[str], dict[str, Any]]] = []
        self.handlers: dict[str, Callable[..., subprocess.CompletedProcess[str]]] = {}

    def __call__(self, cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.calls.append((list(cmd), kwargs))
        handler = self.handlers.get(Path(cmd[0]).name)
        if handler is not None:
            return handler(cmd, **kwargs)
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    def commands(self) -> list[list[str]]:
        return [cmd for cmd, _ in self.calls]


@pytest.fixture
def fake_run(monkeypatch: pytest.MonkeyPatch) -> FakeRun:
    fake = FakeRun()
    monkeypatch.setattr("certproxy.services.process.subprocess.run", fake)
    return fake
