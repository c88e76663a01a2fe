"""Tests for the root CLI: global overrides, print-params and error exits."""

from __future__ import annotations

import io
import subprocess
import sys
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from certproxy import cli
from certproxy.cli import app
from certproxy.commands.print_params import build_table

runner = CliRunner()


class TestPrintParams:
    def test_runs(self):
        result = runner.invoke(app, ["print-params"])
        assert result.exit_code == 0, result.output
        assert "Parameters" in result.output

    def test_table_rows(self):
        out = io.StringIO()
        Console(file=out, width=200).print(build_table())
        text = out.getvalue()
        for name in ("--cf-token", "CF_TOKEN", "NGINX_DEFAULT_OUTPUT", "PROXY_OUTPUT_DIR", "--env KEY=VALUE"):
            assert name in text


class TestGlobalOverrides:
    def _proxy_args(self, tmp_path: Path) -> list[str]:
        return ["write-proxy-config", "--backend-url", "http://10.0.0.5:8096", "--output-dir", str(tmp_path)]

    def test_env_override_beats_process_env(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("PROXY_DOMAIN", "env.example.org")
        result = runner.invoke(app, ["--env", "PROXY_DOMAIN=override.example.org", *self._proxy_args(tmp_path)])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "override-example-org.conf").exists()

    def test_cli_beats_override(self, tmp_path: Path):
        result = runner.invoke(
            app,
            ["--env", "PROXY_DOMAIN=override.example.org", *self._proxy_args(tmp_path),
             "--proxy-domain", "cli.example.org"],
        )
        assert result.exit_code == 0, result.output
        assert (tmp_path / "cli-example-org.conf").exists()

    def test_env_file(self, tmp_path: Path):
        env_file = tmp_path / "certproxy.env"
        env_file.write_text("PROXY_DOMAIN=file.example.org\n")
        result = runner.invoke(app, ["--env-file", str(env_file), *self._proxy_args(tmp_path)])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "file-example-org.conf").exists()

    def test_env_beats_env_file(self, tmp_path: Path):
        env_file = tmp_path / "certproxy.env"
        env_file.write_text("PROXY_DOMAIN=file.example.org\n")
        result = runner.invoke(
            app,
            ["--env-file", str(env_file), "--env", "PROXY_DOMAIN=flag.example.org", *self._proxy_args(tmp_path)],
        )
        assert result.exit_code == 0, result.output
        assert (tmp_path / "flag-example-org.conf").exists()

    def test_malformed_env(self, tmp_path: Path):
        result = runner.invoke(app, ["--env", "=oops", *self._proxy_args(tmp_path)])
        assert result.exit_code == 2

    def test_missing_env_file(self, tmp_path: Path):
        result = runner.invoke(app, ["--env-file", str(tmp_path / "nope.env"), *self._proxy_args(tmp_path)])
        assert result.exit_code == 2


class TestMain:
    def test_error_exit_code(self, tmp_path: Path, monkeypatch, fake_run, capsys):
        fake_run.handlers["acme.sh"] = lambda cmd, **kw: subprocess.CompletedProcess(cmd, 4)
        monkeypatch.setattr(
            sys,
            "argv",
            [
                "certproxy",
                "issue-cert",
                "--cf-token", "t", "--cf-account-id", "a", "--cf-zone-id", "z",
                "--domain", "example.com",
                "--acme-bin", str(tmp_path / "acme.sh"),
                "--acme-home", str(tmp_path / "acme"),
                "--cert-dir", str(tmp_path / "certs"),
                "--no-reload-nginx",
            ],
        )
        monkeypatch.setattr(sys, "stdin", io.StringIO(""))
        with pytest.raises(SystemExit) as exc_info:
            cli.main()
        assert exc_info.value.code == 4
        assert "Certificate issuance failed" in capsys.readouterr().err

    def test_bad_resolver_timeout(self, monkeypatch, capsys):
        monkeypatch.setenv("CERTPROXY_RESOLVER_TIMEOUT", "soon")
        monkeypatch.setattr(sys, "argv", ["certproxy", "print-params"])
        with pytest.raises(SystemExit) as exc_info:
            cli.main()
        assert exc_info.value.code == 1
        assert "CERTPROXY_RESOLVER_TIMEOUT" in capsys.readouterr().err
