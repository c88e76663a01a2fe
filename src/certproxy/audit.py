"""Audit logger: one JSON line per mutating command."""

from __future__ import annotations

import getpass
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator

from certproxy.config import get_config
from certproxy.models import AuditEvent


def _get_actor() -> str:
    return os.environ.get("CERTPROXY_ACTOR") or getpass.getuser()


def _write_jsonl(path: Path, event: AuditEvent) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a") as f:
        f.write(event.to_jsonl() + "\n")


def log_event(event: AuditEvent) -> None:
    """Append an audit event to the JSONL audit log."""
    cfg = get_config()
    if not cfg.audit_enabled:
        return
    _write_jsonl(cfg.audit_log_path, event)


@contextmanager
def audit(
    action: str,
    target: str = "",
    *,
    dry_run: bool = False,
    **params: Any,
) -> Generator[AuditEvent, None, None]:
    """Context manager that records timing and success/failure.

    Nothing is written for dry runs. Never pass secrets as ``params``.
    """
    event = AuditEvent(actor=_get_actor(), action=action, target=target, params=params)
    start = time.monotonic()
    try:
        yield event
        event.result = "success"
    except Exception as exc:
        event.result = "failure"
        event.error = str(exc)
        raise
    finally:
        event.duration_ms = int((time.monotonic() - start) * 1000)
        if not dry_run:
            log_event(event)
