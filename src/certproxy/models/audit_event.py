"""Audit event model: one JSON line per command that changes the host."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class AuditEvent(BaseModel):
    """One certproxy command run.

    ``action`` is the command (``cert.issue``, ``nginx.write-default``, ``proxy.write``,
    ``setup``), ``target`` the domain it acted on, and ``params`` the non-secret
    options it resolved. ``result`` is ``success`` or ``failure`` with ``error``
    holding the message.
    """

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    actor: str = ""
    action: str = ""
    target: str = ""
    params: dict[str, Any] = Field(default_factory=dict)
    result: str = "success"
    error: str | None = None
    duration_ms: int | None = None

    def to_jsonl(self) -> str:
        return self.model_dump_json()
