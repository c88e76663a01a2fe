"""Pydantic models for resolved command parameters and audit events."""

from certproxy.models.audit_event import AuditEvent
from certproxy.models.param_spec import PARAM_TABLE, ParamSpec
from certproxy.models.params import IssueCertParams, NginxDefaultParams, ProxyParams, SetupParams

__all__ = [
    "AuditEvent",
    "IssueCertParams",
    "NginxDefaultParams",
    "PARAM_TABLE",
    "ParamSpec",
    "ProxyParams",
    "SetupParams",
]
