"""Audit trail models."""

from app.models.audit.entry import AUDIT_SCHEMA, AuditAction, AuditEntry

__all__ = [
    "AuditAction",
    "AuditEntry",
    "AUDIT_SCHEMA",
]
