"""Audit trail repositories - background writer and log reads."""

from app.repositories.audit.emitter import AuditEmitter
from app.repositories.audit.log import AuditRepository

__all__ = [
    "AuditEmitter",
    "AuditRepository",
]
