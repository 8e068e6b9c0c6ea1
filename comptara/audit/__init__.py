"""Audit logging package."""

from comptara.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
