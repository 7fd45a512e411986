"""Audit logging package."""

from table_organizer.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
