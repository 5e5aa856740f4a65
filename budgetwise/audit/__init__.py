"""Audit logging package."""

from budgetwise.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
