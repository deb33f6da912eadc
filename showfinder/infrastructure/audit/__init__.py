"""
Audit logging infrastructure for admin review actions.
"""

from showfinder.infrastructure.audit.audit_logger import AuditLogger, audit_logger

__all__ = ["AuditLogger", "audit_logger"]
