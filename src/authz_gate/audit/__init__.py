"""
Audit

Authorization audit trail for saved objects access.
"""

from .sinks import (
    AuditEntry,
    AuditSink,
    LoggingAuditSink,
    MemoryAuditSink,
    JsonlAuditSink,
    HttpAuditSink,
    create_sink,
)
from .logger import SecurityAuditLogger

__all__ = [
    "AuditEntry",
    "AuditSink",
    "LoggingAuditSink",
    "MemoryAuditSink",
    "JsonlAuditSink",
    "HttpAuditSink",
    "create_sink",
    "SecurityAuditLogger",
]
