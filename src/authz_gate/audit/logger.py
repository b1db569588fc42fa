"""
Security Audit Logger

Records saved objects authorization outcomes. Failures are always recorded;
successes only when auditing is enabled. Errors raised by the sink are
logged and never reach the caller.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from .sinks import AuditEntry, AuditSink, LoggingAuditSink

logger = logging.getLogger(__name__)

AUTHORIZATION_FAILURE = "saved_objects_authorization_failure"
AUTHORIZATION_SUCCESS = "saved_objects_authorization_success"


class SecurityAuditLogger:
    def __init__(self, enabled: bool = False, sink: Optional[AuditSink] = None):
        self.enabled = enabled
        self.sink = sink or LoggingAuditSink()

    async def saved_objects_authorization_failure(
        self,
        username: Optional[str],
        operation: str,
        types: Iterable[str],
        actions: Iterable[str],
        missing: Iterable[str],
        args: Optional[Dict[str, Any]] = None,
    ) -> None:
        types = sorted(set(types))
        missing = sorted(missing)
        await self._record(AuditEntry(
            event_type=AUTHORIZATION_FAILURE,
            message=f"{username} unauthorized to {operation} {','.join(types)}, missing {','.join(missing)}",
            data={
                "username": username,
                "action": operation,
                "types": types,
                "actions": sorted(actions),
                "missing": missing,
                "outcome": "denied",
                "args": args or {},
            },
        ))

    async def saved_objects_authorization_success(
        self,
        username: Optional[str],
        operation: str,
        types: Iterable[str],
        actions: Iterable[str],
        args: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not self.enabled:
            return

        types = sorted(set(types))
        await self._record(AuditEntry(
            event_type=AUTHORIZATION_SUCCESS,
            message=f"{username} authorized to {operation} {','.join(types)}",
            data={
                "username": username,
                "action": operation,
                "types": types,
                "actions": sorted(actions),
                "outcome": "granted",
                "args": args or {},
            },
        ))

    async def close(self) -> None:
        await self.sink.close()

    async def _record(self, entry: AuditEntry) -> None:
        try:
            await self.sink.record(entry)
        except Exception as e:
            logger.warning(f"Failed to write audit entry {entry.event_type}: {e}")
