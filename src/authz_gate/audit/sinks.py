"""
Audit Sinks

Append-only destinations for audit entries:
- LoggingAuditSink: the ``authz_gate.audit`` logger
- JsonlAuditSink: local JSONL file
- HttpAuditSink: remote collector over HTTP
- MemoryAuditSink: in-process list (tests)
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import httpx

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("authz_gate.audit")


@dataclass
class AuditEntry:
    """One audit event"""
    event_type: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "@timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type,
            "message": self.message,
            **self.data,
        }


class AuditSink(ABC):
    """Destination for audit entries"""

    @abstractmethod
    async def record(self, entry: AuditEntry) -> None:
        """Append an entry"""

    async def close(self) -> None:
        """Release sink resources"""


class LoggingAuditSink(AuditSink):
    async def record(self, entry: AuditEntry) -> None:
        audit_logger.info(entry.message, extra={"audit": entry.to_dict()})


class MemoryAuditSink(AuditSink):
    def __init__(self):
        self.entries: List[AuditEntry] = []

    async def record(self, entry: AuditEntry) -> None:
        self.entries.append(entry)


class JsonlAuditSink(AuditSink):
    """Appends one JSON document per line"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def record(self, entry: AuditEntry) -> None:
        line = json.dumps(entry.to_dict(), default=str) + "\n"
        async with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a") as f:
                f.write(line)


class HttpAuditSink(AuditSink):
    """Posts entries to ``{endpoint}/audit``"""

    def __init__(self, endpoint: str, client: Optional[httpx.AsyncClient] = None, timeout: float = 5.0):
        self.endpoint = endpoint.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def record(self, entry: AuditEntry) -> None:
        response = await self.client.post(
            f"{self.endpoint}/audit",
            content=json.dumps(entry.to_dict(), default=str),
            headers={"Content-Type": "application/json"},
        )
        response.raise_for_status()

    async def close(self) -> None:
        await self.client.aclose()


def create_sink(kind: str, **options) -> AuditSink:
    """Build a sink from configuration (``log``, ``file``, ``http``, ``memory``)"""
    if kind == "log":
        return LoggingAuditSink()
    if kind == "file":
        return JsonlAuditSink(options["path"])
    if kind == "http":
        return HttpAuditSink(options["endpoint"])
    if kind == "memory":
        return MemoryAuditSink()
    raise ValueError(f"Unknown audit sink: {kind}")
