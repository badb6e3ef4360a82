"""
Audit trail for policy decisions.

The permission checker emits one AuditEvent per evaluated policy, in
evaluation order. Sinks implement the async AuditLogger interface.
"""

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import asyncio
import json
import logging
import uuid


logger = logging.getLogger(__name__)


@dataclass
class AuditEvent:
    """A single policy decision as recorded by the checker."""
    checker: str
    policy_name: str
    outcome: bool
    reason: Optional[str] = None
    category: Optional[str] = None
    rule_name: Optional[str] = None
    ruleset_name: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'event_id': self.event_id,
            'timestamp': self.timestamp.isoformat(),
            'checker': self.checker,
            'policy_name': self.policy_name,
            'outcome': self.outcome,
            'reason': self.reason,
            'category': self.category,
            'rule_name': self.rule_name,
            'ruleset_name': self.ruleset_name,
            'details': self.details,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuditEvent':
        """Create from dictionary representation."""
        return cls(
            checker=data['checker'],
            policy_name=data['policy_name'],
            outcome=data['outcome'],
            reason=data.get('reason'),
            category=data.get('category'),
            rule_name=data.get('rule_name'),
            ruleset_name=data.get('ruleset_name'),
            details=data.get('details', {}),
            event_id=data['event_id'],
            timestamp=datetime.fromisoformat(data['timestamp']),
        )


def _matches(
    event: AuditEvent,
    policy_name: Optional[str],
    outcome: Optional[bool],
    start_time: Optional[datetime],
    end_time: Optional[datetime],
) -> bool:
    if policy_name is not None and event.policy_name != policy_name:
        return False
    if outcome is not None and event.outcome != outcome:
        return False
    if start_time and event.timestamp < start_time:
        return False
    if end_time and event.timestamp > end_time:
        return False
    return True


class AuditLogger(ABC):
    """Abstract base class for audit logging"""

    _lock: Optional[asyncio.Lock] = None

    @abstractmethod
    async def log(self, event: AuditEvent) -> None:
        """Log an audit event"""
        pass

    @abstractmethod
    async def get_events(
        self,
        policy_name: Optional[str] = None,
        outcome: Optional[bool] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        """Retrieve audit events with optional filtering"""
        pass

    def _get_lock(self) -> asyncio.Lock:
        # Created on first use so the lock binds to the running loop.
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock


class MemoryAuditLogger(AuditLogger):
    """In-memory audit logger for development and testing"""

    def __init__(self, max_entries: int = 1000):
        self.max_entries = max_entries
        self.events: deque = deque(maxlen=max_entries)

    async def log(self, event: AuditEvent) -> None:
        async with self._get_lock():
            self.events.append(event)

    async def get_events(
        self,
        policy_name: Optional[str] = None,
        outcome: Optional[bool] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        async with self._get_lock():
            return [
                event for event in self.events
                if _matches(event, policy_name, outcome, start_time, end_time)
            ]


class FileAuditLogger(AuditLogger):
    """Appends audit events to a JSON-lines file"""

    def __init__(self, file_path: str):
        self.file_path = file_path

    async def log(self, event: AuditEvent) -> None:
        async with self._get_lock():
            with open(self.file_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(event.to_dict()) + "\n")

    async def get_events(
        self,
        policy_name: Optional[str] = None,
        outcome: Optional[bool] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        events = []

        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                for line_number, line in enumerate(f, start=1):
                    try:
                        event = AuditEvent.from_dict(json.loads(line))
                    except (json.JSONDecodeError, KeyError, ValueError) as e:
                        logger.warning(
                            f"Skipping malformed audit line {line_number} in {self.file_path}: {e}"
                        )
                        continue

                    if _matches(event, policy_name, outcome, start_time, end_time):
                        events.append(event)
        except FileNotFoundError:
            # Nothing logged yet
            pass

        return events


def create_audit_logger(logger_type: str = "memory", **kwargs) -> AuditLogger:
    """
    Factory function to create audit loggers

    Args:
        logger_type: Type of logger ("memory" or "file")
        **kwargs: Additional arguments for the logger

    Returns:
        AuditLogger instance
    """
    if logger_type == "memory":
        return MemoryAuditLogger(kwargs.get("max_entries", 1000))
    elif logger_type == "file":
        return FileAuditLogger(kwargs.get("file_path", "audit.log"))
    else:
        raise ValueError(f"Unknown logger type: {logger_type}")
