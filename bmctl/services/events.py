"""
Operation events - the outbound reporting channel of batch operations.

The batch runner emits one 'started' event and one outcome event
('succeeded' or 'failed') per host.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


class EventKind(Enum):
    STARTED = "started"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class OperationEvent:
    """
    Progress of one operation on one host.

    Attributes:
        host: Host name
        operation: Operation identifier (e.g. 'power-on')
        kind: Event kind
        message: Human readable summary
        error: Exception for FAILED events
        value: Operation result for SUCCEEDED events (e.g. a PowerState)
    """
    host: str
    operation: str
    kind: EventKind
    message: str = ""
    error: Optional[BaseException] = None
    value: Any = None

    @property
    def is_outcome(self) -> bool:
        return self.kind in (EventKind.SUCCEEDED, EventKind.FAILED)


class EventReporter(ABC):
    """Receives operation events; may be called from several threads"""

    @abstractmethod
    def report(self, event: OperationEvent) -> None:
        pass


class LoggingReporter(EventReporter):
    """Write events to the log"""

    def __init__(self, log: Optional[logging.Logger] = None):
        self._log = log or logger

    def report(self, event: OperationEvent) -> None:
        if event.kind is EventKind.FAILED:
            self._log.error(f"[{event.host}] {event.operation} failed: {event.error}")
        elif event.kind is EventKind.SUCCEEDED:
            suffix = f": {event.message}" if event.message else ""
            self._log.info(f"[{event.host}] {event.operation} succeeded{suffix}")
        else:
            self._log.info(f"[{event.host}] {event.operation} started")


class CollectingReporter(EventReporter):
    """Keep every event in memory, in arrival order"""

    def __init__(self, forward_to: Optional[EventReporter] = None):
        """
        Args:
            forward_to: Reporter that also receives every event
        """
        self._events: List[OperationEvent] = []
        self._lock = threading.Lock()
        self._forward_to = forward_to

    def report(self, event: OperationEvent) -> None:
        with self._lock:
            self._events.append(event)
        if self._forward_to:
            self._forward_to.report(event)

    @property
    def events(self) -> List[OperationEvent]:
        with self._lock:
            return list(self._events)

    def for_host(self, host: str) -> List[OperationEvent]:
        return [e for e in self.events if e.host == host]

    def outcomes(self) -> List[OperationEvent]:
        return [e for e in self.events if e.is_outcome]
