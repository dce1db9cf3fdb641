"""
Service layer - batch operations and their event channel.
"""

from .events import CollectingReporter, EventKind, EventReporter, LoggingReporter, OperationEvent
from .batch_runner import BaremetalOperation, BatchOptions, BatchResult, BatchRunner, HostResult

__all__ = [
    'BaremetalOperation',
    'BatchOptions',
    'BatchResult',
    'BatchRunner',
    'HostResult',
    'EventKind',
    'EventReporter',
    'LoggingReporter',
    'CollectingReporter',
    'OperationEvent',
]
