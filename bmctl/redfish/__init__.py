"""
Redfish transport layer: HTTP capability, operation context and backoff.
"""

from .api import RedfishAPI, RedfishResponse, RequestsRedfishAPI, SUCCESS_STATUS_CODES
from .backoff import Backoff, context_backoff, no_backoff
from .context import OperationContext, ensure_context

__all__ = [
    'RedfishAPI',
    'RedfishResponse',
    'RequestsRedfishAPI',
    'SUCCESS_STATUS_CODES',
    'Backoff',
    'context_backoff',
    'no_backoff',
    'OperationContext',
    'ensure_context',
]
