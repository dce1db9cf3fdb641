"""
Baremetal Remote Management Package

This package drives the out-of-band lifecycle of baremetal hosts: power
control, virtual media and boot source override over Redfish, across hosts
resolved from BareMetalHost documents.

Architecture:
- Strategy Pattern for vendor clients (standard Redfish, Dell iDRAC)
- Factory Pattern for creating clients
- Facade Pattern for batch operations
- Value Object Pattern for immutable data models
"""

from .errors import (
    BaremetalError,
    ConfigurationError,
    RedfishClientError,
    OperationRetriesExceededError,
    OperationCancelledError,
    UnsupportedOperationError,
    HostNotFoundError,
    AmbiguousSelectionError,
    NoHostsMatchedError,
    BatchOperationError,
)
from .models import HostDescriptor, ManagementConfig, PowerState, VirtualMediaSlot
from .clients import RemoteClient, DelegatingClient, RedfishClient, DellClient
from .repositories import ClientFactory
from .redfish import OperationContext, RedfishAPI, RequestsRedfishAPI, context_backoff, no_backoff
from .inventory import HostSelector, BaremetalInventory, StaticDocumentSource, KubernetesDocumentSource
from .services import BaremetalOperation, BatchOptions, BatchResult, BatchRunner
from .formatters import BatchReportFormatter

__all__ = [
    # Errors
    "BaremetalError",
    "ConfigurationError",
    "RedfishClientError",
    "OperationRetriesExceededError",
    "OperationCancelledError",
    "UnsupportedOperationError",
    "HostNotFoundError",
    "AmbiguousSelectionError",
    "NoHostsMatchedError",
    "BatchOperationError",
    # Models
    "HostDescriptor",
    "ManagementConfig",
    "PowerState",
    "VirtualMediaSlot",
    # Clients
    "RemoteClient",
    "DelegatingClient",
    "RedfishClient",
    "DellClient",
    # Factory
    "ClientFactory",
    # Transport
    "OperationContext",
    "RedfishAPI",
    "RequestsRedfishAPI",
    "context_backoff",
    "no_backoff",
    # Inventory
    "HostSelector",
    "BaremetalInventory",
    "StaticDocumentSource",
    "KubernetesDocumentSource",
    # Services
    "BaremetalOperation",
    "BatchOptions",
    "BatchResult",
    "BatchRunner",
    # Formatters
    "BatchReportFormatter",
]
