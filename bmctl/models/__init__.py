"""
Data models and value objects.
Following Domain-Driven Design patterns for immutable data structures.
"""

from .host import BMCEndpoint, Credentials, HostDescriptor
from .management_config import ManagementConfig
from .power_state import PowerState
from .virtual_media import VirtualMediaSlot

__all__ = [
    'BMCEndpoint',
    'Credentials',
    'HostDescriptor',
    'ManagementConfig',
    'PowerState',
    'VirtualMediaSlot',
]
