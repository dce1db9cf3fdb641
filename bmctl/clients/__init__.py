"""
BMC clients - Strategy Pattern.
The standard Redfish client plus vendor clients that delegate to it.
"""

from .base_client import DelegatingClient, RemoteClient
from .redfish_client import RedfishClient
from .dell_client import DellClient

__all__ = [
    'RemoteClient',
    'DelegatingClient',
    'RedfishClient',
    'DellClient',
]
