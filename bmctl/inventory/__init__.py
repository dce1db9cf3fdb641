"""
Host inventory - selectors, document sources and host resolution.
"""

from .selector import HostSelector
from .document_source import DocumentSource, KubernetesDocumentSource, StaticDocumentSource
from .inventory import BaremetalInventory, initialize_inventory

__all__ = [
    'HostSelector',
    'DocumentSource',
    'StaticDocumentSource',
    'KubernetesDocumentSource',
    'BaremetalInventory',
    'initialize_inventory',
]
