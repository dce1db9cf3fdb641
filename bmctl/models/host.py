"""
Host data models - Value Object pattern.
Immutable descriptors resolved once from host documents.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(frozen=True)
class Credentials:
    """BMC login credentials. The password never appears in repr()."""
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class BMCEndpoint:
    """
    Parsed BMC management address.

    Attributes:
        address: Address exactly as written in the host document
        scheme: Transport scheme with the out-of-band marker removed (http/https)
        netloc: host[:port] of the BMC
        system_id: Computer system ID, taken from the last path segment
        marker: Out-of-band marker (e.g. 'redfish'), None if the address had none
    """
    address: str
    scheme: str
    netloc: str
    system_id: str
    marker: Optional[str] = None

    @property
    def base_url(self) -> str:
        """Root URL of the BMC, without any Redfish path"""
        return f"{self.scheme}://{self.netloc}"


@dataclass(frozen=True)
class HostDescriptor:
    """
    Immutable description of one baremetal host.

    Attributes:
        name: Host document name
        namespace: Host document namespace, if any
        labels: Host document labels
        bmc: Parsed BMC endpoint
        driver: Management driver type (e.g. 'redfish', 'redfish-dell')
        credentials: BMC credentials
        disable_certificate_verification: Per-host TLS override from the document
    """
    name: str
    bmc: BMCEndpoint
    driver: str
    credentials: Credentials
    namespace: Optional[str] = None
    labels: Dict[str, str] = field(default_factory=dict, compare=False, hash=False)
    disable_certificate_verification: bool = False

    def __post_init__(self):
        """Validate invariants"""
        if not self.name:
            raise ValueError("Host name cannot be empty")
        if not self.driver:
            raise ValueError("Driver type cannot be empty")

    @property
    def qualified_name(self) -> str:
        """Unique host identity: 'namespace/name', or the bare name without a namespace"""
        return f"{self.namespace}/{self.name}" if self.namespace else self.name
