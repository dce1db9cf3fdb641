"""
Parser for BMC management addresses found in host documents.

Examples:
- redfish+https://bmc.local:2224/redfish/v1/Systems/System.Embedded.1
    -> scheme=https, netloc=bmc.local:2224, system_id=System.Embedded.1
- https://10.23.25.1/redfish/v1/Systems/1  (no out-of-band marker)
    -> scheme=https, netloc=10.23.25.1, system_id=1
"""

from typing import Optional
from urllib.parse import urlsplit

from ..errors import ConfigurationError
from ..models import BMCEndpoint


class BMCAddressParser:
    """
    Parser for '<marker>+<scheme>://<host>:<port>/<systems-path>/<system-id>' addresses.

    The out-of-band marker is optional; when absent the address is treated as an
    ordinary URL.
    """

    MARKER_SEPARATOR = "+"

    @classmethod
    def parse(cls, address: Optional[str]) -> BMCEndpoint:
        """
        Parse a BMC address.

        Args:
            address: Address as written in the host document

        Returns:
            Parsed BMCEndpoint

        Raises:
            ConfigurationError: If the address is empty, has no host, or has no system ID
        """
        if not address or not address.strip():
            raise ConfigurationError("Redfish URL")

        try:
            parts = urlsplit(address.strip())
            netloc = parts.netloc
        except ValueError as e:
            raise ConfigurationError("Redfish URL", f"Invalid Redfish URL '{address}': {e}") from e

        marker = None
        scheme = parts.scheme
        if cls.MARKER_SEPARATOR in scheme:
            marker, _, scheme = scheme.rpartition(cls.MARKER_SEPARATOR)

        if not scheme or not netloc:
            raise ConfigurationError(
                "management URL host",
                f"Redfish URL '{address}' must include a scheme and a host"
            )

        system_id = cls.get_resource_id(parts.path)
        if not system_id:
            raise ConfigurationError("management URL system ID")

        return BMCEndpoint(
            address=address,
            scheme=scheme.lower(),
            netloc=netloc,
            system_id=system_id,
            marker=marker or None,
        )

    @staticmethod
    def get_resource_id(path: Optional[str]) -> str:
        """
        Return the last non-empty segment of a resource path.

        Used both for system IDs in BMC addresses and for @odata.id links.

        >>> BMCAddressParser.get_resource_id('/redfish/v1/Managers/iDRAC.Embedded.1/')
        'iDRAC.Embedded.1'
        """
        if not path:
            return ""
        return path.rstrip("/").rsplit("/", 1)[-1]
