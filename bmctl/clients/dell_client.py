"""
Dell iDRAC client.

iDRAC firmware does not accept a standard BootSourceOverrideTarget of Cd for
virtual media. The boot device is set through the OEM system configuration
import action instead (iDRAC 9 >= 3.3). Everything else is standard Redfish
and goes to the held RedfishClient.
"""

import logging
from typing import Optional

from ..errors import RedfishClientError
from ..redfish.context import OperationContext, ensure_context
from .base_client import DelegatingClient
from .redfish_client import RedfishClient

logger = logging.getLogger(__name__)

DRIVER_TYPE = "redfish-dell"

IMPORT_SYSTEM_CONFIGURATION_PATH = (
    "/redfish/v1/Managers/{manager_id}/Actions/Oem/EID_674_Manager.ImportSystemConfiguration"
)

# Boot once from the virtual CD/DVD, without restarting the host
VIRTUAL_CD_BOOT_REQUEST = {
    "ShareParameters": {
        "Target": "ALL"
    },
    "ShutdownType": "NoReboot",
    "ImportBuffer": (
        "<SystemConfiguration>"
        "<Component FQDD=\"iDRAC.Embedded.1\">"
        "<Attribute Name=\"ServerBoot.1#BootOnce\">Enabled</Attribute>"
        "<Attribute Name=\"ServerBoot.1#FirstBootDevice\">VCD-DVD</Attribute>"
        "</Component>"
        "</SystemConfiguration>"
    ),
}

MALFORMED_RESPONSE_MESSAGE = "Unable to set boot device. Malformed iDRAC response."


class DellClient(DelegatingClient):
    """RemoteClient for Dell iDRAC, delegating standard operations to a RedfishClient"""

    def __init__(self, delegate: RedfishClient):
        super().__init__(delegate)

    @classmethod
    def build(cls, redfish_url: str, **kwargs) -> "DellClient":
        """
        Create a Dell client together with its standard delegate.

        Args:
            redfish_url: BMC address
            **kwargs: Passed through to RedfishClient
        """
        return cls(RedfishClient(redfish_url, **kwargs))

    def set_boot_source_by_type(self, ctx: Optional[OperationContext] = None) -> None:
        """
        Boot once from the virtual CD/DVD via ImportSystemConfiguration.

        Raises:
            RedfishClientError: If the iDRAC does not accept the job (HTTP 202)
        """
        ctx = ensure_context(ctx)
        logger.debug(f"Setting boot device of system '{self.system_id}' to 'VCD-DVD'")

        manager_id = self.delegate.get_manager_id(ctx)
        path = IMPORT_SYSTEM_CONFIGURATION_PATH.format(manager_id=manager_id)
        response = self.delegate.api.post(ctx, path, VIRTUAL_CD_BOOT_REQUEST)

        if response.status_code != 202:
            raise RedfishClientError(
                self._error_message(response.body),
                status_code=response.status_code,
                body=response.body
            )

        logger.debug(f"Boot device of system '{self.system_id}' set to 'VCD-DVD'")

    @staticmethod
    def _error_message(body) -> str:
        """First @Message.ExtendedInfo message of an iDRAC error body"""
        try:
            message = body["error"]["@Message.ExtendedInfo"][0]["Message"]
        except (TypeError, KeyError, IndexError):
            logger.debug(f"Malformed iDRAC response: {body!r}")
            return MALFORMED_RESPONSE_MESSAGE
        return f"Unable to set boot device. {message}"
