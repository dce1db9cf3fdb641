"""
Base remote client - the capability surface every BMC client implements.

Vendor clients do not subclass RedfishClient. They implement RemoteClient and
hold a standard client to which they delegate whatever they do not override,
so any of them can be used wherever a RemoteClient is expected.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from ..errors import ConfigurationError
from ..models import PowerState
from ..redfish.context import OperationContext, ensure_context

logger = logging.getLogger(__name__)


class RemoteClient(ABC):
    """
    Abstract capability surface of a BMC client bound to one computer system.

    reboot() and remote_direct() are composed from the primitive operations,
    so a client that overrides a primitive changes the composite too.
    """

    @property
    @abstractmethod
    def system_id(self) -> str:
        """ID of the computer system this client is bound to"""
        pass

    @abstractmethod
    def power_status(self, ctx: Optional[OperationContext] = None) -> PowerState:
        """
        Read the current power state.

        Returns:
            PowerState (UNKNOWN for unrecognized values)
        """
        pass

    @abstractmethod
    def power_on(self, ctx: Optional[OperationContext] = None) -> None:
        """Power the system on and wait until it reports On"""
        pass

    @abstractmethod
    def power_off(self, ctx: Optional[OperationContext] = None) -> None:
        """Force the system off and wait until it reports Off"""
        pass

    @abstractmethod
    def eject_virtual_media(self, ctx: Optional[OperationContext] = None) -> None:
        """Eject every inserted virtual media slot"""
        pass

    @abstractmethod
    def set_virtual_media(self, iso_url: str, ctx: Optional[OperationContext] = None) -> None:
        """Eject existing media, then insert iso_url into a CD/DVD capable slot"""
        pass

    @abstractmethod
    def set_boot_source_by_type(self, ctx: Optional[OperationContext] = None) -> None:
        """Boot once from the virtual media device"""
        pass

    def reboot(self, ctx: Optional[OperationContext] = None) -> None:
        """Power cycle the system: off (wait Off), then on (wait On)"""
        ctx = ensure_context(ctx)
        self.power_off(ctx)
        self.power_on(ctx)

    def remote_direct(self, iso_url: str, ctx: Optional[OperationContext] = None) -> None:
        """
        Boot the system from a remote ISO image.

        A system that is not On is powered on first. Steps run strictly in
        order and the first failure aborts the rest; completed steps are not
        undone.

        Raises:
            ConfigurationError: If iso_url is empty
        """
        if not iso_url:
            raise ConfigurationError("isoURL")

        ctx = ensure_context(ctx)
        logger.info(f"Remote direct boot of system '{self.system_id}' from {iso_url}")

        power_state = self.power_status(ctx)
        if power_state is not PowerState.ON:
            logger.info(f"System '{self.system_id}' has power state {power_state.value}, powering on")
            self.power_on(ctx)

        self.set_virtual_media(iso_url, ctx)
        self.set_boot_source_by_type(ctx)
        self.reboot(ctx)

        logger.info(f"System '{self.system_id}' rebooted from virtual media")

    def close(self) -> None:
        """Release transport resources"""

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.close()


class DelegatingClient(RemoteClient):
    """
    RemoteClient that forwards every operation to a held default client.

    Vendor clients extend this and override only what their firmware needs.
    """

    def __init__(self, delegate: RemoteClient):
        self._delegate = delegate

    @property
    def delegate(self) -> RemoteClient:
        return self._delegate

    @property
    def system_id(self) -> str:
        return self._delegate.system_id

    def power_status(self, ctx=None):
        return self._delegate.power_status(ctx)

    def power_on(self, ctx=None):
        self._delegate.power_on(ctx)

    def power_off(self, ctx=None):
        self._delegate.power_off(ctx)

    def eject_virtual_media(self, ctx=None):
        self._delegate.eject_virtual_media(ctx)

    def set_virtual_media(self, iso_url, ctx=None):
        self._delegate.set_virtual_media(iso_url, ctx)

    def set_boot_source_by_type(self, ctx=None):
        self._delegate.set_boot_source_by_type(ctx)

    def close(self):
        self._delegate.close()
